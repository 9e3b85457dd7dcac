import pytest

from shared.clients.rag.memory.similarity import cosine_similarity, top_k
from shared.errors import DimensionMismatch


class TestCosineSimilarity:
    """Tests for cosine scoring."""

    def test_self_similarity_is_one(self) -> None:
        """A non-zero vector scores 1 against itself."""
        assert cosine_similarity([0.3, -1.2, 4.0], [0.3, -1.2, 4.0]) == pytest.approx(1.0)

    def test_zero_vector_scores_zero(self) -> None:
        """Zero magnitude on either side gives 0."""
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0

    def test_opposite_and_orthogonal(self) -> None:
        """Opposite vectors give -1, orthogonal vectors give 0."""
        assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_length_mismatch(self) -> None:
        """Raises DimensionMismatch for vectors of different length."""
        with pytest.raises(DimensionMismatch):
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


class TestTopK:
    """Tests for stable top-k selection."""

    def test_orders_by_score(self) -> None:
        """Returns indices best first."""
        result = top_k([1.0, 0.0], [[0.0, 1.0], [1.0, 0.0], [1.0, 1.0]], 3)
        assert [index for index, _ in result] == [1, 2, 0]

    def test_limits_to_k(self) -> None:
        """Returns at most k results."""
        assert len(top_k([1.0, 0.0], [[1.0, 0.0]] * 5, 2)) == 2

    def test_ties_keep_insertion_order(self) -> None:
        """Equal scores keep the candidates' original order."""
        result = top_k([1.0, 0.0], [[2.0, 0.0], [0.0, 1.0], [1.0, 0.0], [3.0, 0.0]], 3)
        assert [index for index, _ in result] == [0, 2, 3]

    def test_empty_inputs(self) -> None:
        """Empty candidates or k <= 0 give no results."""
        assert top_k([1.0], [], 3) == []
        assert top_k([1.0], [[1.0]], 0) == []
