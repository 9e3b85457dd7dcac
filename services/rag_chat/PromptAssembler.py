"""Builds the context-augmented prompt for the RAG profile."""

from collections.abc import Sequence

CONTEXT_SEPARATOR = "\n\n---\n\n"

PROMPT_TEMPLATE = """Based on the following context, please answer the user's question.
Answer only from the context. If the context does not contain the answer, say that you don't have enough information.

CONTEXT:
{context}

QUESTION:
{question}
"""


def assemble_prompt(context_chunks: Sequence[str], question: str) -> str:
    """Join retrieved chunks and the question into one prompt.

    Args:
        context_chunks (Sequence[str]): Retrieved chunk texts, most relevant first. May be empty.
        question (str): The user's question.

    Returns:
        str: The prompt text.
    """
    return PROMPT_TEMPLATE.format(context=CONTEXT_SEPARATOR.join(context_chunks), question=question)
