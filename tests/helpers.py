"""HTTP fakes shared by the client and service tests."""

import json

import httpx


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request and answers through a handler."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def json_bodies(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests if request.content]


def embedding_response(values: list[float]) -> httpx.Response:
    return httpx.Response(200, json={"embedding": {"values": values}})


def text_response(text: str) -> httpx.Response:
    return httpx.Response(200, json={"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]})


def function_call_response(*calls: tuple[str, dict]) -> httpx.Response:
    parts = [{"functionCall": {"name": name, "args": args}} for name, args in calls]
    return httpx.Response(200, json={"candidates": [{"content": {"role": "model", "parts": parts}}]})
