"""
Shared fixtures: an in-memory Wikipedia / completion backend served through
httpx.MockTransport, and helpers to build the app around it.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from healthwiki.config import Settings
from healthwiki.main import create_app


class StubBackend:
    """
    Fake upstream APIs.

    `titles` maps an exact srsearch value to the title returned for it;
    anything else gets an empty result list. `extracts` maps a title to its
    extract text.
    """

    def __init__(self, titles=None, extracts=None, completion_reply="A short answer from the model."):
        self.titles = dict(titles or {})
        self.extracts = dict(extracts or {})
        self.completion_reply = completion_reply
        self.completion_status = 200
        self.fail_search = False
        self.fail_extract = False
        self.search_terms = []
        self.extract_titles = []
        self.completion_payloads = []
        self.completion_headers = []

    @property
    def call_count(self):
        return len(self.search_terms) + len(self.extract_titles) + len(self.completion_payloads)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/chat/completions"):
            return self._completion(request)

        params = request.url.params
        if params.get("list") == "search":
            self.search_terms.append(params["srsearch"])
            if self.fail_search:
                raise httpx.ConnectError("search backend unreachable", request=request)
            title = self.titles.get(params["srsearch"])
            results = [{"ns": 0, "title": title}] if title else []
            return httpx.Response(200, json={"query": {"search": results}})

        if params.get("prop") == "extracts":
            title = params["titles"]
            self.extract_titles.append(title)
            if self.fail_extract:
                raise httpx.ConnectError("extract backend unreachable", request=request)
            page = {"pageid": 1, "ns": 0, "title": title}
            if title in self.extracts:
                page["extract"] = self.extracts[title]
            return httpx.Response(200, json={"query": {"pages": {"1": page}}})

        return httpx.Response(404, json={"error": "unknown route"})

    def _completion(self, request: httpx.Request) -> httpx.Response:
        self.completion_payloads.append(json.loads(request.content))
        self.completion_headers.append(dict(request.headers))
        if self.completion_status != 200:
            return httpx.Response(self.completion_status, json={"error": {"message": "nope"}})
        return httpx.Response(
            200,
            json={"choices": [{"index": 0, "message": {"role": "assistant", "content": self.completion_reply}}]},
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def backend():
    return StubBackend(
        titles={"fever": "Fever", "Fever": "Fever", "flu": "Influenza"},
        extracts={
            "Fever": "Fever is a raised body temperature.\nMore text",
            "Influenza": "\n\nInfluenza is an infectious disease.\nSecond paragraph.",
        },
    )


@pytest.fixture
def make_client(backend):
    def _make(**overrides):
        settings = Settings(**overrides)
        return TestClient(create_app(settings, transport=backend.transport))
    return _make


@pytest.fixture
def client(make_client):
    return make_client()
