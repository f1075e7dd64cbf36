"""Shared fixtures for the gateway tests: canned provider responses and a fake HTTP session."""

import json
from unittest import mock

import requests

from gateway.services.dispatcher import ChatDispatcher
from gateway.services.history_store import HistoryStore
from gateway.services.providers import build_adapters
from gateway.services.registry import MODEL_TABLE, ModelRegistry, ProviderConfig


def make_response(status_code=200, payload=None, text=None):
    """Build a real requests.Response with the given status and JSON (or raw text) body."""
    response = requests.Response()
    response.status_code = status_code
    body = text if text is not None else json.dumps(payload if payload is not None else {})
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


def completion(text):
    """A minimal successful chat-completions body."""
    return {
        "id": "cmpl-1",
        "model": "test",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
    }


def fake_session(*responses, side_effect=None):
    """A mock requests.Session whose post() returns the given responses in order."""
    session = mock.Mock(spec=requests.Session)
    if side_effect is not None:
        session.post.side_effect = side_effect
    elif len(responses) == 1:
        session.post.return_value = responses[0]
    else:
        session.post.side_effect = list(responses)
    return session


def stub_provider_configs():
    return {
        "huggingface": ProviderConfig("huggingface", "https://hf.test/v1/chat/completions", "hf-token"),
        "groq": ProviderConfig("groq", "https://groq.test/v1/chat/completions", "groq-token"),
        "openrouter": ProviderConfig(
            "openrouter",
            "https://openrouter.test/v1/chat/completions",
            "or-token",
            extra_headers={"HTTP-Referer": "https://example.test", "X-Title": "Test Bot"},
        ),
    }


def make_dispatcher(session, store=None):
    """Dispatcher over the real model table, test endpoints and the given fake session."""
    registry = ModelRegistry(MODEL_TABLE, stub_provider_configs())
    return ChatDispatcher(store if store is not None else HistoryStore(), registry, build_adapters(session))
