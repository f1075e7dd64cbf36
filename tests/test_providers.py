"""Tests for provider adapters: persona injection, payload shapes, headers, response parsing."""

import threading
import unittest

import requests

from gateway.exceptions import ProviderResponseError, ProviderTransportError
from gateway.models import ImagePart, Message, TextPart
from gateway.services.providers import (
    GroqAdapter,
    HuggingFaceAdapter,
    OpenRouterAdapter,
    ProviderAdapter,
    build_adapters,
)
from gateway.services.registry import MODEL_TABLE, ModelRegistry
from tests.helpers import completion, fake_session, make_response, stub_provider_configs


REGISTRY = ModelRegistry(MODEL_TABLE, stub_provider_configs())


def _user(text="hello"):
    return [Message(role="user", content=text)]


class _AdapterCase(unittest.TestCase):
    """Runs one send() against a fake session and exposes what was posted."""

    def send(self, adapter_cls, model_id, messages, response=None):
        spec = REGISTRY.get(model_id)
        provider = REGISTRY.provider_config(spec.provider)
        session = fake_session(response or make_response(200, completion("ok")))
        text = adapter_cls(session).send(messages, spec, provider)
        args, kwargs = session.post.call_args
        return text, args[0], kwargs


class HuggingFaceAdapterTests(_AdapterCase):

    def test_deepseek_payload(self):
        text, url, kwargs = self.send(HuggingFaceAdapter, "deepseek", _user())

        self.assertEqual(text, "ok")
        self.assertEqual(url, "https://hf.test/v1/chat/completions")
        self.assertEqual(kwargs["json"], {
            "model": "deepseek-ai/DeepSeek-V3.1:fireworks-ai",
            "messages": [{"role": "user", "content": "hello"}],
            "max_tokens": 4000,
            "temperature": 0.7,
            "stream": False,
        })
        self.assertEqual(kwargs["timeout"], 30)

    def test_llama4_omits_stream(self):
        _, _, kwargs = self.send(HuggingFaceAdapter, "llama4", _user())
        self.assertNotIn("stream", kwargs["json"])
        self.assertEqual(kwargs["json"]["model"], "meta-llama/Llama-4-Maverick-17B-128E-Instruct:groq")

    def test_no_persona_means_no_system_message(self):
        _, _, kwargs = self.send(HuggingFaceAdapter, "deepseek", _user())
        self.assertEqual([m["role"] for m in kwargs["json"]["messages"]], ["user"])

    def test_image_parts_use_openai_wire_format(self):
        messages = [Message(role="user", content=[TextPart(text="what?"), ImagePart(url="https://img.test/a.png")])]
        _, _, kwargs = self.send(HuggingFaceAdapter, "deepseek", messages)
        self.assertEqual(kwargs["json"]["messages"][0]["content"], [
            {"type": "text", "text": "what?"},
            {"type": "image_url", "image_url": {"url": "https://img.test/a.png", "detail": "high"}},
        ])

    def test_bearer_auth_and_content_type(self):
        _, _, kwargs = self.send(HuggingFaceAdapter, "deepseek", _user())
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer hf-token")
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/json")
        self.assertNotIn("X-Title", kwargs["headers"])


class GroqAdapterTests(_AdapterCase):

    def test_persona_injected_for_fresh_conversation(self):
        _, _, kwargs = self.send(GroqAdapter, "groq-llama", _user())
        messages = kwargs["json"]["messages"]

        self.assertEqual([m["role"] for m in messages], ["system", "user"])
        self.assertEqual(messages[0]["content"], REGISTRY.get("groq-llama").system_prompt)

    def test_no_persona_when_history_present(self):
        history = [
            Message(role="user", content="earlier"),
            Message(role="assistant", content="reply"),
            Message(role="user", content="now"),
        ]
        _, _, kwargs = self.send(GroqAdapter, "groq-llama", history)
        self.assertEqual([m["role"] for m in kwargs["json"]["messages"]], ["user", "assistant", "user"])

    def test_payload_includes_top_p(self):
        _, url, kwargs = self.send(GroqAdapter, "moon-ai", _user())
        self.assertEqual(url, "https://groq.test/v1/chat/completions")
        self.assertEqual(kwargs["json"]["model"], "moonshotai/kimi-k2-instruct-0905")
        self.assertEqual(kwargs["json"]["temperature"], 0.3)
        self.assertEqual(kwargs["json"]["top_p"], 0.9)
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer groq-token")

    def test_moon_alias_uses_same_backend(self):
        _, _, kwargs = self.send(GroqAdapter, "moon", _user())
        self.assertEqual(kwargs["json"]["model"], "moonshotai/kimi-k2-instruct-0905")


class OpenRouterAdapterTests(_AdapterCase):

    def test_identifying_headers(self):
        _, url, kwargs = self.send(OpenRouterAdapter, "sonoma-ai", _user())
        self.assertEqual(url, "https://openrouter.test/v1/chat/completions")
        self.assertEqual(kwargs["headers"]["HTTP-Referer"], "https://example.test")
        self.assertEqual(kwargs["headers"]["X-Title"], "Test Bot")
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer or-token")

    def test_qwen_payload(self):
        _, _, kwargs = self.send(OpenRouterAdapter, "qwen-coder", _user())
        payload = kwargs["json"]
        self.assertEqual(payload["model"], "qwen/qwen3-coder")
        self.assertEqual(payload["max_tokens"], 2000)
        self.assertNotIn("top_p", payload)
        self.assertEqual(payload["messages"][0]["role"], "system")

    def test_sonoma_has_no_persona(self):
        _, _, kwargs = self.send(OpenRouterAdapter, "sonoma-ai", _user())
        self.assertEqual(kwargs["json"]["max_tokens"], 5000)
        self.assertEqual(len(kwargs["json"]["messages"]), 1)


class ResponseParsingTests(unittest.TestCase):

    def setUp(self):
        self.adapter = ProviderAdapter(fake_session())

    def test_extracts_first_choice(self):
        body = completion("first")
        body["choices"].append({"index": 1, "message": {"role": "assistant", "content": "second"}})
        self.assertEqual(self.adapter.parse_response(make_response(200, body)), "first")

    def test_non_200_carries_status_and_body(self):
        with self.assertRaises(ProviderResponseError) as ctx:
            self.adapter.parse_response(make_response(401, text='{"error": "invalid token"}'))
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertIn("invalid token", ctx.exception.body)
        self.assertIn("401", str(ctx.exception))
        self.assertTrue(str(ctx.exception).startswith("provider_response_error:"))

    def test_empty_choices_is_an_error(self):
        with self.assertRaises(ProviderResponseError):
            self.adapter.parse_response(make_response(200, {"choices": []}))

    def test_missing_choices_is_an_error(self):
        with self.assertRaises(ProviderResponseError):
            self.adapter.parse_response(make_response(200, {"error": "overloaded"}))

    def test_wrong_shapes_are_errors(self):
        bodies = [
            {"choices": ["not an object"]},
            {"choices": [{"message": "flat string"}]},
            {"choices": [{"message": {"role": "assistant"}}]},
            {"choices": [{"message": {"content": None}}]},
            {"choices": [{"message": {"content": ["a", "b"]}}]},
        ]
        for body in bodies:
            with self.subTest(body=body):
                with self.assertRaises(ProviderResponseError):
                    self.adapter.parse_response(make_response(200, body))

    def test_invalid_json_is_an_error(self):
        with self.assertRaises(ProviderResponseError) as ctx:
            self.adapter.parse_response(make_response(200, text="<html>Bad Gateway</html>"))
        self.assertIn("Bad Gateway", ctx.exception.body)

    def test_long_body_is_truncated_in_message(self):
        body = "x" * 5000
        with self.assertRaises(ProviderResponseError) as ctx:
            self.adapter.parse_response(make_response(500, text=body))
        self.assertEqual(len(ctx.exception.body), 5000)
        self.assertLess(len(str(ctx.exception)), 700)


class TransportErrorTests(unittest.TestCase):

    def _send(self, error):
        spec = REGISTRY.get("deepseek")
        adapter = HuggingFaceAdapter(fake_session(side_effect=error))
        return adapter.send(_user(), spec, REGISTRY.provider_config("huggingface"))

    def test_timeout(self):
        with self.assertRaises(ProviderTransportError) as ctx:
            self._send(requests.exceptions.ReadTimeout("read timed out"))
        self.assertTrue(ctx.exception.timeout)
        self.assertEqual(ctx.exception.provider, "huggingface")

    def test_connection_error(self):
        with self.assertRaises(ProviderTransportError) as ctx:
            self._send(requests.exceptions.ConnectionError("refused"))
        self.assertFalse(ctx.exception.timeout)
        self.assertIn("refused", str(ctx.exception))

    def test_no_retry(self):
        session = fake_session(side_effect=requests.exceptions.ConnectTimeout("slow"))
        adapter = HuggingFaceAdapter(session)
        with self.assertRaises(ProviderTransportError):
            adapter.send(_user(), REGISTRY.get("deepseek"), REGISTRY.provider_config("huggingface"))
        self.assertEqual(session.post.call_count, 1)


class BuildAdaptersTests(unittest.TestCase):

    def test_one_adapter_per_family(self):
        adapters = build_adapters(fake_session())
        self.assertEqual(set(adapters), {"huggingface", "groq", "openrouter"})
        self.assertIsInstance(adapters["groq"], GroqAdapter)

    def test_shared_session_across_threads(self):
        session = fake_session(make_response(200, completion("ok")))
        adapters = build_adapters(session)
        self.assertEqual({id(a.session) for a in adapters.values()}, {id(session)})

        spec = REGISTRY.get("groq-llama")
        provider = REGISTRY.provider_config("groq")
        results = []

        def call():
            results.append(adapters["groq"].send([Message(role="user", content="hi")], spec, provider))

        threads = [threading.Thread(target=call) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        self.assertEqual(results, ["ok"] * 8)
        for call_args in session.post.call_args_list:
            self.assertNotIn("cookies", call_args[1])


if __name__ == "__main__":
    unittest.main()
