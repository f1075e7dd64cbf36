"""Tests for request -> provider-neutral message normalization."""

import unittest

from gateway.models import ChatRequest, HistoryItem, ImagePart, TextPart, Turn
from gateway.services.normalizer import normalize


class NormalizeTests(unittest.TestCase):

    def test_plain_message_without_history(self):
        messages = normalize(ChatRequest(message="hello", model="deepseek"))
        self.assertEqual(len(messages), 1)
        self.assertEqual(messages[0].role, "user")
        self.assertEqual(messages[0].content, "hello")

    def test_image_produces_text_then_image_parts(self):
        request = ChatRequest(message="what is this?", model="deepseek", imageUrl="https://img.test/cat.png")
        content = normalize(request)[-1].content

        self.assertIsInstance(content, list)
        self.assertEqual([part.type for part in content], ["text", "image"])
        self.assertEqual(content[0], TextPart(text="what is this?"))
        self.assertEqual(content[1], ImagePart(url="https://img.test/cat.png", detail="high"))

    def test_prior_history_comes_first_in_order(self):
        prior = [
            Turn(role="user", content="one"),
            Turn(role="assistant", content="two"),
        ]
        messages = normalize(ChatRequest(message="three", model="deepseek"), prior)
        self.assertEqual([(m.role, m.content) for m in messages], [
            ("user", "one"),
            ("assistant", "two"),
            ("user", "three"),
        ])

    def test_explicit_history_replaces_prior_history(self):
        request = ChatRequest(
            message="next",
            model="groq-llama",
            history=[HistoryItem(role="system", content="be brief"), HistoryItem(role="user", content="hi")],
        )
        prior = [Turn(role="user", content="stored turn")]

        messages = normalize(request, prior)
        self.assertEqual([m.content for m in messages], ["be brief", "hi", "next"])

    def test_empty_explicit_history_still_bypasses_store(self):
        request = ChatRequest(message="hi", model="deepseek", history=[])
        messages = normalize(request, [Turn(role="user", content="stored")])
        self.assertEqual([m.content for m in messages], ["hi"])

    def test_multimodal_history_passes_through(self):
        prior = [Turn(role="user", content=[TextPart(text="see"), ImagePart(url="https://img.test/x.png")])]
        messages = normalize(ChatRequest(message="and now?", model="deepseek"), prior)
        self.assertEqual(messages[0].content, prior[0].content)


if __name__ == "__main__":
    unittest.main()
