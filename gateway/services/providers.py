"""
PROVIDER ADAPTERS MODULE
========================

One adapter per backend family. All of them speak the OpenAI-style
chat-completions protocol, so the call and the response parsing are shared;
a family only decides the shape of its request payload.

FLOW (ProviderAdapter.send):
  1. prepare_messages: prepend the model's persona prompt when the conversation
     is just the new user message (no history).
  2. build_payload: typed payload for this family (model, messages, max_tokens,
     temperature, plus family extras like top_p or stream).
  3. POST to the provider endpoint with bearer auth and a fixed timeout.
  4. parse_response: require HTTP 200 and a non-empty choices list, return
     choices[0].message.content.

FAMILIES:
  huggingface - HuggingFace router (deepseek, llama4); may send stream=false.
  groq        - Groq OpenAI-compatible API (groq-llama, moon-ai); sends top_p.
  openrouter  - OpenRouter (qwen-coder, sonoma-ai); identifying headers come from ProviderConfig.

No retries: a failed call raises ProviderTransportError or ProviderResponseError.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaError

from gateway.exceptions import ProviderResponseError, ProviderTransportError
from gateway.models import ChatCompletion, ImagePart, Message, TextPart
from gateway.services.registry import ModelSpec, ProviderConfig

logger = logging.getLogger("Jinxie")


# ==============================================================================
# WIRE PAYLOADS
# ==============================================================================

class ChatPayload(BaseModel):
    """Fields every family sends. Unknown extras are rejected."""
    model_config = ConfigDict(extra="forbid")

    model: str
    messages: List[Dict[str, Any]]
    max_tokens: int
    temperature: float


class HuggingFacePayload(ChatPayload):
    stream: Optional[bool] = None


class GroqPayload(ChatPayload):
    top_p: Optional[float] = None


class OpenRouterPayload(ChatPayload):
    pass


def to_wire_content(content):
    """Plain strings pass through; parts become OpenAI content parts (image -> image_url)."""
    if isinstance(content, str):
        return content
    wire = []
    for part in content:
        if isinstance(part, TextPart):
            wire.append({"type": "text", "text": part.text})
        elif isinstance(part, ImagePart):
            wire.append({"type": "image_url", "image_url": {"url": part.url, "detail": part.detail}})
    return wire


def to_wire_message(message: Message) -> Dict[str, Any]:
    return {"role": message.role, "content": to_wire_content(message.content)}


# ==============================================================================
# ADAPTERS
# ==============================================================================

class ProviderAdapter:
    """Generic OpenAI-compatible adapter. Subclasses set name and payload_model."""

    name = "generic"
    payload_model = ChatPayload

    def __init__(self, session: Optional[requests.Session] = None):
        # One session per adapter so connections to the provider are pooled.
        self.session = session if session is not None else requests.Session()

    def prepare_messages(self, messages: List[Message], spec: ModelSpec) -> List[Message]:
        """Open a fresh conversation with the model's persona, if it has one."""
        if spec.system_prompt and len(messages) == 1 and messages[0].role == "user":
            return [Message(role="system", content=spec.system_prompt)] + list(messages)
        return list(messages)

    def build_payload(self, messages: List[Message], spec: ModelSpec) -> ChatPayload:
        return self.payload_model(
            model=spec.backend_model,
            messages=[to_wire_message(m) for m in messages],
            max_tokens=spec.max_tokens,
            temperature=spec.temperature,
            **spec.extra_params,
        )

    def build_headers(self, provider: ProviderConfig) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {provider.auth_token}",
            "Content-Type": "application/json",
        }
        headers.update(provider.extra_headers)
        return headers

    def send(self, messages: List[Message], spec: ModelSpec, provider: ProviderConfig) -> str:
        """Call the provider for one model and return the assistant text."""
        payload = self.build_payload(self.prepare_messages(messages, spec), spec)
        logger.info(
            "Calling %s (%s) with %s message(s)", self.name, spec.backend_model, len(payload.messages)
        )
        try:
            response = self.session.post(
                provider.endpoint_url,
                json=payload.model_dump(exclude_none=True),
                headers=self.build_headers(provider),
                timeout=provider.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise ProviderTransportError(
                self.name, f"API request timed out after {provider.timeout}s", timeout=True
            ) from e
        except requests.exceptions.RequestException as e:
            raise ProviderTransportError(self.name, f"API request failed: {e}") from e

        return self.parse_response(response)

    def parse_response(self, response: requests.Response) -> str:
        if response.status_code != 200:
            raise ProviderResponseError(
                self.name,
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        try:
            completion = ChatCompletion.model_validate_json(response.text)
        except SchemaError as e:
            raise ProviderResponseError(
                self.name,
                f"invalid response format ({e.error_count()} error(s))",
                status_code=response.status_code,
                body=response.text,
            ) from e
        return completion.text


class HuggingFaceAdapter(ProviderAdapter):
    name = "huggingface"
    payload_model = HuggingFacePayload


class GroqAdapter(ProviderAdapter):
    name = "groq"
    payload_model = GroqPayload


class OpenRouterAdapter(ProviderAdapter):
    name = "openrouter"
    payload_model = OpenRouterPayload


ADAPTER_CLASSES = {
    HuggingFaceAdapter.name: HuggingFaceAdapter,
    GroqAdapter.name: GroqAdapter,
    OpenRouterAdapter.name: OpenRouterAdapter,
}


def build_adapters(session: Optional[requests.Session] = None) -> Dict[str, ProviderAdapter]:
    """One adapter instance per provider family, optionally sharing a session."""
    # Adapters are called from FastAPI's threadpool. They only use the
    # session's urllib3 connection pool, which is thread-safe, and never
    # read or set cookies.
    return {name: cls(session) for name, cls in ADAPTER_CLASSES.items()}
