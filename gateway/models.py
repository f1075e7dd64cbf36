"""
DATA MODELS MODULE
==================

Pydantic models for the HTTP API, the provider-neutral conversation model, and
the provider wire schemas. FastAPI uses the API models to validate incoming JSON
and serialize responses; the services use the rest internally.

MODELS:
  TextPart, ImagePart - The two kinds of part in multimodal content.
  Content             - Either a plain string or a list of parts.
  Turn                - One stored message (role + content + created_at). Immutable.
  Message             - One provider-neutral message (role + content), no timestamp.
  HistoryItem         - One message of caller-supplied history in a ChatRequest.
  ChatRequest         - Body of POST /api/ai.
  ChatResponse        - Body returned by POST /api/ai (success or failure).
  ClearHistoryResponse, HistoryResponse - Bodies of the history endpoints.
  ChatCompletion      - The standard choices/message/content envelope every provider returns.
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

import config
from gateway.utils.time_info import utc_now, utc_timestamp

Role = Literal["system", "user", "assistant"]

# ==============================================================================
# CONTENT
# ==============================================================================

class TextPart(BaseModel):
    """Plain text part of a multimodal message."""
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    """Image part of a multimodal message, referenced by URL."""
    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    url: str
    detail: str = "high"


Part = Annotated[Union[TextPart, ImagePart], Field(discriminator="type")]

# A message body is either a plain string or an ordered list of parts.
Content = Union[str, List[Part]]


# ==============================================================================
# CONVERSATION MODEL
# ==============================================================================

class Message(BaseModel):
    """A provider-neutral chat message as produced by the normalizer."""
    role: Role
    content: Content


class Turn(BaseModel):
    """
    One stored message of a conversation. The history store assigns created_at
    when the turn is appended; turns are never modified afterwards.
    """
    model_config = ConfigDict(frozen=True)

    role: Role
    content: Content
    created_at: datetime = Field(default_factory=utc_now)

    def to_message(self) -> Message:
        return Message(role=self.role, content=self.content)


# ==============================================================================
# API REQUEST / RESPONSE MODELS
# ==============================================================================

class HistoryItem(BaseModel):
    """One message of explicit history sent by the caller instead of stored memory."""
    role: Role
    content: Content


class ChatRequest(BaseModel):
    """
    Request body for POST /api/ai.

    - message: The user's message. May only be empty when imageUrl is set.
    - model: Public model id (deepseek, llama4, groq-llama, moon-ai, qwen-coder, sonoma-ai).
    - imageUrl: Optional image sent alongside the text (multimodal models).
    - chatId / senderId: Optional. When both are present the conversation is remembered.
    - history: Optional explicit history. When given, stored memory is not read.

    Both camelCase (wire) and snake_case (Python) field names are accepted.
    """
    model_config = ConfigDict(populate_by_name=True)

    # Presence checks live in the dispatcher so they report as validation errors.
    message: str = Field("", max_length=config.MAX_MESSAGE_LENGTH)
    model: str = ""
    image_url: Optional[str] = Field(None, alias="imageUrl")
    chat_id: Optional[str] = Field(None, alias="chatId")
    sender_id: Optional[str] = Field(None, alias="senderId")
    history: Optional[List[HistoryItem]] = None

    @property
    def is_stateful(self) -> bool:
        """True when the request names a conversation, so memory is read and written."""
        return bool(self.chat_id) and bool(self.sender_id)


class ChatResponse(BaseModel):
    """
    Response body for POST /api/ai.

    - success: Whether the provider produced an answer.
    - model: The public model id that handled the request.
    - response: The assistant's reply text ("" on failure).
    - error: "<code>: <detail>" on failure.
    - timestamp: RFC 3339 time the response was built.
    """
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    success: bool
    model_used: str = Field("", alias="model")
    text: str = Field("", alias="response")
    error: Optional[str] = None
    timestamp: str = Field(default_factory=utc_timestamp)

    # The provider error behind a failed response; not serialized.
    _exception: Optional[Exception] = PrivateAttr(default=None)

    @classmethod
    def failure(cls, model_used: str, exc: Exception) -> "ChatResponse":
        """Build a success=False response carrying exc as its error and exception."""
        response = cls(success=False, model_used=model_used, error=str(exc))
        response._exception = exc
        return response

    @property
    def exception(self) -> Optional[Exception]:
        return self._exception


class ClearHistoryResponse(BaseModel):
    success: bool
    message: str


class HistoryResponse(BaseModel):
    """Body of GET /api/ai/history: the remembered turns of one conversation, oldest first."""
    model_config = ConfigDict(populate_by_name=True)

    chat_id: str = Field(alias="chatId")
    sender_id: str = Field(alias="senderId")
    messages: List[Turn]


# ==============================================================================
# PROVIDER RESPONSE ENVELOPE
# ==============================================================================
# Every supported backend speaks the OpenAI chat-completions response format.
# Validating against these models is what turns a malformed body into an error.

class CompletionMessage(BaseModel):
    role: Optional[str] = None
    content: str


class CompletionChoice(BaseModel):
    index: int = 0
    message: CompletionMessage
    finish_reason: Optional[str] = None


class ChatCompletion(BaseModel):
    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[CompletionChoice] = Field(..., min_length=1)

    @property
    def text(self) -> str:
        return self.choices[0].message.content
