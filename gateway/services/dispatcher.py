"""
CHAT DISPATCHER MODULE
======================

The single switch point every chat request goes through. The API layer calls
dispatch(); the dispatcher does not know about HTTP.

FLOW (dispatch):
  1. validate(request): message and model must be present (ValidationError).
  2. Look up the model in the registry (UnknownModelError for unknown ids).
  3. Read stored history, only for stateful requests without explicit history.
  4. normalize() into provider-neutral messages.
  5. adapter.send() - the only network call, made without holding the store lock.
  6. On success, append the user message and the assistant reply to memory.
  7. Wrap the outcome in a ChatResponse. Provider failures become
     success=False responses and never touch memory.
"""

import logging
from typing import Dict, List, Optional

from gateway.exceptions import ProviderError, ValidationError
from gateway.models import ChatRequest, ChatResponse, Turn
from gateway.services.history_store import ConversationKey, HistoryStore
from gateway.services.normalizer import normalize
from gateway.services.providers import ProviderAdapter
from gateway.services.registry import ModelRegistry

logger = logging.getLogger("Jinxie")


# ==============================================================================
# CHAT DISPATCHER CLASS
# ==============================================================================

class ChatDispatcher:
    """
    Routes ChatRequests to provider adapters and keeps conversation memory in step.

    All collaborators are injected so tests can pass fakes (e.g. adapters with a
    mocked HTTP session).
    """

    def __init__(
        self,
        store: HistoryStore,
        registry: ModelRegistry,
        adapters: Dict[str, ProviderAdapter],
        history_window: Optional[int] = None,
    ):
        missing = set(registry.providers()) - set(adapters)
        if missing:
            raise ValueError(f"No adapter registered for provider(s): {', '.join(sorted(missing))}")
        self.store = store
        self.registry = registry
        self.adapters = adapters
        self.history_window = history_window if history_window is not None else store.default_window

    def validate(self, request: ChatRequest) -> None:
        """Reject requests that must never reach a provider."""
        if not request.model or not request.model.strip():
            raise ValidationError("Model is required")
        if not request.message and not request.image_url:
            raise ValidationError("Message is required")

    def dispatch(self, request: ChatRequest) -> ChatResponse:
        """
        Handle one chat request end to end.

        Raises ValidationError / UnknownModelError before any network call.
        Provider failures are returned as ChatResponse(success=False); the
        original exception is attached as `response.exception` for the caller.
        """
        self.validate(request)
        spec = self.registry.get(request.model)
        adapter = self.adapters[spec.provider]
        provider = self.registry.provider_config(spec.provider)

        key = self._key_for(request)
        prior: List[Turn] = []
        if key is not None and request.history is None:
            prior = self.store.read(key, self.history_window)

        messages = normalize(request, prior)

        try:
            text = adapter.send(messages, spec, provider)
        except ProviderError as e:
            logger.warning("Model %s failed: %s", spec.model_id, e)
            return ChatResponse.failure(spec.model_id, e)

        if key is not None:
            self.store.append(key, "user", request.message)
            self.store.append(key, "assistant", text)

        return ChatResponse(success=True, model_used=spec.model_id, text=text)

    def clear_history(self, chat_id: str, sender_id: str) -> bool:
        """Forget one conversation. Safe to call for conversations that never existed."""
        cleared = self.store.clear(ConversationKey(chat_id, sender_id))
        logger.info("Cleared history for %s:%s (existed=%s)", chat_id, sender_id, cleared)
        return cleared

    def get_history(self, chat_id: str, sender_id: str, limit: Optional[int] = None) -> List[Turn]:
        return self.store.read(ConversationKey(chat_id, sender_id), limit or self.store.max_stored_turns)

    def available_models(self) -> List[str]:
        return self.registry.model_ids()

    @staticmethod
    def _key_for(request: ChatRequest) -> Optional[ConversationKey]:
        if not request.is_stateful:
            return None
        return ConversationKey(request.chat_id, request.sender_id)
