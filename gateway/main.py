"""
JINXIE AI GATEWAY MAIN API
==========================

This module defines the FastAPI application and all HTTP endpoints. One
request = one chat completion from one of the registered models; the gateway
picks the provider, remembers the conversation when asked to, and returns a
uniform response whatever backend answered.

ENDPOINTS:
  GET    /                - Returns service name, endpoints and registered models.
  GET    /health          - Returns whether the dispatcher is ready (for monitoring).
  POST   /api/ai          - Chat: {message, model, imageUrl?, chatId?, senderId?, history?}.
  DELETE /api/ai/clear    - Forget a conversation: ?chatId=...&senderId=...
  GET    /api/ai/history  - Inspect a remembered conversation: ?chatId=...&senderId=...

AUTH:
  The /api/ai endpoints require "Authorization: Bearer <key>" where key is one
  of API_KEYS from .env. With no API_KEYS configured, auth is disabled.

MEMORY:
  Requests that carry both chatId and senderId share history. Memory is kept in
  process only; restarting the server forgets every conversation.

STARTUP:
  The lifespan function builds the history store, the model registry, one
  adapter per provider family and the dispatcher, and stores them on app.state.
  Route handlers receive them through FastAPI dependencies.
"""


from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

import config
from gateway.exceptions import GatewayError, ProviderTransportError, ValidationError
from gateway.models import ChatRequest, ChatResponse, ClearHistoryResponse, HistoryResponse
from gateway.services.dispatcher import ChatDispatcher
from gateway.services.history_store import HistoryStore
from gateway.services.providers import build_adapters
from gateway.services.registry import build_default_registry


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("Jinxie")


def build_dispatcher() -> ChatDispatcher:
    """Create the store, registry and adapters from config.py and wire them together."""
    store = HistoryStore(
        max_conversations=config.MAX_CONVERSATIONS,
        max_stored_turns=config.MAX_STORED_TURNS,
        default_window=config.MAX_HISTORY_TURNS,
    )
    return ChatDispatcher(store, build_default_registry(), build_adapters())


# -------------------------------------------------------------------------
# LIFESPAN (STARTUP / SHUTDOWN)
# -------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the dispatcher once at startup and keep it on app.state for the
    lifetime of the process. Nothing needs saving at shutdown: memory is
    in-process only.
    """
    logger.info("=" * 60)
    logger.info("%s v%s - Starting Up...", config.SERVICE_NAME, config.SERVICE_VERSION)
    logger.info("=" * 60)

    try:
        app.state.dispatcher = build_dispatcher()
    except Exception as e:
        logger.error(f"Fatal error during startup: {e}", exc_info=True)
        raise

    models = ", ".join(app.state.dispatcher.available_models())
    logger.info("Models: %s", models)
    logger.info(
        "Memory: window=%s turns, %s stored per conversation, max %s conversations",
        config.MAX_HISTORY_TURNS, config.MAX_STORED_TURNS, config.MAX_CONVERSATIONS,
    )
    if not config.API_KEYS:
        logger.warning("API_KEYS not set. /api/ai endpoints are open to anyone who can reach this server.")
    logger.info("Gateway is online: http://%s:%s", config.HOST, config.PORT)
    logger.info("=" * 60)

    yield

    logger.info("Shutting down %s. In-memory conversations are discarded.", config.SERVICE_NAME)


# -------------------------------------------------------------------------
# FASTAPI APP AND CORS
# -------------------------------------------------------------------------
app = FastAPI(
    title="Jinxie AI Gateway",
    description="One chat API in front of HuggingFace, Groq and OpenRouter models",
    version=config.SERVICE_VERSION,
    lifespan=lifespan
)

# Allow any origin so bots and web frontends on other hosts can call the API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------------------------------------------------
# ERROR HANDLERS
# -------------------------------------------------------------------------
# Errors keep the ChatResponse shape so clients parse one format.

def _error_body(error: str, model: str = "") -> dict:
    return ChatResponse(success=False, model_used=model, error=error).model_dump(by_alias=True)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning("Rejected request: %s", exc)
    return JSONResponse(status_code=400, content=_error_body(str(exc), getattr(exc, "model", "")))


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    logger.error("Gateway error: %s", exc)
    return JSONResponse(status_code=502, content=_error_body(str(exc)))


# -------------------------------------------------------------------------
# DEPENDENCIES
# -------------------------------------------------------------------------

def get_dispatcher(request: Request) -> ChatDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Dispatcher not initialized")
    return dispatcher


def verify_api_key(authorization: Optional[str] = Header(None)) -> None:
    """Check the bearer key against API_KEYS. Does nothing when no keys are configured."""
    if not config.API_KEYS:
        return
    if not authorization:
        raise HTTPException(status_code=401, detail="missing_auth: Authorization header required")
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise HTTPException(status_code=401, detail="invalid_auth_format: Invalid authorization format")
    if parts[1] not in config.API_KEYS:
        raise HTTPException(status_code=401, detail="invalid_api_key: Invalid API key")


def _require_conversation(chat_id: Optional[str], sender_id: Optional[str]) -> None:
    if not chat_id or not sender_id:
        raise HTTPException(status_code=400, detail="missing_params: chatId and senderId are required")


# =========================================================================
# API ENDPOINTS
# =========================================================================

@app.get("/")
async def root(dispatcher: ChatDispatcher = Depends(get_dispatcher)):
    """Return the service name, its endpoints and the model ids it accepts."""
    return {
        "status": "online",
        "service": config.SERVICE_NAME,
        "version": config.SERVICE_VERSION,
        "endpoints": {
            "POST /api/ai": "Chat with a model",
            "DELETE /api/ai/clear": "Clear conversation history",
            "GET /api/ai/history": "Get conversation history",
            "GET /health": "Health check",
        },
        "models": dispatcher.available_models(),
    }


@app.get("/health")
async def health(request: Request):
    """Return ok and whether the dispatcher has been built."""
    return {
        "status": "ok",
        "service": config.SERVICE_NAME,
        "dispatcher": getattr(request.app.state, "dispatcher", None) is not None,
    }


@app.post("/api/ai", response_model=ChatResponse, dependencies=[Depends(verify_api_key)])
def chat(body: ChatRequest, dispatcher: ChatDispatcher = Depends(get_dispatcher)):
    """
    Chat endpoint - send one message to one model.

    Declared with plain `def` so FastAPI runs it in its threadpool: the provider
    call blocks for up to REQUEST_TIMEOUT seconds and must not block the event loop.

    HOW IT WORKS:
    1. Validates message and model (400 on failure, no provider is called)
    2. Loads remembered history when chatId and senderId are both given
       (unless the body carries its own history)
    3. Calls the provider that serves the model
    4. Remembers the user message and the reply (stateful requests, success only)
    5. Returns the reply; provider failures return success=false with status 502 (504 on timeout)

    REQUEST BODY:
    {
        "message": "Halo, apa kabar?",
        "model": "deepseek",
        "chatId": "group-42",
        "senderId": "62812345"
    }

    RESPONSE:
    {
        "success": true,
        "model": "deepseek",
        "response": "Halo! Kabar baik...",
        "timestamp": "2026-02-05T14:03:22Z"
    }
    """
    try:
        response = dispatcher.dispatch(body)
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"Error processing chat: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"internal_error: {str(e)}")

    if response.success:
        return response

    # 504 for provider timeouts, 502 for every other provider failure.
    status_code = 502
    if isinstance(response.exception, ProviderTransportError) and response.exception.timeout:
        status_code = 504
    return JSONResponse(status_code=status_code, content=response.model_dump(by_alias=True))


@app.delete("/api/ai/clear", response_model=ClearHistoryResponse, dependencies=[Depends(verify_api_key)])
def clear_history(
    chat_id: Optional[str] = Query(None, alias="chatId"),
    sender_id: Optional[str] = Query(None, alias="senderId"),
    dispatcher: ChatDispatcher = Depends(get_dispatcher),
):
    """Forget the conversation for chatId + senderId. Succeeds even if nothing was stored."""
    _require_conversation(chat_id, sender_id)
    dispatcher.clear_history(chat_id, sender_id)
    return ClearHistoryResponse(success=True, message="Conversation history cleared")


@app.get("/api/ai/history", response_model=HistoryResponse, dependencies=[Depends(verify_api_key)])
def get_chat_history(
    chat_id: Optional[str] = Query(None, alias="chatId"),
    sender_id: Optional[str] = Query(None, alias="senderId"),
    limit: Optional[int] = Query(None, ge=1),
    dispatcher: ChatDispatcher = Depends(get_dispatcher),
):
    """
    Return the remembered turns for chatId + senderId, oldest first.
    Unknown conversations return an empty list, not an error.
    """
    _require_conversation(chat_id, sender_id)
    messages = dispatcher.get_history(chat_id, sender_id, limit)
    return HistoryResponse(chat_id=chat_id, sender_id=sender_id, messages=messages)


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m gateway.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py); used if someone does python -m gateway.main"""
    uvicorn.run(
        "gateway.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=True,
        log_level="info"
    )

if __name__ == "__main__":
    run()
