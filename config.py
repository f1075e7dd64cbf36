"""
CONFIGURATION MODULE
====================

PURPOSE:
  Central place for all gateway settings: provider credentials, endpoint URLs,
  memory limits, and the persona system prompts. Loaded once at process start;
  nothing here is mutated afterwards.

WHAT THIS FILE DOES:
  - Loads environment variables from .env (so API keys stay out of code).
  - Exposes HF_TOKEN, GROQ_API_KEY, OPENROUTER_API_KEY and the three endpoint URLs.
  - Exposes API_KEYS: the bearer keys clients must send to /api/ai.
  - Defines the conversation memory limits (read window, stored turns, key ceiling).
  - Holds the persona prompts injected at the start of a fresh conversation.

USAGE:
  Import what you need: `from config import GROQ_API_KEY, MAX_HISTORY_TURNS`
  The model registry (gateway/services/registry.py) reads provider settings from here.
"""

import os
import logging
from dotenv import load_dotenv


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
# Used when an environment value cannot be parsed and we fall back to a default.
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# ENVIRONMENT
# -----------------------------------------------------------------------------
# Load environment variables from .env file (if it exists).
# This keeps API keys and secrets out of the code and version control.
load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to default on bad input."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive, using %s", name, raw, default)
        return default
    return value


def _load_api_keys() -> list:
    """
    Load the client API keys from API_KEYS (comma separated).
    Blank entries are dropped. An empty list disables auth (local development).
    """
    raw = os.getenv("API_KEYS", "")
    return [k.strip() for k in raw.split(",") if k.strip()]


# ============================================================================
# SERVER
# ============================================================================
SERVICE_NAME = "jinxie-ai-gateway"
SERVICE_VERSION = "1.1.0"
HOST = os.getenv("HOST", "0.0.0.0")
PORT = _env_int("PORT", 8080)

# Bearer keys accepted on the /api/ai endpoints.
API_KEYS = _load_api_keys()

# ============================================================================
# PROVIDER CREDENTIALS AND ENDPOINTS
# ============================================================================
# Tokens are not validated here: a missing token makes the provider reject the
# call with its own authentication error at request time.

HF_TOKEN = os.getenv("HF_TOKEN", "").strip()
HF_API_URL = os.getenv("HF_API_URL", "https://router.huggingface.co/v1/chat/completions")

GROQ_API_KEY = os.getenv("GROQ_API_KEY", "").strip()
GROQ_API_URL = os.getenv("GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions")

OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "").strip()
OPENROUTER_API_URL = os.getenv("OPENROUTER_API_URL", "https://openrouter.ai/api/v1/chat/completions")
# OpenRouter asks apps to identify themselves with these two headers.
OPENROUTER_REFERER = os.getenv("OPENROUTER_REFERER", "https://github.com/jinxie-bot")
OPENROUTER_TITLE = os.getenv("OPENROUTER_TITLE", "Jinxie WhatsApp Bot")

# Seconds before an outbound provider call is abandoned. Failed calls are not retried.
REQUEST_TIMEOUT = _env_int("REQUEST_TIMEOUT", 30)

# ============================================================================
# CONVERSATION MEMORY
# ============================================================================
# MAX_HISTORY_TURNS: how many previous turns are sent to the provider per request.
# MAX_STORED_TURNS: how many turns are kept per conversation (must be >= the window).
# MAX_CONVERSATIONS: ceiling on distinct (chatId, senderId) pairs held in memory.

MAX_HISTORY_TURNS = _env_int("MAX_HISTORY_TURNS", 10)
MAX_STORED_TURNS = max(_env_int("MAX_STORED_TURNS", 50), MAX_HISTORY_TURNS)
MAX_CONVERSATIONS = _env_int("MAX_CONVERSATIONS", 1000)

# Maximum length (characters) for a single user message.
MAX_MESSAGE_LENGTH = 32_000

# ============================================================================
# PERSONA PROMPTS
# ============================================================================
# Injected as the system message when a conversation has no prior turns.
# Models without a persona get no system message at all.

ASSISTANT_NAME = (os.getenv("ASSISTANT_NAME", "").strip() or "Jinxie AI")

CODER_SYSTEM_PROMPT = (
    f"Kamu adalah {ASSISTANT_NAME}, asisten pintar yang ahli dalam coding, debugging, dan analisis "
    "teknis dengan model LLaMA 4. Berikan jawaban yang talkative, informatif, dan jelas, sertakan tips, "
    "penjelasan, dan contoh ketika perlu. Gunakan bahasa Indonesia untuk penjelasan umum, tetapi biarkan "
    "semua kode tetap dalam bahasa aslinya."
)

ANALYST_SYSTEM_PROMPT = (
    f"Kamu adalah {ASSISTANT_NAME}, asisten pintar yang ahli dalam memberikan informasi, analisis, dan "
    "penjelasan teknis. Gunakan bahasa Indonesia untuk semua penjelasan agar mudah dimengerti. Fokus pada "
    "jawaban yang jelas, ringkas, dan akurat, sertakan contoh atau tabel jika perlu. Jangan menulis kode "
    "pemrograman."
)

PROGRAMMER_SYSTEM_PROMPT = (
    "Kamu adalah AI programmer yang ahli dalam coding. Bantu dengan kode, debugging, dan penjelasan "
    "teknis. Gunakan bahasa Indonesia untuk penjelasan umum, tapi pertahankan kode dalam bahasa aslinya."
)
