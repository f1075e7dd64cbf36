"""
MODEL REGISTRY MODULE
=====================

The data table behind model routing. Each public model id maps to one row:
which provider family serves it, the backend model name, its token and
temperature defaults, any extra payload fields, and the persona prompt used
to open a fresh conversation.

Adding a model means adding a row to MODEL_TABLE. Adding a backend family
means adding a ProviderConfig here and an adapter in providers.py.

Everything in this module is built once at startup and never mutated.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

import config
from gateway.exceptions import UnknownModelError


# ==============================================================================
# CONFIGURATION RECORDS
# ==============================================================================

@dataclass(frozen=True)
class ProviderConfig:
    """Where and how to reach one provider family."""
    name: str
    endpoint_url: str
    auth_token: str
    extra_headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: float = 30


@dataclass(frozen=True)
class ModelSpec:
    """One row of the model table."""
    model_id: str
    provider: str
    backend_model: str
    max_tokens: int
    temperature: float
    extra_params: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))
    system_prompt: Optional[str] = None


def _row(model_id, provider, backend_model, max_tokens, temperature, system_prompt=None, **extra_params):
    return ModelSpec(
        model_id=model_id,
        provider=provider,
        backend_model=backend_model,
        max_tokens=max_tokens,
        temperature=temperature,
        extra_params=MappingProxyType(dict(extra_params)),
        system_prompt=system_prompt,
    )


# ==============================================================================
# MODEL TABLE
# ==============================================================================

MODEL_TABLE = (
    # HuggingFace router
    _row("deepseek", "huggingface", "deepseek-ai/DeepSeek-V3.1:fireworks-ai", 4000, 0.7, stream=False),
    _row("llama4", "huggingface", "meta-llama/Llama-4-Maverick-17B-128E-Instruct:groq", 4000, 0.7),
    # Groq
    _row("groq-llama", "groq", "llama-3.3-70b-versatile", 4000, 0.3, config.CODER_SYSTEM_PROMPT, top_p=0.9),
    _row("moon-ai", "groq", "moonshotai/kimi-k2-instruct-0905", 4000, 0.3, config.ANALYST_SYSTEM_PROMPT, top_p=0.9),
    _row("moon", "groq", "moonshotai/kimi-k2-instruct-0905", 4000, 0.3, config.ANALYST_SYSTEM_PROMPT, top_p=0.9),
    # OpenRouter
    _row("qwen-coder", "openrouter", "qwen/qwen3-coder", 2000, 0.3, config.PROGRAMMER_SYSTEM_PROMPT),
    _row("sonoma-ai", "openrouter", "openrouter/sonoma-sky-alpha", 5000, 0.7),
)


def default_provider_configs() -> Dict[str, ProviderConfig]:
    """Provider settings from config.py (which reads .env)."""
    return {
        "huggingface": ProviderConfig(
            name="huggingface",
            endpoint_url=config.HF_API_URL,
            auth_token=config.HF_TOKEN,
            timeout=config.REQUEST_TIMEOUT,
        ),
        "groq": ProviderConfig(
            name="groq",
            endpoint_url=config.GROQ_API_URL,
            auth_token=config.GROQ_API_KEY,
            timeout=config.REQUEST_TIMEOUT,
        ),
        "openrouter": ProviderConfig(
            name="openrouter",
            endpoint_url=config.OPENROUTER_API_URL,
            auth_token=config.OPENROUTER_API_KEY,
            extra_headers=MappingProxyType({
                "HTTP-Referer": config.OPENROUTER_REFERER,
                "X-Title": config.OPENROUTER_TITLE,
            }),
            timeout=config.REQUEST_TIMEOUT,
        ),
    }


# ==============================================================================
# REGISTRY CLASS
# ==============================================================================

class ModelRegistry:
    """Read-only lookup from public model id to its ModelSpec and ProviderConfig."""

    def __init__(self, models: Iterable[ModelSpec], providers: Mapping[str, ProviderConfig]):
        self._models = {}
        for spec in models:
            if spec.provider not in providers:
                raise ValueError(f"Model {spec.model_id!r} uses unknown provider {spec.provider!r}")
            if spec.model_id in self._models:
                raise ValueError(f"Duplicate model id {spec.model_id!r}")
            self._models[spec.model_id] = spec
        self._providers = dict(providers)

    def get(self, model_id: str) -> ModelSpec:
        try:
            return self._models[model_id]
        except KeyError:
            raise UnknownModelError(model_id) from None

    def provider_config(self, name: str) -> ProviderConfig:
        return self._providers[name]

    def model_ids(self) -> List[str]:
        return list(self._models)

    def providers(self) -> List[str]:
        return list(self._providers)

    def __contains__(self, model_id) -> bool:
        return model_id in self._models


def build_default_registry() -> ModelRegistry:
    return ModelRegistry(MODEL_TABLE, default_provider_configs())
