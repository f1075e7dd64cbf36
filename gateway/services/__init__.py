"""
SERVICES PACKAGE
=================

Business logic lives here. The API layer (gateway.main) calls the dispatcher;
nothing in this package handles HTTP requests from clients.

MODULES:
    history_store - Per-conversation memory (bounded, thread-safe)
    normalizer    - Request + history -> provider-neutral messages
    registry      - Model table and provider settings
    providers     - One adapter per backend family (HuggingFace, Groq, OpenRouter)
    dispatcher    - Validates, routes, calls the adapter, updates memory
"""
