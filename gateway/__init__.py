"""
JINXIE AI GATEWAY PACKAGE
=========================

This directory is the main Python package for the gateway backend.
The presence of __init__.py makes Python treat 'gateway' as a package, so you can:

  from gateway.main import app
  from gateway.models import ChatRequest
  from gateway.services.dispatcher import ChatDispatcher

FILE STRUCTURE:
  gateway/
    __init__.py   - This file; marks 'gateway' as a package.
    main.py       - FastAPI app and all HTTP endpoints (/api/ai, /api/ai/clear, /api/ai/history, /health).
    models.py     - Pydantic models: API bodies, conversation turns, provider response envelope.
    exceptions.py - Error types with stable codes (validation, unknown model, provider failures).
    services/     - Business logic: history store, normalizer, model registry, provider adapters, dispatcher.
    utils/        - Helpers: reader/writer lock, UTC timestamps.
"""
