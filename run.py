"""
RUN SCRIPT - Start the Jinxie AI Gateway
========================================

PURPOSE:
  Single entry point to start the backend.

WHAT IT DOES:
  - Imports the FastAPI app from gateway.main.
  - Runs it with uvicorn on HOST/PORT from .env (default 0.0.0.0:8080).
  - reload=True means any change to Python files will restart the server (handy for development).
    Restarting also forgets every remembered conversation.

USAGE:
  python run.py

  API docs: http://localhost:8080/docs

NOTE:
  Before running, set HF_TOKEN, GROQ_API_KEY and OPENROUTER_API_KEY (and API_KEYS
  for client auth) in .env.
"""

import uvicorn

import config

# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
if __name__ == "__main__":
    uvicorn.run(
        "gateway.main:app",   # String path to the FastAPI app instance (module:variable).
        host=config.HOST,     # 0.0.0.0 by default so other devices can connect.
        port=config.PORT,
        reload=True
    )
