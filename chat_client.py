"""
JINXIE CHAT CLIENT - Interactive command-line client
====================================================

PURPOSE:
This is a command-line interface for talking to a running gateway. It lets you
pick any registered model and switch between models mid-conversation: all
models share the same chatId/senderId, so the gateway's memory carries over.

WHY IT EXISTS:
- Provides an easy way to try the gateway without a bot or frontend
- Shows conversation memory and history clearing in action
- Useful for development and debugging of provider credentials

USAGE:
    python chat_client.py

    Make sure the server is running first: python run.py
    Set GATEWAY_URL and GATEWAY_API_KEY in the environment if needed.

COMMANDS:
    /models          - List the models the server accepts
    /model <id>      - Switch to a model (e.g. /model groq-llama)
    /image <url>     - Attach an image to the next message
    /history         - View the remembered conversation
    /clear           - Ask the server to forget the conversation
    /quit or /exit   - Exit the client
"""

import os
from uuid import uuid4

import requests


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
# API base URL; change if your server runs on a different host or port.
BASE_URL = os.getenv("GATEWAY_URL", "http://localhost:8080")
API_KEY = os.getenv("GATEWAY_API_KEY", "")
# One conversation per client run; the server keys memory by chatId + senderId.
CHAT_ID = f"cli-{uuid4().hex[:8]}"
SENDER_ID = os.getenv("USER", "cli-user")
CURRENT_MODEL = None
PENDING_IMAGE = None


def _headers():
    return {"Authorization": f"Bearer {API_KEY}"} if API_KEY else {}


def _conversation_params():
    return {"chatId": CHAT_ID, "senderId": SENDER_ID}


# -----------------------------------------------------------------------------
# UI HELPERS
# -----------------------------------------------------------------------------

def print_header():
    print("\n" + "="*60)
    print("🤖 Jinxie AI Gateway - Chat Client")
    print("="*60)
    print("\nCommands:")
    print("  /models       - List models")
    print("  /model <id>   - Select a model")
    print("  /image <url>  - Attach an image to the next message")
    print("  /history      - See chat history")
    print("  /clear        - Clear chat history")
    print("  /quit         - Exit")
    print("="*60 + "\n")


def get_user_input():
    """Get user's input - either a command or a message."""
    try:
        return input("\nYou: ").strip()
    except (KeyboardInterrupt, EOFError):
        return None


# -----------------------------------------------------------------------------
# API CALLS
# -----------------------------------------------------------------------------

def list_models():
    """Return the model ids the server accepts, or [] if it cannot be reached."""
    try:
        response = requests.get(f"{BASE_URL}/", timeout=10)
        if response.status_code == 200:
            return response.json().get("models", [])
    except requests.exceptions.RequestException:
        pass
    return []


def send_message(message, model, image_url=None):
    """
    Send a message to POST /api/ai and return the reply (or an error line).

    Every request carries the same chatId/senderId, so the server remembers the
    conversation across messages and across model switches.
    """
    body = {"message": message, "model": model, **_conversation_params()}
    if image_url:
        body["imageUrl"] = image_url

    try:
        # Slightly above the server's 30s provider timeout.
        response = requests.post(f"{BASE_URL}/api/ai", json=body, headers=_headers(), timeout=35)
        try:
            data = response.json()
        except ValueError:
            return f"❌ Error: {response.status_code} - {response.text}"

        if response.status_code == 200 and data.get("success"):
            return data.get("response", "No response")
        if isinstance(data.get("detail"), str):
            return f"❌ {data['detail']}"
        return f"❌ {data.get('error') or response.status_code}"

    except requests.exceptions.ConnectionError:
        return "❌ Cannot connect to gateway. Start it with: python run.py"
    except requests.exceptions.Timeout:
        return "❌ Request timed out."
    except requests.exceptions.RequestException as e:
        return f"❌ Error: {str(e)}"


def get_chat_history():
    """Fetch and format the remembered conversation for this client."""
    try:
        response = requests.get(
            f"{BASE_URL}/api/ai/history",
            params=_conversation_params(),
            headers=_headers(),
            timeout=10,
        )
        if response.status_code != 200:
            return "Could not retrieve history"

        messages = response.json().get("messages", [])
        if not messages:
            return "No messages in this conversation"

        output = f"\n📜 Chat History ({len(messages)} messages):\n"
        output += "-" * 60 + "\n"
        for i, msg in enumerate(messages, 1):
            role = "You" if msg.get("role") == "user" else "Jinxie"
            content = msg.get("content", "")
            if isinstance(content, list):
                content = " ".join(p.get("text") or f"[image {p.get('url')}]" for p in content)
            output += f"{i}. {role}: {content}\n"
        output += "-" * 60 + "\n"
        return output

    except requests.exceptions.RequestException as e:
        return f"Error retrieving history: {str(e)}"


def clear_chat_history():
    try:
        response = requests.delete(
            f"{BASE_URL}/api/ai/clear",
            params=_conversation_params(),
            headers=_headers(),
            timeout=10,
        )
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


# -----------------------------------------------------------------------------
# MAIN LOOP
# -----------------------------------------------------------------------------

def main():
    """Accept commands and messages until /quit or /exit."""
    global CURRENT_MODEL, PENDING_IMAGE

    print_header()
    models = list_models()
    if models:
        print(f"💡 Available models: {', '.join(models)}")
    print("Select a model first, e.g. /model deepseek\n")

    while True:
        user_input = get_user_input()
        if user_input is None or user_input in ["/quit", "/exit"]:
            print("\n👋 Goodbye!")
            break

        if user_input == "/models":
            models = list_models()
            print(", ".join(models) if models else "❌ Could not fetch models")
            continue

        if user_input.startswith("/model "):
            CURRENT_MODEL = user_input.split(maxsplit=1)[1].strip()
            print(f"✅ Switched to {CURRENT_MODEL}\n")
            continue

        if user_input.startswith("/image "):
            PENDING_IMAGE = user_input.split(maxsplit=1)[1].strip()
            print("🖼️  Image attached to your next message")
            continue

        if user_input == "/history":
            print(get_chat_history())
            continue

        if user_input == "/clear":
            if clear_chat_history():
                print("\n🔄 History cleared. Starting fresh!")
            else:
                print("❌ Could not clear history")
            continue

        if user_input.startswith("/"):
            print(f"❌ Unknown command: {user_input}")
            continue

        if not CURRENT_MODEL:
            print("❌ Please select a model first (/model <id>)")
            continue

        print(f"🤖 {CURRENT_MODEL}: ", end="", flush=True)
        print(send_message(user_input, CURRENT_MODEL, PENDING_IMAGE))
        PENDING_IMAGE = None


# Run the interactive loop when this file is executed (python chat_client.py).
if __name__ == "__main__":
    main()
