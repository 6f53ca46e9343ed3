"""Hybrid Chat - Streamlit Chat Interface.

Thin client for the chat gateway. All routing logic lives in the FastAPI
backend. This file handles:
  - Conversation state (st.session_state)
  - POST /api/chat with the full conversation
  - Showing which provider answered, and whether it was a fallback
  - Backend health in the sidebar
"""

import os
import time

import requests
import streamlit as st

# Config
API_URL = os.environ.get("API_URL", "http://localhost:8080")
CHAT_ENDPOINT = f"{API_URL}/api/chat"
HEALTH_ENDPOINT = f"{API_URL}/health"

# Page setup
st.set_page_config(
    page_title="Hybrid Chat - OpenAI + Ollama",
    layout="centered",
)


def init_session():
    """Initialize session state on first load."""
    if "messages" not in st.session_state:
        st.session_state.messages = []


def conversation_payload() -> list[dict]:
    """User/assistant turns to send upstream; error bubbles are UI-only."""
    return [
        {"role": m["role"], "content": m["content"]}
        for m in st.session_state.messages
        if m.get("provider") != "error"
    ]


def render_message(msg: dict):
    """Render a single chat message with its provider caption."""
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])
        if msg["role"] != "user" and msg.get("provider"):
            caption = f"via {msg['provider']}"
            if msg.get("note"):
                caption += " (fallback)"
            if msg.get("latency_ms") is not None:
                caption += f" | {msg['latency_ms']}ms"
            st.caption(caption, help=msg.get("note"))


def send_message(user_input: str):
    """POST the conversation to the backend and append the reply."""
    st.session_state.messages.append({"role": "user", "content": user_input})
    render_message(st.session_state.messages[-1])

    with st.spinner("Sending..."):
        try:
            start_time = time.monotonic()
            resp = requests.post(
                CHAT_ENDPOINT,
                json={"messages": conversation_payload()},
                timeout=120,
            )
            if not resp.ok:
                raise RuntimeError(f"HTTP {resp.status_code}: {resp.text}")

            data = resp.json()
            reply = {
                "role": "assistant",
                "content": data.get("text", ""),
                "provider": data.get("provider"),
                "note": data.get("note"),
                "latency_ms": int((time.monotonic() - start_time) * 1000),
            }
        except requests.Timeout:
            reply = {"role": "assistant", "provider": "error",
                     "content": "[TIMEOUT] Request timed out. The model may still be loading."}
        except requests.ConnectionError:
            reply = {"role": "assistant", "provider": "error",
                     "content": "[DISCONNECT] Cannot connect to the backend. Is the API server running?"}
        except Exception as e:
            reply = {"role": "assistant", "provider": "error", "content": f"[ERROR] {e}"}

    st.session_state.messages.append(reply)
    render_message(reply)


def render_sidebar():
    """Show provider configuration reported by /health."""
    with st.sidebar:
        st.markdown("### Providers")
        try:
            health = requests.get(HEALTH_ENDPOINT, timeout=3).json()
        except (requests.RequestException, ValueError):
            st.error("[OFFLINE] Backend not reachable.")
            return

        if health.get("primary_configured"):
            st.success(f"Primary: OpenAI ({health.get('primary_model')})")
        else:
            st.info("Primary: not configured")
        st.success(f"Secondary: Ollama ({health.get('secondary_model')})")
        st.caption(health.get("secondary_base_url", ""))

        st.divider()
        if st.button("[DEL] Clear Chat", use_container_width=True):
            st.session_state.messages = []
            st.rerun()


def main():
    """Run the Streamlit chat application."""
    init_session()

    st.title("WebChatGPT (Hybrid: OpenAI + Ollama)")
    render_sidebar()

    for msg in st.session_state.messages:
        render_message(msg)

    if user_input := st.chat_input("Type a message..."):
        text = user_input.strip()
        if text:
            send_message(text)


if __name__ == "__main__":
    main()
