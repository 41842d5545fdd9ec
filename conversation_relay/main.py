"""
FastAPI server bridging Twilio ConversationRelay calls to an AI virtual agent.

This module initializes and configures the FastAPI application that serves
the Twilio voice webhooks and the ConversationRelay WebSocket endpoint. Calls
are answered by a language model; when it decides a human is needed the call
is handed off to Flex with the conversation transcript attached.
"""

import os
from pathlib import Path
from typing import Optional

import dotenv
from fastapi import FastAPI, Form, Request, WebSocket
from fastapi.responses import JSONResponse, Response

from conversation_relay.config.logging_config import configure_logging
from conversation_relay.exceptions import UnknownConversationError
from conversation_relay.handlers.call_handlers import (
    handle_handoff,
    handle_incoming_call,
    lookup_conversation,
)
from conversation_relay.models.conversation import ConversationStore
from conversation_relay.services.task_lookup import TaskLookup
from conversation_relay.websocket_manager import RelayWebSocketManager

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

# Configure logging
logger = configure_logging()

# Get configuration from environment variables
PORT = int(os.getenv("PORT", "3000"))
HOST = os.getenv("HOST", "0.0.0.0")

app = FastAPI(
    title="Conversation Relay Agent",
    description="Twilio ConversationRelay virtual agent with human handoff to Flex",
    version="1.0.0",
)

# Shared state for every call handled by this process
conversation_store = ConversationStore()
task_lookup = TaskLookup()
websocket_manager = RelayWebSocketManager(conversation_store)


@app.websocket("/conversation/{call_sid}")
async def conversation_endpoint(websocket: WebSocket, call_sid: str):
    """WebSocket endpoint for Twilio ConversationRelay.

    Twilio connects here using the URL from the incoming-call TwiML and sends
    setup, prompt, interrupt, error and end events for the call.
    """
    await websocket_manager.handle_websocket(websocket, call_sid)


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API.

    Returns:
        dict: Basic information about the API and its purpose.
    """
    return {
        "name": "Conversation Relay Agent",
        "status": "ok",
        "version": "1.0.0",
        "endpoints": {
            "/conversation/{callSid}": "WebSocket endpoint for Twilio ConversationRelay",
            "/voice/incoming": "Twilio voice webhook for incoming calls",
            "/voice/handoff": "Twilio action webhook that enqueues escalated calls",
            "/api/transcript/{identifier}": "Transcript by CallSid or TaskSid",
            "/monitor": "All tracked conversations",
            "/health": "Health check endpoint",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status."""
    return {
        "status": "healthy",
        "openai_api_key_configured": bool(os.getenv("OPENAI_API_KEY")),
        "active_sessions": len(websocket_manager.sessions),
        "conversations": len(conversation_store),
    }


@app.get("/monitor")
async def monitor():
    """List every conversation this process has seen."""
    return conversation_store.list()


@app.post("/voice/incoming")
async def voice_incoming(
    request: Request,
    CallSid: str = Form(...),
    From: str = Form("unknown"),
):
    """Answer an incoming call by connecting it to ConversationRelay."""
    host = request.headers.get("host", f"localhost:{PORT}")
    twiml = handle_incoming_call(CallSid, From, host, conversation_store)
    return Response(content=twiml, media_type="text/xml")


@app.post("/voice/handoff")
async def voice_handoff(
    CallSid: str = Form(...),
    From: Optional[str] = Form(None),
):
    """Enqueue a call whose relay session ended to a human agent."""
    twiml = handle_handoff(CallSid, From, conversation_store)
    return Response(content=twiml, media_type="text/xml")


@app.get("/api/transcript/{identifier}")
async def get_transcript(identifier: str):
    """Return the transcript for a CallSid, or for the call behind a TaskSid."""
    try:
        conversation = await lookup_conversation(identifier, conversation_store, task_lookup)
    except UnknownConversationError as e:
        logger.info(str(e))
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": "Conversation not found"},
        )

    summary = conversation.to_summary()
    return {"success": True, **summary}


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{HOST}:{PORT}")
    logger.info(f"WebSocket endpoint: ws://localhost:{PORT}/conversation/{{callSid}}")
    logger.info(f"Voice webhook: http://localhost:{PORT}/voice/incoming")
    uvicorn.run(app, host=HOST, port=PORT, http="h11")
