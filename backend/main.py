"""Main entry point for BelowMSRP Chat Assistant API."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL
from logger import setup_logging
from models.api import (
    MessageRequest,
    EmailRequest,
    SessionRequest,
    ErrorInfo,
    TurnModel,
    SessionResponse,
    MessageResponse,
    HistoryResponse,
)
from services.session_store import SessionStore
from services.llm_client import LLMClient
from services.notifier import AdminNotifier
from services.conversation_orchestrator import ConversationOrchestrator

if LOG_FORMAT == "json":
    setup_logging(LOG_LEVEL)

# Initialize logging
logger = logging.getLogger(__name__)

# Initialized on startup, replaced by test doubles in tests
orchestrator: ConversationOrchestrator = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build services once at startup and flush pending alerts on shutdown."""
    global orchestrator

    logger.info("Initializing BelowMSRP Chat Assistant services...")
    try:
        orchestrator = ConversationOrchestrator(
            store=SessionStore(),
            llm_client=LLMClient(),
            notifier=AdminNotifier(),
        )
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise

    yield

    if orchestrator is not None and orchestrator.pending_notifications:
        logger.info(f"Waiting for {orchestrator.pending_notifications} admin notification(s)")
        await orchestrator.drain()


# Initialize FastAPI app
app = FastAPI(
    title="BelowMSRP Chat Assistant",
    description="Conversational assistant for the BelowMSRP car marketplace",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "BelowMSRP Chat Assistant API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "belowmsrp-chat-assistant",
        "version": "1.0.0",
        "sessions": orchestrator.store.session_count() if orchestrator else 0,
    }


@app.post("/chat/session", response_model=SessionResponse)
async def create_session_endpoint() -> SessionResponse:
    """Start a new chat session."""
    session_id = orchestrator.create_session()
    return SessionResponse(status="ok", session_id=session_id)


@app.post("/chat/email", response_model=SessionResponse)
async def save_email_endpoint(request: EmailRequest) -> SessionResponse:
    """Record the visitor's contact email for admin alerts."""
    ok = orchestrator.save_contact_email(request.session_id, request.email)
    return SessionResponse(status="ok" if ok else "not_found", session_id=request.session_id)


@app.post("/chat/message", response_model=MessageResponse)
async def message_endpoint(request: MessageRequest) -> MessageResponse:
    """
    Send a user message and get the assistant's reply.

    A new session is created when no sessionId is supplied. Completion
    failures still return 200 with an apology reply and the error populated.
    """
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="message is required and cannot be empty")

    try:
        result = await orchestrator.send_message(request.session_id, request.message)
    except Exception as e:
        logger.error(f"Message endpoint error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"status": "error", "message": str(e)})

    error = None
    if result.error is not None:
        error = ErrorInfo(code=result.error.code, message=result.error.message)

    return MessageResponse(
        status="ok",
        session_id=result.session_id,
        reply=result.reply,
        error=error,
    )


@app.get("/chat/history", response_model=HistoryResponse)
async def history_endpoint(
    session_id: str = Query(..., alias="sessionId", min_length=1)
) -> HistoryResponse:
    """Return a session's transcript ([] for unknown sessions)."""
    history = [TurnModel(**turn.to_dict()) for turn in orchestrator.get_history(session_id)]
    return HistoryResponse(status="ok", session_id=session_id, history=history)


@app.post("/chat/reset", response_model=SessionResponse)
async def reset_endpoint(request: SessionRequest) -> SessionResponse:
    """Clear a session's history."""
    ok = orchestrator.reset_session(request.session_id)
    return SessionResponse(status="ok" if ok else "not_found", session_id=request.session_id)


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting BelowMSRP Chat Assistant API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
