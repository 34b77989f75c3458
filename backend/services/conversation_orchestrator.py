"""Conversation orchestrator tying sessions, completions and admin alerts together."""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Set

from models.conversation import Turn
from prompts import SYSTEM_PROMPT
from services.escalation_detector import is_escalation
from services.llm_client import LLMClient, LLMClientError, LLMError
from services.notifier import AdminNotifier, UNKNOWN_CONTACT
from services.session_store import SessionStore

logger = logging.getLogger(__name__)

APOLOGY_TEMPLATE = "Sorry, I encountered an error: {message}"


@dataclass
class ChatResult:
    """Outcome of processing one user message."""
    session_id: str
    reply: str
    error: Optional[LLMError] = None


class ConversationOrchestrator:
    """
    Processes user messages for chat sessions.

    Each message is appended to the session, answered by the completion client
    using the full transcript, and stored as an assistant turn. Replies carrying
    the admin-alert marker trigger an admin notification that runs as a detached
    task; the caller's reply never waits on it or depends on its outcome.

    Completion failures become an apology turn in the transcript, so every call
    appends exactly one user turn and one assistant turn.
    """

    def __init__(
        self,
        store: SessionStore,
        llm_client: LLMClient,
        notifier: AdminNotifier,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.store = store
        self.llm_client = llm_client
        self.notifier = notifier
        self.system_prompt = system_prompt
        self._pending: Set[asyncio.Task] = set()

    def create_session(self) -> str:
        return self.store.create_session()

    def reset_session(self, session_id: str) -> bool:
        return self.store.reset_session(session_id)

    def get_history(self, session_id: str) -> List[Turn]:
        return self.store.get_history(session_id)

    def save_contact_email(self, session_id: str, email: str) -> bool:
        return self.store.save_contact_email(session_id, email)

    async def send_message(self, session_id: Optional[str], message: str) -> ChatResult:
        """
        Answer a user message within a session.

        Args:
            session_id: Existing session ID, or None/empty to start a new session
            message: The user's message text

        Returns:
            ChatResult with the session ID, reply text and, on completion
            failure, the structured error
        """
        if not session_id:
            session_id = self.store.create_session()

        prior_turns = self.store.get_history(session_id)
        self.store.append_turn(session_id, Turn.user(message))
        logger.info(
            f"Processing message for session {session_id}: {message[:100]}",
            extra={"session_id": session_id},
        )

        try:
            reply = await self.llm_client.complete(self.system_prompt, prior_turns, message)
        except LLMClientError as e:
            return self._absorb_failure(session_id, e.error)
        except Exception as e:
            logger.error(
                f"Unexpected completion error for session {session_id}: {e}",
                exc_info=True,
                extra={"session_id": session_id},
            )
            error = LLMError(
                code="UNKNOWN_ERROR",
                message=f"Unexpected error during generation: {str(e)}",
                details={"error_type": type(e).__name__, "original_error": str(e)},
            )
            return self._absorb_failure(session_id, error)

        self.store.append_turn(session_id, Turn.assistant(reply))

        if is_escalation(reply):
            logger.warning(
                f"Off-topic query flagged in session {session_id}",
                extra={"session_id": session_id},
            )
            self._dispatch_notification(session_id, message)

        return ChatResult(session_id=session_id, reply=reply)

    def _absorb_failure(self, session_id: str, error: LLMError) -> ChatResult:
        """Store an apology turn for a failed completion and report the error."""
        reply = APOLOGY_TEMPLATE.format(message=error.message)
        self.store.append_turn(session_id, Turn.assistant(reply))
        logger.error(
            f"Completion failed for session {session_id}: {error.code}",
            extra={"session_id": session_id, "error_code": error.code},
        )
        return ChatResult(session_id=session_id, reply=reply, error=error)

    def _dispatch_notification(self, session_id: str, message: str) -> None:
        contact = self.store.get_contact_email(session_id) or UNKNOWN_CONTACT
        task = asyncio.create_task(self.notifier.notify(contact, message, datetime.now()))
        self._pending.add(task)
        task.add_done_callback(self._notification_done)

    def _notification_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("Admin notification was cancelled")
            return

        error = task.exception()
        if error is not None:
            logger.error("Admin notification raised unexpectedly", exc_info=error)
        elif task.result() is False:
            logger.warning("Admin notification was not delivered")

    @property
    def pending_notifications(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for all in-flight admin notifications to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
