"""In-memory session store for chat conversations."""
import logging
import uuid
from typing import Dict, List, Optional

from models.conversation import Session, Turn

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Holds chat sessions and contact emails for the lifetime of the process.

    Sessions are never expired or evicted. Contact emails live in their own
    map so an email can be recorded for an id that has no session yet.
    """

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._contact_emails: Dict[str, str] = {}

    def create_session(self) -> str:
        """
        Create a new session with an empty history.

        Returns:
            The new session ID
        """
        session_id = self._generate_session_id()
        self._sessions[session_id] = Session(session_id=session_id)
        logger.info(f"Created new session: {session_id}")
        return session_id

    def reset_session(self, session_id: str) -> bool:
        """
        Clear a session's history, keeping its ID and contact email.

        Returns:
            True if the session existed, False otherwise
        """
        session = self._sessions.get(session_id)
        if session is None:
            logger.warning(f"Reset requested for unknown session {session_id}")
            return False

        session.history = []
        logger.info(f"Reset session {session_id}")
        return True

    def get_history(self, session_id: str) -> List[Turn]:
        """Return a copy of the session transcript, or [] if unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            return []
        return list(session.history)

    def save_contact_email(self, session_id: str, email: str) -> bool:
        """
        Record the contact email for a session ID.

        The session does not need to exist and the email is not validated.

        Returns:
            False only when session_id is empty
        """
        if not session_id:
            return False

        self._contact_emails[session_id] = email
        logger.info(f"Saved contact email for session {session_id}")
        return True

    def get_contact_email(self, session_id: str) -> Optional[str]:
        return self._contact_emails.get(session_id)

    def append_turn(self, session_id: str, turn: Turn) -> None:
        """Append a turn, creating the session on first use."""
        session = self._sessions.get(session_id)
        if session is None:
            session = Session(session_id=session_id)
            self._sessions[session_id] = session
            logger.info(f"Implicitly created session {session_id}")

        session.history.append(turn)

    def has_session(self, session_id: str) -> bool:
        return session_id in self._sessions

    def session_count(self) -> int:
        return len(self._sessions)

    def _generate_session_id(self) -> str:
        """Generate a unique session ID."""
        session_id = str(uuid.uuid4())
        while session_id in self._sessions:
            session_id = str(uuid.uuid4())
        return session_id
