"""Services for BelowMSRP Chat Assistant."""
from .session_store import SessionStore
from .llm_client import LLMClient, LLMError, LLMClientError
from .escalation_detector import is_escalation
from .notifier import AdminNotifier, UNKNOWN_CONTACT
from .conversation_orchestrator import ConversationOrchestrator, ChatResult

__all__ = ['SessionStore', 'LLMClient', 'LLMError', 'LLMClientError', 'is_escalation', 'AdminNotifier', 'UNKNOWN_CONTACT', 'ConversationOrchestrator', 'ChatResult']
