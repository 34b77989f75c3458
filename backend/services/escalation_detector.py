"""Detects the admin-alert marker the model appends to off-topic replies."""
import re

# Matches prompts.ADMIN_ALERT_NOTE with any casing and any spacing between words
ESCALATION_PATTERN = re.compile(r"\[\s*admin\s*email\s*alert", re.IGNORECASE)


def is_escalation(text: str) -> bool:
    """Return True if the generated text carries the admin-alert marker."""
    if not text:
        return False
    return ESCALATION_PATTERN.search(text) is not None
