"""
Audit logging for financial and hiring actions.

Writes structured JSON events to the ``security.audit`` logger so hires,
invoice transitions and payment reconciliation can be traced after the fact.
"""

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Set

logger = logging.getLogger("security.audit")


class AuditAction(str, Enum):
    """Audit log action types."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    ACCEPT_AGREEMENT = "ACCEPT_AGREEMENT"
    CONFIRM_HIRE = "CONFIRM_HIRE"
    ISSUE_INVOICE = "ISSUE_INVOICE"
    VOID_INVOICE = "VOID_INVOICE"
    RECORD_PAYMENT = "RECORD_PAYMENT"


class ResourceType(str, Enum):
    """Resource types for audit logging."""

    USER = "USER"
    EMPLOYER = "EMPLOYER"
    JOB = "JOB"
    INTRODUCTION = "INTRODUCTION"
    HIRE_CONFIRMATION = "HIRE_CONFIRMATION"
    INVOICE = "INVOICE"


# PII fields that should be masked in logs
PII_FIELDS: Set[str] = {
    "email", "phone", "full_name", "contact_name", "name",
}


def mask_pii(data: Any, depth: int = 0) -> Any:
    """
    Recursively mask PII fields in data structures.

    Args:
        data: Data to mask (dict, list, or primitive)
        depth: Current recursion depth (max 10)

    Returns:
        Data with PII fields masked
    """
    if depth > 10:
        return "[MAX_DEPTH]"

    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if key.lower() in PII_FIELDS:
                if isinstance(value, str) and len(value) > 0:
                    masked[key] = f"{value[0]}***[{len(value)}]"
                else:
                    masked[key] = "[MASKED]"
            else:
                masked[key] = mask_pii(value, depth + 1)
        return masked
    elif isinstance(data, list):
        return [mask_pii(item, depth + 1) for item in data[:5]]
    else:
        return data


def log_audit_event(
    action: AuditAction,
    resource_type: ResourceType,
    resource_id: Optional[str] = None,
    user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    contains_pii: bool = False,
) -> Dict[str, Any]:
    """
    Log an audit event for compliance tracking.

    Returns the event that was written, which keeps callers and tests from
    having to parse the log stream.
    """
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": "AUDIT",
        "action": action.value,
        "resource_type": resource_type.value,
        "resource_id": str(resource_id) if resource_id else None,
        "user_id": user_id,
        "contains_pii": contains_pii,
        "details": mask_pii(details) if details and contains_pii else details,
    }

    logger.info(json.dumps(event, default=str))
    return event
