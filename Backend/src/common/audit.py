"""Journal des actions d'administration (console uniquement, logger "audit")."""
import logging
from typing import Any, Dict, Optional

audit_logger = logging.getLogger("audit")

SENSITIVE_KEYS = ("password", "token", "secret", "key", "authorization")


def redact(details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not details:
        return {}
    return {
        k: "***" if any(s in str(k).lower() for s in SENSITIVE_KEYS) else v
        for k, v in details.items()
    }


def log_admin_action(user, action: str, resource: str, resource_id: Any = None,
                     details: Optional[Dict[str, Any]] = None) -> None:
    user_id = getattr(user, "pk", None) or "system"
    target = f"{resource}:{resource_id}" if resource_id is not None else resource
    audit_logger.info(f"ADMIN ACTION: {action} {target} by user:{user_id} {redact(details)}")
