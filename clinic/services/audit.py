from typing import Optional, Any, Dict

from clinic.models import Admin, AuditEvent


def log_action(*, admin: Optional[Admin], action: str, object_type: Optional[str] = None,
               object_id: Optional[int] = None, detail: Optional[Dict[str, Any]] = None) -> AuditEvent:
    return AuditEvent.objects.create(
        admin=admin if isinstance(admin, Admin) else None,
        action=action,
        object_type=object_type, object_id=object_id,
        detail=detail or {},
    )
