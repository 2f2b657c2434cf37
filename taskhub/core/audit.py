from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from taskhub.core.enums import AuditAction
from taskhub.core.logging import get_logger
from taskhub.models.audit_log import AuditLog

logger = get_logger(__name__)


class AuditService:
    @staticmethod
    async def record(
        db: AsyncSession,
        *,
        action: AuditAction,
        tenant_id: Optional[str] = None,
        user_id: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> bool:
        """
        Append an audit entry for an action that has already been committed.

        This is a non-critical write: a failure is rolled back and logged but
        never raised, so the caller's response is unaffected. Returns whether
        the entry was stored.
        """
        action_name = AuditAction(action).value
        log_extra = {"tenant_id": tenant_id, "user_id": user_id, "action": action_name}

        try:
            db.add(AuditLog(
                tenant_id=tenant_id,
                user_id=user_id,
                action=action_name,
                entity_type=entity_type,
                entity_id=entity_id,
                ip_address=ip_address,
            ))
            await db.commit()
        except Exception:
            logger.exception(f"Audit write failed for {action_name}", extra=log_extra)
            try:
                await db.rollback()
            except Exception:
                logger.exception("Rollback after failed audit write also failed", extra=log_extra)
            return False

        logger.debug(f"Audit {action_name} {entity_type}:{entity_id}", extra=log_extra)
        return True
