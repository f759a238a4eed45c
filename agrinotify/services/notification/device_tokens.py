"""Device token registry backing push fan-out."""

from datetime import timedelta

from sqlalchemy import delete, select, update

from agrinotify.common.db import utc_now
from agrinotify.common.logging import logger
from agrinotify.services.notification.models import DeviceToken


class DeviceTokenRepository:
    """Register, deactivate and prune push registrations."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def register_token(self, farmer_id: str, token: str, device_type: str | None = None) -> DeviceToken:
        """Upsert a registration; re-registering reactivates a stale token."""

        with self.session_factory() as db:
            row = db.execute(
                select(DeviceToken).where(DeviceToken.farmer_id == farmer_id, DeviceToken.token == token)
            ).scalar_one_or_none()
            if row is None:
                row = DeviceToken(farmer_id=farmer_id, token=token, device_type=device_type, is_active=True)
                db.add(row)
            else:
                row.is_active = True
                row.updated_at = utc_now()
                if device_type is not None:
                    row.device_type = device_type
            db.commit()
            logger.info("device_token_registered farmer_id=%s device_type=%s", farmer_id, device_type)
            return row

    def unregister_token(self, farmer_id: str, token: str) -> bool:
        with self.session_factory() as db:
            result = db.execute(
                update(DeviceToken)
                .where(DeviceToken.farmer_id == farmer_id, DeviceToken.token == token)
                .values(is_active=False, updated_at=utc_now())
            )
            db.commit()
            return result.rowcount > 0

    def deactivate_all(self, farmer_id: str) -> int:
        """Log a farmer out of every device."""

        with self.session_factory() as db:
            result = db.execute(
                update(DeviceToken)
                .where(DeviceToken.farmer_id == farmer_id, DeviceToken.is_active.is_(True))
                .values(is_active=False, updated_at=utc_now())
            )
            db.commit()
            logger.info("device_tokens_deactivated farmer_id=%s count=%s", farmer_id, result.rowcount)
            return result.rowcount

    def mark_invalid(self, tokens: list[str]) -> int:
        """Deactivate tokens the push provider rejected permanently."""

        if not tokens:
            return 0
        with self.session_factory() as db:
            result = db.execute(
                update(DeviceToken)
                .where(DeviceToken.token.in_(tokens))
                .values(is_active=False, updated_at=utc_now())
            )
            db.commit()
            return result.rowcount

    def active_tokens(self, farmer_id: str) -> list[str]:
        with self.session_factory() as db:
            return list(
                db.execute(
                    select(DeviceToken.token).where(
                        DeviceToken.farmer_id == farmer_id,
                        DeviceToken.is_active.is_(True),
                    )
                ).scalars()
            )

    def delete_inactive_older_than(self, days: int) -> int:
        cutoff = utc_now() - timedelta(days=days)
        with self.session_factory() as db:
            result = db.execute(
                delete(DeviceToken).where(DeviceToken.is_active.is_(False), DeviceToken.updated_at < cutoff)
            )
            db.commit()
            return result.rowcount
