"""In-app notification center storage."""

from datetime import timedelta

from sqlalchemy import delete, func, select, update

from agrinotify.common.db import utc_now
from agrinotify.services.notification.models import InAppNotification


def notification_to_dict(row: InAppNotification) -> dict:
    return {
        "id": row.id,
        "farmer_id": row.farmer_id,
        "type": row.type,
        "title": row.title,
        "body": row.body,
        "deeplink": row.deeplink,
        "metadata": row.extra or {},
        "is_read": row.is_read,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }


class NotificationRepository:
    """CRUD over `farmer_notifications`, always scoped by farmer for user actions."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def create(
        self,
        farmer_id: str,
        type: str,
        title: str,
        body: str,
        deeplink: str | None = None,
        metadata: dict | None = None,
    ) -> InAppNotification:
        """Insert one record; a duplicate `metadata["event_id"]` raises IntegrityError."""

        metadata = dict(metadata or {})
        with self.session_factory() as db:
            row = InAppNotification(
                farmer_id=farmer_id,
                type=type,
                title=title,
                body=body,
                deeplink=deeplink,
                extra=metadata,
                event_id=metadata.get("event_id"),
                created_at=utc_now(),
            )
            db.add(row)
            db.commit()
            return row

    def find_by_event_id(self, event_id: str) -> InAppNotification | None:
        with self.session_factory() as db:
            return db.execute(
                select(InAppNotification).where(InAppNotification.event_id == event_id)
            ).scalar_one_or_none()

    def get(self, notification_id: str, farmer_id: str) -> InAppNotification | None:
        with self.session_factory() as db:
            return db.execute(
                select(InAppNotification).where(
                    InAppNotification.id == notification_id,
                    InAppNotification.farmer_id == farmer_id,
                )
            ).scalar_one_or_none()

    def unread_count(self, farmer_id: str) -> int:
        with self.session_factory() as db:
            return db.execute(
                select(func.count())
                .select_from(InAppNotification)
                .where(InAppNotification.farmer_id == farmer_id, InAppNotification.is_read.is_(False))
            ).scalar_one()

    def list_for_farmer(
        self,
        farmer_id: str,
        unread_only: bool = False,
        type: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        """Newest-first page of a farmer's notifications plus paging totals."""

        page = max(1, page)
        limit = max(1, min(limit, 100))
        filters = [InAppNotification.farmer_id == farmer_id]
        if unread_only:
            filters.append(InAppNotification.is_read.is_(False))
        if type:
            filters.append(InAppNotification.type == type)

        with self.session_factory() as db:
            total = db.execute(select(func.count()).select_from(InAppNotification).where(*filters)).scalar_one()
            rows = db.execute(
                select(InAppNotification)
                .where(*filters)
                .order_by(InAppNotification.created_at.desc(), InAppNotification.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars()
            notifications = [notification_to_dict(row) for row in rows]

        return {
            "notifications": notifications,
            "unread_count": self.unread_count(farmer_id),
            "page": page,
            "limit": limit,
            "total": total,
            "has_more": page * limit < total,
        }

    def mark_read(self, notification_id: str, farmer_id: str) -> bool:
        with self.session_factory() as db:
            result = db.execute(
                update(InAppNotification)
                .where(InAppNotification.id == notification_id, InAppNotification.farmer_id == farmer_id)
                .values(is_read=True)
            )
            db.commit()
            return result.rowcount > 0

    def mark_all_read(self, farmer_id: str) -> int:
        with self.session_factory() as db:
            result = db.execute(
                update(InAppNotification)
                .where(InAppNotification.farmer_id == farmer_id, InAppNotification.is_read.is_(False))
                .values(is_read=True)
            )
            db.commit()
            return result.rowcount

    def delete(self, notification_id: str, farmer_id: str) -> bool:
        with self.session_factory() as db:
            result = db.execute(
                delete(InAppNotification).where(
                    InAppNotification.id == notification_id,
                    InAppNotification.farmer_id == farmer_id,
                )
            )
            db.commit()
            return result.rowcount > 0

    def delete_read_older_than(self, days: int) -> int:
        """Retention: unread notifications are kept regardless of age."""

        cutoff = utc_now() - timedelta(days=days)
        with self.session_factory() as db:
            result = db.execute(
                delete(InAppNotification).where(
                    InAppNotification.is_read.is_(True),
                    InAppNotification.created_at < cutoff,
                )
            )
            db.commit()
            return result.rowcount
