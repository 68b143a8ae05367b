"""NotificationRepository — recipient lookup and notification inserts (raw SQL)."""

import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_notification.domain.models import Notification, Recipient

_GET_RECIPIENT_SQL = text("""
    SELECT id, email, first_name
    FROM users
    WHERE CAST(id AS TEXT) = :user_id
""")

_INSERT_NOTIFICATION_SQL = text("""
    INSERT INTO notifications (id, user_id, related_id, type, title, message, link, actions)
    VALUES (:id, :user_id, :related_id, :type, :title, :message, :link, CAST(:actions AS JSONB))
""")


class NotificationRepository:
    async def get_recipient(self, db: AsyncSession, user_id: str) -> Recipient | None:
        result = await db.execute(_GET_RECIPIENT_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            return None
        return Recipient(id=str(row.id), email=row.email, first_name=row.first_name)

    async def insert(self, db: AsyncSession, notification: Notification) -> None:
        await db.execute(
            _INSERT_NOTIFICATION_SQL,
            {
                "id": notification.id,
                "user_id": notification.user_id,
                "related_id": notification.related_id,
                "type": notification.type,
                "title": notification.title,
                "message": notification.message,
                "link": notification.link,
                "actions": json.dumps(notification.actions),
            },
        )
