"""NotificationService — fire-and-forget side effects after settlement.

Every public method logs and swallows its own failures: a settled order has
already been committed when these run, and nothing here may undo that.
"""

import json
import logging
import uuid
from typing import Any

import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bo_binary.application.schemas import BinaryOrderResponse
from src.bo_binary.domain.models import BinaryOrder
from src.bo_common.datetime_utils import utc_now
from src.bo_notification.domain.email import binary_order_result_job
from src.bo_notification.domain.models import Notification, Recipient
from src.bo_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)

ORDER_TOPIC = "/api/exchange/binary/order"
CRON_LOG_CHANNEL = "cron:logs"
EMAIL_QUEUE_KEY = "email:queue"


class NotificationService:
    def __init__(
        self,
        redis: aioredis.Redis,
        session_factory: async_sessionmaker[AsyncSession],
        repo: NotificationRepository | None = None,
    ) -> None:
        self._redis = redis
        self._session_factory = session_factory
        self._repo = repo or NotificationRepository()

    async def order_completed(self, order: BinaryOrder) -> None:
        await self.broadcast_order_completed(order)
        recipient = await self._load_recipient(order.user_id)
        if recipient is None:
            return
        await self.send_binary_order_email(recipient, order)
        await self.create_notification(
            user_id=recipient.id,
            related_id=order.id,
            title="Binary Order Completed",
            message=(
                f"Your binary order for {order.symbol} has been completed "
                f"with a status of {order.status}"
            ),
            link=f"/binary/orders/{order.id}",
            actions=[
                {"label": "View Order", "link": f"/binary/orders/{order.id}", "primary": True}
            ],
        )

    async def broadcast_order_completed(self, order: BinaryOrder) -> None:
        message = {
            "filter": {"type": "order", "symbol": order.symbol, "userId": order.user_id},
            "payload": {
                "type": "ORDER_COMPLETED",
                "order": BinaryOrderResponse.from_domain(order).model_dump(mode="json"),
            },
        }
        try:
            await self._redis.publish(ORDER_TOPIC, json.dumps(message))
        except Exception:
            logger.exception("Failed to broadcast completion of order %s", order.id)

    async def send_binary_order_email(self, recipient: Recipient, order: BinaryOrder) -> None:
        try:
            job = binary_order_result_job(recipient, order)
            await self._redis.rpush(EMAIL_QUEUE_KEY, json.dumps(job))
        except Exception:
            logger.exception(
                "Error sending binary order email for user %s, order %s", recipient.id, order.id
            )

    async def create_notification(
        self,
        user_id: str,
        related_id: str,
        title: str,
        message: str,
        link: str | None = None,
        actions: list[dict[str, Any]] | None = None,
        type: str = "system",
    ) -> None:
        notification = Notification(
            id=str(uuid.uuid4()),
            user_id=user_id,
            related_id=related_id,
            type=type,
            title=title,
            message=message,
            link=link,
            actions=actions or [],
        )
        try:
            async with self._session_factory() as db:
                try:
                    await self._repo.insert(db, notification)
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise
        except Exception:
            logger.exception("Failed to create notification for user %s", user_id)

    async def broadcast_log(self, cron_name: str, message: str, level: str = "info") -> None:
        entry = {
            "cronName": cron_name,
            "message": message,
            "level": level,
            "timestamp": utc_now().isoformat(),
        }
        try:
            await self._redis.publish(CRON_LOG_CHANNEL, json.dumps(entry))
        except Exception:
            logger.warning("Failed to publish cron log for %s: %s", cron_name, message)

    async def _load_recipient(self, user_id: str) -> Recipient | None:
        try:
            async with self._session_factory() as db:
                recipient = await self._repo.get_recipient(db, user_id)
        except Exception:
            logger.exception("Failed to load notification recipient %s", user_id)
            return None
        if recipient is None:
            logger.warning("No user %s to notify", user_id)
        return recipient
