"""MarketApplicationService — amount limits for binary order placement.

All methods are read-only; no commit/rollback needed.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_common.decimals import format_amount
from src.bo_common.errors import InvalidInputError, MarketNotFoundError
from src.bo_market.domain.models import AmountLimits, amount_limits_from_metadata
from src.bo_market.domain.repository import MarketRepositoryProtocol
from src.bo_market.infrastructure.persistence import MarketRepository


class MarketApplicationService:
    def __init__(self, repo: MarketRepositoryProtocol | None = None) -> None:
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()

    async def get_amount_limits(
        self, db: AsyncSession, currency: str, pair: str
    ) -> AmountLimits:
        market = await self._repo.get_by_currency_pair(db, currency, pair)
        if market is None or not market.metadata:
            raise MarketNotFoundError()
        return amount_limits_from_metadata(market.metadata)

    async def check_amount(
        self, db: AsyncSession, currency: str, pair: str, amount: Decimal
    ) -> AmountLimits:
        limits = await self.get_amount_limits(db, currency, pair)
        if not limits.contains(amount):
            raise InvalidInputError(
                f"Amount must be between {format_amount(limits.min)} "
                f"and {format_amount(limits.max)} {currency}"
            )
        return limits
