"""Repository Protocol — dependency inversion for testability."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_market.domain.models import ExchangeMarket


class MarketRepositoryProtocol(Protocol):
    async def get_by_currency_pair(
        self, db: AsyncSession, currency: str, pair: str
    ) -> ExchangeMarket | None: ...
