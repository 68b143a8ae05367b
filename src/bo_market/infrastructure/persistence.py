"""MarketRepository — read-only access to exchange_markets.

metadata is JSONB; asyncpg may hand it back as a str when the column was
written as text, so both shapes are accepted.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_market.domain.models import ExchangeMarket

_GET_BY_CURRENCY_PAIR_SQL = text("""
    SELECT id, currency, pair, status, metadata, created_at, updated_at
    FROM exchange_markets
    WHERE currency = :currency AND pair = :pair
""")


def _parse_metadata(raw: Any) -> dict[str, Any] | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return json.loads(raw) if raw else None
    return dict(raw)


def _row_to_market(row: Any) -> ExchangeMarket:
    return ExchangeMarket(
        id=str(row.id),
        currency=row.currency,
        pair=row.pair,
        status=bool(row.status),
        metadata=_parse_metadata(row.metadata),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class MarketRepository:
    async def get_by_currency_pair(
        self, db: AsyncSession, currency: str, pair: str
    ) -> ExchangeMarket | None:
        result = await db.execute(
            _GET_BY_CURRENCY_PAIR_SQL, {"currency": currency, "pair": pair}
        )
        row = result.fetchone()
        return _row_to_market(row) if row else None
