"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET; set it before anything imports config.settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests-only")

from collections.abc import Callable  # noqa: E402
from datetime import datetime  # noqa: E402
from decimal import Decimal  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from src.bo_binary.application.service import BinaryOrderService  # noqa: E402
from src.bo_binary.domain.outcome import ProfitConfig  # noqa: E402
from src.bo_common.result import Ok  # noqa: E402
from src.bo_exchange.domain.models import Ticker  # noqa: E402
from src.bo_wallet.domain.models import Transaction, Wallet  # noqa: E402
from tests.factories import NOW, make_session_factory  # noqa: E402


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def feed() -> MagicMock:
    """PriceFeed double: ticker at 105, no candles."""
    f = MagicMock()
    f.fetch_ticker = AsyncMock(return_value=Ticker(symbol="BTC/USDT", last=Decimal("105")))
    f.fetch_ohlcv = AsyncMock(return_value=[])
    f.close = AsyncMock()
    return f


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    return session


@pytest.fixture
def harness(db, feed, fixed_clock) -> SimpleNamespace:
    """BinaryOrderService wired to mock repositories and collaborators."""
    orders = MagicMock()
    orders.save = AsyncMock(side_effect=lambda _db, order: order)
    orders.get_by_id = AsyncMock(return_value=None)
    orders.get_for_user = AsyncMock(return_value=None)
    orders.list_by_status = AsyncMock(return_value=[])
    orders.list_by_user = AsyncMock(return_value=[])
    orders.apply_outcome = AsyncMock()

    wallets = MagicMock()
    wallets.get_spot_wallet_for_update = AsyncMock(
        return_value=Wallet(id="w-1", user_id="user-1", currency="USDT", type="SPOT",
                            balance=Decimal("1000"))
    )
    wallets.get_wallet_for_update = AsyncMock(
        return_value=Wallet(id="w-1", user_id="user-1", currency="USDT", type="SPOT",
                            balance=Decimal("1000"))
    )
    wallets.set_balance = AsyncMock()
    wallets.create_transaction = AsyncMock(side_effect=lambda _db, tx: tx)
    wallets.get_transaction_by_reference = AsyncMock(
        return_value=Transaction(
            id="tx-1", user_id="user-1", wallet_id="w-1", type="BINARY_ORDER",
            status="PENDING", amount=Decimal("100"), fee=Decimal("0"), reference_id="ord-1",
        )
    )
    wallets.mark_transaction_completed = AsyncMock()
    wallets.delete_transaction = AsyncMock()

    markets = MagicMock()
    markets.check_amount = AsyncMock()

    ban_gate = MagicMock()
    ban_gate.check = AsyncMock(return_value=Ok(None))

    exchange = MagicMock()
    exchange.acquire = AsyncMock(return_value=Ok(feed))

    scheduler = MagicMock()
    scheduler.schedule = AsyncMock()
    scheduler.has = MagicMock(return_value=False)

    notifier = MagicMock()
    notifier.order_completed = AsyncMock()
    notifier.broadcast_log = AsyncMock()

    svc = BinaryOrderService(
        session_factory=make_session_factory(db),
        exchange=exchange,
        ban_gate=ban_gate,
        scheduler=scheduler,
        notifier=notifier,
        profit_config=ProfitConfig.from_raw({}),
        order_repo=orders,
        wallet_repo=wallets,
        market_service=markets,
        clock=fixed_clock,
    )
    return SimpleNamespace(
        svc=svc, db=db, feed=feed, orders=orders, wallets=wallets, markets=markets,
        ban_gate=ban_gate, exchange=exchange, scheduler=scheduler, notifier=notifier,
    )
