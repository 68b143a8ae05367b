# tests/unit/test_binary_create_order.py
"""BinaryOrderService.create_order with mock repositories."""
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.bo_common.errors import (
    ExternalServiceError,
    InsufficientBalanceError,
    InvalidInputError,
    MarketNotFoundError,
    ServiceUnavailableError,
    WalletNotFoundError,
)
from src.bo_common.result import Err, ErrorKind, Ok
from src.bo_exchange.domain.models import Ticker
from tests.factories import NOW

D = Decimal


def _params(**kwargs) -> dict:
    defaults = dict(
        currency="BTC",
        pair="USDT",
        amount=D("100"),
        side="RISE",
        type="RISE_FALL",
        closed_at=NOW + timedelta(minutes=5),
    )
    defaults.update(kwargs)
    return defaults


class TestCreateOrderHappyPath:
    @pytest.mark.asyncio
    async def test_debits_wallet_and_persists_order(self, harness) -> None:
        order = await harness.svc.create_order(harness.db, "user-1", **_params())

        harness.wallets.get_spot_wallet_for_update.assert_awaited_once_with(
            harness.db, "user-1", "USDT"
        )
        harness.wallets.set_balance.assert_awaited_once_with(harness.db, "w-1", D("900"))
        assert order.symbol == "BTC/USDT"
        assert order.price == D("105")
        assert order.status == "PENDING"
        assert order.profit == 0
        assert order.duration_type == "TIME"
        harness.feed.fetch_ticker.assert_awaited_once_with("BTC/USDT")

    @pytest.mark.asyncio
    async def test_creates_linked_pending_transaction(self, harness) -> None:
        order = await harness.svc.create_order(harness.db, "user-1", **_params())

        tx = harness.wallets.create_transaction.await_args.args[1]
        assert tx.reference_id == order.id
        assert tx.wallet_id == "w-1"
        assert tx.status == "PENDING"
        assert tx.type == "BINARY_ORDER"
        assert tx.amount == D("100")
        assert tx.fee == 0
        assert tx.description.startswith(
            "Binary Position | Market: BTC/USDT | Amount: 100 BTC | Price: 105 | Side: RISE"
        )
        assert "| Type: RISE_FALL | DurationType: TIME" in tx.description

    @pytest.mark.asyncio
    async def test_schedules_only_after_commit(self, harness) -> None:
        calls: list[str] = []
        harness.db.commit = AsyncMock(side_effect=lambda: calls.append("commit"))
        harness.scheduler.schedule = AsyncMock(side_effect=lambda o: calls.append("schedule"))

        order = await harness.svc.create_order(harness.db, "user-1", **_params())

        assert calls == ["commit", "schedule"]
        harness.scheduler.schedule.assert_awaited_once_with(order)

    @pytest.mark.asyncio
    async def test_demo_order_skips_wallet_and_transaction(self, harness) -> None:
        order = await harness.svc.create_order(harness.db, "user-1", **_params(is_demo=True))

        assert order.is_demo is True
        harness.wallets.get_spot_wallet_for_update.assert_not_awaited()
        harness.wallets.set_balance.assert_not_awaited()
        harness.wallets.create_transaction.assert_not_awaited()
        harness.scheduler.schedule.assert_awaited_once()


class TestTypeConditionalFields:
    @pytest.mark.asyncio
    async def test_rise_fall_drops_extra_fields(self, harness) -> None:
        order = await harness.svc.create_order(
            harness.db, "user-1",
            **_params(barrier=D("1"), strike_price=D("2"), payout_per_point=D("3"),
                      duration_type="TICKS"),
        )
        assert order.barrier is None
        assert order.strike_price is None
        assert order.payout_per_point is None
        assert order.duration_type == "TIME"

    @pytest.mark.asyncio
    async def test_call_put_keeps_strike_and_payout(self, harness) -> None:
        order = await harness.svc.create_order(
            harness.db, "user-1",
            **_params(type="CALL_PUT", side="CALL", barrier=D("1"), strike_price=D("2"),
                      payout_per_point=D("3")),
        )
        assert order.barrier is None
        assert order.strike_price == D("2")
        assert order.payout_per_point == D("3")

    @pytest.mark.asyncio
    async def test_turbo_keeps_barrier_payout_and_duration(self, harness) -> None:
        order = await harness.svc.create_order(
            harness.db, "user-1",
            **_params(type="TURBO", side="UP", barrier=D("40"), payout_per_point=D("3"),
                      duration_type="TICKS"),
        )
        assert order.barrier == D("40")
        assert order.payout_per_point == D("3")
        assert order.duration_type == "TICKS"

    @pytest.mark.asyncio
    async def test_higher_lower_keeps_barrier_forces_time(self, harness) -> None:
        order = await harness.svc.create_order(
            harness.db, "user-1",
            **_params(type="HIGHER_LOWER", side="HIGHER", barrier=D("40"), duration_type="TICKS"),
        )
        assert order.barrier == D("40")
        assert order.duration_type == "TIME"


class TestCreateOrderValidation:
    @pytest.mark.asyncio
    async def test_invalid_input_before_any_io(self, harness) -> None:
        with pytest.raises(InvalidInputError, match="Invalid side: UP"):
            await harness.svc.create_order(harness.db, "user-1", **_params(side="UP"))
        harness.markets.check_amount.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_market_errors_propagate(self, harness) -> None:
        harness.markets.check_amount = AsyncMock(side_effect=MarketNotFoundError())
        with pytest.raises(MarketNotFoundError) as exc_info:
            await harness.svc.create_order(harness.db, "user-1", **_params())
        assert exc_info.value.http_status == 404
        harness.wallets.get_spot_wallet_for_update.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("offset", [timedelta(0), timedelta(seconds=-1)])
    async def test_closed_at_must_be_future(self, harness, offset) -> None:
        with pytest.raises(InvalidInputError, match="closed_at must be a future time"):
            await harness.svc.create_order(
                harness.db, "user-1", **_params(closed_at=NOW + offset)
            )

    @pytest.mark.asyncio
    async def test_ban_gate_rejects_with_503(self, harness) -> None:
        harness.ban_gate.check = AsyncMock(
            return_value=Err(ErrorKind.SERVICE_UNAVAILABLE,
                             "Service temporarily unavailable. Please try again in 1m 5s.")
        )
        with pytest.raises(ServiceUnavailableError) as exc_info:
            await harness.svc.create_order(harness.db, "user-1", **_params())
        assert exc_info.value.http_status == 503
        assert exc_info.value.message.endswith("try again in 1m 5s.")
        harness.wallets.get_spot_wallet_for_update.assert_not_awaited()


class TestCreateOrderRollback:
    @pytest.mark.asyncio
    async def test_missing_wallet(self, harness) -> None:
        harness.wallets.get_spot_wallet_for_update = AsyncMock(return_value=None)
        with pytest.raises(WalletNotFoundError):
            await harness.svc.create_order(harness.db, "user-1", **_params())
        harness.db.rollback.assert_awaited_once()
        harness.db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, harness) -> None:
        with pytest.raises(InsufficientBalanceError):
            await harness.svc.create_order(harness.db, "user-1", **_params(amount=D("1000.01")))
        harness.wallets.set_balance.assert_not_awaited()
        harness.db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_exact_balance_is_allowed(self, harness) -> None:
        await harness.svc.create_order(harness.db, "user-1", **_params(amount=D("1000")))
        harness.wallets.set_balance.assert_awaited_once_with(harness.db, "w-1", D("0"))

    @pytest.mark.asyncio
    async def test_exchange_unavailable_is_503_and_rolls_back_debit(self, harness) -> None:
        harness.exchange.acquire = AsyncMock(
            return_value=Err(ErrorKind.SERVICE_UNAVAILABLE,
                             "Service temporarily unavailable. Please try again later.")
        )
        with pytest.raises(ServiceUnavailableError):
            await harness.svc.create_order(harness.db, "user-1", **_params())
        harness.db.rollback.assert_awaited_once()
        harness.orders.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ban_tripped_during_transaction(self, harness) -> None:
        harness.ban_gate.check = AsyncMock(
            side_effect=[Ok(None), Err(ErrorKind.SERVICE_UNAVAILABLE, "banned")]
        )
        with pytest.raises(ServiceUnavailableError, match="banned"):
            await harness.svc.create_order(harness.db, "user-1", **_params())
        harness.db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ticker_exception_is_external_service_error(self, harness) -> None:
        harness.feed.fetch_ticker = AsyncMock(side_effect=ConnectionError("reset"))
        with pytest.raises(ExternalServiceError) as exc_info:
            await harness.svc.create_order(harness.db, "user-1", **_params())
        assert exc_info.value.message == "Error fetching market data from exchange"
        assert exc_info.value.http_status == 500
        harness.db.rollback.assert_awaited_once()
        harness.scheduler.schedule.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("last", [None, D("0")])
    async def test_ticker_without_price(self, harness, last) -> None:
        harness.feed.fetch_ticker = AsyncMock(return_value=Ticker(symbol="BTC/USDT", last=last))
        with pytest.raises(
            ExternalServiceError, match=r"Error fetching ticker data \(price unavailable\)"
        ):
            await harness.svc.create_order(harness.db, "user-1", **_params())
        harness.orders.save.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_persistence_failure_rolls_back(self, harness) -> None:
        harness.wallets.create_transaction = AsyncMock(side_effect=RuntimeError("db down"))
        with pytest.raises(RuntimeError):
            await harness.svc.create_order(harness.db, "user-1", **_params())
        harness.db.rollback.assert_awaited_once()
        harness.scheduler.schedule.assert_not_awaited()
