"""BinaryOrderService — binary order lifecycle.

Creation and cancellation run on the request's session and own its
transaction (commit on success, rollback and re-raise on any error).
Settlement runs outside any request: it opens its own sessions from the
injected session factory and never raises to its caller.

Lock order everywhere: binary_orders row, then transactions row, then wallets row.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bo_binary.application.scheduler import SettlementScheduler
from src.bo_binary.application.schemas import (
    BinaryOrderListResponse,
    BinaryOrderResponse,
    cursor_decode,
    cursor_encode,
)
from src.bo_binary.domain.barrier import check_barrier_touched, check_turbo_breach
from src.bo_binary.domain.contracts import (
    BARRIER_TYPES,
    DURATION_TYPE_TYPES,
    PAYOUT_PER_POINT_TYPES,
    STRIKE_PRICE_TYPES,
    check_cancellation_window,
    validate_create_order_input,
)
from src.bo_binary.domain.models import BinaryOrder
from src.bo_binary.domain.outcome import (
    OrderOutcome,
    ProfitConfig,
    apply_final_payout,
    cancellation_refund,
    evaluate_outcome,
)
from src.bo_binary.domain.repository import BinaryOrderRepositoryProtocol
from src.bo_binary.infrastructure.persistence import BinaryOrderRepository
from src.bo_common.datetime_utils import ensure_utc, to_epoch_ms, utc_now
from src.bo_common.decimals import ZERO, format_amount
from src.bo_common.enums import (
    BinaryOrderSide,
    BinaryOrderStatus,
    BinaryOrderType,
    DurationType,
    TransactionStatus,
    TransactionType,
)
from src.bo_common.errors import (
    AppError,
    ExternalServiceError,
    InsufficientBalanceError,
    InternalError,
    InvalidInputError,
    OrderNotFoundError,
    TransactionNotFoundError,
    WalletNotFoundError,
)
from src.bo_common.result import Err, unwrap_or_raise
from src.bo_exchange.application.ban_gate import BanGate
from src.bo_exchange.application.exchange_manager import ExchangeManager
from src.bo_exchange.domain.models import ONE_MINUTE_MS
from src.bo_exchange.domain.price_feed import PriceFeedProtocol
from src.bo_market.application.service import MarketApplicationService
from src.bo_notification.application.service import NotificationService
from src.bo_wallet.domain.models import Transaction
from src.bo_wallet.domain.repository import WalletRepositoryProtocol
from src.bo_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)

SWEEP_CRON_NAME = "processPendingOrders"

ORDER_CANCELLED = "Order cancelled"
ORDER_ALREADY_PROCESSED = "Order already processed or canceled."


def _transaction_description(order: BinaryOrder) -> str:
    return (
        f"Binary Position | Market: {order.base_currency}/{order.quote_currency} "
        f"| Amount: {format_amount(order.amount)} {order.base_currency} "
        f"| Price: {format_amount(order.price)} | Side: {order.side} "
        f"| Expiration: {ensure_utc(order.closed_at).isoformat()} "
        f"| Type: {order.type} | DurationType: {order.duration_type}"
    )


class BinaryOrderService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        exchange: ExchangeManager,
        ban_gate: BanGate,
        scheduler: SettlementScheduler,
        notifier: NotificationService,
        profit_config: ProfitConfig,
        order_repo: BinaryOrderRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        market_service: MarketApplicationService | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._exchange = exchange
        self._ban_gate = ban_gate
        self._scheduler = scheduler
        self._notifier = notifier
        self._profit_config = profit_config
        self._orders: BinaryOrderRepositoryProtocol = order_repo or BinaryOrderRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._markets = market_service or MarketApplicationService()
        self._clock = clock
        scheduler.set_handler(self._settle_scheduled)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_order(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        currency: str,
        pair: str,
        amount: Decimal,
        side: str,
        type: str,
        closed_at: datetime,
        is_demo: bool = False,
        duration_type: str | None = None,
        barrier: Decimal | None = None,
        strike_price: Decimal | None = None,
        payout_per_point: Decimal | None = None,
    ) -> BinaryOrder:
        order_type = validate_create_order_input(
            type, side, barrier, strike_price, payout_per_point, duration_type
        )
        await self._markets.check_amount(db, currency, pair, amount)

        closed_at = ensure_utc(closed_at)
        if closed_at <= self._clock():
            raise InvalidInputError("closed_at must be a future time")

        unwrap_or_raise(await self._ban_gate.check())

        symbol = f"{currency}/{pair}"
        try:
            wallet_id: str | None = None
            if not is_demo:
                wallet = await self._wallets.get_spot_wallet_for_update(db, user_id, pair)
                if wallet is None:
                    raise WalletNotFoundError()
                new_balance = wallet.balance - amount
                if new_balance < ZERO:
                    raise InsufficientBalanceError()
                await self._wallets.set_balance(db, wallet.id, new_balance)
                wallet_id = wallet.id

            feed = unwrap_or_raise(await self._exchange.acquire())
            unwrap_or_raise(await self._ban_gate.check())
            price = await self._fetch_last_price(
                feed,
                symbol,
                on_error="Error fetching market data from exchange",
                on_missing="Error fetching ticker data (price unavailable)",
            )

            order = await self._orders.save(
                db,
                BinaryOrder(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    symbol=symbol,
                    type=order_type.value,
                    side=side,
                    amount=amount,
                    price=price,
                    closed_at=closed_at,
                    is_demo=is_demo,
                    barrier=barrier if order_type in BARRIER_TYPES else None,
                    strike_price=strike_price if order_type in STRIKE_PRICE_TYPES else None,
                    payout_per_point=(
                        payout_per_point if order_type in PAYOUT_PER_POINT_TYPES else None
                    ),
                    duration_type=(
                        duration_type
                        if order_type in DURATION_TYPE_TYPES and duration_type
                        else DurationType.TIME.value
                    ),
                ),
            )

            if wallet_id is not None:
                await self._wallets.create_transaction(
                    db,
                    Transaction(
                        id=str(uuid.uuid4()),
                        user_id=user_id,
                        wallet_id=wallet_id,
                        type=TransactionType.BINARY_ORDER.value,
                        status=TransactionStatus.PENDING.value,
                        amount=amount,
                        fee=ZERO,
                        reference_id=order.id,
                        description=_transaction_description(order),
                    ),
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Binary order %s created: user=%s %s %s %s amount=%s price=%s",
            order.id, user_id, order.symbol, order.type, order.side, order.amount, order.price,
        )
        await self._scheduler.schedule(order)
        return order

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def _settle_scheduled(self, order: BinaryOrder) -> None:
        await self.process_order(order.user_id, order.id, order.symbol)

    async def process_order(self, user_id: str, order_id: str, symbol: str) -> None:
        """Settle one order at expiry. Never raises; the sweep retries what fails here."""
        try:
            ban = await self._ban_gate.check()
            if isinstance(ban, Err):
                logger.warning("Settlement of order %s deferred: %s", order_id, ban.message)
                return

            acquired = await self._exchange.acquire()
            if isinstance(acquired, Err):
                logger.error("Settlement of order %s deferred: %s", order_id, acquired.message)
                return
            feed = acquired.value

            async with self._session_factory() as db:
                order = await self._orders.get_by_id(db, order_id)
            if order is None or order.user_id != user_id:
                logger.error("Order %s not found for user %s.", order_id, user_id)
                return
            if not order.is_pending:
                logger.info("Order %s already %s, skipping settlement.", order_id, order.status)
                return

            ticker = await feed.fetch_ticker(symbol)
            if not ticker.last:
                logger.error("No close price for order %s (%s), skipping.", order_id, symbol)
                return

            touched, breached = await self._scan_history(feed, order)
            outcome = evaluate_outcome(
                order, ticker.last, self._profit_config, touched=touched, turbo_breached=breached
            )
            await self.update_binary_order(order_id, outcome)
        except Exception:
            logger.exception("Error processing binary order %s", order_id)
        finally:
            self._scheduler.discard(order_id)

    async def _scan_history(
        self, feed: PriceFeedProtocol, order: BinaryOrder
    ) -> tuple[bool, bool]:
        """(touched, turbo_breached) over the order's lifetime."""
        if order.barrier is None:
            return False, False
        start = order.created_at or order.closed_at
        if order.type == BinaryOrderType.TOUCH_NO_TOUCH:
            touched = await check_barrier_touched(
                feed, order.symbol, start, order.closed_at, order.barrier
            )
            return touched, False
        if order.type == BinaryOrderType.TURBO and order.side in (
            BinaryOrderSide.UP,
            BinaryOrderSide.DOWN,
        ):
            breached = await check_turbo_breach(
                feed, order.symbol, start, order.closed_at, order.barrier, order.side
            )
            return False, breached
        return False, False

    async def update_binary_order(
        self, order_id: str, outcome: OrderOutcome
    ) -> BinaryOrder | None:
        """Apply an outcome atomically; None when the order was no longer PENDING."""
        async with self._session_factory() as db:
            try:
                current = await self._orders.get_by_id(db, order_id, for_update=True)
                if current is None or not current.is_pending:
                    await db.rollback()
                    logger.info(
                        "Order %s no longer pending (%s), outcome discarded.",
                        order_id, current.status if current else "missing",
                    )
                    return None

                await self._orders.apply_outcome(
                    db, order_id, outcome.status.value, outcome.profit, outcome.close_price
                )
                order = await self._orders.get_by_id(db, order_id)
                if order is None:
                    raise InternalError(f"Order {order_id} not found after update")

                if not order.is_demo and order.is_settled:
                    await self._settle_ledger(db, order)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Binary order %s settled: %s profit=%s close=%s",
            order.id, order.status, order.profit, order.close_price,
        )
        if order.is_settled:
            await self._notifier.order_completed(order)
        return order

    async def _settle_ledger(self, db: AsyncSession, order: BinaryOrder) -> None:
        transaction = await self._wallets.get_transaction_by_reference(
            db, order.id, for_update=True
        )
        if transaction is None:
            raise TransactionNotFoundError(order.id)
        await self._wallets.mark_transaction_completed(db, transaction.id)

        wallet = await self._wallets.get_wallet_for_update(db, transaction.wallet_id)
        if wallet is None:
            raise WalletNotFoundError()
        balance = apply_final_payout(order.status, order.amount, order.profit, wallet.balance)
        if balance != wallet.balance:
            await self._wallets.set_balance(db, wallet.id, balance)

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    async def cancel_order(
        self,
        db: AsyncSession,
        user_id: str,
        order_id: str,
        percentage: Decimal | None = None,
    ) -> dict[str, str]:
        order = await self._orders.get_for_user(db, user_id, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        if order.is_terminal:
            logger.info("Order %s is already %s. Cannot cancel again.", order_id, order.status)
            return {"message": ORDER_ALREADY_PROCESSED}

        unwrap_or_raise(await self._ban_gate.check())
        feed = unwrap_or_raise(await self._exchange.acquire())
        current_price = await self._fetch_last_price(
            feed,
            order.symbol,
            on_error="Error fetching current price for the order symbol",
            on_missing="Error fetching current price for the order symbol",
        )
        check_cancellation_window(
            order.type, order.duration_type, ensure_utc(order.closed_at), self._clock()
        )

        try:
            locked = await self._orders.get_by_id(db, order_id, for_update=True)
            cancellable = locked is not None and locked.is_pending
            if cancellable:
                if not order.is_demo:
                    await self._refund_stake(db, order, percentage)
                await self._orders.apply_outcome(
                    db, order_id, BinaryOrderStatus.CANCELED.value, ZERO, current_price
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if not cancellable:
            logger.info("Order %s settled before cancellation could lock it.", order_id)
            return {"message": ORDER_ALREADY_PROCESSED}

        self._scheduler.cancel(order_id)
        logger.info("Binary order %s cancelled at %s", order_id, current_price)
        return {"message": ORDER_CANCELLED}

    async def _refund_stake(
        self, db: AsyncSession, order: BinaryOrder, percentage: Decimal | None
    ) -> None:
        transaction = await self._wallets.get_transaction_by_reference(
            db, order.id, for_update=True
        )
        if transaction is None:
            raise TransactionNotFoundError(order.id)
        wallet = await self._wallets.get_wallet_for_update(db, transaction.wallet_id)
        if wallet is None:
            raise WalletNotFoundError()

        refund = cancellation_refund(order.amount, percentage)
        await self._wallets.set_balance(db, wallet.id, wallet.balance + refund)
        await self._wallets.delete_transaction(db, transaction.id)

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------

    async def process_pending_orders(self, should_broadcast: bool = True) -> int:
        """Settle expired PENDING orders that have no armed timer.

        Only the close price is re-derived here; barrier history is not
        rescanned. Returns the number of orders settled.
        """
        try:
            async with self._session_factory() as db:
                pending = await self._orders.list_by_status(db, BinaryOrderStatus.PENDING.value)

            now = self._clock()
            orphaned = [
                o
                for o in pending
                if ensure_utc(o.closed_at) <= now and not self._scheduler.has(o.id)
            ]
            if not orphaned:
                return 0

            feed = unwrap_or_raise(await self._exchange.acquire())
            settled = 0
            for order in orphaned:
                try:
                    if await self._sweep_one(feed, order, should_broadcast):
                        settled += 1
                except Exception as exc:
                    logger.exception("Sweep failed for binary order %s", order.id)
                    await self._cron_log(
                        should_broadcast,
                        f"Error processing pending order {order.id}: {exc}",
                        "error",
                    )
        except Exception as exc:
            logger.exception("Error in processPendingOrders")
            await self._cron_log(
                should_broadcast, f"Error in processPendingOrders: {exc}", "error"
            )
            raise

        await self._cron_log(
            should_broadcast, f"Processed {settled} pending binary orders", "success"
        )
        return settled

    async def _sweep_one(
        self, feed: PriceFeedProtocol, order: BinaryOrder, should_broadcast: bool
    ) -> bool:
        if not order.is_pending:
            await self._cron_log(
                should_broadcast,
                f"Order {order.id} already processed as {order.status}. Skipping.",
                "error",
            )
            return False

        close_price = await self._sweep_close_price(feed, order, should_broadcast)
        if close_price is None:
            logger.warning("Unable to determine closePrice for order %s", order.id)
            await self._cron_log(
                should_broadcast,
                f"Unable to determine closePrice for order {order.id}. Skipping.",
                "error",
            )
            return False

        outcome = evaluate_outcome(order, close_price, self._profit_config)
        return await self.update_binary_order(order.id, outcome) is not None

    async def _sweep_close_price(
        self, feed: PriceFeedProtocol, order: BinaryOrder, should_broadcast: bool
    ) -> Decimal | None:
        """Close of the candle at expiry, else the live ticker."""
        since = to_epoch_ms(order.closed_at) - ONE_MINUTE_MS
        try:
            candles = await feed.fetch_ohlcv(order.symbol, "1m", since, 2)
            if len(candles) > 1 and candles[1].close:
                return candles[1].close
            await self._cron_log(
                should_broadcast,
                f"Not enough OHLCV data for order {order.id} to determine closePrice. Using ticker.",
                "warning",
            )
        except Exception as exc:
            logger.warning("OHLCV fetch failed for order %s: %s", order.id, exc)
            await self._cron_log(
                should_broadcast,
                f"Error fetching OHLCV for pending order {order.id}: {exc}",
                "error",
            )
        ticker = await feed.fetch_ticker(order.symbol)
        return ticker.last or None

    async def _cron_log(self, should_broadcast: bool, message: str, level: str) -> None:
        if should_broadcast:
            await self._notifier.broadcast_log(SWEEP_CRON_NAME, message, level)

    async def reschedule_pending(self) -> int:
        """Re-arm timers for unexpired PENDING orders after a restart.

        Expired ones are left to the sweep.
        """
        async with self._session_factory() as db:
            pending = await self._orders.list_by_status(db, BinaryOrderStatus.PENDING.value)
        now = self._clock()
        armed = 0
        for order in pending:
            if ensure_utc(order.closed_at) > now and not self._scheduler.has(order.id):
                await self._scheduler.schedule(order)
                armed += 1
        if armed:
            logger.info("Re-armed settlement timers for %d pending binary orders", armed)
        return armed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_order(self, db: AsyncSession, user_id: str, order_id: str) -> BinaryOrder:
        order = await self._orders.get_for_user(db, user_id, order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def list_orders(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        limit: int,
        cursor: str | None,
    ) -> BinaryOrderListResponse:
        orders = await self._orders.list_by_user(
            db, user_id, status, cursor_decode(cursor), limit + 1
        )
        has_more = len(orders) > limit
        orders = orders[:limit]
        next_cursor = None
        if has_more and orders and orders[-1].created_at is not None:
            next_cursor = cursor_encode(orders[-1].created_at, orders[-1].id)
        return BinaryOrderListResponse(
            items=[BinaryOrderResponse.from_domain(o) for o in orders],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _fetch_last_price(
        self, feed: PriceFeedProtocol, symbol: str, *, on_error: str, on_missing: str
    ) -> Decimal:
        try:
            ticker = await feed.fetch_ticker(symbol)
        except AppError:
            raise
        except Exception as exc:
            logger.error("Ticker fetch for %s failed: %s", symbol, exc)
            raise ExternalServiceError(on_error) from exc
        if not ticker.last:
            raise ExternalServiceError(on_missing)
        return ticker.last
