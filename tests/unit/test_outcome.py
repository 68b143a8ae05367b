# tests/unit/test_outcome.py
"""Outcome evaluation, payout policy and profit configuration."""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from src.bo_binary.domain.outcome import (
    DEFAULT_PROFIT_PERCENTAGE,
    ProfitConfig,
    apply_final_payout,
    cancellation_refund,
    evaluate_outcome,
    parse_profit_percentage,
)
from src.bo_common.enums import BinaryOrderStatus, BinaryOrderType
from tests.factories import make_order

D = Decimal
CONFIG = ProfitConfig.from_raw({t: "80" for t in BinaryOrderType})


class TestProfitConfig:
    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "-1"])
    def test_invalid_falls_back_to_87(self, raw) -> None:
        assert parse_profit_percentage(raw) == DEFAULT_PROFIT_PERCENTAGE == D("87")

    def test_valid_values_kept(self) -> None:
        assert parse_profit_percentage("92.5") == D("92.5")
        assert parse_profit_percentage("0") == D("0")

    def test_from_settings_maps_each_type(self) -> None:
        settings = SimpleNamespace(
            BINARY_PROFIT="70",
            BINARY_HIGHER_LOWER_PROFIT="71",
            BINARY_TOUCH_NO_TOUCH_PROFIT=None,
            BINARY_CALL_PUT_PROFIT="bad",
            BINARY_TURBO_PROFIT="74",
        )
        cfg = ProfitConfig.from_settings(settings)
        assert cfg.for_type("RISE_FALL") == D("70")
        assert cfg.for_type("HIGHER_LOWER") == D("71")
        assert cfg.for_type("TOUCH_NO_TOUCH") == D("87")
        assert cfg.for_type("CALL_PUT") == D("87")
        assert cfg.for_type("TURBO") == D("74")


class TestRiseFall:
    def test_rise_wins_when_close_above_entry(self) -> None:
        order = make_order(side="RISE", price=D("100"), amount=D("50"))
        outcome = evaluate_outcome(order, D("105"), CONFIG)
        assert outcome.status == BinaryOrderStatus.WIN
        assert outcome.profit == D("40")
        assert outcome.close_price == D("105")

    def test_rise_loses_when_close_below_entry(self) -> None:
        outcome = evaluate_outcome(make_order(side="RISE"), D("99"), CONFIG)
        assert outcome.status == BinaryOrderStatus.LOSS
        assert outcome.profit == 0

    def test_fall_wins_when_close_below_entry(self) -> None:
        outcome = evaluate_outcome(make_order(side="FALL"), D("99"), CONFIG)
        assert outcome.status == BinaryOrderStatus.WIN

    def test_default_percentage_scenario(self) -> None:
        cfg = ProfitConfig.from_raw({})
        outcome = evaluate_outcome(make_order(side="RISE", amount=D("10")), D("105"), cfg)
        assert outcome.profit == D("8.7")


class TestEqualPriceIsDraw:
    @pytest.mark.parametrize(
        "kwargs, close",
        [
            ({"type": "RISE_FALL", "side": "RISE", "price": D("100")}, D("100")),
            ({"type": "RISE_FALL", "side": "FALL", "price": D("100")}, D("100")),
            ({"type": "HIGHER_LOWER", "side": "HIGHER", "barrier": D("120")}, D("120")),
            ({"type": "HIGHER_LOWER", "side": "LOWER", "barrier": D("120")}, D("120")),
            ({"type": "CALL_PUT", "side": "CALL", "strike_price": D("90")}, D("90")),
            ({"type": "CALL_PUT", "side": "PUT", "strike_price": D("90")}, D("90")),
        ],
    )
    def test_draw(self, kwargs, close) -> None:
        outcome = evaluate_outcome(make_order(**kwargs), close, CONFIG)
        assert outcome.status == BinaryOrderStatus.DRAW
        assert outcome.profit == 0


class TestHigherLower:
    def test_compares_against_barrier_not_entry(self) -> None:
        order = make_order(type="HIGHER_LOWER", side="HIGHER", price=D("200"), barrier=D("100"))
        assert evaluate_outcome(order, D("150"), CONFIG).status == BinaryOrderStatus.WIN

    def test_lower(self) -> None:
        order = make_order(type="HIGHER_LOWER", side="LOWER", barrier=D("100"))
        assert evaluate_outcome(order, D("150"), CONFIG).status == BinaryOrderStatus.LOSS

    def test_missing_barrier_is_loss(self) -> None:
        order = make_order(type="HIGHER_LOWER", side="HIGHER", barrier=None)
        assert evaluate_outcome(order, D("150"), CONFIG).status == BinaryOrderStatus.LOSS


class TestTouchNoTouch:
    def test_no_touch_wins_when_untouched(self) -> None:
        order = make_order(type="TOUCH_NO_TOUCH", side="NO_TOUCH", barrier=D("50"))
        outcome = evaluate_outcome(order, D("60"), CONFIG, touched=False)
        assert outcome.status == BinaryOrderStatus.WIN
        assert outcome.profit == D("80")

    def test_touched_flips_result(self) -> None:
        no_touch = make_order(type="TOUCH_NO_TOUCH", side="NO_TOUCH", barrier=D("50"))
        touch = make_order(type="TOUCH_NO_TOUCH", side="TOUCH", barrier=D("50"))
        assert evaluate_outcome(no_touch, D("60"), CONFIG, touched=True).status == "LOSS"
        assert evaluate_outcome(touch, D("60"), CONFIG, touched=True).status == "WIN"

    def test_never_draws(self) -> None:
        order = make_order(type="TOUCH_NO_TOUCH", side="TOUCH", barrier=D("50"))
        assert evaluate_outcome(order, D("50"), CONFIG).status == BinaryOrderStatus.LOSS


class TestCallPut:
    def test_call_wins_above_strike(self) -> None:
        order = make_order(type="CALL_PUT", side="CALL", strike_price=D("90"))
        assert evaluate_outcome(order, D("91"), CONFIG).status == BinaryOrderStatus.WIN

    def test_put_wins_below_strike(self) -> None:
        order = make_order(type="CALL_PUT", side="PUT", strike_price=D("90"))
        assert evaluate_outcome(order, D("89"), CONFIG).status == BinaryOrderStatus.WIN

    def test_missing_strike_forces_loss(self) -> None:
        order = make_order(type="CALL_PUT", side="CALL", strike_price=None)
        assert evaluate_outcome(order, D("1000"), CONFIG).status == BinaryOrderStatus.LOSS


class TestTurbo:
    def _order(self, side: str = "UP", **kwargs):
        defaults = dict(
            type="TURBO", side=side, barrier=D("40"), payout_per_point=D("10"), amount=D("100")
        )
        defaults.update(kwargs)
        return make_order(**defaults)

    def test_breach_is_loss_regardless_of_close(self) -> None:
        outcome = evaluate_outcome(self._order(), D("1000"), CONFIG, turbo_breached=True)
        assert outcome.status == BinaryOrderStatus.LOSS
        assert outcome.profit == 0

    def test_up_win_profit_is_payout_minus_stake(self) -> None:
        outcome = evaluate_outcome(self._order(), D("55"), CONFIG)
        assert outcome.status == BinaryOrderStatus.WIN
        assert outcome.profit == D("50")

    def test_down_win(self) -> None:
        outcome = evaluate_outcome(self._order(side="DOWN"), D("20"), CONFIG)
        assert outcome.status == BinaryOrderStatus.WIN
        assert outcome.profit == D("100")

    def test_payout_equal_to_stake_is_draw(self) -> None:
        assert evaluate_outcome(self._order(), D("50"), CONFIG).status == BinaryOrderStatus.DRAW

    def test_payout_below_stake_is_loss(self) -> None:
        assert evaluate_outcome(self._order(), D("45"), CONFIG).status == BinaryOrderStatus.LOSS

    def test_unfavorable_side_is_loss(self) -> None:
        assert evaluate_outcome(self._order(), D("30"), CONFIG).status == BinaryOrderStatus.LOSS
        assert (
            evaluate_outcome(self._order(side="DOWN"), D("60"), CONFIG).status
            == BinaryOrderStatus.LOSS
        )

    def test_close_on_barrier_is_draw(self) -> None:
        assert evaluate_outcome(self._order(), D("40"), CONFIG).status == BinaryOrderStatus.DRAW

    @pytest.mark.parametrize("missing", ["barrier", "payout_per_point"])
    def test_missing_fields_force_loss(self, missing) -> None:
        order = self._order(**{missing: None})
        assert evaluate_outcome(order, D("1000"), CONFIG).status == BinaryOrderStatus.LOSS


def test_unknown_type_is_loss() -> None:
    outcome = evaluate_outcome(make_order(type="LADDER"), D("105"), CONFIG)
    assert outcome.status == BinaryOrderStatus.LOSS


class TestApplyFinalPayout:
    def test_win_returns_stake_plus_profit(self) -> None:
        assert apply_final_payout("WIN", D("100"), D("87"), D("1000")) == D("1187")

    def test_loss_leaves_balance(self) -> None:
        assert apply_final_payout("LOSS", D("100"), D("0"), D("1000")) == D("1000")

    def test_draw_returns_stake(self) -> None:
        assert apply_final_payout("DRAW", D("100"), D("0"), D("1000")) == D("1100")

    def test_canceled_untouched(self) -> None:
        assert apply_final_payout("CANCELED", D("100"), D("0"), D("1000")) == D("1000")


class TestCancellationRefund:
    def test_full_refund_without_percentage(self) -> None:
        assert cancellation_refund(D("100"), None) == D("100")

    def test_partial_refund(self) -> None:
        assert cancellation_refund(D("100"), D("30")) == D("70")

    def test_negative_percentage_uses_absolute_value(self) -> None:
        assert cancellation_refund(D("100"), D("-30")) == D("70")

    def test_clamped_at_zero(self) -> None:
        assert cancellation_refund(D("100"), D("150")) == D("0")
