"""
Single-instrument long-only trade simulation.

**Conceptual**: The simulation walks the bars in order and applies the
strategy's signals to a tiny portfolio (cash plus shares of one instrument).
It is written as an explicit fold: `step` is a pure function from
(state, bar, signal) to the next state plus whatever it recorded, and
`simulate` threads the state through every bar. Nothing is mutated in place,
so a single step can be tested on its own.

**Per-bar order** (every bar after the first):
  1. Mark to market: equity = capital + shares * close.
  2. Risk exit: while holding, measure the move from the latest entry price.
     A move at or below -stop_loss_percent forces SELL (STOP_LOSS); otherwise a
     move at or above take_profit_percent forces SELL (TAKE_PROFIT). The forced
     SELL replaces the strategy's signal for this bar.
  3. BUY (only with capital > 0): commit position_sizing_percent of equity at
     the close. Repeated BUYs add to the position and reset the entry price to
     the newest fill.
  4. SELL (only while holding): liquidate everything at the close and realize
     P&L against the latest entry price.
  5. Record equity after the action.

Execution is at the bar's close with no fees, slippage or fills to model.
Capital is never clamped; pyramiding BUYs can drive it negative, which shows
up as leverage in the equity curve.
"""

from dataclasses import dataclass, replace
from typing import Optional, Sequence

from loguru import logger

from financify.backtesting.models import (
    EquityPoint,
    ExitReason,
    PriceBar,
    RiskConfig,
    Signal,
    Trade,
    TradeAction,
)


@dataclass(frozen=True)
class SimulationState:
    """
    Portfolio between bars.

    Attributes:
        capital: Cash on hand. May go negative.
        shares: Shares held (fractional, >= 0).
        last_buy_price: Price of the most recent BUY fill; 0.0 before the first.
    """
    capital: float
    shares: float = 0.0
    last_buy_price: float = 0.0

    def equity(self, price: float) -> float:
        return self.capital + self.shares * price


@dataclass(frozen=True)
class StepOutcome:
    """
    Everything one bar produced.

    Attributes:
        state: Portfolio after the bar.
        trade: The trade executed on this bar, if any.
        equity_point: Equity after the bar's action.
        applied_signal: The signal actually acted upon (SELL when a risk band
            overrode the strategy, otherwise the strategy's signal).
    """
    state: SimulationState
    trade: Optional[Trade]
    equity_point: EquityPoint
    applied_signal: Signal


@dataclass(frozen=True)
class SimulationResult:
    trades: tuple
    equity_curve: tuple


def check_risk_exit(state: SimulationState, price: float, risk: RiskConfig) -> Optional[ExitReason]:
    """
    Return the exit reason if an open position has crossed a risk band.

    Stop-loss wins when both bands trigger on the same bar.
    """
    if state.shares <= 0 or state.last_buy_price <= 0:
        return None
    pl_percent = (price - state.last_buy_price) / state.last_buy_price * 100
    if pl_percent <= -risk.stop_loss_percent:
        return ExitReason.STOP_LOSS
    if pl_percent >= risk.take_profit_percent:
        return ExitReason.TAKE_PROFIT
    return None


def step(
    state: SimulationState,
    bar: PriceBar,
    signal: Signal,
    risk: RiskConfig,
) -> StepOutcome:
    """
    Advance the portfolio by one bar.

    Args:
        state: Portfolio before the bar.
        bar: Current bar; trades fill at `bar.close`.
        signal: The strategy's signal for this bar.
        risk: Position sizing and exit bands.

    Returns:
        StepOutcome with the new state, the trade (if any), and the equity point.
    """
    price = bar.close
    current_equity = state.equity(price)

    exit_reason = check_risk_exit(state, price, risk)
    if exit_reason is not None:
        applied = Signal.SELL
    else:
        applied = signal
        exit_reason = ExitReason.SIGNAL

    trade = None
    if applied is Signal.BUY and state.capital > 0:
        position_size = current_equity * risk.position_sizing_percent / 100
        quantity = position_size / price
        state = SimulationState(
            capital=state.capital - position_size,
            shares=state.shares + quantity,
            last_buy_price=price,
        )
        trade = Trade(date=bar.date, action=TradeAction.BUY, price=price, quantity=quantity)
    elif applied is Signal.SELL and state.shares > 0:
        pl = (price - state.last_buy_price) * state.shares
        trade = Trade(
            date=bar.date,
            action=TradeAction.SELL,
            price=price,
            quantity=state.shares,
            profit_and_loss=pl,
            exit_reason=exit_reason,
        )
        state = replace(state, capital=state.capital + state.shares * price, shares=0.0)

    return StepOutcome(
        state=state,
        trade=trade,
        equity_point=EquityPoint(date=bar.date, value=state.equity(price)),
        applied_signal=applied,
    )


def simulate(
    bars: Sequence[PriceBar],
    signals: Sequence[Signal],
    initial_capital: float,
    risk: RiskConfig,
) -> SimulationResult:
    """
    Fold `step` over the bars.

    The curve is seeded with (bars[0].date, initial_capital); bar 0 never
    trades. Any position still open after the last bar stays open and is
    marked to market in the final equity point.

    Raises:
        ValueError: If `signals` and `bars` differ in length.
    """
    if len(signals) != len(bars):
        raise ValueError(
            f"Signal count ({len(signals)}) does not match bar count ({len(bars)})."
        )
    if not bars:
        return SimulationResult(trades=(), equity_curve=())

    state = SimulationState(capital=initial_capital)
    trades = []
    equity_curve = [EquityPoint(date=bars[0].date, value=initial_capital)]
    warned_negative = False

    for bar, signal in zip(bars[1:], signals[1:]):
        outcome = step(state, bar, signal, risk)
        state = outcome.state
        if outcome.trade is not None:
            trades.append(outcome.trade)
        equity_curve.append(outcome.equity_point)

        if state.capital < 0 and not warned_negative:
            logger.warning(
                "Capital went negative ({:.2f}) on {}; position is leveraged.",
                state.capital,
                bar.date,
            )
            warned_negative = True

    logger.debug(
        "Simulation finished: {} trades, final equity {:.2f}, open shares {:.4f}",
        len(trades),
        equity_curve[-1].value,
        state.shares,
    )
    return SimulationResult(trades=tuple(trades), equity_curve=tuple(equity_curve))
