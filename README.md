# clob

Core pieces of a central limit order book, in plain Python with no
third-party dependencies: exact fixed-point numbers, order vocabulary,
a market state machine, fee calculators, a stop-order book and the event
records an engine emits.

## Modules

- `clob.fixedpoint`: `Decimal(value, precision)`, an integer mantissa scaled by
  `10 ** -precision` (precision 0 to 18). `+`, `-`, comparisons, `mul`, `div`,
  `mul_int`, `is_valid_tick` and `is_valid_lot` are exact; `mul` and `div`
  truncate toward zero. Combining two decimals of different precision raises
  `PrecisionMismatchError`; bad input raises `DecimalError`; dividing by zero
  raises `ZeroDivisionError`. Also `zero`, `parse_decimal`, `min_decimal`,
  `max_decimal`, `Decimal.to_json`, `Decimal.from_json` and
  `Decimal.from_string` (precision taken from the number of fractional digits).
- `clob.domain`: the enums `Side`, `OrderType`, `TIF`, `OrderStatus`,
  `CancelReason`, `RejectionReason` and the bit flags `OrderFlags`; the `Fill`
  record; `new_ulid` and the ID makers `new_order_id`, `new_trade_id` and
  `new_fill_id`, which prefix a ULID with `ord_`, `trd_` and `fil_`.
- `clob.pool`: `Pool(capacity, factory)`, a fixed number of slots. `acquire()`
  returns a new object from `factory` and its slot index, and raises
  `PoolExhaustedError` when every slot is taken; `release(index)` frees a slot
  and raises `ValueError` for a slot that is not in use.
- `clob.sequence`: `Counter(start)`, a 64-bit counter whose first `next()`
  returns `start`; `peek()` and `reset(n)` as well.
- `clob.statemachine`: `MarketState` (PreOpen, Auction, Open, Halted, Closed),
  `can_transition` and `Machine`, whose `transition` raises
  `InvalidTransitionError` on a move that is not allowed. `can_accept_limit_order`,
  `can_accept_market_order`, `can_accept_stop_order`, `can_match` and
  `can_cancel` say what the current state permits.
- `clob.hooks`: `OrderContext`, `ValidationResult` (`accept()` and
  `reject(reason, message)`), and the protocols `PreOrderHook` and
  `PostFillHook`.
- `clob.fees`: `FlatRateFeeCalculator`, `TieredFeeCalculator(volume, market_id)`
  and `ZeroFeeCalculator`, returning a `FeeResult`; `find_tier` picks the last
  tier whose `min_volume` a volume reaches. A negative maker rate is a rebate.
- `clob.events`: frozen event records such as `OrderAccepted`, `OrderRested`,
  `TradeFill`, `TradeExecuted`, `OrderCanceled`, `OrderRejected`,
  `StopTriggered`, `DepthUpdate` and `BookSnapshot`, with `EventType`,
  `DepthUpdateType` and `Role`.
- `clob.stopbook`: `StopBook`, holding `StopNode`s in per-price `StopLevel`
  queues until `check_triggers` fires them as `TriggeredOrder`s.

## Installation

```
pip install .
```

## Examples

Decimal arithmetic:

```python
from clob.fixedpoint import parse_decimal

a = parse_decimal("0.1", 1)
b = parse_decimal("0.2", 1)
assert a + b == parse_decimal("0.3", 1)
print(parse_decimal("101.25", 2).to_json())   # "101.25"
```

Moving a market through its lifecycle:

```python
from clob.statemachine import Machine, MarketState

machine = Machine(None)
machine.transition(MarketState.OPEN)
assert machine.can_match()
```

Fees. A fee schedule is any object with `maker_fee_rate` and `taker_fee_rate`
(decimals at precision 4, so 30 means 0.0030), `fee_currency`, and for tiered
fees `tiers`:

```python
from types import SimpleNamespace

from clob.domain import Fill
from clob.fees import FlatRateFeeCalculator
from clob.fixedpoint import Decimal, parse_decimal

schedule = SimpleNamespace(
    maker_fee_rate=Decimal(-10, 4),
    taker_fee_rate=Decimal(30, 4),
    fee_currency="USD",
)
fill = Fill(price=parse_decimal("100.00", 2), qty=parse_decimal("10", 0))
result = FlatRateFeeCalculator().calculate(schedule, fill)
print(result.maker_fee, result.taker_fee)      # -1.00 3.00
```

Stop orders. Sell stops fire when the last trade price is at or below their
trigger, buy stops when it is at or above:

```python
from clob.domain import OrderType, Side, new_order_id
from clob.fixedpoint import parse_decimal
from clob.pool import Pool
from clob.stopbook import StopBook, StopLevel, StopNode

book = StopBook(Pool(100, StopNode), Pool(20, StopLevel), max_cascade_depth=10)
node, index = book.acquire_node()
node.pool_index = index
node.order_id = new_order_id()
node.side = Side.ASK
node.trigger_price = parse_decimal("100.00", 2)
node.qty = parse_decimal("10", 0)
node.convert_to = OrderType.MARKET
book.add_stop(node)

fired = book.check_triggers(parse_decimal("99.50", 2))
assert [order.order_id for order in fired] == [node.order_id]
assert len(book) == 0
```

`check_triggers(price, depth)` raises `CascadeLimitError` once `depth` reaches
the cascade limit. `cancel_stop` returns the removed node, or `None`, and
leaves its pool slot for the caller to release.

Events:

```python
from clob.domain import RejectionReason
from clob.events import OrderRejected

event = OrderRejected(
    seq_num=1, timestamp=1_000_000, market_id="AAPL",
    order_id="ord_test", user_id="user1",
    reason=RejectionReason.INVALID_TICK, message="price not on tick",
)
text = event.to_json()
assert OrderRejected.from_json(text) == event
```

JSON keys are camel case (`seqNum`, `marketID`, `orderID`), decimals are
quoted strings and enums are written as their values. When read back, a
decimal takes its precision from its digits. `to_json` does not write a
discriminator: call `from_json` on the concrete class, or on `Event` with a
`"type"` key such as `"order_rejected"` added to the object. `event.type()`
returns the event's `EventType`.

## What this package does not do

There is no matching engine, no order book of resting limit orders, no
command to run and no storage. There is no market configuration or fee
schedule class: `Machine` keeps whatever config object it is given, and the
fee calculators read their schedule by attribute. Hooks are protocols only;
nothing in the package calls them.

## Running the tests

```
pip install .[test]
pytest
```