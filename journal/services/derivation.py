"""Derived trade fields and pre-persistence validation.

Direction and R-multiple are recomputed from the price and outcome fields
every time one of those fields changes on a draft, and once more by the
repository before a row is written. Both derivations are total: inputs that
are missing, non-numeric, zero or negative are treated as absent.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields as dataclass_fields
from datetime import date, time
from decimal import Decimal
from typing import Any

import pydantic

from journal.errors import ValidationError
from journal.schemas.trade import TradeCreate
from journal.utils.constants import (
    DEFAULT_DIRECTION,
    DERIVATION_INPUTS,
    DIRECTIONS,
    LONG,
    MUTABLE_FIELDS,
    SHORT,
)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _positive(value: Any) -> bool:
    return _is_number(value) and value > 0


def derive_direction(avg_entry: Any, stop_loss: Any, current: str = DEFAULT_DIRECTION) -> str:
    """Return ``long`` when the stop sits below the entry, ``short`` when at or above it.

    Without a positive entry and a positive stop the current direction is kept.
    """
    if _positive(avg_entry) and _positive(stop_loss):
        return LONG if avg_entry > stop_loss else SHORT
    return current


def derive_r_multiple(risk: Any, realised_win: Any, realised_loss: Any) -> float | None:
    """Realized outcome as a multiple of risk; a recorded win takes precedence over a loss."""
    if not _positive(risk):
        return None
    if _positive(realised_win):
        return realised_win / risk
    if _positive(realised_loss):
        return -realised_loss / risk
    return None


def apply_derivations(values: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``values`` with direction and r_multiple refreshed."""
    result = dict(values)
    result["direction"] = derive_direction(
        result.get("avg_entry"),
        result.get("stop_loss"),
        result.get("direction") or DEFAULT_DIRECTION,
    )
    result["r_multiple"] = derive_r_multiple(
        result.get("risk"),
        result.get("realised_win"),
        result.get("realised_loss"),
    )
    return result


def _format_errors(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "trade"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def validate_trade_fields(values: Mapping[str, Any]) -> dict[str, Any]:
    """Check a trade record before it is persisted.

    Decimal amounts are converted to float, ``coin`` is trimmed and
    ``trade_date`` is parsed from an ISO string when needed. The record is
    then checked strictly against TradeCreate, so numeric strings, negative
    risk or outcomes and non-time ``trade_time`` values are rejected.
    Returns the normalized mutable fields; raises ValidationError otherwise.
    """
    result = {
        name: float(value) if isinstance(value, Decimal) else value
        for name, value in values.items()
    }

    coin = result.get("coin")
    if not isinstance(coin, str) or not coin.strip():
        raise ValidationError("coin is required")
    result["coin"] = coin.strip()

    avg_entry = result.get("avg_entry")
    if not _is_number(avg_entry) or math.isinf(avg_entry) or avg_entry <= 0:
        raise ValidationError("avg_entry must be a positive number")

    trade_date = result.get("trade_date")
    if trade_date is None or trade_date == "":
        raise ValidationError("trade_date is required")
    if isinstance(trade_date, str):
        try:
            trade_date = date.fromisoformat(trade_date)
        except ValueError:
            raise ValidationError(f"trade_date is not a valid date: {trade_date!r}") from None
    if not isinstance(trade_date, date):
        raise ValidationError("trade_date must be a date")
    result["trade_date"] = trade_date

    direction = result.get("direction")
    if direction is None:
        result.pop("direction", None)
    elif direction not in DIRECTIONS:
        raise ValidationError(f"direction must be '{LONG}' or '{SHORT}'")

    try:
        record = TradeCreate.model_validate(result, strict=True)
    except pydantic.ValidationError as e:
        raise ValidationError(_format_errors(e)) from e
    return record.model_dump()


@dataclass
class TradeDraft:
    """A trade being edited before it is saved.

    Assign fields through ``set`` or ``update`` so derived fields stay in sync.
    """

    trade_date: date = field(default_factory=date.today)
    trade_time: time | None = None
    coin: str = ""
    direction: str = DEFAULT_DIRECTION
    entry_order_type: str | None = None
    avg_entry: float = 0
    stop_loss: float | None = None
    avg_exit: float | None = None
    risk: float | None = None
    expected_loss: float | None = None
    realised_loss: float | None = None
    realised_win: float | None = None
    deviation: float | None = None
    r_multiple: float | None = None
    early_exit_reason: str | None = None
    rules: str | None = None
    system_number: str | None = None
    notes: str | None = None

    def __post_init__(self):
        self.refresh()

    @classmethod
    def from_trade(cls, trade: Any) -> "TradeDraft":
        """Start an edit draft from a stored trade (or any object with trade attributes)."""
        names = [f.name for f in dataclass_fields(cls)]
        return cls(**{name: getattr(trade, name) for name in names if hasattr(trade, name)})

    def set(self, name: str, value: Any) -> None:
        self.update(**{name: value})

    def update(self, **changes: Any) -> None:
        unknown = set(changes) - set(MUTABLE_FIELDS)
        if unknown:
            raise AttributeError(f"Unknown draft field(s): {', '.join(sorted(unknown))}")
        if "direction" in changes and changes["direction"] not in DIRECTIONS:
            raise ValueError(f"direction must be '{LONG}' or '{SHORT}'")
        for name, value in changes.items():
            setattr(self, name, value)
        if DERIVATION_INPUTS & set(changes):
            self.refresh()

    def refresh(self) -> None:
        """Recompute direction and r_multiple from the current inputs."""
        self.direction = derive_direction(self.avg_entry, self.stop_loss, self.direction)
        self.r_multiple = derive_r_multiple(self.risk, self.realised_win, self.realised_loss)

    def to_payload(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in MUTABLE_FIELDS}
