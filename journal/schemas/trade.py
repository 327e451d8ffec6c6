"""Pydantic schemas for Trade API."""

from datetime import date, datetime, time
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

Direction = Literal["long", "short"]


class TradeCreate(BaseModel):
    trade_date: date
    trade_time: time | None = None
    coin: str = Field(min_length=1)
    direction: Direction = "long"
    entry_order_type: str | None = None
    avg_entry: float = Field(gt=0)
    stop_loss: float | None = None
    avg_exit: float | None = None
    risk: float | None = Field(default=None, ge=0)
    expected_loss: float | None = None
    realised_loss: float | None = Field(default=None, ge=0)
    realised_win: float | None = Field(default=None, ge=0)
    deviation: float | None = None
    r_multiple: float | None = None  # recomputed on save
    early_exit_reason: str | None = None
    rules: str | None = None
    system_number: str | None = None
    notes: str | None = None

    model_config = {"extra": "forbid"}

    @field_validator("coin")
    @classmethod
    def _trim_coin(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class TradeUpdate(BaseModel):
    trade_date: date | None = None
    trade_time: time | None = None
    coin: str | None = Field(default=None, min_length=1)
    direction: Direction | None = None
    entry_order_type: str | None = None
    avg_entry: float | None = Field(default=None, gt=0)
    stop_loss: float | None = None
    avg_exit: float | None = None
    risk: float | None = Field(default=None, ge=0)
    expected_loss: float | None = None
    realised_loss: float | None = Field(default=None, ge=0)
    realised_win: float | None = Field(default=None, ge=0)
    deviation: float | None = None
    r_multiple: float | None = None
    early_exit_reason: str | None = None
    rules: str | None = None
    system_number: str | None = None
    notes: str | None = None

    model_config = {"extra": "forbid"}

    @field_validator("coin")
    @classmethod
    def _trim_optional_coin(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @model_validator(mode="after")
    def _reject_cleared_required(self):
        # Required columns may be omitted from an update but never cleared
        for name in ("trade_date", "coin", "avg_entry", "direction"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class TradeRead(BaseModel):
    id: int
    user_id: int
    trade_number: int
    trade_date: date
    trade_time: time | None
    coin: str
    direction: Direction
    entry_order_type: str | None
    avg_entry: float
    stop_loss: float | None
    avg_exit: float | None
    risk: float | None
    expected_loss: float | None
    realised_loss: float | None
    realised_win: float | None
    deviation: float | None
    r_multiple: float | None
    early_exit_reason: str | None
    rules: str | None
    system_number: str | None
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TradeDraftFields(BaseModel):
    """Raw draft inputs sent by the form after each edit."""

    avg_entry: float | None = None
    stop_loss: float | None = None
    risk: float | None = None
    realised_win: float | None = None
    realised_loss: float | None = None
    direction: Direction = "long"


class DerivedFields(BaseModel):
    direction: Direction
    r_multiple: float | None


class TradeStats(BaseModel):
    total_trades: int = 0
    winners: int = 0
    losers: int = 0
    win_rate: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0
    net_pnl: float = 0.0
    avg_r_multiple: float = 0.0
