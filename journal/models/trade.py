"""Trade model: one journaled position, open or closed."""

from datetime import date, datetime, time, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from journal.utils.constants import DEFAULT_DIRECTION


class Trade(SQLModel, table=True):
    __tablename__ = "trade"
    __table_args__ = (UniqueConstraint("user_id", "trade_number", name="uq_trade_user_number"),)

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    trade_number: int  # per-user sequence, assigned by the repository
    trade_date: date = Field(index=True)
    trade_time: time | None = None
    coin: str
    direction: str = DEFAULT_DIRECTION  # "long" or "short"
    entry_order_type: str | None = None

    # Prices
    avg_entry: float
    stop_loss: float | None = None
    avg_exit: float | None = None

    # Money at stake and outcome
    risk: float | None = None
    expected_loss: float | None = None
    realised_loss: float | None = None
    realised_win: float | None = None
    deviation: float | None = None
    r_multiple: float | None = None

    # Journal notes
    early_exit_reason: str | None = None
    rules: str | None = None
    system_number: str | None = None
    notes: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
