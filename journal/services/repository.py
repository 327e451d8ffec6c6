"""Trade repository: user-scoped CRUD and stats over the trade table."""

import logging
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import date
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, func

from journal.errors import NotFound, StoreError, ValidationError
from journal.models.trade import Trade
from journal.schemas.trade import TradeStats
from journal.services.derivation import apply_derivations, validate_trade_fields
from journal.services.stats import compute_trade_stats
from journal.utils.constants import GENERATED_FIELDS, MUTABLE_FIELDS

logger = logging.getLogger(__name__)


def _check_fields(data: Mapping[str, Any]) -> None:
    generated = GENERATED_FIELDS & set(data)
    if generated:
        raise ValidationError(f"Store-assigned field(s) cannot be set: {', '.join(sorted(generated))}")
    unknown = set(data) - set(MUTABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown trade field(s): {', '.join(sorted(unknown))}")


class TradeRepository:
    """Data access for trades. Every store failure is raised as StoreError."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _store_call(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            raise StoreError(f"Failed to {action}: {e}") from e

    def _ordered(self, user_id: int):
        return (
            select(Trade)
            .where(Trade.user_id == user_id)
            .order_by(Trade.trade_date.desc(), Trade.trade_number.desc())
        )

    def list(self, user_id: int) -> Sequence[Trade]:
        """All trades of a user, newest trade date first."""
        with self._store_call("list trades"):
            return list(self.session.exec(self._ordered(user_id)).all())

    def list_by_date_range(self, user_id: int, start: date, end: date) -> Sequence[Trade]:
        """Trades with start <= trade_date <= end, newest first."""
        stmt = self._ordered(user_id).where(Trade.trade_date >= start, Trade.trade_date <= end)
        with self._store_call("list trades by date range"):
            return list(self.session.exec(stmt).all())

    def get(self, trade_id: int, user_id: int | None = None) -> Trade:
        with self._store_call("load trade"):
            trade = self.session.get(Trade, trade_id)
        if trade is None or (user_id is not None and trade.user_id != user_id):
            raise NotFound(f"Trade {trade_id} not found")
        return trade

    def create(self, user_id: int, data: Mapping[str, Any]) -> Trade:
        """Validate, derive and insert a trade; returns the stored row."""
        _check_fields(data)
        values = apply_derivations(validate_trade_fields(data))

        with self._store_call("create trade"):
            last_number = self.session.exec(
                select(func.max(Trade.trade_number)).where(Trade.user_id == user_id)
            ).one()
            trade = Trade(user_id=user_id, trade_number=(last_number or 0) + 1, **values)
            self.session.add(trade)
            self.session.commit()
            self.session.refresh(trade)

        logger.info(f"Created trade {trade.id} (#{trade.trade_number}) for user {user_id}")
        return trade

    def update(self, trade_id: int, data: Mapping[str, Any], user_id: int | None = None) -> Trade:
        """Merge the supplied fields into a stored trade; other fields are kept."""
        _check_fields(data)
        trade = self.get(trade_id, user_id=user_id)

        # Validate the merged record so a partial update cannot clear required fields
        current = {name: getattr(trade, name) for name in MUTABLE_FIELDS}
        values = apply_derivations(validate_trade_fields({**current, **data}))

        with self._store_call("update trade"):
            for key, value in values.items():
                if getattr(trade, key) != value:
                    setattr(trade, key, value)
            self.session.add(trade)
            self.session.commit()
            self.session.refresh(trade)

        logger.info(f"Updated trade {trade_id} ({', '.join(sorted(data)) or 'no fields'})")
        return trade

    def delete(self, trade_id: int, user_id: int | None = None) -> None:
        trade = self.get(trade_id, user_id=user_id)
        with self._store_call("delete trade"):
            self.session.delete(trade)
            self.session.commit()
        logger.info(f"Deleted trade {trade_id}")

    def stats(self, user_id: int) -> TradeStats:
        """Aggregate stats over every trade of the user, recomputed on each call."""
        stmt = select(Trade.realised_win, Trade.realised_loss, Trade.r_multiple).where(
            Trade.user_id == user_id
        )
        with self._store_call("load trade stats"):
            rows = self.session.exec(stmt).all()
        return compute_trade_stats(rows)
