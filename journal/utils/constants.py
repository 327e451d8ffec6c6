"""Shared constants for trade records."""

LONG = "long"
SHORT = "short"
DIRECTIONS = (LONG, SHORT)
DEFAULT_DIRECTION = LONG

# Fields the store assigns; clients never supply them
GENERATED_FIELDS = frozenset({"id", "user_id", "trade_number", "created_at"})

# Fields a client may set on create or update
MUTABLE_FIELDS = (
    "trade_date",
    "trade_time",
    "coin",
    "direction",
    "entry_order_type",
    "avg_entry",
    "stop_loss",
    "avg_exit",
    "risk",
    "expected_loss",
    "realised_loss",
    "realised_win",
    "deviation",
    "r_multiple",
    "early_exit_reason",
    "rules",
    "system_number",
    "notes",
)

# Edits to these fields refresh the derived direction and r_multiple
DERIVATION_INPUTS = frozenset({"avg_entry", "stop_loss", "risk", "realised_win", "realised_loss"})
