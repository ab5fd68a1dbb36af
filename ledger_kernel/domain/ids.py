"""Human-readable ledger ids: a fixed prefix and a zero-padded sequence."""

TRANSACTION_ID_PREFIX = "FTX"
OFFERING_ID_PREFIX = "OFF"


def format_id(prefix: str, seq: int) -> str:
    """Render a sequence number as a ledger id (``FTX001``)."""
    return f"{prefix}{seq:03d}"


def parse_id_seq(prefix: str, value: str) -> int:
    """Sequence number of a ledger id, or 0 when it is not one of ours."""
    if not value.startswith(prefix):
        return 0
    digits = value[len(prefix):]
    return int(digits) if digits.isdigit() else 0
