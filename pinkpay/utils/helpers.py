"""Amount and datetime helpers."""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pinkpay.core.exceptions import InvalidAmountError

FIAT_QUANT = Decimal("0.01")


def to_decimal(value: Any, field: str = "amount") -> Decimal:
    """Parse a monetary input into a finite Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        InvalidAmountError: If the value is not numeric
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(f"{field} must be numeric", {field: repr(value)})
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise InvalidAmountError(f"{field} must be numeric", {field: repr(value)}) from e
    if not result.is_finite():
        raise InvalidAmountError(f"{field} must be finite", {field: repr(value)})
    return result


def require_positive(value: Any, field: str = "amount") -> Decimal:
    """Parse and require a strictly positive amount."""
    amount = to_decimal(value, field)
    if amount <= 0:
        raise InvalidAmountError(f"{field} must be greater than 0", {field: str(amount)})
    return amount


def round_fiat(amount: Decimal) -> Decimal:
    """Round to 2 decimal places for fiat display, e.g. 12626.245 -> 12626.25."""
    return amount.quantize(FIAT_QUANT, rounding=ROUND_HALF_UP)


def first_of_month(now: datetime) -> datetime:
    """Midnight on the first day of ``now``'s month, same tzinfo."""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def field_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten pydantic errors, e.g. ['first_name: Input should be a valid string']."""
    return [
        f"{'.'.join(str(part) for part in err['loc']) or 'value'}: {err['msg']}"
        for err in exc.errors()
    ]
