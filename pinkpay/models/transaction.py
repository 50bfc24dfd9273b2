"""PinkPay Offramp - Transaction model."""

import secrets
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from pinkpay.models.payout import PayoutDestination


class TransactionType(str, Enum):
    """Transaction type."""

    OFFRAMP = "offramp"  # crypto -> fiat payout
    ONRAMP = "onramp"  # fiat -> crypto


class TransactionStatus(str, Enum):
    """Transaction status.

    State transitions:
    - pending -> processing -> completed / failed / cancelled
    - pending -> cancelled
    - failed -> processing (retry)
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


VALID_TRANSITIONS: dict[TransactionStatus, set[TransactionStatus]] = {
    TransactionStatus.PENDING: {TransactionStatus.PROCESSING, TransactionStatus.CANCELLED},
    TransactionStatus.PROCESSING: {
        TransactionStatus.COMPLETED,
        TransactionStatus.FAILED,
        TransactionStatus.CANCELLED,
    },
    TransactionStatus.FAILED: {TransactionStatus.PROCESSING},
    # Terminal states
    TransactionStatus.COMPLETED: set(),
    TransactionStatus.CANCELLED: set(),
}


def can_transition(current: TransactionStatus, target: TransactionStatus) -> bool:
    """Check whether a status change is allowed."""
    return target in VALID_TRANSITIONS.get(current, set())


def generate_transaction_id() -> str:
    """Generate a unique transaction id, e.g. tx_3f9a1c0b7e2d."""
    return f"tx_{secrets.token_hex(6)}"


def generate_reference(payout_method_id: str | None, sequence: int, now: datetime) -> str:
    """Generate a human-readable reference code.

    Format: PREFIX + yymmddHHMM + 5-digit sequence
    - M-Pesa payouts: MP2401151030 00001 -> MP240115103000001
    - Other payouts use the country suffix of the method id: bank_ng -> NG...
    - No payout method: TX...
    """
    if not payout_method_id:
        prefix = "TX"
    elif payout_method_id.startswith("mpesa"):
        prefix = "MP"
    else:
        prefix = payout_method_id.rsplit("_", 1)[-1][:2].upper()
    return f"{prefix}{now.strftime('%y%m%d%H%M')}{sequence:05d}"


class Transaction(BaseModel):
    """Ledger transaction record.

    Attributes:
        id: Unique id (tx_ prefix)
        type: offramp or onramp
        status: Lifecycle status
        crypto_amount: Amount of crypto sold (full precision)
        crypto_currency: Crypto symbol
        fiat_amount: Gross fiat amount (2 dp)
        fiat_currency: Fiat code
        payout_method_id: Payout channel
        exchange_rate: Rate used for the conversion
        fees: Fee in fiat (2 dp)
        net_amount: fiat_amount - fees
        created_at: Creation time
        completed_at: Completion time
        tx_hash: On-chain hash (if any)
        reference: Human-readable reference code
        notes: Free-form notes (failure reasons, etc.)
        idempotency_key: Client intent key used to deduplicate submissions
        destination: Where the fiat is paid out
        source_chain: Network the crypto was sent from
    """

    id: str = Field(default_factory=generate_transaction_id)
    type: TransactionType = TransactionType.OFFRAMP
    status: TransactionStatus = TransactionStatus.PENDING
    crypto_amount: Decimal = Field(gt=0)
    crypto_currency: str
    fiat_amount: Decimal = Field(ge=0)
    fiat_currency: str
    payout_method_id: str | None = None
    exchange_rate: Decimal = Field(ge=0)
    fees: Decimal = Field(default=Decimal("0"), ge=0)
    net_amount: Decimal = Field(ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    tx_hash: str | None = None
    reference: str = ""
    notes: str | None = None
    idempotency_key: str | None = None
    destination: PayoutDestination | None = None
    source_chain: str | None = None

    @model_validator(mode="after")
    def _check_net_amount(self) -> "Transaction":
        if self.net_amount != self.fiat_amount - self.fees:
            raise ValueError("net_amount must equal fiat_amount - fees")
        return self
