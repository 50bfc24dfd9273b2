"""PinkPay Offramp - Conversion, payout and transaction schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from pinkpay.models.exchange_rate import PayoutMethod
from pinkpay.models.payout import PayoutDestination
from pinkpay.models.transaction import TransactionStatus, TransactionType

# ============ Rates ============


class ExchangeRateResponse(BaseModel):
    from_asset: str
    to_currency: str
    rate: Decimal
    observed_at: datetime


class RateTableResponse(BaseModel):
    fetched_at: datetime
    rates: list[ExchangeRateResponse]


# ============ Quote ============


class QuoteRequest(BaseModel):
    """Conversion preview request.

    crypto_amount is range-checked by the engine, so a non-positive value is
    reported as invalid_amount rather than a schema error.
    """

    from_asset: str = Field(..., min_length=2, max_length=10, description="Crypto asset, e.g. USDC")
    to_currency: str = Field(..., min_length=3, max_length=3, description="Fiat currency, e.g. KSH")
    crypto_amount: Decimal = Field(..., description="Amount of crypto to convert")
    payout_method_id: str = Field(..., description="Payout method id, e.g. mpesa_ke")


class QuoteResponse(BaseModel):
    from_asset: str
    to_currency: str
    crypto_amount: Decimal
    exchange_rate: Decimal
    rate_observed_at: datetime
    payout_method: PayoutMethod
    fiat_amount: Decimal
    fee: Decimal
    net_amount: Decimal


# ============ Payout ============


class PayoutRequest(QuoteRequest):
    destination: PayoutDestination = Field(..., description="Where the fiat is paid out")
    source_chain: str | None = Field(
        default=None, max_length=20, description="Network the crypto is sent from, e.g. base"
    )
    idempotency_key: str | None = Field(
        default=None,
        max_length=64,
        description="Client-generated key; resubmitting the same key returns the same transaction",
    )


# ============ Transactions ============


class TransactionResponse(BaseModel):
    id: str
    type: TransactionType
    status: TransactionStatus
    crypto_amount: Decimal
    crypto_currency: str
    fiat_amount: Decimal
    fiat_currency: str
    payout_method_id: str | None
    exchange_rate: Decimal
    fees: Decimal
    net_amount: Decimal
    created_at: datetime
    completed_at: datetime | None
    tx_hash: str | None
    reference: str
    notes: str | None
    destination: PayoutDestination | None = None
    source_chain: str | None = None

    model_config = {"from_attributes": True}


class LedgerSummaryResponse(BaseModel):
    total_transactions: int
    completed_transactions: int
    total_volume: Decimal
    total_fees: Decimal

    model_config = {"from_attributes": True}
