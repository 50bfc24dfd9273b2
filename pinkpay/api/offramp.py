"""PinkPay Offramp - Rates, quotes and payout submission endpoints."""

import asyncio

from fastapi import APIRouter, status

from pinkpay.api.deps import AccountId, Conversion, Offramp, Rates
from pinkpay.models.exchange_rate import PayoutMethod
from pinkpay.models.payout import BANKS, MOBILE_CHANNELS, SUPPORTED_CHAINS, Chain, MobileChannel
from pinkpay.schemas.offramp import (
    ExchangeRateResponse,
    PayoutRequest,
    QuoteRequest,
    QuoteResponse,
    RateTableResponse,
    TransactionResponse,
)

router = APIRouter(tags=["Offramp"])


@router.get("/rates", response_model=RateTableResponse)
def get_rates(rates: Rates) -> RateTableResponse:
    """Current rate table snapshot."""
    table = rates.table
    return RateTableResponse(
        fetched_at=table.fetched_at,
        rates=[ExchangeRateResponse.model_validate(rate.model_dump()) for rate in table],
    )


@router.get("/payout-methods", response_model=list[PayoutMethod])
def list_payout_methods(currency: str, conversion: Conversion) -> list[PayoutMethod]:
    return conversion.available_payout_methods(currency)


@router.get("/chains", response_model=list[Chain])
def list_chains() -> list[Chain]:
    """Networks a payout can be funded from."""
    return SUPPORTED_CHAINS


@router.get("/payout-channels", response_model=list[MobileChannel])
def list_payout_channels(country: str | None = None) -> list[MobileChannel]:
    """Mobile payout channels (M-Pesa, Till, Paybill, Pochi), optionally for one country."""
    if country is None:
        return MOBILE_CHANNELS
    return [c for c in MOBILE_CHANNELS if country.upper() in c.countries]


@router.get("/banks", response_model=dict[str, str])
def list_banks(country: str) -> dict[str, str]:
    """Bank code -> name for one country."""
    return BANKS.get(country.upper(), {})


@router.post("/quote", response_model=QuoteResponse)
def create_quote(data: QuoteRequest, conversion: Conversion) -> QuoteResponse:
    """Preview a conversion. Nothing is recorded."""
    quote = conversion.quote(
        data.from_asset, data.to_currency, data.crypto_amount, data.payout_method_id
    )
    return QuoteResponse.model_validate(quote, from_attributes=True)


@router.post("/payouts", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def submit_payout(
    data: PayoutRequest,
    account_id: AccountId,
    offramp: Offramp,
) -> TransactionResponse:
    """Submit a payout.

    Requires verified KYC. The transaction is returned in processing state;
    settlement completes or fails it in the background.
    """
    tx = await offramp.submit_payout(
        account_id,
        data.from_asset,
        data.to_currency,
        data.crypto_amount,
        data.payout_method_id,
        data.destination,
        idempotency_key=data.idempotency_key,
        source_chain=data.source_chain,
    )
    return TransactionResponse.model_validate(tx)


@router.post("/payouts/{transaction_id}/cancel", response_model=TransactionResponse)
async def cancel_payout(
    transaction_id: str, account_id: AccountId, offramp: Offramp
) -> TransactionResponse:
    tx = await offramp.cancel_payout(account_id, transaction_id)
    return TransactionResponse.model_validate(tx)


@router.post("/payouts/{transaction_id}/retry", response_model=TransactionResponse)
async def retry_payout(
    transaction_id: str, account_id: AccountId, offramp: Offramp
) -> TransactionResponse:
    """Re-run settlement for a failed payout."""
    await offramp.retry_payout(account_id, transaction_id)
    tx = await asyncio.to_thread(offramp.ledger.get, account_id, transaction_id)
    return TransactionResponse.model_validate(tx)
