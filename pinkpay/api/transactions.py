"""PinkPay Offramp - Transaction history endpoints."""

from fastapi import APIRouter, Query

from pinkpay.api.deps import AccountId, Ledger
from pinkpay.models.transaction import TransactionStatus, TransactionType
from pinkpay.schemas.offramp import LedgerSummaryResponse, TransactionResponse
from pinkpay.services.ledger_service import TransactionFilter

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=list[TransactionResponse])
def list_transactions(
    account_id: AccountId,
    ledger: Ledger,
    status: TransactionStatus | None = None,
    type: TransactionType | None = None,
    currency: str | None = Query(None, max_length=10, description="Crypto or fiat code"),
    search: str | None = Query(None, max_length=64, description="Id, reference or tx hash"),
) -> list[TransactionResponse]:
    """List transactions matching every given filter, oldest first."""
    filters = TransactionFilter(status=status, type=type, currency=currency, search=search)
    return [TransactionResponse.model_validate(tx) for tx in ledger.query(account_id, filters)]


@router.get("/recent", response_model=list[TransactionResponse])
def recent_transactions(
    account_id: AccountId,
    ledger: Ledger,
    limit: int = Query(5, ge=1, le=100),
) -> list[TransactionResponse]:
    return [TransactionResponse.model_validate(tx) for tx in ledger.recent(account_id, limit)]


@router.get("/summary", response_model=LedgerSummaryResponse)
def transaction_summary(account_id: AccountId, ledger: Ledger) -> LedgerSummaryResponse:
    return LedgerSummaryResponse.model_validate(ledger.summary(account_id))


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(transaction_id: str, account_id: AccountId, ledger: Ledger) -> TransactionResponse:
    return TransactionResponse.model_validate(ledger.get(account_id, transaction_id))
