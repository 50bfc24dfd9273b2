"""Ledger Service - Transaction records and their lifecycle."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import ValidationError as PydanticValidationError

from pinkpay.core.exceptions import (
    InvalidAmountError,
    InvalidTransitionError,
    TransactionNotFoundError,
)
from pinkpay.db.store import EntityKind, PersistenceStore
from pinkpay.models.payout import PayoutDestination
from pinkpay.models.transaction import (
    Transaction,
    TransactionStatus,
    TransactionType,
    can_transition,
    generate_reference,
    generate_transaction_id,
)
from pinkpay.utils.helpers import field_errors

logger = logging.getLogger(__name__)


@dataclass
class TransactionFilter:
    """Conjunctive transaction query. None means 'all'."""

    status: TransactionStatus | None = None
    type: TransactionType | None = None
    currency: str | None = None  # matches crypto or fiat currency
    search: str | None = None  # id / reference / tx_hash substring

    def matches(self, tx: Transaction) -> bool:
        if self.status is not None and tx.status != self.status:
            return False
        if self.type is not None and tx.type != self.type:
            return False
        if self.currency:
            code = self.currency.upper()
            if code not in (tx.crypto_currency, tx.fiat_currency):
                return False
        if self.search:
            needle = self.search.lower()
            haystack = [tx.id, tx.reference, tx.tx_hash or ""]
            if not any(needle in value.lower() for value in haystack):
                return False
        return True


@dataclass
class LedgerSummary:
    total_transactions: int
    completed_transactions: int
    total_volume: Decimal
    total_fees: Decimal


class LedgerService:
    """Service for the per-account transaction ledger.

    Gating (KYC, duplicate submissions) is the caller's responsibility.
    """

    def __init__(self, store: PersistenceStore) -> None:
        self.store = store

    def list_transactions(self, account_id: str) -> list[Transaction]:
        """All transactions in insertion order."""
        return self.store.load(EntityKind.TRANSACTIONS, account_id, default=None) or []

    def get(self, account_id: str, transaction_id: str) -> Transaction:
        for tx in self.list_transactions(account_id):
            if tx.id == transaction_id:
                return tx
        raise TransactionNotFoundError(transaction_id)

    def find_by_idempotency_key(self, account_id: str, key: str) -> Transaction | None:
        return next(
            (tx for tx in self.list_transactions(account_id) if tx.idempotency_key == key),
            None,
        )

    def create(
        self,
        account_id: str,
        *,
        crypto_amount: Decimal,
        crypto_currency: str,
        fiat_amount: Decimal,
        fiat_currency: str,
        exchange_rate: Decimal,
        fees: Decimal,
        payout_method_id: str | None = None,
        tx_type: TransactionType = TransactionType.OFFRAMP,
        notes: str | None = None,
        idempotency_key: str | None = None,
        destination: PayoutDestination | None = None,
        source_chain: str | None = None,
        now: datetime | None = None,
    ) -> Transaction:
        """Append a pending transaction.

        net_amount is derived as fiat_amount - fees.

        Raises:
            InvalidAmountError: If an amount is negative or fees exceed fiat_amount
        """
        now = now or datetime.now(UTC)
        with self.store.lock(account_id):
            transactions = self.list_transactions(account_id)
            existing_ids = {tx.id for tx in transactions}

            try:
                tx = Transaction(
                    type=tx_type,
                    status=TransactionStatus.PENDING,
                    crypto_amount=crypto_amount,
                    crypto_currency=crypto_currency.upper(),
                    fiat_amount=fiat_amount,
                    fiat_currency=fiat_currency.upper(),
                    payout_method_id=payout_method_id,
                    exchange_rate=exchange_rate,
                    fees=fees,
                    net_amount=fiat_amount - fees,
                    created_at=now,
                    reference=generate_reference(payout_method_id, len(transactions) + 1, now),
                    notes=notes,
                    idempotency_key=idempotency_key,
                    destination=destination,
                    source_chain=source_chain,
                )
            except PydanticValidationError as e:
                raise InvalidAmountError(
                    "Transaction amounts are invalid",
                    {"errors": field_errors(e)},
                ) from e
            while tx.id in existing_ids:
                tx = tx.model_copy(update={"id": generate_transaction_id()})

            transactions.append(tx)
            self.store.save(EntityKind.TRANSACTIONS, account_id, transactions)
        logger.info("Transaction %s created for %s (%s)", tx.id, account_id, tx.reference)
        return tx

    # ==================== Transitions ====================

    def start_processing(self, account_id: str, transaction_id: str) -> Transaction:
        """pending -> processing."""
        return self._transition(
            account_id, transaction_id, TransactionStatus.PROCESSING, {TransactionStatus.PENDING}
        )

    def retry(self, account_id: str, transaction_id: str) -> Transaction:
        """failed -> processing."""
        return self._transition(
            account_id, transaction_id, TransactionStatus.PROCESSING, {TransactionStatus.FAILED}
        )

    def cancel(self, account_id: str, transaction_id: str) -> Transaction:
        """pending / processing -> cancelled."""
        return self._transition(
            account_id,
            transaction_id,
            TransactionStatus.CANCELLED,
            {TransactionStatus.PENDING, TransactionStatus.PROCESSING},
        )

    def complete(
        self,
        account_id: str,
        transaction_id: str,
        tx_hash: str | None = None,
        now: datetime | None = None,
    ) -> Transaction:
        """processing -> completed, stamping completed_at."""
        changes: dict = {"completed_at": now or datetime.now(UTC)}
        if tx_hash:
            changes["tx_hash"] = tx_hash
        return self._transition(
            account_id,
            transaction_id,
            TransactionStatus.COMPLETED,
            {TransactionStatus.PROCESSING},
            changes,
        )

    def fail(self, account_id: str, transaction_id: str, notes: str | None = None) -> Transaction:
        """processing -> failed."""
        changes = {"notes": notes} if notes else {}
        return self._transition(
            account_id,
            transaction_id,
            TransactionStatus.FAILED,
            {TransactionStatus.PROCESSING},
            changes,
        )

    def _transition(
        self,
        account_id: str,
        transaction_id: str,
        target: TransactionStatus,
        allowed_from: set[TransactionStatus],
        changes: dict | None = None,
    ) -> Transaction:
        with self.store.lock(account_id):
            transactions = self.list_transactions(account_id)
            for index, tx in enumerate(transactions):
                if tx.id == transaction_id:
                    break
            else:
                raise TransactionNotFoundError(transaction_id)

            if tx.status not in allowed_from or not can_transition(tx.status, target):
                logger.warning(
                    "Rejected transition %s: %s -> %s", transaction_id, tx.status.value, target.value
                )
                raise InvalidTransitionError("transaction", tx.status.value, target.value)

            updated = tx.model_copy(update={"status": target, **(changes or {})})
            transactions[index] = updated
            self.store.save(EntityKind.TRANSACTIONS, account_id, transactions)
        logger.info("Transaction %s: %s -> %s", transaction_id, tx.status.value, target.value)
        return updated

    # ==================== Queries ====================

    def query(self, account_id: str, filters: TransactionFilter | None = None) -> list[Transaction]:
        """Filtered transactions, insertion order."""
        filters = filters or TransactionFilter()
        return [tx for tx in self.list_transactions(account_id) if filters.matches(tx)]

    def recent(self, account_id: str, limit: int = 5) -> list[Transaction]:
        """Most recent ``limit`` transactions, newest first."""
        if limit <= 0:
            return []
        return list(reversed(self.list_transactions(account_id)[-limit:]))

    def summary(self, account_id: str) -> LedgerSummary:
        transactions = self.list_transactions(account_id)
        completed = [tx for tx in transactions if tx.status == TransactionStatus.COMPLETED]
        return LedgerSummary(
            total_transactions=len(transactions),
            completed_transactions=len(completed),
            total_volume=sum((tx.fiat_amount for tx in completed), Decimal("0")),
            total_fees=sum((tx.fees for tx in completed), Decimal("0")),
        )
