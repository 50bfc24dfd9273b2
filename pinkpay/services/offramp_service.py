"""PinkPay Offramp - Offramp Service.

Payout submission flow:

    1. KYC gate (require_verified)
    2. Quote (rate + payout method + fees), destination and source chain checks
    3. Idempotency: reserve the key so a concurrent duplicate is rejected,
       then, while holding it, return the existing transaction for a used key
    4. Ledger: create (pending) -> start_processing
    5. Schedule settlement
       - settled: complete + reward event
       - failed:  fail

Steps 1-4 touch the store and run in a worker thread.
"""

import asyncio
import logging
import random
from functools import partial
from typing import Any

from pinkpay.core.exceptions import DuplicateSubmissionError, PinkPayError, ValidationError
from pinkpay.models.exchange_rate import PayoutMethod, PayoutMethodKind
from pinkpay.models.payout import BANKS, PayoutDestination, get_chain, get_mobile_channel
from pinkpay.models.transaction import Transaction
from pinkpay.services.conversion_service import ConversionService, Quote
from pinkpay.services.kyc_service import KYCService
from pinkpay.services.ledger_service import LedgerService
from pinkpay.services.reward_service import RewardService
from pinkpay.services.settlement_service import (
    SettlementHandle,
    SettlementOutcome,
    SettlementResult,
    SettlementScheduler,
)
from pinkpay.utils.idempotency import SubmissionGuard

logger = logging.getLogger(__name__)


def validate_destination(method: PayoutMethod, destination: PayoutDestination) -> PayoutDestination:
    """Check the destination carries what the payout method needs.

    M-Pesa destinations default to the 'mpesa' channel.

    Raises:
        ValidationError: If a required field is missing, or the channel or bank is unknown
    """
    if method.kind == PayoutMethodKind.MPESA:
        channel_id = destination.channel or "mpesa"
        channel = get_mobile_channel(channel_id)
        if channel is None or method.country not in channel.countries:
            raise ValidationError(
                f"Channel {channel_id} is not available for {method.name}",
                {"channel": channel_id, "payout_method": method.id},
            )
        destination = destination.model_copy(update={"channel": channel.id})
        required = channel.requires
    elif method.kind == PayoutMethodKind.BANK:
        required = ["bank_code", "account_number"]
        banks = BANKS.get(method.country, {})
        if destination.bank_code and destination.bank_code not in banks:
            raise ValidationError(
                f"Unknown bank: {destination.bank_code}",
                {"bank_code": destination.bank_code, "country": method.country},
            )
    else:
        required = ["phone_number"]

    missing = [field for field in required if not getattr(destination, field)]
    if missing:
        raise ValidationError(
            f"Payout destination is missing: {', '.join(missing)}",
            {"payout_method": method.id, "missing": missing},
        )
    return destination


def validate_source_chain(chain_id: str | None) -> str | None:
    """Normalize an optional source chain id.

    Raises:
        ValidationError: If the chain is not supported
    """
    if chain_id is None:
        return None
    chain = get_chain(chain_id.lower())
    if chain is None:
        raise ValidationError(f"Unsupported chain: {chain_id}", {"source_chain": chain_id})
    return chain.id


class OfframpService:
    """Coordinates KYC, conversion, ledger, settlement and rewards for payouts."""

    def __init__(
        self,
        conversion: ConversionService,
        kyc: KYCService,
        ledger: LedgerService,
        rewards: RewardService,
        scheduler: SettlementScheduler,
        guard: SubmissionGuard,
        rng: random.Random | None = None,
    ) -> None:
        self.conversion = conversion
        self.kyc = kyc
        self.ledger = ledger
        self.rewards = rewards
        self.scheduler = scheduler
        self.guard = guard
        self.rng = rng or random.Random()

    def quote(
        self,
        from_asset: str,
        to_currency: str,
        crypto_amount: Any,
        payout_method_id: str,
    ) -> Quote:
        return self.conversion.quote(from_asset, to_currency, crypto_amount, payout_method_id)

    async def submit_payout(
        self,
        account_id: str,
        from_asset: str,
        to_currency: str,
        crypto_amount: Any,
        payout_method_id: str,
        destination: PayoutDestination,
        idempotency_key: str | None = None,
        source_chain: str | None = None,
    ) -> Transaction:
        """Submit a payout and schedule its settlement.

        A replayed idempotency key returns the original transaction without
        scheduling it again.

        Raises:
            KYCRequiredError: If the account is not verified
            InvalidAmountError: If crypto_amount is not a positive number
            RateUnavailableError: If the pair has no current rate
            UnknownPayoutMethodError: If the payout method cannot be used
            ValidationError: If the destination or source chain is invalid
            DuplicateSubmissionError: If the same intent is already in flight
        """
        tx, replayed = await asyncio.to_thread(
            self._record_payout,
            account_id,
            from_asset,
            to_currency,
            crypto_amount,
            payout_method_id,
            destination,
            idempotency_key,
            source_chain,
        )
        if replayed:
            return tx

        self.scheduler.schedule(tx.id, partial(self._on_settled, account_id))
        logger.info(
            "Payout %s submitted: %s %s -> %s %s via %s",
            tx.id,
            tx.crypto_amount,
            tx.crypto_currency,
            tx.net_amount,
            tx.fiat_currency,
            tx.payout_method_id,
        )
        return tx

    def _record_payout(
        self,
        account_id: str,
        from_asset: str,
        to_currency: str,
        crypto_amount: Any,
        payout_method_id: str,
        destination: PayoutDestination,
        idempotency_key: str | None,
        source_chain: str | None,
    ) -> tuple[Transaction, bool]:
        """Gate, quote and write the processing transaction. Returns (tx, replayed)."""
        self.kyc.require_verified(account_id)
        quote = self.quote(from_asset, to_currency, crypto_amount, payout_method_id)
        destination = validate_destination(quote.payout_method, destination)
        source_chain = validate_source_chain(source_chain)

        if idempotency_key and not self.guard.reserve(account_id, idempotency_key):
            logger.warning("Duplicate payout submission for %s (%s)", account_id, idempotency_key)
            raise DuplicateSubmissionError(
                "An identical payout is already being submitted",
                {"idempotency_key": idempotency_key},
            )

        try:
            if idempotency_key:
                existing = self.ledger.find_by_idempotency_key(account_id, idempotency_key)
                if existing is not None:
                    logger.info("Payout %s replayed for key %s", existing.id, idempotency_key)
                    return existing, True

            tx = self.ledger.create(
                account_id,
                crypto_amount=quote.crypto_amount,
                crypto_currency=quote.from_asset,
                fiat_amount=quote.fiat_amount,
                fiat_currency=quote.to_currency,
                exchange_rate=quote.exchange_rate,
                fees=quote.fee,
                payout_method_id=quote.payout_method.id,
                idempotency_key=idempotency_key,
                destination=destination,
                source_chain=source_chain,
            )
            return self.ledger.start_processing(account_id, tx.id), False
        finally:
            # Once the transaction exists the key is answered from the ledger
            if idempotency_key:
                self.guard.release(account_id, idempotency_key)

    async def cancel_payout(self, account_id: str, transaction_id: str) -> Transaction:
        """Cancel a payout and stop its pending settlement."""
        tx = await asyncio.to_thread(self.ledger.cancel, account_id, transaction_id)
        handle = self.scheduler.get(transaction_id)
        if handle is not None and not handle.resolved:
            handle.cancel()
        return tx

    async def retry_payout(self, account_id: str, transaction_id: str) -> SettlementHandle:
        """Move a failed payout back to processing and settle it again."""
        await asyncio.to_thread(self.ledger.retry, account_id, transaction_id)
        return self.scheduler.schedule(transaction_id, partial(self._on_settled, account_id))

    def _on_settled(self, account_id: str, result: SettlementResult) -> None:
        # Runs in a worker thread; the account lock keeps cancel and complete apart
        try:
            with self.ledger.store.lock(account_id):
                if result.outcome == SettlementOutcome.SETTLED:
                    self.ledger.complete(account_id, result.transaction_id, tx_hash=result.tx_hash)
                    state = self.rewards.get_state(account_id)
                    tier = self.rewards.tier_for(state.transaction_count)
                    outcome = self.rewards.record_event(
                        account_id, self.rewards.reward(tier, self.rng)
                    )
                    logger.info(
                        "Payout %s settled, %s tokens credited",
                        result.transaction_id,
                        outcome.amount,
                    )
                else:
                    self.ledger.fail(account_id, result.transaction_id, notes=result.reason)
                    logger.warning("Payout %s failed: %s", result.transaction_id, result.reason)
        except PinkPayError as e:
            logger.error("Failed to apply settlement for %s: %s", result.transaction_id, e.message)
            raise
