"""Tests for payout submission and settlement."""

import asyncio
import random
from decimal import Decimal

import pytest

from pinkpay.core.exceptions import (
    DuplicateSubmissionError,
    InvalidAmountError,
    KYCRequiredError,
    RateUnavailableError,
    ValidationError,
)
from pinkpay.models.payout import PayoutDestination
from pinkpay.models.transaction import TransactionStatus
from pinkpay.services.offramp_service import OfframpService
from pinkpay.services.settlement_service import SettlementScheduler
from pinkpay.utils.idempotency import MemorySubmissionGuard

MPESA = PayoutDestination(phone_number="+254700000001")


async def _refuse(transaction_id):
    return None


def _service(conversion, kyc, ledger, rewards, rail=None, delay=0.0):
    return OfframpService(
        conversion,
        kyc,
        ledger,
        rewards,
        SettlementScheduler(delay=delay, timeout=1, rail=rail),
        MemorySubmissionGuard(),
        rng=random.Random(1),
    )


@pytest.fixture
def offramp(conversion, kyc, ledger, rewards) -> OfframpService:
    return _service(conversion, kyc, ledger, rewards)


async def _settle(offramp, tx_id):
    handle = offramp.scheduler.get(tx_id)
    if handle is not None:
        await handle.wait()


@pytest.mark.asyncio
async def test_payout_completes_and_rewards(offramp, ledger, rewards, verified_account):
    tx = await offramp.submit_payout(verified_account, "USDC", "KSH", "100", "mpesa_ke", MPESA)

    assert tx.status == TransactionStatus.PROCESSING
    assert tx.net_amount == Decimal("12626.25")

    await _settle(offramp, tx.id)

    done = ledger.get(verified_account, tx.id)
    state = rewards.get_state(verified_account)
    expected_reward = random.Random(1).randint(10, 59) * Decimal("1")
    assert done.status == TransactionStatus.COMPLETED
    assert done.completed_at is not None
    assert done.tx_hash is not None
    assert state.transaction_count == 1
    assert state.token_balance == expected_reward


@pytest.mark.asyncio
async def test_refused_settlement_fails_transaction(conversion, kyc, ledger, rewards, verified_account):
    offramp = _service(conversion, kyc, ledger, rewards, rail=_refuse)

    tx = await offramp.submit_payout(verified_account, "USDT", "TZS", "10", "mpesa_tz", MPESA)
    await _settle(offramp, tx.id)

    failed = ledger.get(verified_account, tx.id)
    assert failed.status == TransactionStatus.FAILED
    assert failed.notes == "Payout rail refused the settlement"
    assert rewards.get_state(verified_account).transaction_count == 0


@pytest.mark.asyncio
async def test_failed_payout_can_be_retried(conversion, kyc, ledger, rewards, verified_account):
    offramp = _service(conversion, kyc, ledger, rewards, rail=_refuse)
    tx = await offramp.submit_payout(verified_account, "USDC", "KSH", "5", "mpesa_ke", MPESA)
    await _settle(offramp, tx.id)

    offramp.scheduler.rail = SettlementScheduler().rail
    handle = await offramp.retry_payout(verified_account, tx.id)
    await handle.wait()

    assert ledger.get(verified_account, tx.id).status == TransactionStatus.COMPLETED


@pytest.mark.asyncio
async def test_cancel_stops_settlement(conversion, kyc, ledger, rewards, verified_account):
    offramp = _service(conversion, kyc, ledger, rewards, delay=0.5)
    tx = await offramp.submit_payout(verified_account, "USDC", "KSH", "5", "mpesa_ke", MPESA)

    cancelled = await offramp.cancel_payout(verified_account, tx.id)
    await asyncio.sleep(0.01)

    assert cancelled.status == TransactionStatus.CANCELLED
    assert ledger.get(verified_account, tx.id).status == TransactionStatus.CANCELLED
    assert rewards.get_state(verified_account).transaction_count == 0


@pytest.mark.asyncio
async def test_requires_verified_kyc(offramp, ledger, account_id):
    with pytest.raises(KYCRequiredError):
        await offramp.submit_payout(account_id, "USDC", "KSH", "100", "mpesa_ke", MPESA)

    assert ledger.list_transactions(account_id) == []


@pytest.mark.asyncio
async def test_validation_happens_before_recording(offramp, ledger, verified_account):
    with pytest.raises(InvalidAmountError):
        await offramp.submit_payout(verified_account, "USDC", "KSH", "-1", "mpesa_ke", MPESA)
    with pytest.raises(RateUnavailableError):
        await offramp.submit_payout(verified_account, "DOGE", "KSH", "1", "mpesa_ke", MPESA)

    assert ledger.list_transactions(verified_account) == []


@pytest.mark.asyncio
async def test_same_key_returns_same_transaction(offramp, ledger, verified_account):
    first = await offramp.submit_payout(
        verified_account, "USDC", "KSH", "100", "mpesa_ke", MPESA, idempotency_key="intent-1"
    )
    second = await offramp.submit_payout(
        verified_account, "USDC", "KSH", "100", "mpesa_ke", MPESA, idempotency_key="intent-1"
    )

    assert second.id == first.id
    assert len(ledger.list_transactions(verified_account)) == 1
    await _settle(offramp, first.id)


@pytest.mark.asyncio
async def test_in_flight_key_is_rejected(offramp, ledger, verified_account):
    offramp.guard.reserve(verified_account, "intent-2")

    with pytest.raises(DuplicateSubmissionError):
        await offramp.submit_payout(
            verified_account, "USDC", "KSH", "100", "mpesa_ke", MPESA, idempotency_key="intent-2"
        )

    assert ledger.list_transactions(verified_account) == []


@pytest.mark.asyncio
async def test_tier_multiplier_applies_to_reward(offramp, rewards, store, verified_account):
    from pinkpay.db.store import EntityKind
    from pinkpay.models.reward import UserRewardState

    store.save(
        EntityKind.REWARDS,
        verified_account,
        UserRewardState(account_id=verified_account, transaction_count=50),
    )

    tx = await offramp.submit_payout(verified_account, "USDC", "KSH", "1", "mpesa_ke", MPESA)
    await _settle(offramp, tx.id)

    expected = random.Random(1).randint(10, 59) * Decimal("2")
    assert rewards.get_state(verified_account).token_balance == expected


class CompetingGuard(MemorySubmissionGuard):
    """Lets another worker finish a submission for the same key just before our reservation."""

    def __init__(self, ledger):
        super().__init__()
        self.ledger = ledger
        self.raced = False

    def reserve(self, account_id, key):
        if not self.raced:
            self.raced = True
            assert super().reserve(account_id, key)
            self.ledger.create(
                account_id,
                crypto_amount=Decimal("100"),
                crypto_currency="USDC",
                fiat_amount=Decimal("12950.00"),
                fiat_currency="KSH",
                exchange_rate=Decimal("129.50"),
                fees=Decimal("323.75"),
                payout_method_id="mpesa_ke",
                idempotency_key=key,
            )
            self.release(account_id, key)
        return super().reserve(account_id, key)


@pytest.mark.asyncio
async def test_key_used_by_competing_worker_is_replayed(conversion, kyc, ledger, rewards, verified_account):
    offramp = OfframpService(
        conversion,
        kyc,
        ledger,
        rewards,
        SettlementScheduler(delay=0, timeout=1),
        CompetingGuard(ledger),
        rng=random.Random(1),
    )

    tx = await offramp.submit_payout(
        verified_account, "USDC", "KSH", "100", "mpesa_ke", MPESA, idempotency_key="k1"
    )

    transactions = ledger.list_transactions(verified_account)
    assert len(transactions) == 1
    assert tx.id == transactions[0].id
    assert offramp.scheduler.pending() == []


@pytest.mark.asyncio
async def test_concurrent_submissions_record_once(offramp, ledger, verified_account):
    results = await asyncio.gather(
        *[
            offramp.submit_payout(
                verified_account, "USDC", "KSH", "100", "mpesa_ke", MPESA, idempotency_key="intent-3"
            )
            for _ in range(5)
        ],
        return_exceptions=True,
    )

    transactions = ledger.list_transactions(verified_account)
    assert len(transactions) == 1
    for result in results:
        if isinstance(result, Exception):
            assert isinstance(result, DuplicateSubmissionError)
        else:
            assert result.id == transactions[0].id
    await _settle(offramp, transactions[0].id)


class TestDestination:
    @pytest.mark.asyncio
    async def test_mpesa_requires_phone(self, offramp, ledger, verified_account):
        with pytest.raises(ValidationError) as exc:
            await offramp.submit_payout(
                verified_account, "USDC", "KSH", "100", "mpesa_ke", PayoutDestination()
            )

        assert exc.value.details["missing"] == ["phone_number"]
        assert ledger.list_transactions(verified_account) == []

    @pytest.mark.asyncio
    async def test_paybill_requires_recipient_and_account(self, offramp, verified_account):
        destination = PayoutDestination(channel="paybill", recipient="888880")

        with pytest.raises(ValidationError) as exc:
            await offramp.submit_payout(verified_account, "USDC", "KSH", "100", "mpesa_ke", destination)

        assert exc.value.details["missing"] == ["account_number"]

    @pytest.mark.asyncio
    async def test_till_is_kenya_only(self, offramp, verified_account):
        destination = PayoutDestination(channel="till", recipient="123456")

        with pytest.raises(ValidationError):
            await offramp.submit_payout(verified_account, "USDT", "TZS", "10", "mpesa_tz", destination)

    @pytest.mark.asyncio
    async def test_till_payout_keeps_channel(self, offramp, verified_account):
        destination = PayoutDestination(channel="till", recipient="123456")

        tx = await offramp.submit_payout(verified_account, "USDC", "KSH", "10", "mpesa_ke", destination)

        assert tx.destination.channel == "till"
        assert tx.destination.recipient == "123456"
        await _settle(offramp, tx.id)

    @pytest.mark.asyncio
    async def test_default_channel_is_mpesa(self, offramp, verified_account):
        tx = await offramp.submit_payout(verified_account, "USDC", "KSH", "10", "mpesa_ke", MPESA)

        assert tx.destination.channel == "mpesa"
        assert tx.destination.phone_number == "+254700000001"
        await _settle(offramp, tx.id)

    @pytest.mark.asyncio
    async def test_bank_requires_known_bank_and_account(self, offramp, verified_account):
        with pytest.raises(ValidationError):
            await offramp.submit_payout(
                verified_account,
                "USDC",
                "NGN",
                "10",
                "bank_ng",
                PayoutDestination(bank_code="nobank", account_number="0123456789"),
            )
        with pytest.raises(ValidationError) as exc:
            await offramp.submit_payout(
                verified_account, "USDC", "NGN", "10", "bank_ng", PayoutDestination(bank_code="gtb")
            )
        assert exc.value.details["missing"] == ["account_number"]

        tx = await offramp.submit_payout(
            verified_account,
            "USDC",
            "NGN",
            "10",
            "bank_ng",
            PayoutDestination(bank_code="gtb", account_number="0123456789"),
        )
        assert tx.destination.bank_code == "gtb"
        await _settle(offramp, tx.id)


class TestSourceChain:
    @pytest.mark.asyncio
    async def test_chain_is_normalized_and_recorded(self, offramp, verified_account):
        tx = await offramp.submit_payout(
            verified_account, "USDC", "KSH", "10", "mpesa_ke", MPESA, source_chain="Base"
        )

        assert tx.source_chain == "base"
        await _settle(offramp, tx.id)

    @pytest.mark.asyncio
    async def test_unsupported_chain_is_rejected(self, offramp, ledger, verified_account):
        with pytest.raises(ValidationError):
            await offramp.submit_payout(
                verified_account, "USDC", "KSH", "10", "mpesa_ke", MPESA, source_chain="solana"
            )

        assert ledger.list_transactions(verified_account) == []
