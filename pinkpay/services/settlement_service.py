"""PinkPay Offramp - Settlement Scheduler.

Each payout is settled by a single asyncio task:

    sleep(delay) -> rail(transaction_id) -> resolve(outcome)

The whole run is bounded by a timeout; on expiry the settlement resolves
as failed. A handle resolves at most once. Cancelling it stops the task.
The resolve callback does blocking store work, so the task runs it in a
worker thread; wait() returns only after the callback has finished.
"""

import asyncio
import logging
import secrets
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from pinkpay.core.exceptions import AlreadyResolvedError

logger = logging.getLogger(__name__)


class SettlementOutcome(str, Enum):
    SETTLED = "settled"
    FAILED = "failed"


@dataclass(frozen=True)
class SettlementResult:
    transaction_id: str
    outcome: SettlementOutcome
    tx_hash: str | None = None
    reason: str | None = None


# Payout rail: returns the settlement hash, or None when the payout was refused
PayoutRail = Callable[[str], Awaitable[str | None]]
ResolveCallback = Callable[[SettlementResult], None]


async def simulated_rail(transaction_id: str) -> str | None:
    """Stand-in rail that always settles with a random hash."""
    return f"0x{secrets.token_hex(20)}"


class SettlementHandle:
    """Single-fire handle for one scheduled settlement."""

    def __init__(self, transaction_id: str, on_resolve: ResolveCallback) -> None:
        self.transaction_id = transaction_id
        self._on_resolve = on_resolve
        self._task: asyncio.Task | None = None
        self._done = asyncio.Event()
        self.result: SettlementResult | None = None
        self.cancelled = False

    @property
    def resolved(self) -> bool:
        return self.result is not None or self.cancelled

    def resolve(
        self,
        outcome: SettlementOutcome,
        tx_hash: str | None = None,
        reason: str | None = None,
    ) -> SettlementResult:
        """Resolve and fire the callback in the calling thread.

        Raises:
            AlreadyResolvedError: If already resolved or cancelled
        """
        result = self._claim(outcome, tx_hash, reason)
        try:
            self._on_resolve(result)
        finally:
            self._done.set()
        return result

    def _claim(
        self,
        outcome: SettlementOutcome,
        tx_hash: str | None,
        reason: str | None,
    ) -> SettlementResult:
        if self.resolved:
            raise AlreadyResolvedError(
                f"Settlement for {self.transaction_id} is already resolved",
                {"transaction_id": self.transaction_id},
            )
        self.result = SettlementResult(self.transaction_id, outcome, tx_hash, reason)
        return self.result

    def cancel(self) -> None:
        """Stop the pending settlement.

        Raises:
            AlreadyResolvedError: If already resolved or cancelled
        """
        if self.resolved:
            raise AlreadyResolvedError(
                f"Settlement for {self.transaction_id} is already resolved",
                {"transaction_id": self.transaction_id},
            )
        self.cancelled = True
        if self._task is not None and self._task is not asyncio.current_task():
            self._task.cancel()
        self._done.set()
        logger.info("Settlement for %s cancelled", self.transaction_id)

    async def wait(self) -> SettlementResult | None:
        """Block until resolved or cancelled. None when cancelled."""
        await self._done.wait()
        return self.result


class SettlementScheduler:
    """Runs settlement tasks and tracks the ones still in flight."""

    def __init__(
        self,
        delay: float = 2.0,
        timeout: float = 30.0,
        rail: PayoutRail | None = None,
    ) -> None:
        self.delay = delay
        self.timeout = timeout
        self.rail = rail or simulated_rail
        self._handles: dict[str, SettlementHandle] = {}

    def schedule(
        self,
        transaction_id: str,
        on_resolve: ResolveCallback,
        delay: float | None = None,
    ) -> SettlementHandle:
        """Start a settlement. Must be called with a running event loop.

        Raises:
            AlreadyResolvedError: If the transaction already has a settlement in flight
        """
        if transaction_id in self._handles:
            raise AlreadyResolvedError(
                f"Settlement for {transaction_id} is already scheduled",
                {"transaction_id": transaction_id},
            )
        handle = SettlementHandle(transaction_id, on_resolve)
        task = asyncio.get_running_loop().create_task(
            self._run(handle, self.delay if delay is None else delay)
        )
        task.add_done_callback(lambda _: self._forget(handle))
        handle._task = task
        self._handles[transaction_id] = handle
        logger.debug("Settlement for %s scheduled", transaction_id)
        return handle

    def get(self, transaction_id: str) -> SettlementHandle | None:
        return self._handles.get(transaction_id)

    def pending(self) -> list[SettlementHandle]:
        return list(self._handles.values())

    async def shutdown(self) -> None:
        """Cancel every settlement still in flight."""
        for handle in self.pending():
            if not handle.resolved:
                handle.cancel()
        tasks = [h._task for h in self._handles.values() if h._task is not None]
        await asyncio.gather(*tasks, return_exceptions=True)
        self._handles.clear()

    def _forget(self, handle: SettlementHandle) -> None:
        if self._handles.get(handle.transaction_id) is handle:
            del self._handles[handle.transaction_id]

    async def _run(self, handle: SettlementHandle, delay: float) -> None:
        tx_hash = None
        reason = None
        try:
            async with asyncio.timeout(self.timeout):
                await asyncio.sleep(delay)
                tx_hash = await self.rail(handle.transaction_id)
            if tx_hash is None:
                reason = "Payout rail refused the settlement"
        except TimeoutError:
            logger.warning(
                "Settlement for %s timed out after %.1fs", handle.transaction_id, self.timeout
            )
            reason = "Settlement timed out"
        except Exception as e:
            logger.error("Settlement for %s failed: %s", handle.transaction_id, e)
            reason = f"Settlement error: {e}"

        self._forget(handle)
        if handle.resolved:
            return

        outcome = SettlementOutcome.SETTLED if reason is None else SettlementOutcome.FAILED
        result = handle._claim(outcome, tx_hash, reason)
        try:
            await asyncio.to_thread(handle._on_resolve, result)
        except Exception:
            logger.exception("Settlement callback for %s raised", handle.transaction_id)
        finally:
            handle._done.set()
