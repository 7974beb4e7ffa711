"""Guest Lifecycle Reaper — deletes expired guest accounts and frees their card bindings.

Invariants:
    - Cycle: IDLE -> SCANNING -> REAPING -> IDLE; one cycle runs immediately on start(),
      then one per interval, until the handle is stopped
    - Scan selects account_type='guest' AND account_expires_at IS NOT NULL
      AND account_expires_at < cycle_start
    - Per account, independently: release every card registered to it (and its
      usc_id, if set), THEN delete the account row.
      Release is attempted even if the delete later fails; either failure is logged
      and the batch continues
    - run_cycle() never raises; a scan failure yields an empty report and the next
      cycle retries
    - stop() never cancels an in-flight cycle: it suppresses the next one and waits

Design Decisions:
    - No lock over the store: both steps are idempotent, so a crash between them is
      repaired by the next cycle re-scanning (at-least-once reaping)
    - Release and delete run in separate transactions: a freed binding for a row that
      survives is low-risk, an orphaned binding denies the card to its holder
    - Explicit ReaperHandle instead of a process-global timer: tests start, stop and
      observe exactly one cycle; the lifespan stops it at shutdown
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from sqlalchemy import delete, select

from gatekeeper.core.domain_types import AccountType, ReaperState, ResourceId, UserId
from gatekeeper.core.guest_expiry import (
    ReapOutcome, ReapReport, mask_resource_id, utc_now,
)
from gatekeeper.core.repository_protocols import ResourceBinder
from gatekeeper.infrastructure.database import DatabaseSessionManager
from gatekeeper.models.account import Account
from gatekeeper.models.card_registration import CardRegistration

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 6 * 60 * 60


@dataclass(frozen=True)
class ExpiredGuest:
    user_id: UserId
    resource_ids: tuple[ResourceId, ...]
    expires_at: datetime


class ReaperHandle:
    """Owned, stoppable handle on a running reaper loop."""

    def __init__(self, task: asyncio.Task, stop_event: asyncio.Event):
        self._task = task
        self._stop_event = stop_event

    @property
    def running(self) -> bool:
        return not self._task.done()

    async def stop(self) -> None:
        """Suppress further cycles and wait for the current one to finish."""
        self._stop_event.set()
        await self._task


class GuestLifecycleReaper:
    """Enforces guest expiry and cascades the release of card bindings."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        binder: ResourceBinder,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._db = db
        self._binder = binder
        self.interval_seconds = interval_seconds
        self._clock = clock
        self.state = ReaperState.IDLE
        self.cycles_completed = 0

    # ─── Scheduling ──────────────────────────────────────────────

    def start(self) -> ReaperHandle:
        """Run one cycle now, then one every interval_seconds."""
        stop_event = asyncio.Event()
        task = asyncio.create_task(
            self._run_forever(stop_event), name="guest-reaper",
        )
        logger.info(
            f"Guest reaper started (every {self.interval_seconds:g}s)",
        )
        return ReaperHandle(task, stop_event)

    async def _run_forever(self, stop_event: asyncio.Event) -> None:
        while True:
            await self.run_cycle()
            try:
                await asyncio.wait_for(
                    stop_event.wait(), timeout=self.interval_seconds,
                )
            except asyncio.TimeoutError:
                continue
            logger.info("Guest reaper stopped")
            return

    # ─── Cycle ───────────────────────────────────────────────────

    async def run_cycle(self) -> ReapReport:
        report = ReapReport(cycle_start=self._clock())
        try:
            self.state = ReaperState.SCANNING
            try:
                expired = await self._scan(report.cycle_start)
            except Exception as e:
                logger.error(f"Guest reaper scan failed: {e}", exc_info=True)
                return report

            report.expired_found = len(expired)
            logger.info(
                f"Found {len(expired)} expired guest accounts",
                extra={"expired_count": len(expired)},
            )

            self.state = ReaperState.REAPING
            for guest in expired:
                await self._reap(guest, report)

            logger.info(
                f"Guest reaper cycle complete: {len(report.deleted)} deleted, "
                f"{len(report.freed)} freed, {len(report.failures)} failed",
            )
            return report
        finally:
            self.state = ReaperState.IDLE
            self.cycles_completed += 1

    async def _scan(self, cycle_start: datetime) -> list[ExpiredGuest]:
        async with self._db.session() as session:
            result = await session.execute(
                select(
                    Account.user_id, Account.usc_id, Account.account_expires_at,
                )
                .where(
                    Account.account_type == AccountType.GUEST.value,
                    Account.account_expires_at.is_not(None),
                    Account.account_expires_at < cycle_start,
                )
                .order_by(Account.account_expires_at),
            )
            rows = result.all()
            if not rows:
                return []

            # Registrations are the source of truth; usc_id can lag behind them
            cards: dict[str, list[ResourceId]] = {}
            registrations = await session.execute(
                select(CardRegistration.user_id, CardRegistration.usc_id)
                .where(CardRegistration.user_id.in_([uid for uid, _, _ in rows])),
            )
            for uid, rid in registrations.all():
                cards.setdefault(uid, []).append(ResourceId(rid))

        expired = []
        for uid, usc_id, exp in rows:
            held = cards.get(uid, [])
            if usc_id and usc_id not in held:
                held.append(ResourceId(usc_id))
            expired.append(ExpiredGuest(UserId(uid), tuple(held), exp))
        return expired

    async def _reap(self, guest: ExpiredGuest, report: ReapReport) -> None:
        for resource_id in guest.resource_ids:
            masked = mask_resource_id(resource_id)
            try:
                await self._binder.release(resource_id)
                report.freed.append(resource_id)
                logger.info(
                    f"Freed card {masked}",
                    extra={
                        "user_id": guest.user_id, "resource_id": masked,
                        "outcome": ReapOutcome.FREED.value,
                    },
                )
            except Exception as e:
                report.record_failure(guest.user_id, "release", e)
                logger.error(
                    f"Failed to free card {masked}: {e}",
                    extra={
                        "user_id": guest.user_id, "resource_id": masked,
                        "outcome": ReapOutcome.FAILED.value,
                    },
                    exc_info=True,
                )

        try:
            await self._delete_account(guest.user_id)
            report.deleted.append(guest.user_id)
            logger.info(
                f"Deleted expired guest {guest.user_id} "
                f"(expired: {guest.expires_at.isoformat()})",
                extra={
                    "user_id": guest.user_id,
                    "outcome": ReapOutcome.DELETED.value,
                },
            )
        except Exception as e:
            report.record_failure(guest.user_id, "delete", e)
            logger.error(
                f"Failed to delete guest {guest.user_id}: {e}",
                extra={
                    "user_id": guest.user_id,
                    "outcome": ReapOutcome.FAILED.value,
                },
                exc_info=True,
            )

    async def _delete_account(self, user_id: UserId) -> None:
        """Idempotent: deleting an absent row is a no-op."""
        async with self._db.session() as session:
            async with session.begin():
                await session.execute(
                    delete(Account).where(Account.user_id == user_id),
                )
