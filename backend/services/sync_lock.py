"""Per-item advisory lock for transaction syncs.

Two concurrent syncs of the same item would both read the stored cursor,
apply the same page twice, and race on writing the next cursor. A lease
row in ``plaid_sync_locks`` serializes them across threads and processes.

A lease expires after ``ttl_seconds`` so a crashed worker cannot lock an
item out forever. A running sync renews its lease with every page it
commits, and aborts the page if the lease was taken over meanwhile.
"""

import logging
import time
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Iterator

from sqlalchemy import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from models import SyncLock
from models.utils import generate_uuid, utc_now
from services.exceptions import SyncInProgressError

logger = logging.getLogger(__name__)

_POLL_INTERVAL_SECONDS = 0.25


def _utcnow() -> datetime:
    # Naive UTC: SQLite drops tzinfo on round-trip, so compare naive values.
    return utc_now().replace(tzinfo=None)


def try_acquire(db: Session, item_id: str, owner: str, ttl_seconds: int) -> bool:
    """Attempt to take the lease once, without waiting.

    Inserts a fresh lease, or takes over a lease whose ``expires_at`` has
    passed. Commits on success.
    """
    now = _utcnow()
    expires_at = now + timedelta(seconds=ttl_seconds)

    try:
        db.execute(
            insert(SyncLock).values(
                item_id=item_id, owner=owner, acquired_at=now, expires_at=expires_at
            )
        )
        db.commit()
        return True
    except IntegrityError:
        db.rollback()

    # Someone holds (or held) the lease. Take it only if it has expired;
    # the WHERE clause makes the takeover a compare-and-swap.
    taken = (
        db.query(SyncLock)
        .filter(SyncLock.item_id == item_id, SyncLock.expires_at < now)
        .update(
            {"owner": owner, "acquired_at": now, "expires_at": expires_at},
            synchronize_session=False,
        )
    )
    db.commit()
    if taken:
        logger.warning("Took over expired sync lease for item %s", item_id)
    return bool(taken)


def renew(db: Session, item_id: str, owner: str, ttl_seconds: int) -> bool:
    """Push the lease expiry ``ttl_seconds`` into the future.

    Flushes but does not commit, so the renewal lands with the caller's
    unit of work. Returns False if ``owner`` no longer holds the lease.
    """
    renewed = (
        db.query(SyncLock)
        .filter(SyncLock.item_id == item_id, SyncLock.owner == owner)
        .update(
            {"expires_at": _utcnow() + timedelta(seconds=ttl_seconds)},
            synchronize_session=False,
        )
    )
    return bool(renewed)


def release(db: Session, item_id: str, owner: str) -> None:
    """Drop the lease if ``owner`` still holds it."""
    db.rollback()  # discard anything left over from a failed sync page
    (
        db.query(SyncLock)
        .filter(SyncLock.item_id == item_id, SyncLock.owner == owner)
        .delete(synchronize_session=False)
    )
    db.commit()


@contextmanager
def item_sync_lock(
    db: Session,
    item_id: str,
    ttl_seconds: int | None = None,
    wait_seconds: float | None = None,
) -> Iterator[str]:
    """Hold the sync lease for ``item_id`` for the duration of the block.

    Waits up to ``wait_seconds`` for a running sync to finish before
    raising :class:`SyncInProgressError`. Yields the owner token.
    """
    ttl = ttl_seconds if ttl_seconds is not None else settings.SYNC_LOCK_TTL_SECONDS
    wait = wait_seconds if wait_seconds is not None else settings.SYNC_LOCK_WAIT_SECONDS
    owner = generate_uuid()
    deadline = time.monotonic() + wait

    while not try_acquire(db, item_id, owner, ttl):
        if time.monotonic() >= deadline:
            raise SyncInProgressError(item_id)
        time.sleep(_POLL_INTERVAL_SECONDS)

    logger.debug("Acquired sync lease for item %s", item_id)
    try:
        yield owner
    finally:
        release(db, item_id, owner)
        logger.debug("Released sync lease for item %s", item_id)
