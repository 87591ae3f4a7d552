"""Background metrics refresh for one user.

APScheduler runs this after trade writes so the next dashboard read hits a
warm cache.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)
# Only users with a refresh in flight hold an entry
_user_locks: dict[str, asyncio.Lock] = {}
_user_locks_guard = asyncio.Lock()


async def _get_user_lock(user_id: str) -> asyncio.Lock:
    async with _user_locks_guard:
        lock = _user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            _user_locks[user_id] = lock
        return lock


async def _release_user_lock(user_id: str, lock: asyncio.Lock):
    async with _user_locks_guard:
        if not lock.locked() and _user_locks.get(user_id) is lock:
            del _user_locks[user_id]


async def run_metrics_refresh(service, user_id: str) -> bool:
    """Recompute and re-cache a user's metrics, skipping if a refresh is in flight.

    Returns True when a refresh actually ran.
    """
    lock = await _get_user_lock(user_id)
    if lock.locked():
        logger.info(f"[user_{user_id}] Skipping overlapping metrics refresh")
        return False

    refreshed = False
    async with lock:
        try:
            metrics = await service.on_trade_update(user_id)
        except Exception as e:
            logger.error(f"[user_{user_id}] Metrics refresh failed: {e}")
        else:
            refreshed = True
            logger.info(
                f"[user_{user_id}] Metrics refreshed: {metrics.total_trades} trades, "
                f"win_rate={metrics.win_rate:.1f}%, default={metrics.is_default_data}"
            )
    await _release_user_lock(user_id, lock)
    return refreshed
