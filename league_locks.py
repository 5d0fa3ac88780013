from __future__ import annotations

"""league_locks

Process-local, per-league serialization for load -> operate -> save.

Why per league:
- Two operations on the same league must not interleave their read-modify-write,
  otherwise the execute-time ownership re-check is the only safety net.
- Different leagues are independent and may run in parallel.

Constraints:
- threading.RLock based, so this is *process-local*. With several uvicorn
  workers the store's optimistic version check (STALE_SNAPSHOT) is what catches
  cross-process races.
- Recommended lock order: league_lock -> repo.transaction(...). Do not acquire a
  league lock inside a repo transaction.
"""

from contextlib import contextmanager
from threading import Lock, RLock
from typing import Dict, Iterator

_REGISTRY_GUARD = Lock()
_LEAGUE_LOCKS: Dict[str, RLock] = {}


def _lock_for(league_id: str) -> RLock:
    key = str(league_id)
    with _REGISTRY_GUARD:
        lock = _LEAGUE_LOCKS.get(key)
        if lock is None:
            lock = RLock()
            _LEAGUE_LOCKS[key] = lock
        return lock


@contextmanager
def league_lock(league_id: str, *, reason: str = "", timeout_s: float | None = None) -> Iterator[None]:
    """Serialize critical sections for one league within a single process.

    Args:
        league_id: league whose snapshot is being read-modify-written.
        reason: debug/log description (optional).
        timeout_s: acquire timeout in seconds. None waits forever.

    Raises:
        TimeoutError: the lock was not acquired within timeout_s.
        ValueError: timeout_s is not a number.

    Usage:
        with league_lock(league_id, reason="EXECUTE_TRADE"):
            ...  # load, engine op, save
    """
    lock = _lock_for(league_id)
    acquired = False
    if timeout_s is None:
        lock.acquire()
        acquired = True
    else:
        try:
            timeout = float(timeout_s)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"timeout_s must be a float seconds value, got: {timeout_s!r}") from exc
        if timeout < 0:
            timeout = 0.0
        acquired = lock.acquire(timeout=timeout)

    if not acquired:
        msg = f"league_lock timeout (league_id={league_id}, timeout_s={timeout_s})"
        if reason:
            msg += f": {reason}"
        raise TimeoutError(msg)

    try:
        yield
    finally:
        lock.release()


__all__ = [
    "league_lock",
]
