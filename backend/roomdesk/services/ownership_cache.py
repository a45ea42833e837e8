from __future__ import annotations

from datetime import date
from threading import Lock
from typing import Callable, Iterable

from roomdesk.services.schedule_types import Block


class BlockSnapshotCache:
    """Per-date read cache of immutable block snapshots.

    Each entry is stored with the date's store revision. Callers read the
    current revision first and an entry is only served when it matches, so a
    write committed by another process is picked up on the next read. Local
    writers also call ``invalidate``; a load that started before an
    invalidation (or a ``clear``) is never stored.
    """

    def __init__(self) -> None:
        self._entries: dict[date, tuple[int, tuple[Block, ...]]] = {}
        self._generations: dict[date, int] = {}
        self._epoch = 0
        self._lock = Lock()

    def _stamp(self, block_date: date) -> tuple[int, int]:
        return self._epoch, self._generations.get(block_date, 0)

    def get(
        self,
        block_date: date,
        revision: int,
        loader: Callable[[date], Iterable[Block]],
    ) -> tuple[Block, ...]:
        with self._lock:
            cached = self._entries.get(block_date)
            if cached is not None and cached[0] == revision:
                return cached[1]
            stamp = self._stamp(block_date)

        loaded = tuple(loader(block_date))

        with self._lock:
            if self._stamp(block_date) == stamp:
                self._entries[block_date] = (revision, loaded)
        return loaded

    def invalidate(self, *dates: date) -> None:
        with self._lock:
            for block_date in dates:
                self._entries.pop(block_date, None)
                self._generations[block_date] = self._generations.get(block_date, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generations.clear()
            self._epoch += 1


block_cache = BlockSnapshotCache()


def clear_block_cache() -> None:
    block_cache.clear()
