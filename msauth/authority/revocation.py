"""Ledger of revoked token ids, pruned lazily as entries expire."""

import threading
import time
from collections.abc import Iterable

from msauth.authority.types import RevocationEntry
from msauth.core.logging import get_logger

logger = get_logger("msauth.revocation")


class RevocationLedger:
    """Append-only list of revocations with single-pass check-and-prune.

    An entry is kept until its token could no longer verify, which is its
    ``exp`` plus the largest leeway any verification has used so far.
    """

    def __init__(
        self, entries: Iterable[RevocationEntry] = (), leeway: float = 0
    ) -> None:
        self._lock = threading.Lock()
        self._entries: list[RevocationEntry] = list(entries)
        self._leeway = leeway

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def leeway(self) -> float:
        return self._leeway

    def revoke(self, entry: RevocationEntry) -> None:
        """Append an entry; duplicates are kept and expire together."""
        with self._lock:
            self._entries.append(entry)
        logger.info("token revoked", jti=entry.jti, exp=entry.exp)

    def check_and_prune(
        self, jti: str | None, now: float | None = None, leeway: float = 0
    ) -> bool:
        """Drop expired entries and report whether ``jti`` is still revoked."""
        now = time.time() if now is None else now
        hit = False
        with self._lock:
            self._leeway = max(self._leeway, leeway)
            surviving: list[RevocationEntry] = []
            for entry in self._entries:
                if entry.expired(now, self._leeway):
                    continue
                if jti is not None and entry.jti == jti:
                    hit = True
                surviving.append(entry)
            pruned = len(self._entries) - len(surviving)
            self._entries = surviving
        if pruned:
            logger.debug("revocation ledger pruned", pruned=pruned)
        return hit

    def prune(self, now: float | None = None, leeway: float = 0) -> None:
        """Drop expired entries only."""
        self.check_and_prune(None, now, leeway)

    def replace(self, entries: Iterable[RevocationEntry]) -> None:
        with self._lock:
            self._entries = list(entries)

    def entries(self) -> list[RevocationEntry]:
        """Copy of the current entries."""
        with self._lock:
            return [entry.model_copy() for entry in self._entries]
