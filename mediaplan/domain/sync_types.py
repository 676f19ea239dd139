"""
Résultats de synchronisation (POPO).

Le registre (ledger) d'un job de masse contient exactement une entrée par asset énuméré, dans
l'ordre d'énumération.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SyncStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SyncResult:
    """Issue de la synchronisation d'un asset dans un job de masse."""

    asset_id: str
    status: SyncStatus
    code: str | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is SyncStatus.SUCCESS

    @classmethod
    def success(cls, asset_id: str) -> SyncResult:
        return cls(asset_id=asset_id, status=SyncStatus.SUCCESS)

    @classmethod
    def failure(cls, asset_id: str, code: str, reason: str) -> SyncResult:
        return cls(asset_id=asset_id, status=SyncStatus.FAILURE, code=code, reason=reason)

    @classmethod
    def skipped(cls, asset_id: str) -> SyncResult:
        return cls(
            asset_id=asset_id,
            status=SyncStatus.SKIPPED,
            code="CANCELLED",
            reason="job annulé avant planification",
        )

    def to_dict(self) -> dict:
        out: dict = {"id": self.asset_id, "status": self.status.value}
        if self.status is not SyncStatus.SUCCESS:
            out["error"] = self.reason or self.code or "unknown error"
            out["code"] = self.code
        return out


@dataclass
class SyncLedger:
    """Registre ordonné d'un job de masse (reporting pur, aucun retry)."""

    entries: list[SyncResult] = field(default_factory=list)
    cancelled: bool = False

    def __len__(self) -> int:
        return len(self.entries)

    def _count(self, status: SyncStatus) -> int:
        return sum(1 for e in self.entries if e.status is status)

    @property
    def succeeded(self) -> int:
        return self._count(SyncStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(SyncStatus.FAILURE)

    @property
    def skipped(self) -> int:
        return self._count(SyncStatus.SKIPPED)

    @property
    def message(self) -> str:
        if not self.entries:
            return "No assets found to process"
        msg = f"Successfully processed {self.succeeded} assets ({self.failed} failed)"
        if self.skipped:
            msg += f", {self.skipped} skipped after cancellation"
        return msg

    def summary(self) -> dict:
        """Forme externe du registre (réponse HTTP, tâche Celery, CLI)."""
        return {
            "message": self.message,
            "processed_count": self.succeeded,
            "failed_count": self.failed,
            "skipped_count": self.skipped,
            "results": [e.to_dict() for e in self.entries],
        }
