"""Nutzungszähler für KI-Aufrufe pro Projekt, Nutzer und Zweck.

Einfaches "zählen, dann vergleichen" auf einer JSON-Datei; es gibt keinen
Schutz gegen gleichzeitige Schreiber.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from advisor.response import AdvisorError
from config.schema import AdvisorConfig


class UsagePurpose(str, Enum):
    ANALYZE = "analyze"
    ASSIGN = "assign"


class UsageLimitExceeded(AdvisorError):
    """Kontingent für diesen Zweck ist aufgebraucht."""

    def __init__(self, purpose: UsagePurpose, limit: int) -> None:
        self.purpose = purpose
        self.limit = limit
        label = "KI-Analyse" if purpose == UsagePurpose.ANALYZE else "KI-Zuteilung"
        super().__init__(f"{label}: Kontingent aufgebraucht ({limit}× pro Projekt).")


class UsageRecord(BaseModel):
    project_id: str
    user_id: str
    usage_type: UsagePurpose
    created_at: datetime


class _UsageFile(BaseModel):
    records: list[UsageRecord] = []


class UsageTracker:
    """Persistenter Zähler in einer JSON-Datei."""

    def __init__(self, path: Path, limits: dict[UsagePurpose, int]) -> None:
        self.path = Path(path)
        self.limits = dict(limits)

    @classmethod
    def from_config(cls, config: AdvisorConfig) -> "UsageTracker":
        return cls(
            Path(config.usage_file),
            {
                UsagePurpose.ANALYZE: config.analyze_limit,
                UsagePurpose.ASSIGN: config.assign_limit,
            },
        )

    def _load(self) -> _UsageFile:
        if not self.path.exists():
            return _UsageFile()
        with open(self.path, "r", encoding="utf-8") as f:
            return _UsageFile.model_validate_json(f.read())

    def _save(self, data: _UsageFile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(data.model_dump_json(indent=2))

    def used(self, project_id: str, user_id: str, purpose: UsagePurpose) -> int:
        return sum(
            1 for r in self._load().records
            if r.project_id == project_id
            and r.user_id == user_id
            and r.usage_type == purpose
        )

    def remaining(self, project_id: str, user_id: str, purpose: UsagePurpose) -> int:
        return max(self.limits.get(purpose, 0) - self.used(project_id, user_id, purpose), 0)

    def check(self, project_id: str, user_id: str, purpose: UsagePurpose) -> int:
        """Gibt die verbleibenden Aufrufe zurück oder wirft UsageLimitExceeded."""
        remaining = self.remaining(project_id, user_id, purpose)
        if remaining <= 0:
            raise UsageLimitExceeded(purpose, self.limits.get(purpose, 0))
        return remaining

    def record(self, project_id: str, user_id: str, purpose: UsagePurpose) -> int:
        """Speichert einen Aufruf; gibt die danach verbleibenden Aufrufe zurück."""
        data = self._load()
        data.records.append(UsageRecord(
            project_id=project_id,
            user_id=user_id,
            usage_type=purpose,
            created_at=datetime.now(timezone.utc),
        ))
        self._save(data)
        return self.remaining(project_id, user_id, purpose)

    def summary(self, project_id: str, user_id: str) -> dict[str, dict[str, int]]:
        """{zweck: {used, limit, remaining}} für alle Zwecke."""
        result = {}
        for purpose in UsagePurpose:
            used = self.used(project_id, user_id, purpose)
            limit = self.limits.get(purpose, 0)
            result[purpose.value] = {
                "used": used,
                "limit": limit,
                "remaining": max(limit - used, 0),
            }
        return result
