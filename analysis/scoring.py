"""Betreuungsaufwand eines Kindes: Score aus den Tags + 5-stufige Einordnung.

Reine Funktion ohne Seiteneffekte. Die Kataloge werden übergeben,
damit alternative Score-Tabellen ohne Codeänderung möglich sind.
"""

from pydantic import BaseModel, ConfigDict

from models.catalog import TagCatalog
from models.student import Student


class DifficultyResult(BaseModel):
    """Score und Stufe (1 = höchster Aufwand, 5 = unauffällig)."""
    model_config = ConfigDict(frozen=True)

    score: int
    level: int
    label: str

    @property
    def style(self) -> str:
        """Darstellungsklasse für UI und Export."""
        return LEVEL_STYLES[self.level]


# Schwellen absteigend; erster Treffer gewinnt. Unterhalb aller Schwellen → Stufe 5.
LEVEL_THRESHOLDS: tuple[tuple[int, int, str], ...] = (
    (20, 1, "최상"),
    (10, 2, "상"),
    (5,  3, "중"),
    (0,  4, "하"),
)
LOWEST_LEVEL = (5, "양호")

LEVEL_STYLES: dict[int, str] = {
    1: "danger",
    2: "warning",
    3: "attention",
    4: "success",
    5: "safe",
}

LEVEL_LABELS: dict[int, str] = {level: label for _, level, label in LEVEL_THRESHOLDS}
LEVEL_LABELS[LOWEST_LEVEL[0]] = LOWEST_LEVEL[1]


def difficulty_score(
    student: Student,
    behavior_catalog: TagCatalog,
    special_note_catalog: TagCatalog,
) -> int:
    """Summe der Katalog-Scores plus je 1 für einen Freitext-Eintrag."""
    score = sum(behavior_catalog.score_of(b) for b in student.behaviors)
    score += sum(special_note_catalog.score_of(n) for n in student.special_notes)
    if student.custom_behavior:
        score += 1
    if student.custom_special_note:
        score += 1
    return score


def level_for_score(score: int) -> tuple[int, str]:
    """Ordnet einen Score einer Stufe 1–5 zu."""
    for threshold, level, label in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level, label
    return LOWEST_LEVEL


def compute_difficulty(
    student: Student,
    behavior_catalog: TagCatalog,
    special_note_catalog: TagCatalog,
) -> DifficultyResult:
    """Score und Stufe eines Kindes. Ohne Tags: Score 0 → Stufe 4."""
    score = difficulty_score(student, behavior_catalog, special_note_catalog)
    level, label = level_for_score(score)
    return DifficultyResult(score=score, level=level, label=label)
