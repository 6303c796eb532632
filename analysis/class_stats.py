"""Klassen-Statistik für Zielklassen.

Wird bei jedem Aufruf frisch aus Kindern und Beziehungen berechnet und
nie gespeichert. Grundlage für Balance-Bericht, Export und KI-Prompts.
"""

from collections import defaultdict
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from analysis.scoring import difficulty_score
from models.catalog import TagCatalog
from models.relationship import RelationType, Relationship
from models.student import Gender, Student


class RankStats(BaseModel):
    """Rang-Verteilung der Kinder mit erfasstem Rang."""
    model_config = ConfigDict(frozen=True)

    count: int
    min: int
    max: int
    avg: float   # round(mean, 1), Python-Rundung


class ClassStats(BaseModel):
    """Momentaufnahme einer Zielklasse."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    class_number: int
    total: int = 0
    male: int = 0
    female: int = 0
    behavior_counts: dict[str, int] = {}
    special_note_counts: dict[str, int] = {}
    conflict_count: int = 0
    friendly_count: int = 0
    difficulty_score: int = 0
    rank_stats: Optional[RankStats] = None

    def to_prompt_dict(self) -> dict:
        """JSON-taugliche Form mit camelCase-Schlüsseln für KI-Prompts."""
        return self.model_dump(by_alias=True)


def compute_rank_stats(students: Iterable[Student]) -> Optional[RankStats]:
    """None wenn kein Kind einen positiven Rang hat."""
    ranks = [s.student_rank for s in students if s.has_rank]
    if not ranks:
        return None
    return RankStats(
        count=len(ranks),
        min=min(ranks),
        max=max(ranks),
        avg=round(sum(ranks) / len(ranks), 1),
    )


def _build_stats(
    class_number: int,
    members: list[Student],
    scores: dict[str, int],
    conflict_count: int,
    friendly_count: int,
) -> ClassStats:
    male = sum(1 for s in members if s.gender == Gender.MALE)

    behavior_counts: dict[str, int] = defaultdict(int)
    special_note_counts: dict[str, int] = defaultdict(int)
    for s in members:
        for b in s.behaviors:
            behavior_counts[b] += 1
        for n in s.special_notes:
            special_note_counts[n] += 1

    return ClassStats(
        class_number=class_number,
        total=len(members),
        male=male,
        female=len(members) - male,
        behavior_counts=dict(behavior_counts),
        special_note_counts=dict(special_note_counts),
        conflict_count=conflict_count,
        friendly_count=friendly_count,
        difficulty_score=sum(scores[s.id] for s in members),
        rank_stats=compute_rank_stats(members),
    )


def aggregate_class(
    class_number: int,
    students: Iterable[Student],
    relationships: Iterable[Relationship],
    behavior_catalog: TagCatalog,
    special_note_catalog: TagCatalog,
) -> ClassStats:
    """Statistik für eine Zielklasse.

    Eine Beziehung zählt nur, wenn BEIDE Kinder in dieser Klasse sind.
    Doppelt erfasste Beziehungen werden doppelt gezählt.
    """
    members = [s for s in students if s.target_class == class_number]
    member_ids = {s.id for s in members}
    scores = {
        s.id: difficulty_score(s, behavior_catalog, special_note_catalog)
        for s in members
    }

    conflicts = friendly = 0
    for r in relationships:
        if r.student_id in member_ids and r.target_student_id in member_ids:
            if r.type == RelationType.CONFLICT:
                conflicts += 1
            elif r.type == RelationType.FRIENDLY:
                friendly += 1

    return _build_stats(class_number, members, scores, conflicts, friendly)


def aggregate_all_classes(
    target_class_count: int,
    students: Iterable[Student],
    relationships: Iterable[Relationship],
    behavior_catalog: TagCatalog,
    special_note_catalog: TagCatalog,
) -> list[ClassStats]:
    """Statistik für die Klassen 1..target_class_count in einem Durchlauf.

    Leere Klassen erscheinen mit Nullwerten. Kinder ohne oder mit
    ungültiger Zielklasse zählen in keiner Klasse.
    """
    class_numbers = range(1, target_class_count + 1)
    members: dict[int, list[Student]] = {n: [] for n in class_numbers}
    class_of: dict[str, int] = {}
    scores: dict[str, int] = {}

    for s in students:
        if s.target_class in members:
            members[s.target_class].append(s)
            class_of[s.id] = s.target_class
            scores[s.id] = difficulty_score(s, behavior_catalog, special_note_catalog)

    conflicts: dict[int, int] = defaultdict(int)
    friendly: dict[int, int] = defaultdict(int)
    for r in relationships:
        a = class_of.get(r.student_id)
        if a is None or a != class_of.get(r.target_student_id):
            continue
        if r.type == RelationType.CONFLICT:
            conflicts[a] += 1
        elif r.type == RelationType.FRIENDLY:
            friendly[a] += 1

    return [
        _build_stats(n, members[n], scores, conflicts[n], friendly[n])
        for n in class_numbers
    ]
