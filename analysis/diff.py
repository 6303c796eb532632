"""Vergleich zweier Zuteilungen (Diff / Changelog).

Gibt strukturierte Unterschiede zurück, die als Rich-Tabelle oder JSON
ausgegeben werden können.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from models.project_data import ProjectData


@dataclass
class ClassChange:
    """Ein Kind, dessen Zielklasse sich geändert hat."""

    student_id: str
    name: str
    old_class: Optional[int]
    new_class: Optional[int]


@dataclass
class AssignmentDiff:
    """Vollständiger Diff zwischen zwei Zuteilungen."""

    moved: list[ClassChange] = field(default_factory=list)
    newly_assigned: list[ClassChange] = field(default_factory=list)
    unassigned: list[ClassChange] = field(default_factory=list)
    students_added: list[str] = field(default_factory=list)
    students_removed: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Gibt True zurück wenn kein Unterschied gefunden wurde."""
        return (
            not self.moved
            and not self.newly_assigned
            and not self.unassigned
            and not self.students_added
            and not self.students_removed
        )

    @property
    def changes(self) -> list[ClassChange]:
        return self.moved + self.newly_assigned + self.unassigned

    def to_dict(self) -> dict:
        """Serialisiert den Diff als Dictionary (für JSON-Ausgabe)."""
        def _rows(items: list[ClassChange]) -> list[dict]:
            return [
                {
                    "student_id": c.student_id,
                    "name": c.name,
                    "old_class": c.old_class,
                    "new_class": c.new_class,
                }
                for c in items
            ]

        return {
            "moved": _rows(self.moved),
            "newly_assigned": _rows(self.newly_assigned),
            "unassigned": _rows(self.unassigned),
            "students_added": self.students_added,
            "students_removed": self.students_removed,
        }

    def to_json(self, indent: int = 2) -> str:
        """Gibt den Diff als JSON-String zurück."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def diff_assignments(a: "ProjectData", b: "ProjectData") -> AssignmentDiff:
    """Vergleicht die Zielklassen zweier Datensätze desselben Projekts.

    Args:
        a: Erster Datensatz (Basis / alt).
        b: Zweiter Datensatz (neu).

    Returns:
        AssignmentDiff, Einträge nach Name sortiert.
    """
    diff = AssignmentDiff()

    students_a = a.students_by_id()
    students_b = b.students_by_id()
    diff.students_added = sorted(set(students_b) - set(students_a))
    diff.students_removed = sorted(set(students_a) - set(students_b))

    common = set(students_a) & set(students_b)
    for sid in sorted(common, key=lambda i: (students_b[i].name, i)):
        old = students_a[sid].target_class
        new = students_b[sid].target_class
        if old == new:
            continue
        change = ClassChange(student_id=sid, name=students_b[sid].name,
                             old_class=old, new_class=new)
        if old is None:
            diff.newly_assigned.append(change)
        elif new is None:
            diff.unassigned.append(change)
        else:
            diff.moved.append(change)

    return diff
