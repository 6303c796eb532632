"""Datenmodell für eine Schülerin / einen Schüler (Pydantic v2)."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


def _dedup(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result = []
    for v in values:
        if v not in seen:
            seen.add(v)
            result.append(v)
    return result


class Student(BaseModel):
    """Repräsentiert ein Kind im Projekt mit bisheriger und neuer Klasse."""

    id: str
    project_id: str = ""
    name: str
    student_number: Optional[int] = None
    current_class: int                   # bisherige Klasse
    original_class: Optional[int] = None
    target_class: Optional[int] = None   # None = noch nicht zugeteilt
    gender: Gender
    behaviors: list[str] = []            # Katalog-IDs
    special_notes: list[str] = []        # Katalog-IDs
    custom_behavior: Optional[str] = None
    custom_special_note: Optional[str] = None
    student_rank: Optional[int] = None   # Rang in der bisherigen Klasse
    memo: Optional[str] = None

    @field_validator("behaviors", "special_notes")
    @classmethod
    def dedup_tags(cls, v: list[str]) -> list[str]:
        return _dedup(v)

    @field_validator("student_rank")
    @classmethod
    def normalize_rank(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            return None
        return v

    @field_validator("custom_behavior", "custom_special_note", "memo")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def is_assigned(self) -> bool:
        return self.target_class is not None

    @property
    def has_rank(self) -> bool:
        return self.student_rank is not None and self.student_rank > 0
