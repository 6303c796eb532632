"""Datenmodell für Beziehungen zwischen zwei Kindern (Pydantic v2)."""

from enum import Enum

from pydantic import BaseModel, model_validator


class RelationType(str, Enum):
    CONFLICT = "conflict"   # sollten NICHT in dieselbe Klasse
    FRIENDLY = "friendly"   # dürfen gern in dieselbe Klasse


class Relationship(BaseModel):
    """Gerichtetes Paar, inhaltlich symmetrisch. Duplikate sind erlaubt."""

    id: str = ""
    student_id: str
    target_student_id: str
    type: RelationType

    @model_validator(mode='after')
    def _no_self_relation(self):
        if self.student_id == self.target_student_id:
            raise ValueError(
                f"Beziehung {self.id or '?'}: Schüler {self.student_id} "
                f"kann nicht mit sich selbst verknüpft werden."
            )
        return self

    @property
    def pair(self) -> frozenset[str]:
        return frozenset((self.student_id, self.target_student_id))
