"""Auswertung der Freitext-Antworten des Sprachmodells."""

import json
import logging
import re
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class AdvisorError(Exception):
    """Fehler bei der KI-Beratung."""


class AdvisorResponseError(AdvisorError):
    """Antwort enthält kein auswertbares JSON-Objekt."""


# Erstes "{" bis letztes "}"
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> dict:
    """Extrahiert und parst das JSON-Objekt aus einer Modellantwort."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise AdvisorResponseError("Antwort enthält kein JSON-Objekt.")
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AdvisorResponseError(f"Antwort enthält ungültiges JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise AdvisorResponseError("JSON-Antwort ist kein Objekt.")
    return parsed


# ─── Antwort-Modelle ──────────────────────────────────────────────────────────

class _Lenient(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


Score = Union[int, float, str, None]


class ClassAnalysis(_Lenient):
    class_number: int
    gender_balance: str = ""
    behavior_analysis: str = ""
    special_note_analysis: str = ""
    relationship_analysis: str = ""
    rank_analysis: str = ""
    difficulty_level: str = ""
    summary: str = ""


class OverallAnalysis(_Lenient):
    gender_balance_score: Score = None
    difficulty_balance_score: Score = None
    relationship_score: Score = None
    rank_balance_score: Score = None
    overall_score: Score = None
    strengths: list[str] = []
    improvements: list[str] = []
    recommendations: str = ""


class AnalysisResult(_Lenient):
    class_analyses: list[ClassAnalysis] = []
    overall_analysis: Optional[OverallAnalysis] = None


class SuggestedAssignment(_Lenient):
    student_id: str
    target_class: int


class AssignmentSuggestion(_Lenient):
    assignments: list[SuggestedAssignment] = []
    reasoning: str = ""

    def as_mapping(self) -> dict[str, int]:
        return {a.student_id: a.target_class for a in self.assignments}


def parse_analysis(text: str) -> AnalysisResult:
    """Modellantwort → AnalysisResult."""
    raw = extract_json_object(text)
    try:
        return AnalysisResult.model_validate(raw)
    except ValidationError as e:
        raise AdvisorResponseError(f"Analyse-Antwort unvollständig: {e}") from e


def parse_assignment(
    text: str, known_ids: set[str], target_classes: int
) -> AssignmentSuggestion:
    """Modellantwort → AssignmentSuggestion.

    Einträge mit unbekannter ID, ungültiger Klasse oder nicht-numerischer
    Klasse werden verworfen; doppelte IDs: letzter Eintrag gewinnt.
    """
    raw = extract_json_object(text)
    entries: list[Any] = raw.get("assignments") or []
    kept: dict[str, SuggestedAssignment] = {}
    for entry in entries:
        try:
            item = SuggestedAssignment.model_validate(entry)
        except ValidationError:
            logger.warning(f"Ungültiger Zuteilungseintrag verworfen: {entry!r}")
            continue
        if item.student_id not in known_ids:
            logger.warning(f"Unbekannte Schüler-ID im Vorschlag: {item.student_id}")
            continue
        if not 1 <= item.target_class <= target_classes:
            logger.warning(
                f"Zielklasse {item.target_class} für {item.student_id} "
                f"außerhalb 1..{target_classes}"
            )
            continue
        kept[item.student_id] = item
    return AssignmentSuggestion(
        assignments=list(kept.values()),
        reasoning=str(raw.get("reasoning") or ""),
    )
