"""KI-Beratung: Analyse einer Zuteilung und Zuteilungsvorschläge.

Ablauf je Aufruf: Kontingent prüfen → Modell fragen → Antwort parsen →
Nutzung speichern. Fehlgeschlagene Aufrufe verbrauchen kein Kontingent.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from advisor.client import GeminiClient, TextClient
from advisor.prompts import build_analysis_prompt, build_assignment_prompt
from advisor.response import (
    AnalysisResult,
    AssignmentSuggestion,
    parse_analysis,
    parse_assignment,
)
from advisor.usage import UsagePurpose, UsageTracker
from analysis.class_stats import ClassStats, aggregate_all_classes
from models.catalog import behavior_catalog, special_note_catalog
from models.project_data import ProjectData

logger = logging.getLogger(__name__)


class AnalysisOutcome(BaseModel):
    class_stats: list[ClassStats]
    analysis: AnalysisResult
    remaining: int


class AssignmentOutcome(BaseModel):
    suggestion: AssignmentSuggestion
    remaining: int


class Advisor:
    """Verbindet Statistik, Prompts, Modell und Nutzungszähler."""

    def __init__(
        self,
        client: Optional[TextClient] = None,
        usage: Optional[UsageTracker] = None,
    ) -> None:
        self.client = client
        self.usage = usage

    def _client_for(self, data: ProjectData) -> TextClient:
        if self.client is None:
            self.client = GeminiClient.from_config(data.config.advisor)
        return self.client

    def _usage_for(self, data: ProjectData) -> UsageTracker:
        if self.usage is None:
            self.usage = UsageTracker.from_config(data.config.advisor)
        return self.usage

    def analyze(self, data: ProjectData, user_id: str) -> AnalysisOutcome:
        """Bewertet die aktuelle Zuteilung (nur zugeteilte Kinder)."""
        usage = self._usage_for(data)
        usage.check(data.project_id, user_id, UsagePurpose.ANALYZE)

        behaviors = behavior_catalog(data.config)
        notes = special_note_catalog(data.config)
        assigned = [s for s in data.students if s.target_class is not None]
        stats = aggregate_all_classes(
            data.config.target_classes, assigned, data.relationships, behaviors, notes,
        )
        prompt = build_analysis_prompt(stats, behaviors, notes)

        logger.info(
            f"KI-Analyse: Projekt {data.project_id}, {len(assigned)} Kinder, "
            f"{data.config.target_classes} Klassen"
        )
        text = self._client_for(data).generate(prompt)
        analysis = parse_analysis(text)

        remaining = usage.record(data.project_id, user_id, UsagePurpose.ANALYZE)
        return AnalysisOutcome(class_stats=stats, analysis=analysis, remaining=remaining)

    def suggest_assignment(self, data: ProjectData, user_id: str) -> AssignmentOutcome:
        """Fragt einen Zuteilungsvorschlag für alle Kinder an."""
        usage = self._usage_for(data)
        usage.check(data.project_id, user_id, UsagePurpose.ASSIGN)

        prompt = build_assignment_prompt(
            data.students, data.relationships, data.config.target_classes,
        )
        logger.info(
            f"KI-Zuteilung: Projekt {data.project_id}, {len(data.students)} Kinder"
        )
        text = self._client_for(data).generate(prompt)
        suggestion = parse_assignment(
            text, set(data.students_by_id()), data.config.target_classes,
        )
        if len(suggestion.assignments) < len(data.students):
            logger.warning(
                f"Vorschlag unvollständig: {len(suggestion.assignments)}/"
                f"{len(data.students)} Kinder zugeteilt"
            )

        remaining = usage.record(data.project_id, user_id, UsagePurpose.ASSIGN)
        return AssignmentOutcome(suggestion=suggestion, remaining=remaining)
