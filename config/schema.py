from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TagStyle(str, Enum):
    DANGER = "danger"
    WARNING = "warning"
    SUCCESS = "success"
    NEUTRAL = "neutral"


# ─── TAG-KATALOGE (Verhalten + Besonderheiten) ───

class TagOption(BaseModel):
    """Ein Eintrag im Verhaltens- oder Besonderheiten-Katalog.

    score > 0 erschwert die Klassenführung, score < 0 entlastet.
    """
    model_config = ConfigDict(frozen=True)

    # Stabiler Bezeichner, z.B. "leadership"
    id: str
    # Anzeigename (koreanisch), z.B. "리더십"
    label: str
    # Darstellungskategorie für UI/Export
    style: TagStyle = TagStyle.NEUTRAL
    # Beitrag zum Betreuungsaufwand
    score: int = Field(0, ge=-20, le=30)


# ─── KI-BERATUNG ───

class AdvisorConfig(BaseModel):
    """Einstellungen für die KI-gestützte Analyse und Zuteilung."""
    # Modellname beim Anbieter
    model: str = Field("gemini-2.5-flash",
        description="Gemini-Modell für Analyse und Zuteilung")
    # Umgebungsvariable, aus der der API-Schlüssel gelesen wird
    api_key_env: str = Field("GEMINI_API_KEY",
        description="Umgebungsvariable mit dem API-Schlüssel")
    # Maximale Anzahl Analysen pro Projekt und Nutzer
    analyze_limit: int = Field(2, ge=0, le=100,
        description="KI-Analysen pro Projekt und Nutzer")
    # Maximale Anzahl automatischer Zuteilungen pro Projekt und Nutzer
    assign_limit: int = Field(1, ge=0, le=100,
        description="KI-Zuteilungen pro Projekt und Nutzer")
    # Datei für den Nutzungszähler
    usage_file: str = Field("output/ai_usage.json",
        description="JSON-Datei mit dem Nutzungszähler")


# ─── GESAMT-CONFIG ───

class ProjectConfig(BaseModel):
    """Gesamtkonfiguration eines Klassenzuteilungs-Projekts."""
    # Projektname (erscheint in Export und Berichten)
    project_name: str = Field("반편성 프로젝트",
        description="Name des Projekts")
    # Anzahl der bisherigen Klassen
    current_classes: int = Field(4, ge=1, le=20,
        description="Anzahl bisheriger Klassen")
    # Anzahl der neuen Zielklassen
    target_classes: int = Field(4, ge=1, le=20,
        description="Anzahl Zielklassen")
    # Verhaltens-Katalog
    behavior_options: list[TagOption] = Field(default_factory=list)
    # Besonderheiten-Katalog
    special_note_options: list[TagOption] = Field(default_factory=list)
    # Katalog-ID des Freitext-Eintrags "기타" (Verhalten)
    behavior_other_id: str = "other_behavior"
    # Katalog-ID des Freitext-Eintrags "기타" (Besonderheiten)
    special_note_other_id: str = "other_note"
    # KI-Beratung
    advisor: AdvisorConfig = Field(default_factory=AdvisorConfig)

    @model_validator(mode='after')
    def validate_catalogs(self):
        """Prüfe eindeutige IDs und das Vorhandensein der "기타"-Einträge."""
        for name, options, other_id in (
            ("behavior_options", self.behavior_options, self.behavior_other_id),
            ("special_note_options", self.special_note_options,
             self.special_note_other_id),
        ):
            ids = [o.id for o in options]
            dupes = sorted({i for i in ids if ids.count(i) > 1})
            if dupes:
                raise ValueError(f"{name}: doppelte IDs {dupes}")
            if options and other_id not in ids:
                raise ValueError(
                    f"{name}: Freitext-Eintrag '{other_id}' fehlt im Katalog")
        return self

    @property
    def target_class_numbers(self) -> list[int]:
        """Zielklassen 1..N."""
        return list(range(1, self.target_classes + 1))

    def is_valid_target(self, target_class: Optional[int]) -> bool:
        """True wenn target_class eine gültige Zielklasse ist."""
        return target_class is not None and 1 <= target_class <= self.target_classes
