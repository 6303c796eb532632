"""ProjectData: Vollständiger Projektdatensatz + Konsistenzprüfung (Pydantic v2)."""

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel

from models.student import Gender, Student
from models.relationship import RelationType, Relationship
from config.schema import ProjectConfig


class ValidationReport(BaseModel):
    """Ergebnis der Konsistenzprüfung eines Projektdatensatzes."""

    is_valid: bool
    errors: list[str]      # Inkonsistenzen (Statistik wäre irreführend)
    warnings: list[str]    # Hinweise (z.B. doppelte Beziehungen)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_valid:
            status = "[bold green]✓ KONSISTENT[/bold green]"
        else:
            status = "[bold red]✗ INKONSISTENT[/bold red]"

        lines = [status]
        if self.errors:
            lines.append("\n[red bold]Fehler:[/red bold]")
            for e in self.errors:
                lines.append(f"  [red]• {e}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        if not self.errors and not self.warnings:
            lines.append("[dim]Keine Probleme gefunden.[/dim]")

        console.print(Panel("\n".join(lines), title="Datenprüfung", border_style="cyan"))


class ProjectData(BaseModel):
    """Vollständiger Projektdatensatz: Konfiguration, Kinder, Beziehungen."""

    config: ProjectConfig
    project_id: str = "local"
    students: list[Student] = []
    relationships: list[Relationship] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        total = len(self.students)
        male = sum(1 for s in self.students if s.gender == Gender.MALE)
        assigned = sum(1 for s in self.students if s.is_assigned)
        conflicts = sum(1 for r in self.relationships if r.type.value == "conflict")
        lines = [
            f"Projekt: {self.config.project_name}",
            f"Klassen: {self.config.current_classes} bisherige → "
            f"{self.config.target_classes} Zielklassen",
            f"Kinder: {total} ({male} männlich, {total - male} weiblich)",
            f"Zugeteilt: {assigned}/{total}",
            f"Beziehungen: {len(self.relationships)} "
            f"({conflicts} Konflikt, {len(self.relationships) - conflicts} befreundet)",
        ]
        return "\n".join(lines)

    def students_by_id(self) -> dict[str, Student]:
        return {s.id: s for s in self.students}

    def unassigned_students(self) -> list[Student]:
        return [s for s in self.students if s.target_class is None]

    # ─── Zuteilung (last write wins) ───

    def move_student(self, student_id: str, target_class: Optional[int]) -> "ProjectData":
        """Setzt target_class eines Kindes; None hebt die Zuteilung auf.

        Gibt einen neuen Datensatz zurück. Unbekannte IDs → KeyError,
        Klassen außerhalb 1..N → ValueError.
        """
        if target_class is not None and not self.config.is_valid_target(target_class):
            raise ValueError(
                f"Zielklasse {target_class} außerhalb 1..{self.config.target_classes}"
            )
        if student_id not in self.students_by_id():
            raise KeyError(student_id)
        return self.apply_assignments({student_id: target_class})

    def apply_assignments(self, mapping: Mapping[str, Optional[int]]) -> "ProjectData":
        """Übernimmt mehrere Zuteilungen auf einmal (unbekannte IDs werden ignoriert)."""
        students = [
            s.model_copy(update={"target_class": mapping[s.id]}) if s.id in mapping else s
            for s in self.students
        ]
        return self.model_copy(update={"students": students})

    def with_config(self, config: ProjectConfig) -> "ProjectData":
        """Ersetzt die gespeicherte Konfiguration (z.B. nach 'config edit')."""
        return self.model_copy(update={"config": config})

    # ─── Kinder bearbeiten ───

    def add_student(self, student: Student) -> "ProjectData":
        """Fügt ein Kind hinzu. Doppelte ID → ValueError."""
        if student.id in self.students_by_id():
            raise ValueError(f"Schüler-ID {student.id} existiert bereits.")
        return self.model_copy(update={"students": self.students + [student]})

    def update_student(self, student_id: str, **changes) -> "ProjectData":
        """Ändert Felder eines Kindes; die Validatoren von Student laufen erneut.

        Unbekannte IDs → KeyError, ungültige Werte → ValueError.
        """
        if student_id not in self.students_by_id():
            raise KeyError(student_id)
        if "id" in changes:
            raise ValueError("Die Schüler-ID kann nicht geändert werden.")
        students = [
            Student.model_validate({**s.model_dump(), **changes}) if s.id == student_id else s
            for s in self.students
        ]
        return self.model_copy(update={"students": students})

    def remove_student(self, student_id: str) -> "ProjectData":
        """Entfernt ein Kind samt aller Beziehungen, an denen es beteiligt ist."""
        if student_id not in self.students_by_id():
            raise KeyError(student_id)
        return self.model_copy(update={
            "students": [s for s in self.students if s.id != student_id],
            "relationships": [
                r for r in self.relationships if student_id not in r.pair
            ],
        })

    # ─── Beziehungen bearbeiten ───

    def _next_relationship_id(self) -> str:
        numbers = [
            int(r.id[1:]) for r in self.relationships
            if r.id.startswith("r") and r.id[1:].isdigit()
        ]
        return f"r{max(numbers, default=0) + 1:03d}"

    def add_relationship(
        self, student_id: str, target_student_id: str, rtype: RelationType,
    ) -> "ProjectData":
        """Legt eine Beziehung an; die neue Beziehung steht am Ende der Liste.

        Beide Kinder müssen existieren (sonst KeyError). Ein Kind mit sich
        selbst → ValueError. Bereits erfasste Paare werden nicht abgewiesen.
        """
        known = self.students_by_id()
        for sid in (student_id, target_student_id):
            if sid not in known:
                raise KeyError(sid)
        if student_id == target_student_id:
            raise ValueError(
                f"Schüler {student_id} kann nicht mit sich selbst verknüpft werden."
            )
        relationship = Relationship(
            id=self._next_relationship_id(),
            student_id=student_id,
            target_student_id=target_student_id,
            type=rtype,
        )
        return self.model_copy(update={"relationships": self.relationships + [relationship]})

    def remove_relationship(self, relationship_id: str) -> "ProjectData":
        """Entfernt eine Beziehung per ID. Unbekannte ID → KeyError."""
        if not any(r.id == relationship_id for r in self.relationships):
            raise KeyError(relationship_id)
        return self.model_copy(update={
            "relationships": [r for r in self.relationships if r.id != relationship_id],
        })

    def relationships_of(self, student_id: str) -> list[Relationship]:
        return [r for r in self.relationships if student_id in r.pair]

    # ─── Konsistenzprüfung ───

    def validate_data(self) -> ValidationReport:
        """Prüft den Datensatz auf Inkonsistenzen.

        Prüfungen:
        1. Eindeutige Schüler-IDs
        2. target_class innerhalb 1..target_classes
        3. Beziehungen verweisen auf bekannte Kinder
        4. Doppelte Beziehungen (werden in der Statistik doppelt gezählt)
        5. Unbekannte Katalog-IDs (zählen im Score 0)
        """
        errors: list[str] = []
        warnings: list[str] = []

        # ── 1. Eindeutige IDs ────────────────────────────────────────────
        id_counts = Counter(s.id for s in self.students)
        for sid, n in sorted(id_counts.items()):
            if n > 1:
                errors.append(f"Schüler-ID {sid} kommt {n}× vor.")

        # ── 2. Zielklassen ───────────────────────────────────────────────
        for s in self.students:
            if s.target_class is not None and not self.config.is_valid_target(s.target_class):
                errors.append(
                    f"{s.name} ({s.id}): Zielklasse {s.target_class} außerhalb "
                    f"1..{self.config.target_classes}."
                )
            if not 1 <= s.current_class <= self.config.current_classes:
                warnings.append(
                    f"{s.name} ({s.id}): bisherige Klasse {s.current_class} außerhalb "
                    f"1..{self.config.current_classes}."
                )

        # ── 3./4. Beziehungen ────────────────────────────────────────────
        known = set(id_counts)
        pair_counts: Counter = Counter()
        for r in self.relationships:
            missing = [x for x in (r.student_id, r.target_student_id) if x not in known]
            if missing:
                errors.append(
                    f"Beziehung {r.id or '?'}: unbekannte Schüler-ID(s) {', '.join(missing)}."
                )
            pair_counts[(r.pair, r.type)] += 1
        for (pair, rtype), n in pair_counts.items():
            if n > 1:
                a, b = sorted(pair)
                warnings.append(
                    f"Beziehung {a}–{b} ({rtype.value}) ist {n}× erfasst "
                    f"und wird mehrfach gezählt."
                )

        # ── 5. Katalog-IDs ───────────────────────────────────────────────
        behavior_ids = {o.id for o in self.config.behavior_options}
        note_ids = {o.id for o in self.config.special_note_options}
        for s in self.students:
            unknown = [b for b in s.behaviors if b not in behavior_ids]
            unknown += [n for n in s.special_notes if n not in note_ids]
            if unknown:
                warnings.append(
                    f"{s.name} ({s.id}): unbekannte Katalog-IDs {unknown} (zählen 0)."
                )

        return ValidationReport(is_valid=not errors, errors=errors, warnings=warnings)

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = datetime.now(timezone.utc)
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "ProjectData":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
