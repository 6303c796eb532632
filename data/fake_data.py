"""Testdaten-Generator für Klassenzuteilungs-Projekte.

Erzeugt realistische Fake-Daten: koreanische Namen, Klassenränge,
Verhaltens- und Besonderheiten-Tags sowie Beziehungen.

Verteilung:
  1. Jedes Kind trägt 0–3 Verhaltens-Tags (entlastende Tags häufiger)
  2. Ca. 25% der Kinder tragen eine Besonderheit
  3. Ränge 1..n pro bisheriger Klasse, ca. 10% ohne Rang
  4. Pro Klasse ca. 2 Konflikte und 3 Freundschaften
"""

import random
from typing import Optional

from config.schema import ProjectConfig, TagStyle
from models.project_data import ProjectData
from models.relationship import RelationType, Relationship
from models.student import Gender, Student

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_LAST_NAMES = [
    "김", "이", "박", "최", "정", "강", "조", "윤", "장", "임",
    "한", "오", "서", "신", "권", "황", "안", "송", "류", "홍",
]

_GIVEN_NAMES_M = [
    "민준", "서준", "도윤", "예준", "시우", "하준", "주원", "지호",
    "지후", "준우", "준서", "건우", "현우", "우진", "선우", "연우",
]

_GIVEN_NAMES_F = [
    "서연", "서윤", "지우", "서현", "민서", "하은", "하윤", "윤서",
    "지유", "지민", "채원", "수아", "지아", "다은", "은서", "예은",
]

# Wahrscheinlichkeit eines Tags je Darstellungskategorie
_TAG_WEIGHTS = {
    TagStyle.SUCCESS: 5,
    TagStyle.NEUTRAL: 3,
    TagStyle.WARNING: 2,
    TagStyle.DANGER: 1,
}

_CUSTOM_BEHAVIORS = ["상담 필요", "지각 잦음", "편식"]
_CUSTOM_NOTES = ["보건실 이용 잦음", "학부모 상담 요청"]


class FakeDataGenerator:
    """Generiert einen vollständigen Projektdatensatz auf Basis der ProjectConfig."""

    def __init__(self, config: ProjectConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self.rng = random.Random(seed)
        self._used_names: set[str] = set()

    # ─── Namen ────────────────────────────────────────────────────────────────

    def _make_name(self, gender: Gender) -> str:
        given = _GIVEN_NAMES_M if gender == Gender.MALE else _GIVEN_NAMES_F
        for _ in range(50):
            name = self.rng.choice(_LAST_NAMES) + self.rng.choice(given)
            if name not in self._used_names:
                self._used_names.add(name)
                return name
        # Namensraum erschöpft: Zähler anhängen
        name = f"{self.rng.choice(_LAST_NAMES)}{self.rng.choice(given)}{len(self._used_names)}"
        self._used_names.add(name)
        return name

    # ─── Tags ─────────────────────────────────────────────────────────────────

    def _pick_tags(self, options, other_id: str, k: int) -> list[str]:
        pool = [o for o in options if o.id != other_id]
        if not pool or k <= 0:
            return []
        weights = [_TAG_WEIGHTS.get(o.style, 1) for o in pool]
        chosen = self.rng.choices(pool, weights=weights, k=k)
        return list(dict.fromkeys(o.id for o in chosen))

    # ─── Kinder ───────────────────────────────────────────────────────────────

    def _generate_students(self, num_students: int) -> list[Student]:
        cfg = self.config
        students: list[Student] = []
        per_class: dict[int, list[Student]] = {c: [] for c in range(1, cfg.current_classes + 1)}

        for i in range(num_students):
            current = i % cfg.current_classes + 1
            gender = Gender.MALE if self.rng.random() < 0.5 else Gender.FEMALE

            behaviors = self._pick_tags(
                cfg.behavior_options, cfg.behavior_other_id,
                self.rng.choices([0, 1, 2, 3], weights=[3, 4, 2, 1])[0],
            )
            notes = []
            if self.rng.random() < 0.25:
                notes = self._pick_tags(cfg.special_note_options, cfg.special_note_other_id, 1)

            custom_behavior = None
            if cfg.behavior_options and self.rng.random() < 0.05:
                behaviors.append(cfg.behavior_other_id)
                custom_behavior = self.rng.choice(_CUSTOM_BEHAVIORS)
            custom_note = None
            if cfg.special_note_options and self.rng.random() < 0.03:
                notes.append(cfg.special_note_other_id)
                custom_note = self.rng.choice(_CUSTOM_NOTES)

            student = Student(
                id=f"s{i + 1:03d}",
                project_id="local",
                name=self._make_name(gender),
                current_class=current,
                original_class=current,
                gender=gender,
                behaviors=behaviors,
                special_notes=notes,
                custom_behavior=custom_behavior,
                custom_special_note=custom_note,
            )
            per_class[current].append(student)
            students.append(student)

        # Nummern und Ränge pro bisheriger Klasse
        ranked: dict[str, tuple[int, Optional[int]]] = {}
        for members in per_class.values():
            ranks = list(range(1, len(members) + 1))
            self.rng.shuffle(ranks)
            for number, (s, rank) in enumerate(zip(members, ranks), start=1):
                ranked[s.id] = (number, rank if self.rng.random() >= 0.1 else None)

        return [
            s.model_copy(update={
                "student_number": ranked[s.id][0],
                "student_rank": ranked[s.id][1],
            })
            for s in students
        ]

    # ─── Beziehungen ──────────────────────────────────────────────────────────

    def _generate_relationships(self, students: list[Student]) -> list[Relationship]:
        if len(students) < 2:
            return []
        relationships: list[Relationship] = []
        seen: set[frozenset[str]] = set()
        target = {
            RelationType.CONFLICT: 2 * self.config.current_classes,
            RelationType.FRIENDLY: 3 * self.config.current_classes,
        }
        max_pairs = len(students) * (len(students) - 1) // 2
        for rtype, count in target.items():
            added = 0
            while added < count and len(seen) < max_pairs:
                a, b = self.rng.sample(students, 2)
                pair = frozenset((a.id, b.id))
                if pair in seen:
                    continue
                seen.add(pair)
                relationships.append(Relationship(
                    id=f"r{len(relationships) + 1:03d}",
                    student_id=a.id,
                    target_student_id=b.id,
                    type=rtype,
                ))
                added += 1
        return relationships

    # ─── Vollständiger Datensatz ──────────────────────────────────────────────

    def generate(self, num_students: int = 100, assign: bool = False) -> ProjectData:
        """Erzeugt den vollständigen Datensatz.

        Mit assign=True werden die Kinder reihum (gemischt) auf die
        Zielklassen verteilt, sonst bleiben sie unzugeteilt.
        """
        students = self._generate_students(num_students)
        relationships = self._generate_relationships(students)
        if assign:
            order = list(students)
            self.rng.shuffle(order)
            mapping = {
                s.id: i % self.config.target_classes + 1 for i, s in enumerate(order)
            }
            students = [s.model_copy(update={"target_class": mapping[s.id]}) for s in students]
        return ProjectData(
            config=self.config,
            students=students,
            relationships=relationships,
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, data: ProjectData) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Testdaten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        male = sum(1 for s in data.students if s.gender == Gender.MALE)
        conflicts = sum(1 for r in data.relationships if r.type == RelationType.CONFLICT)
        tagged = sum(1 for s in data.students if s.behaviors or s.special_notes)
        table.add_row("Kinder", str(len(data.students)),
                      f"{male} männlich, {len(data.students) - male} weiblich")
        table.add_row("Bisherige Klassen", str(self.config.current_classes), "")
        table.add_row("Zielklassen", str(self.config.target_classes), "")
        table.add_row("Mit Tags", str(tagged), "")
        table.add_row("Beziehungen", str(len(data.relationships)),
                      f"{conflicts} Konflikt, {len(data.relationships) - conflicts} befreundet")

        console.print(table)
