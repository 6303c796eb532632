"""Balance-Bericht für eine (Teil-)Zuteilung.

Fasst die Klassen-Statistiken zusammen und berechnet Spannweiten
zwischen den Zielklassen.
"""

from collections import Counter

from pydantic import BaseModel

from analysis.class_stats import ClassStats, aggregate_all_classes
from analysis.scoring import LEVEL_LABELS, compute_difficulty
from models.catalog import behavior_catalog, special_note_catalog
from models.project_data import ProjectData


# ─── Bericht-Modell ───────────────────────────────────────────────────────────

class BalanceReport(BaseModel):
    """Vollständiger Balance-Bericht über alle Zielklassen."""

    project_name: str
    class_stats: list[ClassStats]
    level_distribution: dict[int, dict[int, int]]   # Klasse → Stufe → Anzahl
    total_students: int
    unassigned: int
    headcount_spread: int       # max − min Kinder pro Klasse
    gender_spread: int          # max − min |männlich − weiblich|
    difficulty_spread: int      # max − min Aufwands-Score
    total_conflicts_in_class: int


# ─── Analyzer ─────────────────────────────────────────────────────────────────

def _spread(values: list[int]) -> int:
    return max(values) - min(values) if values else 0


class BalanceAnalyzer:
    """Berechnet den Balance-Bericht für einen Projektdatensatz."""

    def analyze(self, data: ProjectData) -> BalanceReport:
        """Hauptmethode: Statistik aller Zielklassen plus Spannweiten."""
        behaviors = behavior_catalog(data.config)
        notes = special_note_catalog(data.config)
        stats = aggregate_all_classes(
            data.config.target_classes, data.students, data.relationships,
            behaviors, notes,
        )

        levels: dict[int, Counter] = {s.class_number: Counter() for s in stats}
        for student in data.students:
            if student.target_class in levels:
                result = compute_difficulty(student, behaviors, notes)
                levels[student.target_class][result.level] += 1

        return BalanceReport(
            project_name=data.config.project_name,
            class_stats=stats,
            level_distribution={
                n: {lvl: c[lvl] for lvl in sorted(LEVEL_LABELS)}
                for n, c in levels.items()
            },
            total_students=len(data.students),
            unassigned=len(data.unassigned_students()),
            headcount_spread=_spread([s.total for s in stats]),
            gender_spread=_spread([abs(s.male - s.female) for s in stats]),
            difficulty_spread=_spread([s.difficulty_score for s in stats]),
            total_conflicts_in_class=sum(s.conflict_count for s in stats),
        )

    def print_rich(self, report: BalanceReport) -> None:
        """Gibt den Balance-Bericht formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()

        conflict_color = "green" if report.total_conflicts_in_class == 0 else "red"
        head_color = (
            "green" if report.headcount_spread <= 1
            else "yellow" if report.headcount_spread <= 3
            else "red"
        )
        console.print(Panel(
            f"Kinder: [bold]{report.total_students}[/bold] | "
            f"Nicht zugeteilt: [bold]{report.unassigned}[/bold]\n"
            f"Spannweite Klassengröße: "
            f"[{head_color}]{report.headcount_spread}[/{head_color}] | "
            f"Spannweite Geschlecht: {report.gender_spread} | "
            f"Spannweite Aufwand: {report.difficulty_spread}\n"
            f"Konflikte innerhalb einer Klasse: "
            f"[{conflict_color}]{report.total_conflicts_in_class}[/{conflict_color}]",
            title=f"Balance-Bericht – {report.project_name}",
            border_style="cyan",
        ))

        table = Table(title="Zielklassen", box=box.ROUNDED)
        table.add_column("Klasse", width=7)
        table.add_column("Gesamt", justify="right")
        table.add_column("남", justify="right")
        table.add_column("여", justify="right")
        table.add_column("Konflikt", justify="right")
        table.add_column("Befreundet", justify="right")
        table.add_column("Aufwand", justify="right")
        table.add_column("Rang Ø (min–max)", justify="right")
        for lvl in sorted(LEVEL_LABELS):
            table.add_column(LEVEL_LABELS[lvl], justify="right")

        for s in report.class_stats:
            rank = (
                f"{s.rank_stats.avg:.1f} ({s.rank_stats.min}–{s.rank_stats.max})"
                if s.rank_stats else "—"
            )
            conflict = (
                f"[red]{s.conflict_count}[/red]" if s.conflict_count else "0"
            )
            dist = report.level_distribution.get(s.class_number, {})
            table.add_row(
                f"{s.class_number}반", str(s.total), str(s.male), str(s.female),
                conflict, str(s.friendly_count), str(s.difficulty_score), rank,
                *[str(dist.get(lvl, 0)) for lvl in sorted(LEVEL_LABELS)],
            )
        console.print(table)
