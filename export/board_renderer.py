"""Klassenbrett im Terminal: eine Spalte pro Zielklasse plus "미배정".

board_columns() liefert reine Daten (testbar), print_board() gibt sie
über Rich aus.
"""

from typing import TYPE_CHECKING, Optional

from analysis.scoring import compute_difficulty
from models.catalog import behavior_catalog, special_note_catalog

from export.helpers import RICH_LEVEL_COLORS, class_label, gender_label, sort_key

if TYPE_CHECKING:
    from models.project_data import ProjectData


def board_columns(data: "ProjectData") -> dict[Optional[int], list[dict]]:
    """Gibt {Zielklasse: [Karte, ...]} zurück; None = nicht zugeteilt.

    Karte: {id, name, gender, current_class, score, level, label, style}.
    Kinder mit ungültiger Zielklasse landen in der Spalte None.
    """
    behaviors = behavior_catalog(data.config)
    notes = special_note_catalog(data.config)

    columns: dict[Optional[int], list[dict]] = {
        n: [] for n in data.config.target_class_numbers
    }
    columns[None] = []

    for s in sorted(data.students, key=sort_key):
        result = compute_difficulty(s, behaviors, notes)
        key = s.target_class if s.target_class in columns else None
        columns[key].append({
            "id": s.id,
            "name": s.name,
            "gender": gender_label(s.gender),
            "current_class": s.current_class,
            "score": result.score,
            "level": result.level,
            "label": result.label,
            "style": result.style,
        })
    return columns


def print_board(data: "ProjectData", console=None) -> None:
    """Gibt das Klassenbrett als Rich-Tabelle aus."""
    from rich.console import Console
    from rich.table import Table
    from rich import box

    console = console or Console()
    columns = board_columns(data)
    order = list(data.config.target_class_numbers) + [None]

    table = Table(title=f"반 배정 현황 – {data.config.project_name}", box=box.ROUNDED)
    for key in order:
        cards = columns[key]
        table.add_column(f"{class_label(key)} ({len(cards)})",
                         style="dim" if key is None else None)

    depth = max((len(columns[k]) for k in order), default=0)
    for i in range(depth):
        cells = []
        for key in order:
            cards = columns[key]
            if i >= len(cards):
                cells.append("")
                continue
            card = cards[i]
            color = RICH_LEVEL_COLORS.get(card["style"], "white")
            cells.append(
                f"{card['name']} ({card['gender']}, {card['current_class']}반) "
                f"[{color}]{card['label']}[/{color}]"
            )
        table.add_row(*cells)

    console.print(table)
