"""Gemeinsame Hilfsfunktionen für Excel-Export und Terminal-Anzeige."""

from datetime import date
from typing import Optional

from data.excel_import import OTHER_PREFIXES
from models.catalog import TagCatalog
from models.student import Gender, Student

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "danger":    "FFC7CE",
    "warning":   "FFE4B5",
    "attention": "FFF2B3",
    "success":   "C6EFCE",
    "safe":      "DDEBF7",
    "male":      "DDEBF7",
    "female":    "FCE4EC",
    "conflict":  "FF9999",
    "friendly":  "C6EFCE",
    "header":    "4472C4",
}

# Rich-Farben je Aufwandsstufe
RICH_LEVEL_COLORS: dict[str, str] = {
    "danger":    "bold red",
    "warning":   "dark_orange",
    "attention": "yellow",
    "success":   "green",
    "safe":      "cyan",
}


def today_str() -> str:
    """Gibt das heutige Datum als YYYY-MM-DD zurück."""
    return date.today().strftime("%Y-%m-%d")


# ─── Beschriftungen ───────────────────────────────────────────────────────────

def class_label(class_number: Optional[int]) -> str:
    """3 → '3반', None → '미배정'."""
    return f"{class_number}반" if class_number is not None else "미배정"


def gender_label(gender: Gender) -> str:
    return "남" if gender == Gender.MALE else "여"


def tag_labels(
    tag_ids: list[str], catalog: TagCatalog, custom: Optional[str] = None,
) -> list[str]:
    """Labels der Tags; der "기타"-Eintrag mit Freitext wird zu '기타:Freitext'.

    Das Format entspricht der Import-Konvention von parse_tag_cell.
    """
    labels = []
    for tag_id in tag_ids:
        label = catalog.label_of(tag_id)
        if label is None:
            continue
        if tag_id == catalog.other_id and custom:
            label = f"{OTHER_PREFIXES[0]}{custom}"
        labels.append(label)
    return labels


def format_tags(
    tag_ids: list[str], catalog: TagCatalog, custom: Optional[str] = None,
) -> str:
    """Tags als kommagetrennter Text, leer → ''."""
    return ", ".join(tag_labels(tag_ids, catalog, custom))


def format_rank(student: Student) -> str:
    return str(student.student_rank) if student.has_rank else "-"


def sort_key(student: Student) -> tuple:
    """Sortierung innerhalb einer Klasse: bisherige Klasse, Nummer, Name."""
    return (
        student.current_class,
        student.student_number if student.student_number is not None else 10**6,
        student.name,
    )
