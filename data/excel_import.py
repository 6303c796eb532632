"""Excel-Import und Template-Generator für Schülerlisten.

Template-Generator: Vorlage mit Eingabeblatt "학생명단" und Anleitung "작성안내".
Import-Funktion:    Excel → list[Student] mit ImportReport.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel

from config.schema import ProjectConfig
from models.catalog import TagCatalog, behavior_catalog, special_note_catalog
from models.student import Gender, Student

logger = logging.getLogger(__name__)


class ExcelImportError(Exception):
    """Fehler beim Excel-Import."""


class ImportReport(BaseModel):
    """Zusammenfassung eines Imports."""

    imported: int
    skipped: int
    warnings: list[str]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        lines = [
            f"[green]Importiert:[/green] {self.imported}  "
            f"[dim]Übersprungen:[/dim] {self.skipped}"
        ]
        if self.warnings:
            lines.append("\n[yellow bold]Warnungen:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w}[/yellow]")
        console.print(Panel("\n".join(lines), title="Import", border_style="cyan"))


# ─── Spalten-Aliase ───────────────────────────────────────────────────────────

ROSTER_SHEET = "학생명단"
GUIDE_SHEET = "작성안내"

_COLUMNS: dict[str, list[str]] = {
    "number":    ["번호", "number"],
    "name":      ["이름", "name"],
    "class":     ["학급", "class"],
    "gender":    ["성별", "gender"],
    "rank":      ["석차(선택)", "석차", "rank"],
    "behaviors": ["행동특성(선택)", "행동특성", "behaviors"],
    "notes":     ["특이사항(선택)", "특이사항", "special_notes"],
    "memo":      ["메모(선택)", "메모", "memo"],
}

TEMPLATE_HEADERS = [
    "번호", "이름", "학급", "성별", "석차(선택)",
    "행동특성(선택)", "특이사항(선택)", "메모(선택)",
]

OTHER_PREFIXES = ("기타:", "other:")
EXAMPLE_PREFIX = "(예시)"


def _to_int(value: Any) -> Optional[int]:
    """Zelleninhalt → int; leer oder nicht-numerisch → None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(float(text))
    except ValueError:
        return None


def _to_str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def parse_gender(value: Any) -> Gender:
    """'남' / 'male' → männlich, alles andere → weiblich."""
    text = _to_str(value).lower()
    return Gender.MALE if text in ("남", "male", "m") else Gender.FEMALE


def parse_tag_cell(raw: Any, catalog: TagCatalog) -> tuple[list[str], Optional[str]]:
    """Parst 'Label, Label, 기타:Text' → (Katalog-IDs, Freitext).

    Unbekannte Labels landen ebenfalls im Freitext des "기타"-Eintrags.
    """
    text = _to_str(raw)
    if not text:
        return [], None

    ids: list[str] = []
    custom: list[str] = []
    for item in (t.strip() for t in text.replace(";", ",").split(",")):
        if not item:
            continue
        prefix = next((p for p in OTHER_PREFIXES if item.lower().startswith(p)), None)
        if prefix is not None:
            detail = item[len(prefix):].strip()
            if detail:
                custom.append(detail)
            if catalog.other_id:
                ids.append(catalog.other_id)
            continue
        option = catalog.by_label(item)
        if option is not None:
            ids.append(option.id)
        else:
            custom.append(item)
            if catalog.other_id:
                ids.append(catalog.other_id)

    # Reihenfolge beibehalten, Duplikate entfernen
    unique = list(dict.fromkeys(ids))
    return unique, (", ".join(custom) if custom else None)


def _resolve_columns(header: tuple) -> dict[str, int]:
    """Ordnet Spaltenschlüssel den Spaltenindizes zu (erster Alias-Treffer)."""
    names = [_to_str(h) for h in header]
    mapping: dict[str, int] = {}
    for key, aliases in _COLUMNS.items():
        for alias in aliases:
            if alias in names:
                mapping[key] = names.index(alias)
                break
    return mapping


# ─── IMPORT ───────────────────────────────────────────────────────────────────

def import_students(
    path: Path,
    config: ProjectConfig,
    project_id: str = "local",
) -> tuple[list[Student], ImportReport]:
    """Liest eine Schülerliste aus Excel.

    Verwendet das Blatt "학생명단" oder, falls nicht vorhanden, das erste Blatt.
    Zeilen ohne Namen und Beispielzeilen "(예시) …" werden übersprungen.

    Raises:
        ExcelImportError: Datei fehlt, ist keine Excel-Datei oder hat keine Spalte "이름".
    """
    try:
        import openpyxl
    except ImportError:
        raise ImportError("openpyxl nicht installiert. Bitte: pip install openpyxl")

    path = Path(path)
    if not path.exists():
        raise ExcelImportError(f"Datei nicht gefunden: {path}")
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except Exception as e:
        raise ExcelImportError(f"Datei kann nicht gelesen werden: {path} ({e})") from e

    try:
        ws = wb[ROSTER_SHEET] if ROSTER_SHEET in wb.sheetnames else wb.worksheets[0]
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()

    if not rows:
        raise ExcelImportError(f"Blatt '{ws.title}' ist leer.")
    cols = _resolve_columns(rows[0])
    if "name" not in cols:
        raise ExcelImportError(
            f"Spalte '이름' (oder 'name') fehlt in Blatt '{ws.title}'."
        )

    behaviors = behavior_catalog(config)
    notes = special_note_catalog(config)

    def cell(row: tuple, key: str) -> Any:
        idx = cols.get(key)
        return row[idx] if idx is not None and idx < len(row) else None

    students: list[Student] = []
    warnings: list[str] = []
    skipped = 0

    for line_no, row in enumerate(rows[1:], start=2):
        name = _to_str(cell(row, "name"))
        if not name or name.startswith(EXAMPLE_PREFIX):
            skipped += 1
            continue

        current_class = _to_int(cell(row, "class"))
        if current_class is None or current_class < 1:
            warnings.append(f"Zeile {line_no} ({name}): Klasse fehlt/ungültig → 1")
            current_class = 1
        elif current_class > config.current_classes:
            warnings.append(
                f"Zeile {line_no} ({name}): Klasse {current_class} > "
                f"{config.current_classes} bisherige Klassen"
            )

        behavior_ids, custom_behavior = parse_tag_cell(cell(row, "behaviors"), behaviors)
        note_ids, custom_note = parse_tag_cell(cell(row, "notes"), notes)

        students.append(Student(
            id=uuid.uuid4().hex[:12],
            project_id=project_id,
            name=name,
            student_number=_to_int(cell(row, "number")),
            current_class=current_class,
            original_class=current_class,
            target_class=None,
            gender=parse_gender(cell(row, "gender")),
            behaviors=behavior_ids,
            special_notes=note_ids,
            custom_behavior=custom_behavior,
            custom_special_note=custom_note,
            student_rank=_to_int(cell(row, "rank")),
            memo=_to_str(cell(row, "memo")) or None,
        ))

    logger.info(f"Excel-Import {path}: {len(students)} Kinder, {skipped} übersprungen")
    return students, ImportReport(imported=len(students), skipped=skipped, warnings=warnings)


# ─── TEMPLATE-GENERATOR ───────────────────────────────────────────────────────

def generate_template(config: ProjectConfig, path: Path) -> None:
    """Erzeugt eine Excel-Vorlage.

    Blätter:
      - 학생명단:  Eingabeblatt mit Kopfzeile und drei Beispielzeilen
      - 작성안내:  Anleitung inkl. aller gültigen Katalog-Labels
    """
    try:
        import openpyxl
        from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
        from openpyxl.utils import get_column_letter
        from openpyxl.worksheet.datavalidation import DataValidation
    except ImportError:
        raise ImportError("openpyxl nicht installiert. Bitte: pip install openpyxl")

    wb = openpyxl.Workbook()

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")
    center = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="BBBBBB")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    # ── Blatt 1: 학생명단 ─────────────────────────────────────────────────────
    ws = wb.active
    ws.title = ROSTER_SHEET
    for col, h in enumerate(TEMPLATE_HEADERS, 1):
        c = ws.cell(row=1, column=col, value=h)
        c.font = hdr_font
        c.fill = hdr_fill
        c.alignment = center
        c.border = border
    for col, width in enumerate([6, 15, 6, 6, 10, 25, 25, 30], 1):
        ws.column_dimensions[get_column_letter(col)].width = width

    examples = [
        [1, "(예시) 홍길동", 1, "남", 3, "리더십, 활동적", "알레르기", ""],
        [2, "(예시) 김영희", 1, "여", 1, "학습우수", "쌍둥이", ""],
        [3, "(예시) 박철수", 2, "남", None, "활동적, 수업방해", "기타:상담필요", ""],
    ]
    for r, values in enumerate(examples, 2):
        for col, val in enumerate(values, 1):
            c = ws.cell(row=r, column=col, value=val)
            c.font = ex_font
            c.border = border

    dv_gender = DataValidation(type="list", formula1='"남,여"', allow_blank=True)
    dv_gender.sqref = "D2:D500"
    ws.add_data_validation(dv_gender)
    dv_class = DataValidation(
        type="whole", operator="between",
        formula1="1", formula2=str(config.current_classes), allow_blank=True,
    )
    dv_class.sqref = "C2:C500"
    ws.add_data_validation(dv_class)

    # ── Blatt 2: 작성안내 ─────────────────────────────────────────────────────
    guide = wb.create_sheet(GUIDE_SHEET)
    behavior_labels = ", ".join(o.label for o in config.behavior_options
                                if o.id != config.behavior_other_id)
    note_labels = ", ".join(o.label for o in config.special_note_options
                            if o.id != config.special_note_other_id)
    guide_rows = [
        ["학생 명단 작성 안내"],
        [],
        ["항목", "설명", "입력 방법"],
        ["번호", "학생 번호", "숫자 (선택)"],
        ["이름", "학생 이름", "한글 이름 입력 (예: 홍길동)"],
        ["학급", "현재 학급", f"1 ~ {config.current_classes} 숫자"],
        ["성별", "학생 성별", '"남" 또는 "여"로 입력'],
        ["석차(선택)", "학생의 석차", "숫자로 입력 (예: 1, 5, 10...)"],
        ["행동특성(선택)", "학생의 행동 특성", "쉼표로 구분하여 입력"],
        ["", "", f"사용 가능 값: {behavior_labels}, 기타:내용"],
        ["특이사항(선택)", "학생의 특이사항", "쉼표로 구분하여 입력"],
        ["", "", f"사용 가능 값: {note_labels}, 기타:내용"],
        ["메모(선택)", "자유 메모", ""],
        [],
        ['- 기타 항목: "기타:내용"과 같이 "기타:" 접두사 사용'],
        ['- "(예시)"로 시작하는 행은 가져오지 않습니다.'],
    ]
    for r, values in enumerate(guide_rows, 1):
        for col, val in enumerate(values, 1):
            guide.cell(row=r, column=col, value=val)
    guide.cell(row=1, column=1).font = Font(bold=True, size=13)
    for col in range(1, 4):
        guide.cell(row=3, column=col).font = Font(bold=True)
    guide.column_dimensions["A"].width = 16
    guide.column_dimensions["B"].width = 20
    guide.column_dimensions["C"].width = 80

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
