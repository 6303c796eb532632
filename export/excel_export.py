"""Excel-Export des Zuteilungsergebnisses (openpyxl)."""

import logging
from pathlib import Path

from analysis.class_stats import ClassStats, aggregate_all_classes
from analysis.scoring import compute_difficulty
from models.catalog import behavior_catalog, special_note_catalog
from models.project_data import ProjectData
from models.relationship import RelationType
from models.student import Student

from export.helpers import (
    COLORS, class_label, format_rank, format_tags, gender_label,
    sort_key, today_str,
)

logger = logging.getLogger(__name__)


class ResultExporter:
    """Exportiert einen Projektdatensatz in eine Excel-Datei.

    Blätter:
      - 요약:          Projekt-Kopf und Statistik je Zielklasse
      - N반 명단:      ein Blatt pro Zielklasse
      - 학생상세정보:  alle Kinder mit Tags, Score und Stufe
      - 관계분석:      alle Beziehungen mit Klassenlage
    """

    def __init__(self, data: ProjectData):
        self.data = data
        self.config = data.config
        self.behaviors = behavior_catalog(data.config)
        self.notes = special_note_catalog(data.config)
        self.stats: list[ClassStats] = aggregate_all_classes(
            self.config.target_classes, data.students, data.relationships,
            self.behaviors, self.notes,
        )

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Blättern."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        self._sheet_summary(wb)
        for n in self.config.target_class_numbers:
            self._sheet_class(wb, n)
        self._sheet_details(wb)
        self._sheet_relationships(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel-Export geschrieben: {output_path}")

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_header(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Alignment, Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            c = ws.cell(row=row, column=col, value=text)
            c.fill = fill
            c.font = Font(bold=True, color="FFFFFF")
            c.alignment = Alignment(horizontal="center", vertical="center")
            c.border = border

    def _write_row(self, ws, row: int, values: list) -> None:
        border = self._thin_border()
        for col, value in enumerate(values, 1):
            ws.cell(row=row, column=col, value=value).border = border

    def _set_widths(self, ws, widths: list[int]) -> None:
        from openpyxl.utils import get_column_letter
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

    def _members(self, class_number: int) -> list[Student]:
        return sorted(
            (s for s in self.data.students if s.target_class == class_number),
            key=lambda s: (s.name, s.id),
        )

    # ─── Sheet: 요약 ──────────────────────────────────────────────────────────

    def _sheet_summary(self, wb) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="요약", index=0)

        ws.cell(row=1, column=1, value=self.config.project_name).font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value=f"생성일: {today_str()}")
        ws.cell(row=2, column=3, value=f"전체 학생: {len(self.data.students)}명")
        ws.cell(row=2, column=5,
                value=f"미배정: {len(self.data.unassigned_students())}명")

        headers = ["반", "총원", "남", "여", "갈등", "우호", "난이도 점수",
                   "평균 석차", "석차 범위"]
        self._write_header(ws, 4, headers)
        row = 5
        for s in self.stats:
            rank = s.rank_stats
            self._write_row(ws, row, [
                class_label(s.class_number), s.total, s.male, s.female,
                s.conflict_count, s.friendly_count, s.difficulty_score,
                rank.avg if rank else "-",
                f"{rank.min}-{rank.max}" if rank else "-",
            ])
            if s.conflict_count:
                ws.cell(row=row, column=5).fill = self._fill(COLORS["conflict"])
            row += 1

        self._set_widths(ws, [10, 8, 6, 6, 8, 8, 12, 10, 10])

    # ─── Sheet: N반 명단 ──────────────────────────────────────────────────────

    def _sheet_class(self, wb, class_number: int) -> None:
        ws = wb.create_sheet(title=f"{class_number}반 명단")
        headers = ["번호", "이름", "성별", "이전 반", "석차", "행동특성", "특이사항",
                   "난이도", "메모"]
        self._write_header(ws, 1, headers)

        row = 2
        for i, s in enumerate(self._members(class_number), 1):
            result = compute_difficulty(s, self.behaviors, self.notes)
            self._write_row(ws, row, [
                i, s.name, gender_label(s.gender), class_label(s.current_class),
                format_rank(s),
                format_tags(s.behaviors, self.behaviors, s.custom_behavior),
                format_tags(s.special_notes, self.notes, s.custom_special_note),
                result.label, s.memo or "",
            ])
            ws.cell(row=row, column=8).fill = self._fill(COLORS[result.style])
            row += 1

        self._set_widths(ws, [6, 12, 6, 8, 6, 30, 30, 8, 30])

    # ─── Sheet: 학생상세정보 ──────────────────────────────────────────────────

    def _sheet_details(self, wb) -> None:
        ws = wb.create_sheet(title="학생상세정보")
        headers = ["이름", "성별", "이전 반", "배정 반", "석차", "행동특성", "특이사항",
                   "난이도 점수", "난이도", "메모"]
        self._write_header(ws, 1, headers)

        students = sorted(
            self.data.students,
            key=lambda s: (s.target_class is None, s.target_class or 0, sort_key(s)),
        )
        row = 2
        for s in students:
            result = compute_difficulty(s, self.behaviors, self.notes)
            self._write_row(ws, row, [
                s.name, gender_label(s.gender), class_label(s.current_class),
                class_label(s.target_class), format_rank(s),
                format_tags(s.behaviors, self.behaviors, s.custom_behavior),
                format_tags(s.special_notes, self.notes, s.custom_special_note),
                result.score, result.label, s.memo or "",
            ])
            ws.cell(row=row, column=9).fill = self._fill(COLORS[result.style])
            row += 1

        self._set_widths(ws, [12, 6, 8, 8, 6, 30, 30, 10, 8, 30])

    # ─── Sheet: 관계분석 ──────────────────────────────────────────────────────

    def _sheet_relationships(self, wb) -> None:
        ws = wb.create_sheet(title="관계분석")
        headers = ["학생", "배정 반", "관계", "대상 학생", "대상 배정 반", "같은 반"]
        self._write_header(ws, 1, headers)

        by_id = self.data.students_by_id()
        row = 2
        for r in self.data.relationships:
            a = by_id.get(r.student_id)
            b = by_id.get(r.target_student_id)
            if a is None or b is None:
                continue
            same = a.target_class is not None and a.target_class == b.target_class
            is_conflict = r.type == RelationType.CONFLICT
            self._write_row(ws, row, [
                a.name, class_label(a.target_class),
                "갈등" if is_conflict else "우호",
                b.name, class_label(b.target_class),
                "예" if same else "아니오",
            ])
            if same:
                color = COLORS["conflict"] if is_conflict else COLORS["friendly"]
                ws.cell(row=row, column=6).fill = self._fill(color)
            row += 1

        self._set_widths(ws, [12, 10, 8, 12, 12, 8])
