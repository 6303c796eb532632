"""Tests für Balance-Bericht und Zuteilungs-Diff."""

import json
from pathlib import Path

import pytest

from analysis.balance_report import BalanceAnalyzer, BalanceReport
from analysis.diff import diff_assignments
from config.defaults import default_project_config
from models.project_data import ProjectData
from models.relationship import RelationType, Relationship
from models.student import Gender, Student


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _make_mini_data() -> ProjectData:
    config = default_project_config().model_copy(update={"target_classes": 3})

    def s(sid, name, target, gender, **kw):
        return Student(id=sid, name=name, current_class=1, target_class=target,
                       gender=gender, **kw)

    students = [
        s("a", "강민준", 1, Gender.MALE, behaviors=["disruptive"], special_notes=["adhd"]),
        s("b", "김서연", 1, Gender.FEMALE, behaviors=["leadership"], student_rank=2),
        s("c", "박도윤", 1, Gender.MALE, student_rank=4),
        s("d", "이하은", 2, Gender.FEMALE, behaviors=["distracted"]),
        s("e", "최지호", None, Gender.MALE),
    ]
    relationships = [
        Relationship(id="r1", student_id="a", target_student_id="c",
                     type=RelationType.CONFLICT),
        Relationship(id="r2", student_id="b", target_student_id="d",
                     type=RelationType.FRIENDLY),
    ]
    return ProjectData(config=config, students=students, relationships=relationships)


# ─── Fixtures ─────────────────────────────────────────────────────────────────

@pytest.fixture(scope="module")
def mini_data() -> ProjectData:
    return _make_mini_data()


@pytest.fixture(scope="module")
def mini_report(mini_data: ProjectData) -> BalanceReport:
    return BalanceAnalyzer().analyze(mini_data)


# ─── BALANCE-BERICHT ──────────────────────────────────────────────────────────

class TestBalanceReport:
    def test_class_stats_for_all_targets(self, mini_report: BalanceReport):
        assert [s.class_number for s in mini_report.class_stats] == [1, 2, 3]
        assert [s.total for s in mini_report.class_stats] == [3, 1, 0]

    def test_unassigned(self, mini_report: BalanceReport):
        assert mini_report.total_students == 5
        assert mini_report.unassigned == 1

    def test_spreads(self, mini_report: BalanceReport):
        assert mini_report.headcount_spread == 3
        # Klasse 1: 2♂/1♀ → 1; Klasse 2: 0♂/1♀ → 1; Klasse 3: 0
        assert mini_report.gender_spread == 1
        # Klasse 1: 20 − 5 + 0 = 15; Klasse 2: 5; Klasse 3: 0
        assert mini_report.difficulty_spread == 15

    def test_conflicts_in_class(self, mini_report: BalanceReport):
        assert mini_report.total_conflicts_in_class == 1
        assert mini_report.class_stats[0].conflict_count == 1
        # Freundschaft b–d über Klassengrenze zählt nirgends
        assert all(s.friendly_count == 0 for s in mini_report.class_stats)

    def test_level_distribution(self, mini_report: BalanceReport):
        dist = mini_report.level_distribution
        assert dist[1] == {1: 1, 2: 0, 3: 0, 4: 1, 5: 1}
        assert dist[2] == {1: 0, 2: 0, 3: 1, 4: 0, 5: 0}
        assert sum(dist[3].values()) == 0

    def test_print_rich_runs(self, mini_report: BalanceReport):
        """print_rich läuft ohne Fehler durch."""
        BalanceAnalyzer().print_rich(mini_report)


# ─── DIFF ─────────────────────────────────────────────────────────────────────

class TestAssignmentDiff:
    def test_diff_no_changes(self, mini_data: ProjectData):
        diff = diff_assignments(mini_data, mini_data)
        assert diff.is_empty()
        assert diff.changes == []

    def test_diff_moved_assigned_unassigned(self, mini_data: ProjectData):
        after = mini_data.apply_assignments({"a": 2, "e": 3, "d": None})
        diff = diff_assignments(mini_data, after)
        assert [(c.student_id, c.old_class, c.new_class) for c in diff.moved] == [("a", 1, 2)]
        assert [c.student_id for c in diff.newly_assigned] == ["e"]
        assert [c.student_id for c in diff.unassigned] == ["d"]
        assert not diff.is_empty()

    def test_diff_students_added_removed(self, mini_data: ProjectData):
        extra = Student(id="f", name="정우진", current_class=2, gender=Gender.MALE)
        after = mini_data.model_copy(update={
            "students": [s for s in mini_data.students if s.id != "e"] + [extra],
        })
        diff = diff_assignments(mini_data, after)
        assert diff.students_added == ["f"]
        assert diff.students_removed == ["e"]

    def test_diff_json_format(self, mini_data: ProjectData, tmp_path: Path):
        """to_json liefert valides JSON mit allen Abschnitten."""
        after = mini_data.move_student("c", 3)
        diff = diff_assignments(mini_data, after)
        out = tmp_path / "diff.json"
        out.write_text(diff.to_json(), encoding="utf-8")
        parsed = json.loads(out.read_text(encoding="utf-8"))
        assert parsed["moved"][0]["student_id"] == "c"
        assert parsed["moved"][0]["new_class"] == 3
        assert "newly_assigned" in parsed
