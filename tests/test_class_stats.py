"""Tests für die Klassen-Statistik (Zielklassen)."""

import pytest

from analysis.class_stats import aggregate_all_classes, aggregate_class, compute_rank_stats
from config.schema import TagOption
from models.catalog import TagCatalog
from models.relationship import RelationType, Relationship
from models.student import Gender, Student


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _make_catalogs() -> tuple[TagCatalog, TagCatalog]:
    behaviors = TagCatalog([
        TagOption(id="leadership", label="리더십", score=-5),
        TagOption(id="distracted", label="산만함", score=5),
    ])
    notes = TagCatalog([TagOption(id="twins", label="쌍둥이", score=3)])
    return behaviors, notes


def _s(sid: str, target, gender=Gender.MALE, rank=None, **kwargs) -> Student:
    return Student(id=sid, name=sid.upper(), current_class=1, target_class=target,
                   gender=gender, student_rank=rank, **kwargs)


def _rel(a: str, b: str, rtype=RelationType.CONFLICT) -> Relationship:
    return Relationship(student_id=a, target_student_id=b, type=rtype)


# ─── EINZELNE KLASSE ──────────────────────────────────────────────────────────

class TestAggregateClass:
    def test_end_to_end_difficulty(self):
        """A (리더십, -5) + B (산만함, +5) in Klasse 1 → Summe 0."""
        b, n = _make_catalogs()
        students = [
            _s("a", 1, Gender.MALE, behaviors=["leadership"]),
            _s("b", 1, Gender.FEMALE, behaviors=["distracted"]),
        ]
        stats = aggregate_class(1, students, [], b, n)
        assert stats.total == 2
        assert stats.difficulty_score == 0
        assert stats.male == 1
        assert stats.female == 1

    def test_conflict_inside_class(self):
        """Konflikt A–B zählt nur, solange beide in derselben Klasse sind."""
        b, n = _make_catalogs()
        rels = [_rel("a", "b")]
        together = [_s("a", 1), _s("b", 1)]
        assert aggregate_class(1, together, rels, b, n).conflict_count == 1

        apart = [_s("a", 1), _s("b", 2)]
        assert aggregate_class(1, apart, rels, b, n).conflict_count == 0
        assert aggregate_class(2, apart, rels, b, n).conflict_count == 0

    def test_friendly_counted_separately(self):
        b, n = _make_catalogs()
        students = [_s("a", 1), _s("b", 1), _s("c", 1)]
        rels = [_rel("a", "b"), _rel("b", "c", RelationType.FRIENDLY)]
        stats = aggregate_class(1, students, rels, b, n)
        assert stats.conflict_count == 1
        assert stats.friendly_count == 1

    def test_duplicate_relationship_counted_twice(self):
        b, n = _make_catalogs()
        students = [_s("a", 1), _s("b", 1)]
        stats = aggregate_class(1, students, [_rel("a", "b"), _rel("b", "a")], b, n)
        assert stats.conflict_count == 2

    def test_unassigned_not_counted(self):
        b, n = _make_catalogs()
        stats = aggregate_class(1, [_s("a", 1), _s("b", None)], [_rel("a", "b")], b, n)
        assert stats.total == 1
        assert stats.conflict_count == 0

    def test_tag_histograms(self):
        b, n = _make_catalogs()
        students = [
            _s("a", 1, behaviors=["leadership", "distracted"], special_notes=["twins"]),
            _s("b", 1, behaviors=["distracted"], special_notes=["twins"]),
            _s("c", 2, behaviors=["distracted"]),
        ]
        stats = aggregate_class(1, students, [], b, n)
        assert stats.behavior_counts == {"leadership": 1, "distracted": 2}
        assert stats.special_note_counts == {"twins": 2}

    def test_empty_class(self):
        b, n = _make_catalogs()
        stats = aggregate_class(3, [], [], b, n)
        assert stats.total == 0
        assert stats.male == 0
        assert stats.female == 0
        assert stats.behavior_counts == {}
        assert stats.difficulty_score == 0
        assert stats.rank_stats is None


# ─── RÄNGE ────────────────────────────────────────────────────────────────────

class TestRankStats:
    def test_ranks_1_3_5(self):
        """Ränge 1, 3, 5 → count 3, min 1, max 5, Ø 3.0; ohne Rang zählt nicht."""
        b, n = _make_catalogs()
        students = [_s("a", 2, rank=1), _s("b", 2, rank=3), _s("c", 2, rank=5),
                    _s("d", 2)]
        rs = aggregate_class(2, students, [], b, n).rank_stats
        assert rs is not None
        assert (rs.count, rs.min, rs.max, rs.avg) == (3, 1, 5, 3.0)

    def test_none_without_ranks(self):
        assert compute_rank_stats([_s("a", 1), _s("b", 1)]) is None

    def test_zero_rank_ignored(self):
        """Rang 0 wird bei der Validierung zu None normalisiert."""
        student = _s("a", 1, rank=0)
        assert student.student_rank is None
        assert compute_rank_stats([student]) is None

    def test_average_rounded_to_one_decimal(self):
        rs = compute_rank_stats([_s("a", 1, rank=1), _s("b", 1, rank=2),
                                 _s("c", 1, rank=2)])
        assert rs.avg == pytest.approx(1.7)

    def test_min_avg_max_ordering(self):
        rs = compute_rank_stats([_s(str(i), 1, rank=r) for i, r in enumerate([7, 2, 9, 4])])
        assert rs.min <= rs.avg <= rs.max


# ─── ALLE KLASSEN ─────────────────────────────────────────────────────────────

class TestAggregateAllClasses:
    def test_all_classes_present(self):
        """Klassen 1..N erscheinen lückenlos, auch leere."""
        b, n = _make_catalogs()
        stats = aggregate_all_classes(4, [_s("a", 2)], [], b, n)
        assert [s.class_number for s in stats] == [1, 2, 3, 4]
        assert [s.total for s in stats] == [0, 1, 0, 0]

    def test_empty_inputs(self):
        b, n = _make_catalogs()
        stats = aggregate_all_classes(3, [], [], b, n)
        assert len(stats) == 3
        assert all(s.total == 0 and s.rank_stats is None for s in stats)

    def test_headcount_preserved(self):
        """Summe der Klassengrößen + Nicht-Zugeteilte = alle Kinder."""
        b, n = _make_catalogs()
        students = [_s(f"s{i}", (i % 4) or None) for i in range(13)]
        stats = aggregate_all_classes(3, students, [], b, n)
        unassigned = sum(1 for s in students if s.target_class is None)
        assert unassigned == 4
        assert sum(s.total for s in stats) + unassigned == len(students)

    def test_matches_single_class(self):
        """Ein Durchlauf liefert dasselbe wie aggregate_class pro Klasse."""
        b, n = _make_catalogs()
        students = [
            _s("a", 1, Gender.FEMALE, rank=2, behaviors=["distracted"]),
            _s("b", 1, rank=4, special_notes=["twins"]),
            _s("c", 2, behaviors=["leadership"]),
            _s("d", 2, Gender.FEMALE, rank=1),
            _s("e", None),
        ]
        rels = [_rel("a", "b"), _rel("c", "d", RelationType.FRIENDLY), _rel("a", "c")]
        all_stats = aggregate_all_classes(2, students, rels, b, n)
        for stats in all_stats:
            assert stats == aggregate_class(stats.class_number, students, rels, b, n)

    def test_cross_class_relationship_counts_nowhere(self):
        b, n = _make_catalogs()
        stats = aggregate_all_classes(2, [_s("a", 1), _s("b", 2)], [_rel("a", "b")], b, n)
        assert [s.conflict_count for s in stats] == [0, 0]

    def test_prompt_dict_uses_camel_case(self):
        b, n = _make_catalogs()
        stats = aggregate_all_classes(1, [_s("a", 1, rank=3)], [], b, n)
        d = stats[0].to_prompt_dict()
        assert d["classNumber"] == 1
        assert d["difficultyScore"] == 0
        assert d["rankStats"] == {"count": 1, "min": 3, "max": 3, "avg": 3.0}
