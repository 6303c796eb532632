"""Tests für den Aufwands-Score und die 5-stufige Einordnung."""

import itertools

import pytest

from analysis.scoring import (
    LEVEL_LABELS,
    compute_difficulty,
    difficulty_score,
    level_for_score,
)
from config.schema import TagOption
from config.defaults import default_project_config
from models.catalog import TagCatalog, behavior_catalog, special_note_catalog
from models.student import Gender, Student


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _make_catalogs() -> tuple[TagCatalog, TagCatalog]:
    behaviors = TagCatalog([
        TagOption(id="leadership", label="리더십", score=-5),
        TagOption(id="distracted", label="산만함", score=5),
        TagOption(id="disruptive", label="수업방해", score=10),
        TagOption(id="other_behavior", label="기타", score=1),
    ], other_id="other_behavior")
    notes = TagCatalog([
        TagOption(id="adhd", label="ADHD", score=10),
        TagOption(id="gifted", label="영재", score=-2),
        TagOption(id="other_note", label="기타", score=1),
    ], other_id="other_note")
    return behaviors, notes


def _make_student(**kwargs) -> Student:
    defaults = dict(id="s1", name="테스트", current_class=1, gender=Gender.MALE)
    defaults.update(kwargs)
    return Student(**defaults)


# ─── SCORE ────────────────────────────────────────────────────────────────────

class TestDifficultyScore:
    def test_no_tags_is_zero_level_4(self):
        """Ohne Tags: Score 0, Stufe 4 '하'."""
        b, n = _make_catalogs()
        result = compute_difficulty(_make_student(), b, n)
        assert result.score == 0
        assert result.level == 4
        assert result.label == "하"

    def test_sum_of_both_catalogs(self):
        """Verhalten und Besonderheiten werden addiert."""
        b, n = _make_catalogs()
        s = _make_student(behaviors=["distracted", "disruptive"], special_notes=["adhd"])
        assert difficulty_score(s, b, n) == 25

    def test_negative_scores_mitigate(self):
        b, n = _make_catalogs()
        s = _make_student(behaviors=["leadership"], special_notes=["gifted"])
        result = compute_difficulty(s, b, n)
        assert result.score == -7
        assert result.level == 5
        assert result.label == "양호"

    def test_unknown_ids_count_zero(self):
        """Unbekannte Katalog-IDs zählen 0 und werfen keinen Fehler."""
        b, n = _make_catalogs()
        s = _make_student(behaviors=["distracted", "does_not_exist"],
                          special_notes=["also_unknown"])
        assert difficulty_score(s, b, n) == 5

    def test_custom_text_adds_one_each(self):
        """Freitext zu "기타" zählt zusätzlich je +1."""
        b, n = _make_catalogs()
        s = _make_student(
            behaviors=["other_behavior"], custom_behavior="지각 잦음",
            special_notes=["other_note"], custom_special_note="상담 필요",
        )
        # 1 + 1 (Katalog) + 1 + 1 (Freitext)
        assert difficulty_score(s, b, n) == 4

    def test_blank_custom_text_does_not_count(self):
        b, n = _make_catalogs()
        s = _make_student(behaviors=["other_behavior"], custom_behavior="   ")
        assert difficulty_score(s, b, n) == 1

    def test_order_independent(self):
        """Reihenfolge der Tags ändert das Ergebnis nicht."""
        b, n = _make_catalogs()
        tags = ["leadership", "distracted", "disruptive"]
        results = {
            compute_difficulty(_make_student(behaviors=list(p)), b, n)
            for p in itertools.permutations(tags)
        }
        assert len(results) == 1

    def test_order_independent_special_notes(self):
        b, n = _make_catalogs()
        notes = ["adhd", "gifted", "other_note"]
        results = {
            compute_difficulty(
                _make_student(behaviors=["distracted"], special_notes=list(p)), b, n,
            )
            for p in itertools.permutations(notes)
        }
        assert len(results) == 1

    def test_deterministic(self):
        b, n = _make_catalogs()
        s = _make_student(behaviors=["disruptive"], special_notes=["adhd"])
        assert compute_difficulty(s, b, n) == compute_difficulty(s, b, n)

    def test_alternate_catalog_changes_score(self):
        """Kataloge werden übergeben, nicht global gelesen."""
        _, n = _make_catalogs()
        heavy = TagCatalog([TagOption(id="distracted", label="산만함", score=20)])
        s = _make_student(behaviors=["distracted"])
        assert compute_difficulty(s, heavy, n).level == 1

    def test_default_catalogs(self):
        """Mit den eingebauten Katalogen: 수업방해 + ADHD = 20 → 최상."""
        config = default_project_config()
        s = _make_student(behaviors=["disruptive"], special_notes=["adhd"])
        result = compute_difficulty(s, behavior_catalog(config), special_note_catalog(config))
        assert result.score == 20
        assert result.label == "최상"


# ─── STUFEN ───────────────────────────────────────────────────────────────────

class TestLevels:
    @pytest.mark.parametrize("score,level", [
        (1000, 1), (20, 1), (19, 2), (10, 2), (9, 3), (5, 3),
        (4, 4), (0, 4), (-1, 5), (-50, 5),
    ])
    def test_boundaries(self, score: int, level: int):
        assert level_for_score(score)[0] == level

    def test_labels(self):
        assert [LEVEL_LABELS[i] for i in range(1, 6)] == ["최상", "상", "중", "하", "양호"]

    def test_style_per_level(self):
        """Jede Stufe hat eine Darstellungsklasse (1 = danger … 5 = safe)."""
        b, n = _make_catalogs()
        top = compute_difficulty(_make_student(behaviors=["disruptive"],
                                               special_notes=["adhd"]), b, n)
        low = compute_difficulty(_make_student(behaviors=["leadership"]), b, n)
        assert top.style == "danger"
        assert low.style == "safe"
