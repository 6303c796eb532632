"""Tests für Datenmodelle, Konsistenzprüfung und Testdaten-Generator."""

from pathlib import Path

import pytest

from config.defaults import default_project_config
from data.fake_data import FakeDataGenerator
from models.catalog import TagCatalog, behavior_catalog
from models.project_data import ProjectData
from models.relationship import RelationType, Relationship
from models.student import Gender, Student


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _make_student(sid: str, target=None, **kwargs) -> Student:
    return Student(id=sid, name=f"학생{sid}", current_class=1, target_class=target,
                   gender=Gender.FEMALE, **kwargs)


def _make_data(**kwargs) -> ProjectData:
    defaults = dict(
        config=default_project_config(),
        students=[_make_student("a", 1), _make_student("b", 2), _make_student("c")],
        relationships=[
            Relationship(id="r1", student_id="a", target_student_id="b",
                         type=RelationType.CONFLICT),
        ],
    )
    defaults.update(kwargs)
    return ProjectData(**defaults)


# ─── STUDENT / RELATIONSHIP ───────────────────────────────────────────────────

class TestStudent:
    def test_tags_deduplicated(self):
        s = _make_student("a", behaviors=["active", "leadership", "active"])
        assert s.behaviors == ["active", "leadership"]

    def test_negative_rank_normalized(self):
        assert _make_student("a", student_rank=-3).student_rank is None
        assert _make_student("a", student_rank=4).has_rank

    def test_blank_custom_text_is_none(self):
        s = _make_student("a", custom_behavior="  ", memo="")
        assert s.custom_behavior is None
        assert s.memo is None

    def test_is_assigned(self):
        assert _make_student("a", 3).is_assigned
        assert not _make_student("a").is_assigned


class TestRelationship:
    def test_self_relation_rejected(self):
        with pytest.raises(Exception):
            Relationship(student_id="a", target_student_id="a",
                         type=RelationType.FRIENDLY)

    def test_pair_is_symmetric(self):
        r1 = Relationship(student_id="a", target_student_id="b", type=RelationType.CONFLICT)
        r2 = Relationship(student_id="b", target_student_id="a", type=RelationType.CONFLICT)
        assert r1.pair == r2.pair


# ─── KATALOG ──────────────────────────────────────────────────────────────────

class TestTagCatalog:
    def test_lookup(self):
        cat = behavior_catalog(default_project_config())
        assert cat.score_of("disruptive") == 10
        assert cat.score_of("unknown") == 0
        assert cat.by_label("리더십").id == "leadership"
        assert cat.by_label(" 리더십 ").id == "leadership"
        assert cat.by_label("없음") is None
        assert "leadership" in cat
        assert cat.other_id == "other_behavior"

    def test_labels_keep_order_and_skip_unknown(self):
        cat = behavior_catalog(default_project_config())
        assert cat.labels(["active", "nope", "leadership"]) == ["활동적", "리더십"]

    def test_summary_for_prompts(self):
        cat = TagCatalog(default_project_config().special_note_options)
        entry = next(e for e in cat.summary() if e["id"] == "violence")
        assert entry == {"id": "violence", "label": "학폭관련", "score": 15}


# ─── PROJECTDATA ──────────────────────────────────────────────────────────────

class TestProjectData:
    def test_move_student_returns_new_data(self):
        data = _make_data()
        moved = data.move_student("c", 3)
        assert moved.students_by_id()["c"].target_class == 3
        assert data.students_by_id()["c"].target_class is None

    def test_move_to_none_unassigns(self):
        moved = _make_data().move_student("a", None)
        assert moved.students_by_id()["a"].target_class is None
        assert len(moved.unassigned_students()) == 2

    def test_move_last_write_wins(self):
        data = _make_data().move_student("a", 2).move_student("a", 4)
        assert data.students_by_id()["a"].target_class == 4

    def test_move_out_of_range(self):
        with pytest.raises(ValueError):
            _make_data().move_student("a", 5)

    def test_move_unknown_student(self):
        with pytest.raises(KeyError):
            _make_data().move_student("zzz", 1)

    def test_apply_assignments_ignores_unknown(self):
        data = _make_data().apply_assignments({"c": 4, "ghost": 1})
        assert data.students_by_id()["c"].target_class == 4
        assert len(data.students) == 3

    def test_summary_mentions_counts(self):
        text = _make_data().summary()
        assert "Kinder: 3" in text
        assert "Zugeteilt: 2/3" in text

    def test_with_config_replaces_stored_config(self):
        config = default_project_config().model_copy(update={"target_classes": 6})
        data = _make_data().with_config(config)
        assert data.config.target_classes == 6
        assert data.move_student("c", 6).students_by_id()["c"].target_class == 6


class TestEditing:
    def test_add_student(self):
        data = _make_data().add_student(_make_student("d", 3))
        assert [s.id for s in data.students] == ["a", "b", "c", "d"]

    def test_add_student_duplicate_id(self):
        with pytest.raises(ValueError):
            _make_data().add_student(_make_student("a"))

    def test_update_student_revalidates(self):
        """Änderungen laufen durch die Student-Validatoren."""
        data = _make_data().update_student(
            "a", behaviors=["leadership", "leadership"], student_rank=0, memo="  ",
        )
        a = data.students_by_id()["a"]
        assert a.behaviors == ["leadership"]
        assert a.student_rank is None
        assert a.memo is None
        assert a.target_class == 1

    def test_update_student_unknown_and_id_change(self):
        with pytest.raises(KeyError):
            _make_data().update_student("zzz", memo="x")
        with pytest.raises(ValueError):
            _make_data().update_student("a", id="b")

    def test_remove_student_drops_relationships(self):
        data = _make_data().remove_student("b")
        assert [s.id for s in data.students] == ["a", "c"]
        assert data.relationships == []
        assert data.validate_data().is_valid

    def test_remove_unknown_student(self):
        with pytest.raises(KeyError):
            _make_data().remove_student("zzz")

    def test_add_relationship(self):
        data = _make_data().add_relationship("b", "c", RelationType.FRIENDLY)
        new = data.relationships[-1]
        assert new.id == "r002"
        assert (new.student_id, new.target_student_id) == ("b", "c")
        assert new.type == RelationType.FRIENDLY
        assert [r.id for r in data.relationships_of("b")] == ["r1", "r002"]

    def test_add_relationship_ids_count_up(self):
        data = ProjectData(config=default_project_config(),
                           students=[_make_student("a"), _make_student("b")])
        data = data.add_relationship("a", "b", RelationType.CONFLICT)
        data = data.add_relationship("b", "a", RelationType.CONFLICT)
        assert [r.id for r in data.relationships] == ["r001", "r002"]
        # Doppelt erfasst: erlaubt, aber als Warnung gemeldet
        assert data.validate_data().warnings

    def test_add_relationship_unknown_endpoint(self):
        with pytest.raises(KeyError):
            _make_data().add_relationship("a", "ghost", RelationType.CONFLICT)

    def test_add_relationship_self(self):
        with pytest.raises(ValueError):
            _make_data().add_relationship("a", "a", RelationType.FRIENDLY)

    def test_remove_relationship(self):
        data = _make_data().remove_relationship("r1")
        assert data.relationships == []
        with pytest.raises(KeyError):
            data.remove_relationship("r1")


class TestValidation:
    def test_valid_data(self):
        report = _make_data().validate_data()
        assert report.is_valid
        assert report.errors == []

    def test_target_out_of_range_is_error(self):
        data = _make_data(students=[_make_student("a", 9)], relationships=[])
        report = data.validate_data()
        assert not report.is_valid
        assert any("Zielklasse 9" in e for e in report.errors)

    def test_unknown_relationship_endpoint(self):
        data = _make_data(relationships=[
            Relationship(id="r9", student_id="a", target_student_id="ghost",
                         type=RelationType.FRIENDLY),
        ])
        report = data.validate_data()
        assert not report.is_valid
        assert any("ghost" in e for e in report.errors)

    def test_duplicate_relationship_warns(self):
        rels = [
            Relationship(student_id="a", target_student_id="b", type=RelationType.CONFLICT),
            Relationship(student_id="b", target_student_id="a", type=RelationType.CONFLICT),
        ]
        report = _make_data(relationships=rels).validate_data()
        assert report.is_valid
        assert any("2×" in w for w in report.warnings)

    def test_duplicate_student_id(self):
        data = _make_data(students=[_make_student("a"), _make_student("a")],
                          relationships=[])
        assert not data.validate_data().is_valid

    def test_unknown_tag_warns(self):
        data = _make_data(students=[_make_student("a", behaviors=["flying"])],
                          relationships=[])
        report = data.validate_data()
        assert report.is_valid
        assert any("flying" in w for w in report.warnings)


class TestPersistence:
    def test_json_roundtrip(self, tmp_path: Path):
        data = _make_data()
        path = tmp_path / "sub" / "project.json"
        data.save_json(path)
        loaded = ProjectData.load_json(path)
        assert loaded.students == data.students
        assert loaded.relationships == data.relationships
        assert loaded.created_at is not None
        assert loaded.modified_at is not None

    def test_load_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ProjectData.load_json(tmp_path / "missing.json")


# ─── TESTDATEN-GENERATOR ──────────────────────────────────────────────────────

class TestFakeData:
    def test_generate_counts(self):
        config = default_project_config()
        data = FakeDataGenerator(config, seed=1).generate(num_students=60)
        assert len(data.students) == 60
        assert {s.current_class for s in data.students} == {1, 2, 3, 4}
        assert all(s.target_class is None for s in data.students)
        assert data.relationships

    def test_reproducible(self):
        config = default_project_config()
        a = FakeDataGenerator(config, seed=7).generate(num_students=30)
        b = FakeDataGenerator(config, seed=7).generate(num_students=30)
        assert a.students == b.students
        assert a.relationships == b.relationships

    def test_generated_data_is_consistent(self):
        config = default_project_config()
        data = FakeDataGenerator(config, seed=3).generate(num_students=80, assign=True)
        report = data.validate_data()
        assert report.is_valid, report.errors
        assert report.warnings == []
        assert all(config.is_valid_target(s.target_class) for s in data.students)

    def test_ranks_unique_per_class(self):
        config = default_project_config()
        data = FakeDataGenerator(config, seed=5).generate(num_students=40)
        for cls in range(1, 5):
            ranks = [s.student_rank for s in data.students
                     if s.current_class == cls and s.student_rank is not None]
            assert len(ranks) == len(set(ranks))
