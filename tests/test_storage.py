"""
tests/test_storage.py
Storage coordinator tests: entity mapping, atomic save, read-back and cascade.
"""

from datetime import date

import pytest

from thoughtlog.core.errors import DatabaseError, NotFoundError, ValidationError
from thoughtlog.models.defaults import AccomplishmentImpact, IdeaStatus
from thoughtlog.models.segments import AnalysisSegment, ExtractionConfig
from thoughtlog.processing.extractor import extract_segments
from thoughtlog.processing.storage import map_priority, map_segment

from conftest import count_rows


FULL_PAYLOAD = [
    {"type": "todo", "text": "Book dentist", "priority": "high", "confidence": 0.9},
    {"type": "todo", "text": "Water plants"},
    {"type": "idea", "text": "Voice journal app", "category": "product"},
    {"type": "learning", "text": "SQLite cascades deletes", "topic": "databases"},
    {"type": "accomplishment", "text": "Finished the marathon"},
]


def assert_empty(db):
    assert count_rows(db) == {
        "logs": 0,
        "todos": 0,
        "ideas": 0,
        "learnings": 0,
        "accomplishments": 0,
    }


# ── MAPPING ──────────────────────────────────────────────────

class TestMapping:

    @pytest.mark.parametrize(
        "label, expected",
        [("high", 1), ("medium", 2), ("low", 3), ("HIGH", 1), (None, 2), ("urgent", 2), (3, 3)],
    )
    def test_priority(self, label, expected):
        assert map_priority(label) == expected

    def test_idea_category_becomes_tag(self):
        _, values = map_segment({"type": "idea", "text": "x", "category": "work"})
        assert values["tags"] == ["work"]
        assert values["status"] is IdeaStatus.RAW

    def test_idea_without_category_has_no_tags(self):
        _, values = map_segment({"type": "idea", "text": "x"})
        assert values["tags"] is None

    def test_learning_topic_becomes_category(self):
        _, values = map_segment(AnalysisSegment(type="learning", text="x", topic="python"))
        assert values["category"] == "python"

    def test_accomplishment_default_impact(self):
        _, values = map_segment({"type": "accomplishment", "text": "x"})
        assert values["impact"] is AccomplishmentImpact.MEDIUM

    def test_todo_confidence_is_normalized(self):
        _, values = map_segment({"type": "todo", "text": "x", "confidence": 80})
        assert values["confidence"] == pytest.approx(0.8)
        assert values["completed"] is False

    def test_processed_segment_reads_extras(self):
        segment = extract_segments(
            [{"type": "task", "text": "x", "priority": "low"}], ExtractionConfig()
        ).segments[0]
        _, values = map_segment(segment)
        assert values["priority"] == 3

    def test_metadata_is_not_read_for_fields(self):
        _, values = map_segment(
            {"type": "todo", "text": "x", "metadata": {"priority": "low"}}
        )
        assert values["priority"] == 2

    def test_non_numeric_confidence(self):
        with pytest.raises(ValidationError):
            map_segment({"type": "todo", "text": "x", "confidence": "high"})

    def test_unknown_type_is_skipped(self):
        assert map_segment({"type": "reminder", "text": "x"}) is None


# ── SAVE ─────────────────────────────────────────────────────

class TestSaveAnalysisResult:

    def test_scenario_high_priority_todo(self, storage):
        result = storage.save_analysis_result(
            "Finish report", [{"type": "todo", "text": "Finish report", "priority": "high"}]
        )
        assert result.todos[0].priority == 1
        assert result.todos[0].log_id == result.id

    def test_scenario_no_segments(self, storage):
        result = storage.save_analysis_result("Just a note", [])
        assert result.id is not None
        assert result.todos == []
        assert result.ideas == []
        assert result.learnings == []
        assert result.accomplishments == []

    def test_scenario_over_length_transcript(self, storage, db):
        with pytest.raises(ValidationError):
            storage.save_analysis_result("A" * 15000, [{"type": "todo", "text": "x"}])
        assert_empty(db)

    def test_scenario_delete_cascades(self, storage, db):
        result = storage.save_analysis_result(
            "Two todos and an idea",
            [
                {"type": "todo", "text": "One"},
                {"type": "todo", "text": "Two"},
                {"type": "idea", "text": "Three"},
            ],
        )
        storage.delete_log(result.id)
        assert db.get_todos_by_log_id(result.id) == []
        assert db.get_ideas_by_log_id(result.id) == []
        assert storage.get_log_with_segments(result.id) is None

    def test_full_mapping(self, storage):
        result = storage.save_analysis_result(
            "Long day", FULL_PAYLOAD, audio_path="/audio/1.wav", date="2024-05-01"
        )
        assert result.date == "2024-05-01"
        assert result.audio_path == "/audio/1.wav"
        assert result.transcript == "Long day"
        assert result.pending_analysis is False
        assert [(t.text, t.priority) for t in result.todos] == [
            ("Book dentist", 1),
            ("Water plants", 2),
        ]
        assert result.todos[0].confidence == pytest.approx(0.9)
        assert result.ideas[0].tags == ["product"]
        assert result.ideas[0].status is IdeaStatus.RAW
        assert result.learnings[0].category == "databases"
        assert result.accomplishments[0].impact is AccomplishmentImpact.MEDIUM

    def test_default_date_is_today(self, storage):
        result = storage.save_analysis_result("x", [])
        assert result.date == date.today().isoformat()

    def test_round_trip(self, storage):
        saved = storage.save_analysis_result("Round trip", FULL_PAYLOAD)
        assert storage.get_log_with_segments(saved.id) == saved

    def test_foreign_keys_point_at_parent(self, storage):
        result = storage.save_analysis_result("FK", FULL_PAYLOAD)
        children = [*result.todos, *result.ideas, *result.learnings, *result.accomplishments]
        assert len(children) == 5
        assert {child.log_id for child in children} == {result.id}

    def test_cardinality_counts_resolved_segments(self, storage):
        segments = FULL_PAYLOAD + [
            {"type": "reminder", "text": "unresolvable"},
            {"type": "TASK", "text": "synonym"},
        ]
        result = storage.save_analysis_result("Cardinality", segments)
        assert result.segment_count == 6

    def test_accepts_processed_segments(self, storage):
        extraction = extract_segments(FULL_PAYLOAD)
        result = storage.save_analysis_result("Processed", extraction.segments)
        assert result.segment_count == 5
        assert result.todos[0].priority == 1
        assert result.learnings[0].category == "databases"

    def test_invalid_child_rolls_back_everything(self, storage, db):
        segments = [
            {"type": "todo", "text": "Valid todo"},
            {"type": "idea", "text": "Valid idea"},
            {"type": "learning", "text": "x" * 1001},
        ]
        with pytest.raises(ValidationError):
            storage.save_analysis_result("Short transcript", segments)
        assert_empty(db)

    def test_blank_child_text_rolls_back(self, storage, db):
        with pytest.raises(ValidationError):
            storage.save_analysis_result(
                "x", [{"type": "todo", "text": "ok"}, {"type": "idea", "text": "  "}]
            )
        assert_empty(db)

    def test_storage_failure_rolls_back(self, storage, db, monkeypatch):
        def broken(*args, **kwargs):
            raise DatabaseError("disk on fire")

        monkeypatch.setattr(db, "create_accomplishment", broken)
        with pytest.raises(DatabaseError):
            storage.save_analysis_result("x", FULL_PAYLOAD)
        assert_empty(db)

    def test_non_numeric_confidence_rolls_back(self, storage, db):
        with pytest.raises(ValidationError):
            storage.save_analysis_result(
                "t", [{"type": "todo", "text": "x", "confidence": "high"}]
            )
        assert_empty(db)

    def test_non_string_transcript(self, storage):
        with pytest.raises(ValidationError):
            storage.save_analysis_result(None, [])


class TestSaveExtraction:

    def test_encoded_payload(self, storage):
        payload = '{"transcript": "t", "segments": [{"type": "todo", "text": "a", "confidence": 0.2}]}'
        result = storage.save_extraction("t", payload, ExtractionConfig())
        assert len(result.todos) == 1

    def test_min_confidence_applies(self, storage):
        payload = {
            "segments": [
                {"type": "todo", "text": "confident", "confidence": 90},
                {"type": "todo", "text": "unsure", "confidence": 10},
            ]
        }
        result = storage.save_extraction("t", payload, ExtractionConfig(min_confidence=0.5))
        assert [t.text for t in result.todos] == ["confident"]


# ── PENDING LOGS ─────────────────────────────────────────────

class TestPendingTransitions:

    def test_complete_pending_analysis(self, storage, db):
        log = db.create_log("2024-01-01", pending_analysis=True)
        storage.record_analysis_failure(log.id, "network down")

        result = storage.complete_pending_analysis(log.id, "Recovered transcript", FULL_PAYLOAD)
        assert result.id == log.id
        assert result.pending_analysis is False
        assert result.last_error is None
        assert result.transcript == "Recovered transcript"
        assert result.segment_count == 5

    def test_complete_missing_log(self, storage, db):
        with pytest.raises(NotFoundError):
            storage.complete_pending_analysis(99, "x", FULL_PAYLOAD)
        assert_empty(db)

    def test_failed_completion_keeps_log_pending(self, storage, db):
        log = db.create_log("2024-01-01", pending_analysis=True)
        with pytest.raises(ValidationError):
            storage.complete_pending_analysis(log.id, "x", [{"type": "todo", "text": "y" * 600}])
        unchanged = db.get_log_by_id(log.id)
        assert unchanged.pending_analysis is True
        assert unchanged.transcript is None
        assert count_rows(db)["todos"] == 0

    def test_record_failure(self, storage, db):
        log = db.create_log("2024-01-01", pending_analysis=True)
        failed = storage.record_analysis_failure(log.id, TimeoutError("took too long"))
        assert failed.retry_count == 1
        assert failed.last_error == "took too long"
        assert failed.pending_analysis is True


# ── READS ────────────────────────────────────────────────────

class TestReads:

    def test_missing_log_is_none(self, storage):
        assert storage.get_log_with_segments(1) is None

    def test_delete_missing_log(self, storage):
        with pytest.raises(NotFoundError):
            storage.delete_log(1)

    def test_all_logs_empty(self, storage):
        assert storage.get_all_logs_with_segments() == []

    def test_all_logs_paginated(self, storage):
        for day in range(1, 4):
            storage.save_analysis_result(
                f"Day {day}", [{"type": "todo", "text": f"t{day}"}], date=f"2024-01-0{day}"
            )
        page = storage.get_all_logs_with_segments(limit=2)
        assert [log.transcript for log in page] == ["Day 3", "Day 2"]
        assert page[0].todos[0].text == "t3"
        rest = storage.get_all_logs_with_segments(limit=2, offset=2)
        assert [log.transcript for log in rest] == ["Day 1"]
