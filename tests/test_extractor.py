"""
tests/test_extractor.py
Unit tests for batch extraction, statistics and payload decoding.
"""

import json

import pytest

from thoughtlog.core.errors import InvalidResponseStructure, ResponseParseError
from thoughtlog.models.defaults import ConfidenceLevel, SegmentType
from thoughtlog.models.segments import AnalysisResult, ExtractionConfig
from thoughtlog.processing.classifier import process_segment
from thoughtlog.processing.extractor import (
    calculate_stats,
    extract_segments,
    parse_and_extract,
    sort_segments_by_type,
)


MIXED_BATCH = [
    {"type": "accomplishment", "text": "Shipped the release", "confidence": 0.9},
    {"type": "todo", "text": "Low todo", "confidence": 0.4},
    {"type": "idea", "text": "Podcast idea", "confidence": 70},
    {"type": "todo", "text": "High todo", "confidence": 95},
    {"type": "note", "text": "Learned about WAL", "confidence": 0.6},
]


# ── EXTRACT SEGMENTS ─────────────────────────────────────────

class TestExtractSegments:

    def test_sorted_by_type_then_confidence(self):
        result = extract_segments(MIXED_BATCH)
        assert [s.text for s in result.segments] == [
            "High todo",
            "Low todo",
            "Podcast idea",
            "Learned about WAL",
            "Shipped the release",
        ]

    def test_original_order_without_sorting(self):
        result = extract_segments(MIXED_BATCH, ExtractionConfig(sort_by_type=False))
        assert [s.text for s in result.segments] == [r["text"] for r in MIXED_BATCH]

    def test_invalid_fragments_are_skipped(self):
        batch = [
            {"type": "todo", "text": "Keep me"},
            {"type": "reminder", "text": "Unknown type"},
            {"type": "idea", "text": "   "},
            {"type": "idea"},
            "not an object",
            {"type": "learning", "text": "Keep me too"},
        ]
        result = extract_segments(batch)
        assert [s.text for s in result.segments] == ["Keep me", "Keep me too"]
        assert result.skipped == 4
        assert result.stats.total == 2

    def test_min_confidence_filters_after_normalization(self):
        config = ExtractionConfig(min_confidence=0.6)
        result = extract_segments(MIXED_BATCH, config)
        texts = {s.text for s in result.segments}
        assert texts == {"Shipped the release", "Podcast idea", "High todo", "Learned about WAL"}
        # Filtered fragments are not counted as skipped
        assert result.skipped == 0

    def test_percent_confidence_kept_without_normalization(self):
        config = ExtractionConfig(normalize_confidence=False)
        result = extract_segments([{"type": "todo", "text": "x", "confidence": 85}], config)
        assert result.skipped == 0
        assert result.segments[0].confidence == pytest.approx(0.85)

    def test_empty_batch(self):
        result = extract_segments([])
        assert result.segments == []
        assert result.stats.total == 0
        assert result.skipped == 0


# ── STATS ────────────────────────────────────────────────────

class TestCalculateStats:

    def test_empty_list_has_every_category(self):
        stats = calculate_stats([])
        assert stats.total == 0
        assert stats.needs_review == 0
        assert stats.by_type == {t: 0 for t in SegmentType}
        assert stats.by_confidence_level == {level: 0 for level in ConfidenceLevel}

    def test_counts(self):
        segments = extract_segments(MIXED_BATCH).segments
        stats = calculate_stats(segments)
        assert stats.total == 5
        assert stats.by_type[SegmentType.TODO] == 2
        assert stats.by_type[SegmentType.IDEA] == 1
        assert stats.by_type[SegmentType.LEARNING] == 1
        assert stats.by_type[SegmentType.ACCOMPLISHMENT] == 1
        assert stats.by_confidence_level[ConfidenceLevel.HIGH] == 2
        assert stats.by_confidence_level[ConfidenceLevel.MEDIUM] == 2
        assert stats.by_confidence_level[ConfidenceLevel.LOW] == 1
        assert stats.needs_review == 1


class TestSortSegmentsByType:

    def test_stable_for_equal_keys(self):
        segments = [
            process_segment({"type": "idea", "text": "first", "confidence": 0.5}),
            process_segment({"type": "idea", "text": "second", "confidence": 0.5}),
        ]
        assert [s.text for s in sort_segments_by_type(segments)] == ["first", "second"]


# ── PARSE AND EXTRACT ────────────────────────────────────────

class TestParseAndExtract:

    def test_encoded_payload(self):
        payload = json.dumps({"transcript": "t", "segments": [{"type": "todo", "text": "x"}]})
        result = parse_and_extract(payload)
        assert len(result.segments) == 1

    def test_fenced_payload(self):
        payload = '```json\n{"segments": [{"type": "idea", "text": "y"}]}\n```'
        result = parse_and_extract(payload)
        assert result.segments[0].type is SegmentType.IDEA

    def test_decoded_payload(self):
        result = parse_and_extract({"segments": [{"type": "task", "text": "z"}]})
        assert result.segments[0].type is SegmentType.TODO

    def test_model_payload(self):
        payload = AnalysisResult(
            transcript="t", segments=[{"type": "todo", "text": "a", "priority": "high"}]
        )
        result = parse_and_extract(payload)
        assert result.segments[0].extras["priority"] == "high"

    def test_missing_segments_is_structural_error(self):
        with pytest.raises(InvalidResponseStructure):
            parse_and_extract({"transcript": "no segments"})

    def test_segments_not_a_list_is_structural_error(self):
        with pytest.raises(InvalidResponseStructure):
            parse_and_extract('{"segments": "todo"}')

    def test_top_level_array_is_structural_error(self):
        with pytest.raises(InvalidResponseStructure):
            parse_and_extract("[1, 2, 3]")

    def test_malformed_json_is_parse_error(self):
        with pytest.raises(ResponseParseError) as excinfo:
            parse_and_extract('{"segments": [')
        assert not isinstance(excinfo.value, InvalidResponseStructure)

    def test_repair_mode_recovers_trailing_comma(self):
        payload = 'Here you go: {"segments": [{"type": "todo", "text": "x"},]}'
        result = parse_and_extract(payload, ExtractionConfig(repair_json=True))
        assert [s.text for s in result.segments] == ["x"]

    def test_bad_segments_inside_valid_payload_are_skipped(self):
        result = parse_and_extract({"segments": [{"type": "bogus", "text": "x"}]})
        assert result.segments == []
        assert result.skipped == 1
