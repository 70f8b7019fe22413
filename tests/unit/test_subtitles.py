"""Tests for SRT generation."""

from pathlib import Path

from slicr.models.transcript import TranscriptWord
from slicr.services.subtitles import build_srt, seconds_to_srt_time, write_srt


def _word(text: str, start: float, end: float) -> TranscriptWord:
    return TranscriptWord(text=text, start=start, end=end)


class TestSrtTime:
    def test_zero(self) -> None:
        assert seconds_to_srt_time(0) == "00:00:00,000"

    def test_hours_minutes_millis(self) -> None:
        assert seconds_to_srt_time(3661.5) == "01:01:01,500"

    def test_rounds_to_millisecond(self) -> None:
        assert seconds_to_srt_time(1.2344) == "00:00:01,234"
        assert seconds_to_srt_time(59.9996) == "00:01:00,000"


class TestBuildSrt:
    def test_one_cue_per_word(self) -> None:
        srt = build_srt([_word("Hello", 0.0, 0.4), _word("world", 0.5, 0.9)])
        assert srt == (
            "1\n00:00:00,000 --> 00:00:00,400\nHello\n\n"
            "2\n00:00:00,500 --> 00:00:00,900\nworld\n"
        )

    def test_invalid_words_skipped_and_numbering_stays_sequential(self) -> None:
        words = [
            _word("first", 0.0, 0.3),
            _word("   ", 0.3, 0.5),  # empty after trimming
            _word("inverted", 1.0, 0.8),
            _word("negative", -0.2, 0.1),
            _word("nan", float("nan"), 1.0),
            _word("inf", 1.0, float("inf")),
            _word(" second ", 1.2, 1.5),
        ]
        lines = build_srt(words).split("\n")

        assert lines[0] == "1"
        assert lines[2] == "first"
        assert lines[4] == "2"
        assert lines[6] == "second"
        assert "inverted" not in lines

    def test_empty(self) -> None:
        assert build_srt([]) == ""


class TestWriteSrt:
    def test_writes_file(self, tmp_path: Path) -> None:
        path = write_srt([_word("Hi", 0.0, 0.2)], tmp_path / "out.srt")
        assert path == tmp_path / "out.srt"
        assert path.read_text(encoding="utf-8").startswith("1\n00:00:00,000 --> 00:00:00,200\nHi\n")

    def test_no_file_without_cues(self, tmp_path: Path) -> None:
        assert write_srt([_word("", 0.0, 0.2)], tmp_path / "out.srt") is None
        assert not (tmp_path / "out.srt").exists()
