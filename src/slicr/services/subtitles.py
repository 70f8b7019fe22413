"""SRT subtitle generation from word timings."""

import logging
from collections.abc import Iterable
from pathlib import Path

from slicr.models.transcript import TranscriptWord

logger = logging.getLogger(__name__)


def seconds_to_srt_time(seconds: float) -> str:
    """Convert seconds to SRT time format (HH:MM:SS,mmm)."""
    ms = int(round(seconds * 1000))
    hours = ms // 3_600_000
    ms %= 3_600_000
    minutes = ms // 60_000
    ms %= 60_000
    secs = ms // 1_000
    millis = ms % 1_000
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def build_srt(words: Iterable[TranscriptWord]) -> str:
    """Render one cue per word.

    Words with invalid or inverted timestamps, or no text after trimming,
    are skipped; cue numbers stay sequential.
    """
    lines: list[str] = []
    index = 0
    for word in words:
        if not word.is_valid:
            continue
        index += 1
        lines.append(str(index))
        lines.append(f"{seconds_to_srt_time(word.start)} --> {seconds_to_srt_time(word.end)}")
        lines.append(word.text.strip())
        lines.append("")  # blank line between entries

    return "\n".join(lines)


def write_srt(words: Iterable[TranscriptWord], output_path: Path) -> Path | None:
    """Write an SRT file, or nothing when no word makes a cue.

    Returns:
        The written path, or None if there were no usable words
    """
    content = build_srt(words)
    if not content:
        return None

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content + "\n", encoding="utf-8")
    logger.info("Wrote SRT to '%s'", output_path)
    return output_path
