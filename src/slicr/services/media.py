"""FFmpeg-backed audio stage runner."""

import asyncio
import json
import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from slicr.errors import FFmpegError

logger = logging.getLogger(__name__)

# Keep the tail of stderr; ffmpeg prints its banner first.
_STDERR_TAIL = 2000


class AudioStageRunner:
    """Runs one ffmpeg filter/encode operation per call.

    Every call is a single awaited subprocess. Failures surface as
    ``FFmpegError`` carrying the tool's stderr, and a failed call never
    leaves its output path behind.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        timeout: float | None = 300.0,
        probe_timeout: float | None = 30.0,
    ) -> None:
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.timeout = timeout
        self.probe_timeout = probe_timeout

    def build_command(
        self,
        input_paths: Sequence[Path],
        filter_graph: str | None,
        output_path: Path,
        output_options: Sequence[str] = (),
    ) -> list[str]:
        """Build the ffmpeg argument list for one stage."""
        if not input_paths:
            raise ValueError("At least one input path is required")

        cmd = [self.ffmpeg_path, "-y", "-hide_banner", "-nostdin"]
        for path in input_paths:
            cmd.extend(["-i", str(path)])

        if filter_graph:
            if len(input_paths) == 1:
                cmd.extend(["-af", filter_graph])
            else:
                cmd.extend(["-filter_complex", filter_graph])

        cmd.extend(output_options)
        cmd.append(str(output_path))
        return cmd

    async def run(
        self,
        input_paths: Sequence[Path],
        filter_graph: str | None,
        output_path: Path,
        output_options: Sequence[str] = (),
    ) -> Path:
        """Run ffmpeg and wait for it to finish.

        Args:
            input_paths: Input files, in ``-i`` order
            filter_graph: Filter for ``-af`` (one input) or ``-filter_complex``
            output_path: Destination file
            output_options: Extra arguments placed before the output path

        Returns:
            The output path

        Raises:
            FFmpegError: If ffmpeg fails, times out, or writes nothing
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(input_paths, filter_graph, output_path, output_options)

        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            self._discard(output_path)
            raise FFmpegError(
                f"ffmpeg timed out after {self.timeout}s",
                stderr=_decode(e.stderr),
            ) from e
        except OSError as e:
            self._discard(output_path)
            raise FFmpegError(f"ffmpeg could not be started: {e}") from e

        if result.returncode != 0:
            self._discard(output_path)
            stderr = result.stderr[-_STDERR_TAIL:]
            raise FFmpegError(
                f"ffmpeg failed (exit {result.returncode})",
                stderr=stderr,
            )

        if not output_path.exists() or output_path.stat().st_size == 0:
            self._discard(output_path)
            raise FFmpegError(
                f"ffmpeg produced no output: {output_path.name}",
                stderr=result.stderr[-_STDERR_TAIL:],
            )

        return output_path

    async def probe_duration(self, path: Path) -> float:
        """Return the duration of a media file in seconds using ffprobe.

        Raises:
            FFmpegError: If ffprobe fails or reports no usable duration
        """
        cmd = [
            self.ffprobe_path,
            "-v", "quiet",
            "-print_format", "json",
            "-show_format",
            str(path),
        ]

        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
                text=True,
                timeout=self.probe_timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise FFmpegError(f"ffprobe timed out after {self.probe_timeout}s") from e
        except OSError as e:
            raise FFmpegError(f"ffprobe could not be started: {e}") from e

        if result.returncode != 0:
            raise FFmpegError(
                f"ffprobe failed (exit {result.returncode})",
                stderr=result.stderr[-_STDERR_TAIL:],
            )

        try:
            data = json.loads(result.stdout)
            duration = float(data["format"]["duration"])
        except (ValueError, KeyError, TypeError) as e:
            raise FFmpegError(f"ffprobe reported no duration for {Path(path).name}") from e

        if duration <= 0:
            raise FFmpegError(f"ffprobe reported non-positive duration for {Path(path).name}")
        return duration

    @staticmethod
    def _discard(path: Path) -> None:
        """Remove partial output so callers can treat the path as absent."""
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove partial output %s: %s", path, e)


def _decode(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        stream = stream.decode("utf-8", errors="replace")
    return stream[-_STDERR_TAIL:]
