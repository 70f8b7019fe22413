"""Sample-level silence detection.

Finds runs of below-threshold samples and reports them as padded
``SilenceInterval`` objects. Used by the preview endpoint and the CLI to
show what the server-side ``silenceremove`` pass will cut.
"""

from collections.abc import Sequence

import numpy as np

from slicr.models.silence import SilenceInterval


def db_to_amplitude(threshold_db: float) -> float:
    """Convert a dBFS threshold to a linear amplitude."""
    return float(10 ** (threshold_db / 20.0))


def _silent_runs(silent: np.ndarray) -> list[tuple[int, int]]:
    """Return ``(start, end)`` sample indices of every run of True values."""
    bounded = np.concatenate(([False], silent, [False]))
    edges = np.flatnonzero(np.diff(bounded.astype(np.int8)))
    return list(zip(edges[0::2].tolist(), edges[1::2].tolist()))


def detect_silence(
    samples: Sequence[float] | np.ndarray,
    sample_rate: int,
    threshold_db: float,
    min_duration: float,
    padding_start: float = 0.0,
    padding_end: float = 0.0,
) -> list[SilenceInterval]:
    """Detect silent intervals in a block of samples.

    A sample is silent while its absolute value is below the threshold.
    Runs shorter than ``min_duration`` are treated as audible. Padding
    shrinks each run inward and never moves an edge past the opposite one;
    runs that padding consumes entirely are dropped.

    Args:
        samples: Mono samples, or a 2-D ``(frames, channels)`` array whose
            first channel is used as the reference
        sample_rate: Samples per second
        threshold_db: Silence threshold in dBFS (positive values never match)
        min_duration: Minimum silence length in seconds
        padding_start: Seconds kept audible after the preceding sound
        padding_end: Seconds kept audible before the following sound

    Returns:
        Time-ordered, non-overlapping intervals in seconds

    Raises:
        ValueError: If sample_rate or min_duration is not positive
    """
    if sample_rate <= 0:
        raise ValueError("sample_rate must be positive")
    if min_duration <= 0:
        raise ValueError("min_duration must be positive")
    if threshold_db > 0:
        return []

    data = np.asarray(samples, dtype=np.float64)
    if data.ndim > 1:
        data = data[:, 0]
    if data.size == 0:
        return []

    threshold = db_to_amplitude(threshold_db)
    min_samples = min_duration * sample_rate
    pad_start = max(padding_start, 0.0) * sample_rate
    pad_end = max(padding_end, 0.0) * sample_rate

    intervals: list[SilenceInterval] = []
    for run_start, run_end in _silent_runs(np.abs(data) < threshold):
        if run_end - run_start < min_samples:
            continue

        padded_start = min(max(run_start + pad_start, run_start), run_end)
        padded_end = max(min(run_end - pad_end, run_end), run_start)
        if padded_end <= padded_start:
            continue

        intervals.append(
            SilenceInterval(
                start=padded_start / sample_rate,
                end=padded_end / sample_rate,
            )
        )

    return intervals
