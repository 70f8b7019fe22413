"""FFmpeg filter graph builders and the arithmetic behind them."""

# atempo accepts rates in this range in a single instance
MIN_TEMPO_RATE = 0.5
MAX_TEMPO_RATE = 100.0

# Rates at or below this are treated as "no change"
TEMPO_APPLY_THRESHOLD = 1.001

MIN_STOP_DURATION = 0.01


def effective_min_duration(min_duration: float, left_padding: float, right_padding: float) -> float:
    """Silence length passed to ``silenceremove`` once padding is kept."""
    return max(MIN_STOP_DURATION, min_duration - left_padding - right_padding)


def should_remove_silence(min_duration: float, left_padding: float, right_padding: float) -> bool:
    """Whether the silence-removal filter runs at all.

    With padding present, the filter is skipped once the padding leaves
    nothing shorter than ``min_duration`` to cut. Without padding the
    filter always runs at ``min_duration``.
    """
    if left_padding + right_padding <= 0:
        return True
    return effective_min_duration(min_duration, left_padding, right_padding) < min_duration


def silence_filter(threshold_db: float, stop_duration: float) -> str:
    return (
        f"silenceremove=stop_periods=-1"
        f":stop_duration={stop_duration:.4f}"
        f":stop_threshold={threshold_db:g}dB"
    )


def compute_playback_rate(
    probed_duration: float | None,
    target_duration: float | None,
    tolerance: float = 0.01,
) -> float | None:
    """Speed-up rate needed to reach ``target_duration``.

    Returns None when no tempo pass should run: no target, unknown
    duration, already short enough, or a rate too close to 1.
    """
    if target_duration is None or target_duration <= 0:
        return None
    if probed_duration is None or probed_duration <= 0:
        return None
    if probed_duration - target_duration <= tolerance:
        return None

    rate = probed_duration / target_duration
    rate = max(MIN_TEMPO_RATE, min(MAX_TEMPO_RATE, rate))
    if rate <= TEMPO_APPLY_THRESHOLD:
        return None
    return rate


def tempo_filter(rate: float) -> str:
    return f"atempo={rate:.4f}"


def gain_filter(gain_db: float) -> str:
    return f"volume={gain_db:.2f}dB"


def fade_out_filter(track_duration: float, fade_seconds: float) -> str:
    """Linear fade that ends exactly at the track's natural end."""
    fade = min(fade_seconds, track_duration)
    start = max(0.0, track_duration - fade)
    return f"afade=t=out:st={start:.3f}:d={fade:.3f}"


def trim_filter(duration: float) -> str:
    return f"atrim=start=0:end={duration:.3f},asetpts=PTS-STARTPTS"


def mix_filter(ducking_db: float) -> str:
    """Mix voice (input 0) with music (input 1); output follows the voice length.

    ``normalize=0`` keeps the voice at full level, so ``ducking_db`` is the
    music level relative to it.
    """
    return (
        f"[1:a]volume={ducking_db:.2f}dB[bg];"
        "[0:a][bg]amix=inputs=2:duration=first:dropout_transition=0:normalize=0[out]"
    )
