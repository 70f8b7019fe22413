"""Slicr command-line interface with subcommands.

Usage:
    slicr-cli process <audio|url> [--threshold-db -40] [--min-duration 0.2] [--target-duration 30]
                      [--transcribe] [--format mp3] [--music TRACK_ID | --auto-music] [-d output_dir]
    slicr-cli detect <audio> [--threshold-db -40] [--min-duration 0.2] [--padding 0.0332]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import soundfile as sf
from pydantic import ValidationError

from slicr.config import settings
from slicr.errors import SlicrError
from slicr.models.request import ExportFormat, InputSource, ProcessingRequest
from slicr.pipeline.orchestrator import PipelineOrchestrator
from slicr.services.silence import detect_silence
from slicr.services.storage import LocalObjectStore


def _is_url(value: str) -> bool:
    return value.lower().startswith(("http://", "https://"))


def _build_request(args: argparse.Namespace) -> ProcessingRequest:
    return ProcessingRequest(
        threshold_db=args.threshold_db,
        min_duration=args.min_duration,
        left_padding=args.left_padding,
        right_padding=args.right_padding,
        target_duration=args.target_duration,
        transcribe=args.transcribe,
        export_format=ExportFormat(args.format),
        add_music=bool(args.music or args.auto_music),
        auto_select_music=args.auto_music,
        music_track_id=args.music,
        music_ducking_db=args.ducking_db,
    )


# --- process subcommand ---


async def cmd_process(args: argparse.Namespace) -> None:
    """Run the full pipeline on a local file or URL."""
    try:
        request = _build_request(args)
    except ValidationError as e:
        print(f"Error: invalid options\n{e}", file=sys.stderr)
        sys.exit(2)

    store = None
    if args.output_dir:
        output_dir = Path(args.output_dir).resolve()
        store = LocalObjectStore(root=output_dir, base_url=output_dir.as_uri())

    orchestrator = PipelineOrchestrator.from_settings(settings, store=store)

    if _is_url(args.input):
        source = InputSource(url=args.input)
        print(f"Processing {args.input}")
        result = await orchestrator.run(request, source)
    else:
        input_path = Path(args.input).resolve()
        if not input_path.exists():
            print(f"Error: file not found: {input_path}", file=sys.stderr)
            sys.exit(1)
        print(f"Processing {input_path.name}")
        with open(input_path, "rb") as f:
            source = InputSource(upload=f, filename=input_path.name)
            result = await orchestrator.run(request, source)

    for name, stage in result.stages.items():
        line = f"  {name:<16} {stage.status.value}"
        if stage.elapsed is not None:
            line += f" {stage.elapsed:.2f}s"
        if stage.message:
            line += f" ({stage.message})"
        print(line)

    if result.dropped_features:
        print(f"\nWarning: completed without {', '.join(result.dropped_features)}")

    print(f"\nAudio: {result.audio_url}")
    if result.srt_url:
        print(f"Subtitles: {result.srt_url}")


# --- detect subcommand ---


def cmd_detect(args: argparse.Namespace) -> None:
    """Print silence intervals of a local audio file as JSON."""
    audio_path = Path(args.input).resolve()
    if not audio_path.exists():
        print(f"Error: file not found: {audio_path}", file=sys.stderr)
        sys.exit(1)

    try:
        samples, sample_rate = sf.read(str(audio_path), dtype="float32")
    except sf.LibsndfileError as e:
        print(f"Error: cannot read {audio_path.name}: {e}", file=sys.stderr)
        sys.exit(1)

    intervals = detect_silence(
        samples,
        sample_rate,
        threshold_db=args.threshold_db,
        min_duration=args.min_duration,
        padding_start=args.padding,
        padding_end=args.padding,
    )

    payload = {
        "file": audio_path.name,
        "sampleRate": sample_rate,
        "duration": round(len(samples) / sample_rate, 6),
        "intervals": [i.model_dump() for i in intervals],
    }
    print(json.dumps(payload, indent=2))


def _add_silence_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--threshold-db", type=float, default=-40.0, help="Silence threshold in dBFS (default: -40)")
    parser.add_argument("--min-duration", type=float, default=0.2, help="Minimum silence length in seconds (default: 0.2)")


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="slicr-cli",
        description="Slicr - voice-over silence removal and finishing",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show pipeline logs")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- process ---
    p_process = subparsers.add_parser("process", help="Run the full processing pipeline")
    p_process.add_argument("input", type=str, help="Input audio file or http(s) URL")
    _add_silence_options(p_process)
    p_process.add_argument("--left-padding", type=float, default=0.0332, help="Silence kept before speech (s)")
    p_process.add_argument("--right-padding", type=float, default=0.0332, help="Silence kept after speech (s)")
    p_process.add_argument("--target-duration", type=float, help="Speed up to fit this many seconds")
    p_process.add_argument("--transcribe", action="store_true", help="Generate SRT subtitles")
    p_process.add_argument("--format", choices=[f.value for f in ExportFormat], default="wav", help="Output format (default: wav)")
    music = p_process.add_mutually_exclusive_group()
    music.add_argument("--music", type=str, help="Catalog id of the background track")
    music.add_argument("--auto-music", action="store_true", help="Let the classifier pick a track")
    p_process.add_argument("--ducking-db", type=float, help="Music level under the voice in dB")
    p_process.add_argument("-d", "--output-dir", type=str, help="Publish into this local directory")

    # --- detect ---
    p_detect = subparsers.add_parser("detect", help="Print silence intervals as JSON")
    p_detect.add_argument("input", type=str, help="Input audio file")
    _add_silence_options(p_detect)
    p_detect.add_argument("--padding", type=float, default=0.0, help="Padding kept on each side (s)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Dispatch
    try:
        if args.command == "process":
            asyncio.run(cmd_process(args))
        elif args.command == "detect":
            cmd_detect(args)
    except (SlicrError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
