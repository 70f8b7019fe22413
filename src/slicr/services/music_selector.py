"""Background music selection: manual id or transcript-driven classification."""

import logging

from slicr.models.music import MusicTrack
from slicr.services.interfaces import IMusicCatalog, ITrackClassifier

logger = logging.getLogger(__name__)

_SELECTION_PROMPT = """\
You are choosing background music for a voice-over recording.

Transcript of the recording:
<transcript>
{transcript}
</transcript>

Available music tracks:
{catalog}

Pick the single track whose mood best fits the transcript.
Reply with the exact title of one track from the list above and nothing else.
"""


def format_catalog(tracks: list[MusicTrack]) -> str:
    """Number each track as ``N. title — description [mood]``."""
    return "\n".join(f"{i}. {track.catalog_line()}" for i, track in enumerate(tracks, start=1))


def build_selection_prompt(transcript: str, tracks: list[MusicTrack]) -> str:
    return _SELECTION_PROMPT.format(transcript=transcript.strip(), catalog=format_catalog(tracks))


def match_reply(reply: str, tracks: list[MusicTrack]) -> MusicTrack | None:
    """Return the track whose title equals the reply exactly.

    Only surrounding whitespace is ignored. Anything else, including a
    near-miss, is no match.
    """
    answer = reply.strip()
    for track in tracks:
        if track.title == answer:
            return track
    return None


class MusicSelector:
    """Decides which catalog track, if any, accompanies a recording.

    A manual id wins. Otherwise the transcript and the catalog go to the
    classifier once; the reply must name an existing title exactly or no
    music is used.
    """

    def __init__(
        self,
        catalog: IMusicCatalog,
        classifier: ITrackClassifier | None = None,
    ) -> None:
        self._catalog = catalog
        self._classifier = classifier

    async def select(
        self,
        manual_track_id: str | None,
        auto_select: bool,
        transcript: str | None,
    ) -> MusicTrack | None:
        """Choose a track.

        Args:
            manual_track_id: Explicit catalog id, takes precedence
            auto_select: Whether to ask the classifier
            transcript: Transcript text for the classifier prompt

        Returns:
            The chosen track, or None to proceed without music

        Raises:
            ServiceUnavailableError: If the catalog or classifier call fails
        """
        if manual_track_id:
            track = await self._catalog.get_track(manual_track_id)
            if track is None:
                logger.warning("Manual music track %s not found; skipping music", manual_track_id)
            return track

        if not auto_select:
            logger.info("No music track requested")
            return None

        return await self.auto_select(transcript)

    async def auto_select(self, transcript: str | None) -> MusicTrack | None:
        if self._classifier is None or not self._classifier.is_available:
            logger.info("No classifier configured; skipping music")
            return None
        if not transcript or not transcript.strip():
            logger.info("No transcript available; skipping music")
            return None

        tracks = await self._catalog.list_tracks()
        if not tracks:
            logger.info("Music catalog is empty; skipping music")
            return None

        prompt = build_selection_prompt(transcript, tracks)
        reply = await self._classifier.classify(prompt)

        track = match_reply(reply, tracks)
        if track is None:
            logger.warning("Classifier reply %r matches no catalog title; skipping music", reply[:200])
            return None

        logger.info("Classifier selected track %s (%s)", track.id, track.title)
        return track
