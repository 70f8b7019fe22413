"""Tests for background music selection and the Claude classifier."""

from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from slicr.errors import ClassifierError
from slicr.models.music import MusicTrack
from slicr.services.classifier import ClaudeTrackClassifier
from slicr.services.music_selector import MusicSelector, build_selection_prompt, format_catalog, match_reply

TRACKS = [
    MusicTrack(
        id="1",
        title="Calm Piano",
        description="Soft keys",
        mood="calm",
        loudness_lufs=-18.0,
        duration_seconds=120.0,
        source_url="https://cdn.example.com/calm.mp3",
    ),
    MusicTrack(
        id="2",
        title="Upbeat Pop",
        description="Bright synths",
        mood="happy",
        source_url="https://cdn.example.com/pop.mp3",
    ),
]


def _catalog(tracks: list[MusicTrack] = TRACKS) -> MagicMock:
    catalog = MagicMock()
    catalog.is_available = True
    catalog.list_tracks = AsyncMock(return_value=list(tracks))
    catalog.get_track = AsyncMock(side_effect=lambda tid: next((t for t in tracks if t.id == tid), None))
    return catalog


def _classifier(reply: str, available: bool = True) -> MagicMock:
    classifier = MagicMock()
    classifier.is_available = available
    classifier.classify = AsyncMock(return_value=reply)
    return classifier


class TestPrompt:
    def test_format_catalog_numbers_tracks(self) -> None:
        assert format_catalog(TRACKS) == (
            "1. Calm Piano — Soft keys [calm]\n"
            "2. Upbeat Pop — Bright synths [happy]"
        )

    def test_prompt_embeds_transcript_and_catalog(self) -> None:
        prompt = build_selection_prompt("  A quiet story about rain.  ", TRACKS)
        assert "<transcript>\nA quiet story about rain.\n</transcript>" in prompt
        assert "2. Upbeat Pop — Bright synths [happy]" in prompt
        assert "exact title" in prompt


class TestMatchReply:
    def test_exact(self) -> None:
        assert match_reply("Calm Piano", TRACKS) is TRACKS[0]

    def test_surrounding_whitespace_ignored(self) -> None:
        assert match_reply("\n  Upbeat Pop \n", TRACKS) is TRACKS[1]

    @pytest.mark.parametrize("reply", ["calm piano", "Calm Piano.", "\"Calm Piano\"", "1. Calm Piano", "Calm", ""])
    def test_near_misses_rejected(self, reply: str) -> None:
        assert match_reply(reply, TRACKS) is None


class TestMusicSelector:
    @pytest.mark.asyncio
    async def test_manual_id(self) -> None:
        classifier = _classifier("Upbeat Pop")
        selector = MusicSelector(_catalog(), classifier)

        track = await selector.select(manual_track_id="1", auto_select=False, transcript="hello")

        assert track is TRACKS[0]
        classifier.classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_manual_id_not_found(self) -> None:
        selector = MusicSelector(_catalog(), _classifier("Calm Piano"))
        assert await selector.select(manual_track_id="42", auto_select=False, transcript="hi") is None

    @pytest.mark.asyncio
    async def test_nothing_requested(self) -> None:
        catalog = _catalog()
        selector = MusicSelector(catalog, _classifier("Calm Piano"))
        assert await selector.select(manual_track_id=None, auto_select=False, transcript="hi") is None
        catalog.list_tracks.assert_not_called()

    @pytest.mark.asyncio
    async def test_auto_select_exact_reply(self) -> None:
        classifier = _classifier(" Upbeat Pop\n")
        selector = MusicSelector(_catalog(), classifier)

        track = await selector.select(manual_track_id=None, auto_select=True, transcript="Great news!")

        assert track is TRACKS[1]
        classifier.classify.assert_awaited_once()
        assert "Great news!" in classifier.classify.call_args.args[0]

    @pytest.mark.asyncio
    async def test_auto_select_unknown_title(self) -> None:
        classifier = _classifier("Calm Piano (Extended Mix)")
        selector = MusicSelector(_catalog(), classifier)

        assert await selector.select(None, True, "Great news!") is None
        classifier.classify.assert_awaited_once()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("transcript", [None, "", "   "])
    async def test_auto_select_without_transcript(self, transcript: str | None) -> None:
        classifier = _classifier("Calm Piano")
        selector = MusicSelector(_catalog(), classifier)

        assert await selector.select(None, True, transcript) is None
        classifier.classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_auto_select_empty_catalog(self) -> None:
        classifier = _classifier("Calm Piano")
        selector = MusicSelector(_catalog([]), classifier)

        assert await selector.select(None, True, "text") is None
        classifier.classify.assert_not_called()

    @pytest.mark.asyncio
    async def test_auto_select_without_classifier(self) -> None:
        catalog = _catalog()
        assert await MusicSelector(catalog, None).select(None, True, "text") is None
        assert await MusicSelector(catalog, _classifier("Calm Piano", available=False)).select(None, True, "text") is None
        catalog.list_tracks.assert_not_called()


class TestClaudeTrackClassifier:
    def test_unavailable_without_key(self) -> None:
        classifier = ClaudeTrackClassifier(api_key=None)
        assert not classifier.is_available
        assert classifier.name == "claude"

    @pytest.mark.asyncio
    async def test_unavailable_raises(self) -> None:
        with pytest.raises(ClassifierError):
            await ClaudeTrackClassifier(api_key=None).classify("prompt")

    @pytest.mark.asyncio
    async def test_classify_joins_text_blocks(self) -> None:
        classifier = ClaudeTrackClassifier(api_key="sk-ant-test", model="claude-test")
        response = MagicMock()
        response.content = [
            MagicMock(type="text", text="Calm "),
            MagicMock(type="tool_use"),
            MagicMock(type="text", text="Piano"),
        ]
        create = AsyncMock(return_value=response)
        classifier._client.messages.create = create

        assert await classifier.classify("pick one") == "Calm Piano"
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["messages"] == [{"role": "user", "content": "pick one"}]

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        classifier = ClaudeTrackClassifier(api_key="sk-ant-test")
        error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))
        classifier._client.messages.create = AsyncMock(side_effect=error)

        with pytest.raises(ClassifierError, match="Claude API error"):
            await classifier.classify("pick one")
