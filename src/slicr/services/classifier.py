"""Claude-backed text classifier used to pick background music."""

import logging

import anthropic

from slicr.errors import ClassifierError

logger = logging.getLogger(__name__)


class ClaudeTrackClassifier:
    """Sends one prompt to the Anthropic API and returns the text reply.

    Gracefully handles a missing API key by marking itself as unavailable
    rather than crashing.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        timeout: float = 60.0,
        max_tokens: int = 100,
    ) -> None:
        """Initialize the classifier.

        Args:
            api_key: Anthropic API key.
            model: Claude model to use.
            timeout: Request timeout in seconds.
            max_tokens: Reply budget; a title is short.
        """
        self._model = model
        self._max_tokens = max_tokens
        self._available = bool(api_key)

        if self._available:
            self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            self._client = None
            logger.warning("ClaudeTrackClassifier: No API key found, classifier unavailable")

    @property
    def name(self) -> str:
        return "claude"

    @property
    def is_available(self) -> bool:
        """Whether the Claude API key is configured."""
        return self._available

    async def classify(self, prompt: str) -> str:
        """Return the model's raw text reply to ``prompt``.

        Raises:
            ClassifierError: If the classifier is unavailable or the call fails.
        """
        if not self._available or self._client is None:
            raise ClassifierError("Claude classifier is not available (no API key)")

        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise ClassifierError(f"Claude API error: {exc}") from exc

        raw_text = ""
        for block in response.content:
            if block.type == "text":
                raw_text += block.text
        return raw_text
