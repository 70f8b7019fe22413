"""Music catalog backed by a NocoDB table."""

import logging
from typing import Any

import httpx

from slicr.errors import CatalogError
from slicr.models.music import MusicTrack

logger = logging.getLogger(__name__)

# NocoDB column names
_COL_ID = "Id"
_COL_TITLE = "Title"
_COL_DESCRIPTION = "Description"
_COL_MOOD = "Mood"
_COL_LUFS = "Lufs"
_COL_DURATION = "Duration"
_COL_URL = "Url (S3)"


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def record_to_track(record: dict[str, Any]) -> MusicTrack | None:
    """Map a NocoDB row to a MusicTrack; rows without id, title or URL are dropped."""
    track_id = record.get(_COL_ID)
    title = record.get(_COL_TITLE)
    url = record.get(_COL_URL)
    if track_id is None or not title or not url:
        return None

    return MusicTrack(
        id=str(track_id),
        title=str(title),
        description=str(record.get(_COL_DESCRIPTION) or ""),
        mood=str(record.get(_COL_MOOD) or ""),
        loudness_lufs=_optional_float(record.get(_COL_LUFS)),
        duration_seconds=_optional_float(record.get(_COL_DURATION)),
        source_url=str(url),
    )


class NocoDBMusicCatalog:
    """Read-only client for the music track table."""

    def __init__(
        self,
        api_url: str | None,
        auth_token: str | None,
        table_id: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/") if api_url else None
        self._auth_token = auth_token
        self.table_id = table_id
        self.timeout = timeout
        self._transport = transport

        if not self.is_available:
            logger.warning("NocoDBMusicCatalog: connection details missing, catalog unavailable")

    @property
    def is_available(self) -> bool:
        return bool(self.api_url and self._auth_token)

    async def list_tracks(self) -> list[MusicTrack]:
        """Fetch every track in the table.

        Raises:
            CatalogError: If the catalog is unconfigured or the request fails
        """
        records = await self._query({"limit": 1000})
        tracks = [t for t in (record_to_track(r) for r in records) if t is not None]
        logger.info("Fetched %d music tracks", len(tracks))
        return tracks

    async def get_track(self, track_id: str) -> MusicTrack | None:
        """Fetch one track by id; None if it does not exist.

        Raises:
            CatalogError: If the catalog is unconfigured or the request fails
        """
        if not track_id:
            return None
        records = await self._query({"where": f"({_COL_ID},eq,{track_id})"})
        for record in records:
            track = record_to_track(record)
            if track is not None and track.id == str(track_id):
                return track
        logger.info("Music track %s not found", track_id)
        return None

    async def _query(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        if not self.is_available:
            raise CatalogError("Music catalog connection details are not configured")

        url = f"{self.api_url}/tables/{self.table_id}/records"
        headers = {"xc-token": self._auth_token or ""}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(url, params=params, headers=headers)
            except httpx.RequestError as e:
                raise CatalogError(f"Failed to connect to music catalog: {e}") from e

        if response.status_code != 200:
            raise CatalogError(
                f"Music catalog returned {response.status_code}: {response.text[:500]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise CatalogError("Music catalog returned invalid JSON") from e

        records = data.get("list") if isinstance(data, dict) else None
        if not isinstance(records, list):
            logger.warning("Unexpected music catalog response format: %r", data)
            return []
        return records
