"""Music catalog endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from slicr.api.deps import get_catalog
from slicr.api.schemas import MusicTrackItem, MusicTracksResponse
from slicr.services.interfaces import IMusicCatalog

router = APIRouter(tags=["music"])


@router.get("/api/music-tracks", response_model=MusicTracksResponse)
async def list_music_tracks(
    catalog: IMusicCatalog = Depends(get_catalog),
) -> MusicTracksResponse:
    tracks = await catalog.list_tracks()
    return MusicTracksResponse(tracks=[MusicTrackItem.from_track(t) for t in tracks])
