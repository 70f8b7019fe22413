"""Streaming download of remote audio files."""

import asyncio
import logging
from pathlib import Path
from urllib.parse import urlparse

import httpx

from slicr.errors import DownloadError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https"}


def url_suffix(url: str, default: str = ".bin") -> str:
    """File extension of the URL path, for naming the local copy."""
    suffix = Path(urlparse(url).path).suffix.lower()
    if suffix and len(suffix) <= 6 and suffix[1:].isalnum():
        return suffix
    return default


async def download_to_path(
    url: str,
    dest: Path,
    timeout: float | None = 120.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Path:
    """Download ``url`` into ``dest``.

    Args:
        url: http(s) URL to fetch
        dest: Destination file; removed again if the download fails
        timeout: Per-operation timeout in seconds
        transport: Optional httpx transport (tests)

    Returns:
        The destination path

    Raises:
        DownloadError: If the URL is unsupported, unreachable, returns a
            non-2xx status or an empty body
    """
    if urlparse(url).scheme.lower() not in _ALLOWED_SCHEMES:
        raise DownloadError(f"Unsupported URL scheme: {url}")

    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    try:
        async with httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, transport=transport
        ) as client:
            async with client.stream("GET", url) as response:
                if response.status_code >= 400:
                    raise DownloadError(
                        f"Download failed with HTTP {response.status_code}: {url}"
                    )
                with open(dest, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        await asyncio.to_thread(f.write, chunk)
    except httpx.HTTPError as e:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}") from e
    except DownloadError:
        dest.unlink(missing_ok=True)
        raise

    if dest.stat().st_size == 0:
        dest.unlink(missing_ok=True)
        raise DownloadError(f"Downloaded file is empty: {url}")

    logger.info("Downloaded %s (%d bytes)", url, dest.stat().st_size)
    return dest
