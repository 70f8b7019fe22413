"""Temporary artifact tracking for a single pipeline run."""

import logging
import shutil
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


class ResourceLedger:
    """Owns every temporary path a pipeline run creates.

    Stages register paths the moment they are chosen, before anything is
    written to them. ``release_all`` removes whatever still exists and only
    acts the first time it is called.
    """

    def __init__(self, owner: str = "") -> None:
        self._owner = owner
        self._paths: list[Path] = []
        self._released = False

    def track(self, path: Path | str) -> Path:
        """Register a path for removal and return it."""
        if self._released:
            raise RuntimeError("ResourceLedger already released")
        path = Path(path)
        if path not in self._paths:
            self._paths.append(path)
        return path

    @property
    def paths(self) -> list[Path]:
        """Tracked paths in registration order."""
        return list(self._paths)

    @property
    def released(self) -> bool:
        return self._released

    def release_all(self) -> None:
        """Delete every tracked path that still exists.

        Individual deletion failures are logged, never raised.
        """
        if self._released:
            return
        self._released = True

        removed = 0
        for path in reversed(self._paths):
            try:
                if path.is_dir():
                    shutil.rmtree(path)
                elif path.exists():
                    path.unlink()
                else:
                    continue
                removed += 1
            except OSError as e:
                logger.warning("[%s] Failed to remove temp path %s: %s", self._owner, path, e)

        logger.debug(
            "[%s] Released %d of %d tracked paths", self._owner, removed, len(self._paths)
        )

    def __enter__(self) -> "ResourceLedger":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release_all()
