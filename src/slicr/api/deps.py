"""FastAPI dependencies."""

from __future__ import annotations

from slicr.config import Settings
from slicr.pipeline.orchestrator import PipelineOrchestrator, build_catalog
from slicr.services.interfaces import IMusicCatalog
from slicr.services.storage import LocalObjectStore, S3ObjectStore, build_object_store

_settings: Settings | None = None
_object_store: S3ObjectStore | LocalObjectStore | None = None
_catalog: IMusicCatalog | None = None
_orchestrator: PipelineOrchestrator | None = None


def init_services(app_settings: Settings) -> None:
    """Build the shared adapters and the orchestrator (called at app startup)."""
    global _settings, _object_store, _catalog, _orchestrator
    _settings = app_settings
    _object_store = build_object_store(app_settings)
    _catalog = build_catalog(app_settings)
    _orchestrator = PipelineOrchestrator.from_settings(
        app_settings, store=_object_store, catalog=_catalog
    )


def get_settings() -> Settings:
    if _settings is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _settings


def get_object_store() -> S3ObjectStore | LocalObjectStore:
    if _object_store is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _object_store


def get_catalog() -> IMusicCatalog:
    if _catalog is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _catalog


def get_orchestrator() -> PipelineOrchestrator:
    if _orchestrator is None:
        raise RuntimeError("Services not initialized, call init_services() first")
    return _orchestrator
