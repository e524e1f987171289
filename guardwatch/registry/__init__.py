"""CCTV registry: cameras, geofence zones, events and recording sessions."""

from typing import Any, Callable, Optional

from ..config import CCTVConfig, config as default_config
from .base import CCTVRegistry
from .fixtures import seeded_store
from .local import LocalRegistry, UsageMeter
from .remote import RemoteRegistry
from .stores import CCTVStore, MemoryStore, SqlStore


def create_registry(
    cfg: CCTVConfig = default_config,
    event_sink: Optional[Callable[[Any], Any]] = None,
) -> CCTVRegistry:
    """
    Build the registry selected by ``CCTV_BACKEND``.

    - memory: LocalRegistry over a MemoryStore (demo site when CCTV_SEED_FIXTURES)
    - database: LocalRegistry over the SQLAlchemy store
    - remote: RemoteRegistry against CCTV_API_URL
    """
    backend = cfg.CCTV_BACKEND
    print(f"[SETUP] Registry backend: {backend}")

    if backend == "remote":
        return RemoteRegistry(
            base_url=cfg.CCTV_API_URL,
            token=cfg.CCTV_API_TOKEN,
            timeout=cfg.CCTV_REQUEST_TIMEOUT,
            stream_base_url=cfg.STREAM_BASE_URL,
        )

    if backend == "database":
        from ..shared.db.database import get_session_factory
        store: CCTVStore = SqlStore(get_session_factory())
    elif backend == "memory":
        if cfg.CCTV_SEED_FIXTURES:
            store = seeded_store(
                stream_base_url=cfg.STREAM_BASE_URL,
                recordings_dir=cfg.RECORDINGS_DIR,
            )
        else:
            store = MemoryStore()
    else:
        raise ValueError(f"Unknown CCTV_BACKEND: {backend}")

    return LocalRegistry(
        store,
        event_sink=event_sink,
        usage_meter=UsageMeter(cfg.RECORDINGS_DIR, cfg.UPLINK_MBPS),
        single_active_recording=cfg.SINGLE_ACTIVE_RECORDING,
        recordings_dir=cfg.RECORDINGS_DIR,
        media_base_url=cfg.MEDIA_BASE_URL,
        stream_base_url=cfg.STREAM_BASE_URL,
    )


__all__ = [
    "CCTVRegistry",
    "LocalRegistry",
    "RemoteRegistry",
    "UsageMeter",
    "CCTVStore",
    "MemoryStore",
    "SqlStore",
    "seeded_store",
    "create_registry",
]
