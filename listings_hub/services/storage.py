from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import urlparse

from listings_hub.core.config import settings

log = logging.getLogger(__name__)


class LocalObjectStore:
    """
    Filesystem blob store for listing media.

    Media refs stored on listings look like "listings/<owner>/<file>"; the
    leading bucket segment is dropped when resolving.
    """

    def __init__(self, base_dir: str, bucket: str = "listings"):
        self.base = Path(base_dir)
        self.bucket = bucket
        self.base.mkdir(parents=True, exist_ok=True)

    def put_bytes(self, *, key: str, data: bytes) -> str:
        path = self.base / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return f"{self.bucket}/{key}"

    def resolve_path(self, uri: str) -> Path:
        """
        Resolve a media ref to a local filesystem path.

        Supports:
          - file:///absolute/path
          - absolute filesystem paths
          - bucket-relative refs ("listings/a/b.jpg") and bare keys
        """
        parsed = urlparse(uri)

        if parsed.scheme == "file":
            return Path(parsed.path)

        if parsed.scheme == "":
            p = Path(uri)
            if p.is_absolute():
                return p
            key = uri.removeprefix(f"{self.bucket}/")
            return self.base / key

        raise ValueError(f"Unsupported storage scheme: {parsed.scheme}")

    def delete(self, uri: str) -> None:
        self.resolve_path(uri).unlink()


def purge_media(store: LocalObjectStore, refs: Iterable[str | None]) -> list[str]:
    """
    Best-effort delete of every ref. Returns the refs that could not be removed.
    """
    failed: list[str] = []
    for ref in refs:
        if not ref:
            continue
        try:
            store.delete(ref)
        except (OSError, ValueError):
            log.warning("media cleanup failed for %s", ref, exc_info=True)
            failed.append(ref)
    return failed


def get_object_store() -> LocalObjectStore:
    return LocalObjectStore(settings.media_dir)
