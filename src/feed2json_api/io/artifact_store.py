"""On-disk artifact store for cached feeds.

Each cache key owns up to three files in a single directory:

    <key>           raw bytes as fetched from the origin
    <key>.json      pretty-printed converted feed
    <key>.min.json  minified converted feed

There is no index. Existence is always answered by the filesystem, so the
store behaves the same across process restarts and between processes sharing
the directory.
"""

from __future__ import annotations

import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import BinaryIO

from feed2json_api.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class Variant(str, Enum):
    RAW = "raw"
    PRETTY = "pretty"
    MINIFIED = "minified"

    @property
    def suffix(self) -> str:
        return _SUFFIXES[self]


_SUFFIXES = {
    Variant.RAW: "",
    Variant.PRETTY: ".json",
    Variant.MINIFIED: ".min.json",
}


class ArtifactStore:
    """Stateless access to the cache directory."""

    def __init__(self, cache_dir: Path | str):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def path(self, key: str, variant: Variant) -> Path:
        return self.cache_dir / f"{key}{variant.suffix}"

    def exists(self, key: str, variant: Variant) -> bool:
        return self.path(key, variant).is_file()

    def read(self, key: str, variant: Variant) -> bytes:
        """Read an artifact.

        Raises:
            NotFoundError: If the artifact does not exist.
            PersistenceError: On any other filesystem failure.
        """
        path = self.path(key, variant)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(f"No {variant.value} artifact for {key}") from exc
        except OSError as exc:
            raise PersistenceError(f"Error reading cached file {path.name}: {exc}") from exc

    def open(self, key: str, variant: Variant) -> BinaryIO:
        """Open an artifact for streaming reads. The caller closes the stream."""
        path = self.path(key, variant)
        try:
            return path.open("rb")
        except FileNotFoundError as exc:
            raise NotFoundError(f"No {variant.value} artifact for {key}") from exc
        except OSError as exc:
            raise PersistenceError(f"Error opening cached file {path.name}: {exc}") from exc

    def write_atomic(self, key: str, variant: Variant, data: bytes) -> Path:
        """Write an artifact so readers only ever see the complete file.

        The bytes go to a temporary file in the cache directory which is then
        renamed over the final path.

        Raises:
            PersistenceError: If the write or rename fails.
        """
        final_path = self.path(key, variant)
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                prefix=f".{key}.", suffix=".part", delete=False, dir=str(self.cache_dir)
            ) as tf:
                tmp_path = Path(tf.name)
                tf.write(data)
                tf.flush()
                os.fsync(tf.fileno())
            os.replace(tmp_path, final_path)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Error writing file {final_path.name}: {exc}") from exc

        logger.info(f"Written {variant.value} artifact: {final_path} ({len(data)} bytes)")
        return final_path
