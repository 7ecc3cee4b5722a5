"""Content-addressed binary blobs with optional LZ4 compression."""

from __future__ import annotations

import hashlib
import json
import os
import re
import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import lz4.block


class BlobError(Exception):
    """Raised when a blob cannot be read, decoded or decompressed."""


_MIME_TYPES = (
    ((".rs",), "text/x-rust"),
    ((".js", ".mjs"), "text/javascript"),
    ((".ts",), "text/typescript"),
    ((".tsx",), "text/tsx"),
    ((".json",), "application/json"),
    ((".md",), "text/markdown"),
    ((".html",), "text/html"),
    ((".css",), "text/css"),
    ((".toml",), "application/toml"),
    ((".yaml", ".yml"), "application/yaml"),
)


def _detect_mime_type(path: str) -> str:
    lowered = path.lower()
    for suffixes, mime in _MIME_TYPES:
        if lowered.endswith(suffixes):
            return mime
    return "application/octet-stream"


def _compute_hash(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


_FRACTION = re.compile(r"\.(\d+)")


def _parse_timestamp(text: str) -> datetime:
    normalized = text.replace("Z", "+00:00")
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1)
    parsed = datetime.fromisoformat(normalized)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class BlobMetadata:
    """Describes a blob's content and how it is stored."""

    hash: str
    path: str
    size: int
    mime_type: str
    original_size: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    compression: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "path": self.path,
            "size": self.size,
            "original_size": self.original_size,
            "mime_type": self.mime_type,
            "created_at": self.created_at.isoformat(),
            "compression": self.compression,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BlobMetadata:
        return cls(
            hash=data["hash"],
            path=data["path"],
            size=int(data["size"]),
            original_size=data.get("original_size"),
            mime_type=data["mime_type"],
            created_at=_parse_timestamp(data["created_at"]),
            compression=data.get("compression"),
        )


@dataclass
class Blob:
    """File content plus metadata.

    Binary layout: a little-endian u32 metadata length, the metadata as JSON,
    then the raw content.
    """

    metadata: BlobMetadata
    content: bytes

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> Blob:
        """Read a file from disk into a blob."""
        file = Path(path)
        try:
            content = file.read_bytes()
        except OSError as error:
            raise BlobError("Failed to read file") from error
        return cls.from_content(str(file), content)

    @classmethod
    def from_content(cls, path: str, content: bytes) -> Blob:
        """Build a blob from in-memory content attributed to ``path``."""
        content = bytes(content)
        metadata = BlobMetadata(
            hash=_compute_hash(content),
            path=path,
            size=len(content),
            mime_type=_detect_mime_type(path),
        )
        return cls(metadata, content)

    def to_binary(self) -> bytes:
        metadata_json = json.dumps(self.metadata.to_dict()).encode("utf-8")
        return struct.pack("<I", len(metadata_json)) + metadata_json + self.content

    @classmethod
    def from_binary(cls, binary: bytes) -> Blob:
        if len(binary) < 4:
            raise BlobError("Invalid blob: too short")
        (metadata_len,) = struct.unpack_from("<I", binary)
        if len(binary) < 4 + metadata_len:
            raise BlobError("Invalid blob: metadata truncated")
        try:
            data = json.loads(binary[4 : 4 + metadata_len].decode("utf-8"))
            metadata = BlobMetadata.from_dict(data)
        except (ValueError, KeyError, TypeError) as error:
            raise BlobError(f"Invalid blob metadata: {error}") from error
        return cls(metadata, bytes(binary[4 + metadata_len :]))

    def compress(self) -> None:
        """LZ4-compress the content, but only if that makes it smaller."""
        if self.metadata.compression is not None:
            return
        compressed = lz4.block.compress(self.content, store_size=False)
        if len(compressed) < len(self.content):
            self.metadata.original_size = self.metadata.size
            self.content = compressed
            self.metadata.compression = "lz4"
            self.metadata.size = len(compressed)

    def decompress(self) -> None:
        """Undo ``compress``; does nothing for uncompressed blobs."""
        if self.metadata.compression is None:
            return
        original_size = (
            self.metadata.original_size
            if self.metadata.original_size is not None
            else self.metadata.size
        )
        try:
            content = lz4.block.decompress(self.content, uncompressed_size=original_size)
        except Exception as error:
            raise BlobError(f"Failed to decompress blob: {error}") from error
        self.content = content
        self.metadata.compression = None
        self.metadata.original_size = None
        self.metadata.size = len(content)

    def hash(self) -> str:
        """The SHA-256 hex digest that addresses this blob."""
        return self.metadata.hash


class BlobRepository:
    """Local content-addressed blob cache under ``<forge_dir>/blobs``."""

    def __init__(self, forge_dir: str | os.PathLike[str]) -> None:
        self.cache_dir = Path(forge_dir) / "blobs"
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _blob_path(self, hash: str) -> Path:
        if len(hash) < 2:
            raise ValueError(f"blob hash too short: {hash!r}")
        return self.cache_dir / hash[:2] / hash[2:]

    def store_local(self, blob: Blob) -> None:
        path = self._blob_path(blob.hash())
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(blob.to_binary())

    def load_local(self, hash: str) -> Blob:
        try:
            binary = self._blob_path(hash).read_bytes()
        except OSError as error:
            raise BlobError("Blob not found in cache") from error
        return Blob.from_binary(binary)

    def exists_local(self, hash: str) -> bool:
        return self._blob_path(hash).exists()