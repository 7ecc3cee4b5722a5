import struct

import pytest

from dxforge.storage.blob import Blob, BlobError, BlobRepository

HELLO_HASH = "315f5bdb76d078c43b8ac0064e4a0164612b1fce77c869345bfc94c75894edd3"


def test_blob_serialization():
    content = b"Hello, world!"
    blob = Blob.from_content("test.txt", content)

    restored = Blob.from_binary(blob.to_binary())

    assert blob.metadata.hash == restored.metadata.hash
    assert blob.content == restored.content
    assert blob.metadata.path == restored.metadata.path
    assert restored.metadata.created_at == blob.metadata.created_at


def test_blob_compression():
    content = b"Hello, world! " * 1000
    blob = Blob.from_content("test.txt", content)

    original_size = blob.metadata.size
    blob.compress()
    compressed_size = blob.metadata.size

    assert compressed_size < original_size
    assert blob.metadata.compression == "lz4"
    assert blob.metadata.original_size == original_size

    blob.decompress()
    assert blob.content == content
    assert blob.metadata.compression is None
    assert blob.metadata.original_size is None
    assert blob.metadata.size == len(content)


def test_compressed_blob_survives_binary_round_trip():
    content = b"abcabcabc" * 500
    blob = Blob.from_content("data.bin", content)
    blob.compress()
    restored = Blob.from_binary(blob.to_binary())
    restored.decompress()
    assert restored.content == content


def test_incompressible_content_left_alone():
    content = bytes(range(16))
    blob = Blob.from_content("raw.bin", content)
    blob.compress()
    assert blob.metadata.compression is None
    assert blob.content == content


def test_hash_is_sha256():
    blob = Blob.from_content("a.txt", b"Hello, world!")
    assert blob.hash() == HELLO_HASH
    assert blob.metadata.size == 13


@pytest.mark.parametrize(
    ("path", "mime"),
    [
        ("main.rs", "text/x-rust"),
        ("app.MJS", "text/javascript"),
        ("x.ts", "text/typescript"),
        ("x.tsx", "text/tsx"),
        ("package.json", "application/json"),
        ("README.md", "text/markdown"),
        ("conf.yml", "application/yaml"),
        ("Cargo.toml", "application/toml"),
        ("image.png", "application/octet-stream"),
    ],
)
def test_mime_detection(path, mime):
    assert Blob.from_content(path, b"").metadata.mime_type == mime


def test_binary_layout_has_length_prefix():
    binary = Blob.from_content("a.txt", b"xyz").to_binary()
    (length,) = struct.unpack_from("<I", binary)
    assert binary[4 + length:] == b"xyz"


def test_from_binary_too_short():
    with pytest.raises(BlobError, match="too short"):
        Blob.from_binary(b"\x01\x00")


def test_from_binary_truncated_metadata():
    with pytest.raises(BlobError, match="metadata truncated"):
        Blob.from_binary(struct.pack("<I", 100) + b"{}")


def test_from_binary_bad_json():
    with pytest.raises(BlobError):
        Blob.from_binary(struct.pack("<I", 3) + b"abc")


def test_from_file(tmp_path):
    path = tmp_path / "hello.md"
    path.write_bytes(b"Hello, world!")
    blob = Blob.from_file(path)
    assert blob.hash() == HELLO_HASH
    assert blob.metadata.mime_type == "text/markdown"
    assert blob.metadata.path == str(path)


def test_from_missing_file(tmp_path):
    with pytest.raises(BlobError, match="Failed to read file"):
        Blob.from_file(tmp_path / "nope.txt")


def test_repository_round_trip(tmp_path):
    repo = BlobRepository(tmp_path)
    blob = Blob.from_content("a.txt", b"Hello, world!")
    assert repo.exists_local(blob.hash()) is False

    repo.store_local(blob)

    assert repo.exists_local(blob.hash()) is True
    assert (tmp_path / "blobs" / HELLO_HASH[:2] / HELLO_HASH[2:]).is_file()
    loaded = repo.load_local(blob.hash())
    assert loaded.content == b"Hello, world!"
    assert loaded.metadata.path == "a.txt"


def test_repository_missing_blob(tmp_path):
    repo = BlobRepository(tmp_path)
    with pytest.raises(BlobError, match="Blob not found in cache"):
        repo.load_local("ab" + "0" * 62)