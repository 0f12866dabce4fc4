"""SHA-256 checksum verification of downloaded release archives."""
from __future__ import annotations

import hashlib
from typing import BinaryIO, Dict

from constants import Constants
from versioning.errors import DownloadError


def parse_checksums(text: str) -> Dict[str, str]:
    """Map file name to hex digest from ``SHA256SUMS`` content.

    Lines read ``<digest>  <file name>``; a leading ``*`` (binary mode
    marker) on the file name is dropped.
    """
    out: Dict[str, str] = {}
    for line in text.splitlines():
        parts = line.strip().split()
        if len(parts) >= 2:
            out[parts[1].lstrip("*")] = parts[0].lower()
    return out


def sha256_fileobj(fileobj: BinaryIO) -> str:
    """Digest ``fileobj`` from its start; the position is left at the end."""
    h = hashlib.sha256()
    fileobj.seek(0)
    for chunk in iter(lambda: fileobj.read(Constants.DOWNLOAD_CHUNK_SIZE), b""):
        h.update(chunk)
    return h.hexdigest()


def verify_checksum(fileobj: BinaryIO, expected: str, file_name: str) -> None:
    """Compare the digest of ``fileobj`` with ``expected``.

    Raises:
        DownloadError: on mismatch.
    """
    digest = sha256_fileobj(fileobj)
    if digest != expected.lower():
        raise DownloadError(
            f"Checksum mismatch for {file_name}: expected {expected.lower()}, got {digest}"
        )
