"""Zip archive extraction into a version directory."""
from __future__ import annotations

import logging
import os
import shutil
import stat
import zipfile
from typing import BinaryIO

from versioning.errors import ExtractionError

logger = logging.getLogger(__name__)


def _safe_member_path(target_path: str, member_name: str) -> str:
    """Resolve ``member_name`` under ``target_path``, rejecting escapes."""
    dest = os.path.realpath(os.path.join(target_path, member_name))
    root = os.path.realpath(target_path)
    if dest != root and not dest.startswith(root + os.sep):
        raise ExtractionError(f"Archive member escapes target directory: {member_name}")
    return dest


def extract_zip(archive: zipfile.ZipFile, target_path: str) -> None:
    """Extract every member of ``archive`` into ``target_path``.

    Unix permission bits stored in the archive are restored so that the
    extracted binaries stay executable.
    """
    for info in archive.infolist():
        dest = _safe_member_path(target_path, info.filename)
        if info.is_dir():
            os.makedirs(dest, exist_ok=True)
            continue
        os.makedirs(os.path.dirname(dest), exist_ok=True)
        with archive.open(info) as src, open(dest, "wb") as out:
            shutil.copyfileobj(src, out)
        mode = (info.external_attr >> 16) & 0o777
        if mode:
            os.chmod(dest, mode | stat.S_IRUSR)


def unzip_to_dir(archive_file: BinaryIO, target_path: str) -> None:
    """Extract the zip archive held in ``archive_file`` into ``target_path``.

    ``archive_file`` must be seekable (zip needs random access); it is read
    from its start.

    Raises:
        ExtractionError: when the payload is not a valid zip archive.
        OSError: on filesystem failure.
    """
    archive_file.seek(0)
    try:
        with zipfile.ZipFile(archive_file) as archive:
            os.makedirs(target_path, exist_ok=True)
            extract_zip(archive, target_path)
    except zipfile.BadZipFile as exc:
        raise ExtractionError(f"Invalid zip archive: {exc}") from exc
    logger.debug("Extracted archive into %s", target_path)
