"""Version manager: resolve requested versions and orchestrate installs.

A ``VersionManager`` owns one install folder under the configured root.
Each subdirectory of that folder, named with a normalized version string,
is an installed version. Remote data comes from a ``ReleaseInfoRetriever``.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from typing import Callable, List, Optional, Set, Tuple

from common.archive import unzip_to_dir
from common.checksum import verify_checksum
from common.http_client import download_to
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants

from .errors import EmptyVersionError, NoCompatibleVersionError, ParseError
from .iterate import iterate
from .models import ReleaseInfoRetriever, ResolutionMode, ResolutionRequest
from .parser import Predicate, parse_predicate
from .semantic import normalize, sort_versions, try_parse

logger = logging.getLogger(__name__)


def _read_trimmed(path: str) -> Optional[str]:
    """Return the stripped content of ``path`` or None when unreadable."""
    try:
        with open(path, encoding="utf-8") as fh:
            return fh.read().strip()
    except OSError:
        return None


class VersionManager:
    """Resolution and installation of one tool's versions.

    Args:
        conf: ``config.Config`` (root_path, user_path, verbose, no_install).
        folder_name: Install folder name under ``conf.root_path``.
        retriever: Release source of the tool.
        version_env_name: Environment variable forcing a version.
        version_file_name: Pointer file name, used in every scope.
        display_name: Tool name used in log messages.
    """

    def __init__(
        self,
        conf,
        folder_name: str,
        retriever: ReleaseInfoRetriever,
        version_env_name: str,
        version_file_name: str,
        display_name: Optional[str] = None,
    ):
        self.conf = conf
        self.folder_name = folder_name
        self.retriever = retriever
        self.version_env_name = version_env_name
        self.version_file_name = version_file_name
        self.display_name = display_name or folder_name

    def _info(self, msg: str, *args) -> None:
        if self.conf.verbose:
            logger.info(msg, *args)

    # Paths

    def install_path(self) -> str:
        """Install folder; not created by this call."""
        return os.path.join(self.conf.root_path, self.folder_name)

    def _ensure_install_path(self) -> str:
        path = self.install_path()
        os.makedirs(path, exist_ok=True)
        return path

    def root_version_file_path(self) -> str:
        return os.path.join(self.conf.root_path, self.version_file_name)

    # Local inventory

    def _installed_names(self) -> List[str]:
        path = self.install_path()
        if not os.path.isdir(path):
            return []
        names = []
        with os.scandir(path) as entries:
            for entry in entries:
                # dot-prefixed directories are in-progress extractions
                if entry.is_dir() and not entry.name.startswith("."):
                    names.append(entry.name)
        return names

    def list_local(self) -> List[str]:
        """Installed versions sorted ascending.

        Raises:
            OSError: if the install folder cannot be read.
        """
        return sort_versions(self._installed_names())

    def local_set(self) -> Set[str]:
        """Installed versions; an unreadable install folder yields an empty set."""
        try:
            return set(self._installed_names())
        except OSError as exc:
            self._info("Can not read installed versions: %s", exc)
            return set()

    def list_remote(self) -> List[str]:
        """Remote versions sorted ascending."""
        return sort_versions(self.retriever.list_releases())

    # Resolution

    def detect(self, requested: str) -> str:
        """Resolve ``requested`` checking local versions first."""
        return self._detect(requested, True)

    def _detect(self, requested: str, local_check: bool) -> str:
        request = ResolutionRequest(
            requested=requested, local_check=local_check, no_install=self.conf.no_install
        )
        mode = self._resolution_mode(request.requested)
        if is_debug_enabled(logger):
            logger.debug(
                "Detect version",
                extra=extra_context(
                    event="function_entry",
                    component="version_manager",
                    action="detect",
                    target=request.requested,
                    mode=mode.value,
                    local_check=request.local_check,
                    no_install=request.no_install,
                ),
            )

        if mode == ResolutionMode.EXACT:
            cleaned = normalize(request.requested)
            if not request.no_install:
                self._install_specific_version(cleaned)
            return cleaned

        if mode == ResolutionMode.LATEST:
            if request.no_install:
                return normalize(self.retriever.latest_release())
            return self._install_latest()

        predicate, reverse_order = parse_predicate(request.requested, self.conf.verbose)

        if request.local_check:
            for version in iterate(self.list_local(), reverse_order):
                if predicate(version):
                    self._info("Found compatible version %s installed locally", version)
                    return version

            if request.no_install:
                raise NoCompatibleVersionError()
            self._info("No compatible version found locally, search a remote one...")

        return self._search_install_remote(predicate, request.no_install, reverse_order)

    @staticmethod
    def _resolution_mode(requested: str) -> ResolutionMode:
        if try_parse(requested) is not None:
            return ResolutionMode.EXACT
        if requested == Constants.LATEST_KEY:
            return ResolutionMode.LATEST
        return ResolutionMode.CONSTRAINT

    def resolve(self, default_version: str) -> str:
        """Currently selected version from the pointer chain.

        Order: environment variable, working directory file, user file, root
        file. Nothing is validated or installed.
        """
        lookups: List[Tuple[str, Callable[[], Optional[str]]]] = [
            ("env", lambda: os.environ.get(self.version_env_name, "").strip()),
            ("working_dir", lambda: _read_trimmed(self.version_file_name)),
            ("user", lambda: _read_trimmed(os.path.join(self.conf.user_path, self.version_file_name))),
            ("root", lambda: _read_trimmed(self.root_version_file_path())),
        ]
        for source, lookup in lookups:
            value = lookup()
            if value:
                if is_debug_enabled(logger):
                    logger.debug(
                        "Resolved version",
                        extra=extra_context(
                            event="decision",
                            component="version_manager",
                            action="resolve",
                            outcome=source,
                            target=value,
                        ),
                    )
                return value
        return default_version

    def use(self, requested: str, force_remote: bool = False, working_dir: bool = False) -> str:
        """Resolve ``requested`` and write it to a pointer file.

        Returns:
            The version written.
        """
        detected = self._detect(requested, not force_remote)

        if working_dir:
            target_file = self.version_file_name
        else:
            target_file = self.root_version_file_path()
            os.makedirs(self.conf.root_path, exist_ok=True)
        self._info("Write %s in %s", detected, target_file)
        with open(target_file, "w", encoding="utf-8") as fh:
            fh.write(detected)
        return detected

    def reset(self) -> None:
        """Remove the root pointer file; a missing file is not an error."""
        version_file = self.root_version_file_path()
        self._info("Remove %s", version_file)
        try:
            os.remove(version_file)
        except FileNotFoundError:
            pass

    # Installation

    def install(self, requested: str) -> str:
        """Install the version designated by ``requested``.

        Installation happens even when no-install mode is configured.

        Returns:
            The installed version.

        Raises:
            EmptyVersionError: if ``requested`` is empty.
        """
        if not requested or not requested.strip():
            raise EmptyVersionError()
        parsed = try_parse(requested)
        if parsed is not None:
            cleaned = str(parsed)
            self._install_specific_version(cleaned)
            return cleaned

        if requested == Constants.LATEST_KEY:
            return self._install_latest()

        predicate, reverse_order = parse_predicate(requested, self.conf.verbose)
        return self._search_install_remote(predicate, False, reverse_order)

    def uninstall(self, requested: str) -> None:
        """Remove an installed version; only exact versions are accepted.

        Raises:
            ParseError: if ``requested`` is not an exact version.
        """
        if try_parse(requested) is None:
            raise ParseError(f"Uninstall requires an exact version, got {requested!r}")
        cleaned = normalize(requested)
        target_path = os.path.join(self.install_path(), cleaned)
        self._info("Uninstallation of %s %s (Remove directory %s)",
                   self.display_name, cleaned, target_path)
        try:
            shutil.rmtree(target_path)
        except FileNotFoundError:
            pass

    def _install_latest(self) -> str:
        latest = normalize(self.retriever.latest_release())
        self._install_specific_version(latest)
        return latest

    def _install_specific_version(self, version: str) -> None:
        if not version:
            raise EmptyVersionError()

        install_path = self._ensure_install_path()
        with os.scandir(install_path) as entries:
            for entry in entries:
                if entry.is_dir() and entry.name == version:
                    self._info("%s %s already installed", self.display_name, version)
                    return

        self._info("Installation of %s %s", self.display_name, version)
        download_url = self.retriever.download_asset_url(version)
        expected = self.retriever.asset_checksum(version)
        target_path = os.path.join(install_path, version)

        # extract beside the target then rename, so a version directory is
        # either complete or absent
        work_dir = tempfile.mkdtemp(prefix=f".{version}-", dir=install_path)
        try:
            with Timer() as t, tempfile.TemporaryFile() as spool:
                download_to(download_url, spool)
                if expected:
                    verify_checksum(spool, expected, download_url.rsplit("/", 1)[-1])
                else:
                    self._info("No published checksum for %s %s", self.display_name, version)
                unzip_to_dir(spool, work_dir)
        except BaseException:
            shutil.rmtree(work_dir, ignore_errors=True)
            raise

        try:
            os.rename(work_dir, target_path)
        except OSError:
            shutil.rmtree(work_dir, ignore_errors=True)
            if not os.path.isdir(target_path):
                raise
            # a concurrent invocation finished the same install first
            self._info("%s %s installed concurrently", self.display_name, version)
            return

        if is_debug_enabled(logger):
            logger.debug(
                "Installed version",
                extra=extra_context(
                    event="complete",
                    component="version_manager",
                    action="install",
                    target=version,
                    duration_ms=t.duration_ms(),
                ),
            )

    def _search_install_remote(
        self, predicate: Predicate, no_install: bool, reverse_order: bool
    ) -> str:
        for version in iterate(self.list_remote(), reverse_order):
            if predicate(version):
                cleaned = normalize(version)
                if not no_install:
                    self._install_specific_version(cleaned)
                return cleaned
        raise NoCompatibleVersionError()
