"""Tests for the command line entrypoint."""

import logging
import os
from unittest.mock import patch

import pytest

from conftest import FakeReleaseSource, broken_response, fake_download, make_zip
from constants import ExitCodes
from tofuenv import exit_code_for, main
from versioning.errors import (
    DownloadError,
    ExtractionError,
    NetworkError,
    NoCompatibleVersionError,
    ParseError,
)

RELEASES = ["1.6.6", "1.7.0-rc1", "1.7.0"]


@pytest.fixture
def env(tmp_path, monkeypatch):
    """Isolated root, home and working directory; root log level restored."""
    for name in ("TOFUENV_ROOT", "TOFUENV_CONFIG", "TOFUENV_VERBOSE", "TOFUENV_AUTO_INSTALL",
                 "TOFUENV_REMOTE", "TOFUENV_TOFU_VERSION", "TOFUENV_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    root_logger = logging.getLogger()
    saved_level = root_logger.level
    yield tmp_path
    root_logger.setLevel(saved_level)


@pytest.fixture
def source():
    fake = FakeReleaseSource(RELEASES, latest="1.7.0")
    with patch("tofuenv.get_retriever", return_value=fake):
        yield fake


def run(env, *argv):
    return main(["-r", str(env / "root")] + list(argv))


def test_detect_no_install_prints_latest(env, source, capsys):
    assert run(env, "-n", "detect") == ExitCodes.SUCCESS.value
    assert capsys.readouterr().out.strip() == "1.7.0"
    assert not os.path.exists(env / "root")


def test_detect_uses_working_dir_pointer(env, source, capsys):
    (env / "work" / ".opentofu-version").write_text("~>1.6\n", encoding="utf-8")

    assert run(env, "-n", "detect") == ExitCodes.NO_COMPATIBLE_VERSION.value
    assert capsys.readouterr().out == ""


def test_install_and_list(env, source, capsys):
    with patch("versioning.manager.download_to", side_effect=fake_download(make_zip())):
        assert run(env, "install", "v1.6.6") == ExitCodes.SUCCESS.value
    assert run(env, "list") == ExitCodes.SUCCESS.value

    assert capsys.readouterr().out.split() == ["1.6.6", "1.6.6"]


def test_list_remote(env, source, capsys):
    assert run(env, "list-remote") == ExitCodes.SUCCESS.value
    assert capsys.readouterr().out.split() == RELEASES


def test_use_then_resolve_then_reset(env, source, capsys):
    assert run(env, "-n", "use", "1.7") == ExitCodes.SUCCESS.value
    assert (env / "root" / ".opentofu-version").read_text(encoding="utf-8") == "1.7.0"

    assert run(env, "resolve") == ExitCodes.SUCCESS.value
    assert capsys.readouterr().out.strip() == "1.7.0"

    assert run(env, "reset") == ExitCodes.SUCCESS.value
    assert not (env / "root" / ".opentofu-version").exists()


def test_parse_error_exit_code(env, source):
    assert run(env, "-n", "detect", "not a version") == ExitCodes.PARSE_ERROR.value


def test_uninstall_requires_exact_version(env, source):
    assert run(env, "uninstall", "~>1.6") == ExitCodes.PARSE_ERROR.value


def test_network_error_exit_code(env, source):
    with patch.object(source, "list_releases", side_effect=NetworkError("offline")):
        assert run(env, "list-remote") == ExitCodes.CONNECTION_ERROR.value


def test_interrupted_download_exit_code(env, source):
    with patch("common.http_client.requests.get", return_value=broken_response()):
        assert run(env, "install", "1.7.0") == ExitCodes.CONNECTION_ERROR.value
    assert os.listdir(env / "root" / "OpenTofu") == []


def test_broken_config_warning_reaches_logfile(env, source):
    cfg = env / "broken.yaml"
    cfg.write_text("root_path: [unclosed\n", encoding="utf-8")
    log_file = env / "tofuenv.log"

    assert run(env, "-c", str(cfg), "--logfile", str(log_file), "list") == ExitCodes.SUCCESS.value
    assert "[WARNING] Can not read config file" in log_file.read_text(encoding="utf-8")


def test_verbose_raises_level_unless_explicit(env, source):
    assert run(env, "-v", "list") == ExitCodes.SUCCESS.value
    assert logging.getLogger().level == logging.INFO

    assert run(env, "-v", "--loglevel", "error", "list") == ExitCodes.SUCCESS.value
    assert logging.getLogger().level == logging.ERROR


def test_unknown_tool_rejected(env):
    with pytest.raises(SystemExit):
        main(["-t", "pulumi", "list"])


@pytest.mark.parametrize(
    "exc,expected",
    [
        (ParseError("x"), ExitCodes.PARSE_ERROR),
        (NoCompatibleVersionError(), ExitCodes.NO_COMPATIBLE_VERSION),
        (DownloadError("x"), ExitCodes.CONNECTION_ERROR),
        (ExtractionError("x"), ExitCodes.FAILURE),
        (PermissionError("x"), ExitCodes.FAILURE),
    ],
)
def test_exit_code_for(exc, expected):
    assert exit_code_for(exc) == expected.value
