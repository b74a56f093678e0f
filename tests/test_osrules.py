import os
import sys

import pytest

from fsbroker.osrules import (
    Platform,
    current_platform,
    info_from_stat,
    is_hidden_file,
    is_system_file,
    stat_info,
)


@pytest.mark.parametrize(
    "value, expected",
    [("linux", Platform.LINUX), ("darwin", Platform.DARWIN), ("win32", Platform.WINDOWS)],
)
def test_current_platform(monkeypatch, value, expected):
    monkeypatch.setattr(sys, "platform", value)
    assert current_platform() is expected


@pytest.mark.parametrize(
    "name, expected",
    [
        (".bash_history", True),
        ("/home/user/.bashrc", True),
        (".BASHRC", True),
        ("notes.txt~", True),
        ("#draft#", True),
        (".main.c.swp", True),
        (".main.c.swo", True),
        ("module.pyc", True),
        (".goutputstream-XYZ", True),
        (".Trash-1000", True),
        (".DS_Store", False),
        ("README.md", False),
        ("main.swp", False),
    ],
)
def test_linux_system_files(name, expected):
    assert is_system_file(name, Platform.LINUX) is expected


@pytest.mark.parametrize(
    "name, expected",
    [
        (".DS_Store", True),
        ("/Users/x/._resource", True),
        ("Icon\r", True),
        (".com.apple.timemachine.donotpresent", True),
        (".zshrc", True),
        ("backup~", True),
        (".Trash-1000", False),
        ("photo.jpg", False),
    ],
)
def test_darwin_system_files(name, expected):
    assert is_system_file(name, Platform.DARWIN) is expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Desktop.ini", True),
        ("C:\\pics\\Thumbs.db", True),
        ("D:/$Recycle.Bin", True),
        ("System Volume Information", True),
        (".bashrc", False),
        ("report.docx", False),
    ],
)
def test_windows_system_files(name, expected):
    assert is_system_file(name, Platform.WINDOWS) is expected


@pytest.mark.parametrize(
    "path, expected",
    [
        (".hidden", True),
        ("/tmp/dir/.secretfile", True),
        (".", False),
        ("..", False),
        ("visible.txt", False),
        ("/tmp/.dir/visible.txt", False),
    ],
)
@pytest.mark.parametrize("platform", [Platform.LINUX, Platform.DARWIN])
def test_posix_hidden_files(path, expected, platform):
    assert is_hidden_file(path, platform) is expected


def test_windows_hidden_missing_file_is_not_hidden(tmp_path):
    assert is_hidden_file(str(tmp_path / "missing.txt"), Platform.WINDOWS) is False


def test_windows_hidden_plain_file_is_not_hidden(tmp_path):
    target = tmp_path / "plain.txt"
    target.write_text("x")
    assert is_hidden_file(str(target), Platform.WINDOWS) is False


def test_info_from_stat_linux_records_identity_only(tmp_path):
    target = tmp_path / "a.txt"
    target.write_text("content")
    result = os.stat(target)
    info = info_from_stat(str(target), result, Platform.LINUX)
    assert info.id == result.st_ino
    assert info.path == str(target)
    assert info.mode == result.st_mode
    assert info.size == 0
    assert info.mod_time is None


@pytest.mark.parametrize("platform", [Platform.DARWIN, Platform.WINDOWS])
def test_info_from_stat_records_size_and_time(tmp_path, platform):
    target = tmp_path / "a.txt"
    target.write_text("content")
    result = os.stat(target)
    info = info_from_stat(str(target), result, platform)
    assert info.id == result.st_ino
    assert info.size == result.st_size
    assert info.mod_time.timestamp() == pytest.approx(result.st_mtime, abs=1e-3)
    assert not info.is_dir()


def test_stat_info_missing_path_returns_none(tmp_path):
    assert stat_info(str(tmp_path / "nope"), Platform.LINUX) is None


def test_stat_info_directory(tmp_path):
    info = stat_info(str(tmp_path), Platform.LINUX)
    assert info.is_dir()
    assert info.id == os.stat(tmp_path).st_ino