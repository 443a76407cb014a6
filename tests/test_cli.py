import logging

import pytest

from factorio_mod_manager.cli import (
    DOCS_URL,
    StartupError,
    cleanup_temp_dir,
    ensure_path_exists,
    ensure_path_is_dir,
    main,
)


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_ensure_path_exists_returns_path(tmp_path):
    target = tmp_path / "f"
    target.write_text("x")
    assert ensure_path_exists(target, "missing") == target


def test_ensure_path_exists_raises_with_message(tmp_path):
    with pytest.raises(StartupError, match="no such thing"):
        ensure_path_exists(tmp_path / "absent", "no such thing")


def test_ensure_path_is_dir_accepts_directory(tmp_path):
    assert ensure_path_is_dir(tmp_path, "bad") == tmp_path


def test_ensure_path_is_dir_rejects_file(tmp_path):
    target = tmp_path / "f"
    target.write_text("x")
    with pytest.raises(StartupError, match="not a dir"):
        ensure_path_is_dir(target, "not a dir")


def test_ensure_path_is_dir_rejects_missing(tmp_path):
    with pytest.raises(StartupError, match="gone"):
        ensure_path_is_dir(tmp_path / "absent", "gone")


def test_cleanup_temp_dir_removes_tree(tmp_path):
    temp = tmp_path / "temp"
    (temp / "nested").mkdir(parents=True)
    (temp / "nested" / "file").write_text("x")
    assert cleanup_temp_dir(temp) is True
    assert not temp.exists()


def test_cleanup_temp_dir_missing(tmp_path):
    assert cleanup_temp_dir(tmp_path / "temp") is False


def test_cleanup_temp_dir_on_file_keeps_it(tmp_path):
    target = tmp_path / "temp"
    target.write_text("x")
    assert cleanup_temp_dir(target) is False
    assert target.read_text() == "x"


def test_main_without_factorio_binary(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 1
    err = capsys.readouterr().err
    assert "factorio not found" in err
    assert DOCS_URL in err
    assert (tmp_path / "mod-manager.toml").is_file()


def test_main_without_data_dir(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    binary = tmp_path / "bin" / "x64" / "factorio"
    binary.parent.mkdir(parents=True)
    binary.write_text("")
    assert main([]) == 1
    assert "data directory missing" in capsys.readouterr().err


def test_main_data_is_a_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    binary = tmp_path / "bin" / "x64" / "factorio"
    binary.parent.mkdir(parents=True)
    binary.write_text("")
    (tmp_path / "data").write_text("")
    assert main([]) == 1
    assert "data directory missing" in capsys.readouterr().err


def test_main_success_cleans_temp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    binary = tmp_path / "bin" / "x64" / "factorio"
    binary.parent.mkdir(parents=True)
    binary.write_text("")
    (tmp_path / "data" / "base").mkdir(parents=True)
    (tmp_path / "data" / "core").mkdir()
    (tmp_path / "temp" / "leftover").mkdir(parents=True)

    assert main([]) == 0
    assert not (tmp_path / "temp").exists()
    assert (tmp_path / "data" / "base").is_dir()


def test_main_invalid_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "mod-manager.toml").write_text("this is = = not toml")
    assert main([]) == 1
    assert "Invalid TOML" in capsys.readouterr().err