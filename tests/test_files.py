import json
from datetime import datetime

import pytest

from defender.files import (
    append_to_file,
    check_and_create_default_file,
    check_file_exists,
    format_timestamp,
    get_extension,
    read_file,
    read_json,
    write_audit,
    write_error,
)
from defender.prompt import PromptError


def test_format_timestamp_layout():
    assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "03:04:05 - 02/01/2024"


def test_read_file_and_json(tmp_path):
    path = tmp_path / "a.json"
    path.write_text(json.dumps({"k": [1, 2]}))
    assert read_json(str(path)) == {"k": [1, 2]}
    assert read_file(str(path)) == path.read_bytes()


def test_check_file_exists_missing(tmp_path):
    with pytest.raises(OSError):
        check_file_exists(str(tmp_path / "missing"))


@pytest.mark.parametrize("path,ext", [("a/b.KEY", ".key"), ("x.tar.gz", ".gz"), ("noext", ""), ("dir.d/file", "")])
def test_get_extension(path, ext):
    assert get_extension(path) == ext


def test_check_and_create_default_file_creates(tmp_path):
    target = tmp_path / "audit.json"
    check_and_create_default_file(str(target), "History.Audit.Path")
    assert target.exists()


def test_check_and_create_default_file_missing_dir(tmp_path):
    with pytest.raises(PromptError) as info:
        check_and_create_default_file(str(tmp_path / "no" / "f.log"), "Cause")
    assert "[Proxy][Cause][Error]" in str(info.value)


def test_check_and_create_default_file_parent_not_dir(tmp_path):
    parent = tmp_path / "plain"
    parent.write_text("x")
    with pytest.raises(PromptError) as info:
        check_and_create_default_file(str(parent / "f.log"), "Cause")
    assert "Cause" in str(info.value)


def test_append_and_write_audit(tmp_path):
    audit = tmp_path / "a.json"
    append_to_file(str(audit), "x")
    write_audit(str(audit), str(tmp_path / "e.log"), "y")
    assert audit.read_text() == "xy\n"


def test_write_audit_failure_goes_to_error(tmp_path):
    error = tmp_path / "e.log"
    write_audit(str(tmp_path), str(error), "data")
    assert "[Proxy][Log][Audit]:" in error.read_text()


def test_write_error_line(tmp_path):
    error = tmp_path / "e.log"
    write_error(str(error), "[Proxy][Target]", "msg")
    line = error.read_text()
    assert line.endswith(" [Proxy][Target]: msg\n")


def test_write_error_to_directory_does_not_create(tmp_path):
    write_error(str(tmp_path), "[X]", "msg")
    assert list(tmp_path.iterdir()) == []