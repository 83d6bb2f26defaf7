import json

import pytest

from defender import errorlog
from defender import request_bodies as rb
from defender.exchange import Headers, Request
from defender.models import Target

BOUNDARY = "formboundary"
JPEG = b"\xff\xd8\xff\xe0" + b"\x00" * 12


def make_target(alias, name, target_id=1):
    return Target(id=target_id, phase=2, alias=alias, name=name, immutable=True)


def make_request(body, content_type, method="POST"):
    return Request(method=method, body=body, headers=Headers({"Content-Type": content_type}))


def multipart(fields=(), files=()):
    chunks = []
    for name, value in fields:
        chunks.append(
            f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'.encode()
            + value.encode()
            + b"\r\n"
        )
    for name, filename, content in files:
        chunks.append(
            (
                f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="{name}"; '
                f'filename="{filename}"\r\nContent-Type: application/octet-stream\r\n\r\n'
            ).encode()
            + content
            + b"\r\n"
        )
    chunks.append(f"--{BOUNDARY}--\r\n".encode())
    return make_request(b"".join(chunks), f"multipart/form-data; boundary={BOUNDARY}")


@pytest.fixture
def error_file(tmp_path):
    errorlog.configure(True, str(tmp_path / "errors"))
    yield tmp_path / "errors.log"
    errorlog.configure(False, "")


def test_json_body_flattened():
    request = make_request(json.dumps({"Name": "bob", "tags": ["x", "y"]}).encode(), "application/json")
    data = rb.body_data(request, 1)
    assert data.keys == ["Name", "tags.0", "tags.1"]
    assert data.values == ["bob", "x", "y"]
    assert data.maps == {"name": "bob", "tags.0": "x", "tags.1": "y"}


def test_json_content_type_with_charset():
    request = make_request(b'{"a": "b"}', "application/json; charset=utf-8")
    assert rb.body_data(request, 1).maps == {"a": "b"}


def test_invalid_json_logs_and_is_empty(error_file):
    request = make_request(b"{not json", "application/json")
    data = rb.body_data(request, 5)
    assert data.keys == [] and data.maps == {}
    assert "Target 5" in error_file.read_text()


def test_yaml_body():
    request = make_request(b"outer:\n  inner: v\n", "application/yaml")
    assert rb.body_data(request, 1).maps == {"outer.inner": "v"}


def test_xml_body():
    request = make_request(b"<root><a>text</a></root>", "application/xml")
    assert rb.body_data(request, 1).keys == ["root.a"]


def test_urlencoded_body_groups_repeated_keys():
    request = make_request(b"a=1&B=2&a=3", "application/x-www-form-urlencoded")
    data = rb.body_data(request, 1)
    assert data.keys == ["a", "B"]
    assert data.values == ["1", "3", "2"]
    assert data.maps == {"a": "1,3", "b": "2"}


def test_urlencoded_ignored_for_get():
    request = make_request(b"a=1", "application/x-www-form-urlencoded", method="GET")
    assert rb.body_data(request, 1).keys == []


def test_urlencoded_bad_escape_logs(error_file):
    request = make_request(b"a=%zz", "application/x-www-form-urlencoded")
    assert rb.body_data(request, 3).keys == []
    assert "[Proxy][Target]" in error_file.read_text()


def test_unknown_content_type_is_empty():
    assert rb.body_data(make_request(b"hello", "text/plain"), 1).values == []


def test_multipart_values():
    request = multipart(fields=[("User", "alice"), ("role", "admin")])
    data = rb.body_data(request, 1)
    assert data.keys == ["User", "role"]
    assert data.maps == {"user": "alice", "role": "admin"}


def test_file_data_reports_names_sizes_and_extensions():
    request = multipart(
        fields=[("note", "hi")],
        files=[("photo", "pic.bin", JPEG), ("doc", "notes.txt", b"hello world")],
    )
    data = rb.file_data(request, 1)
    assert data.keys == ["photo", "doc"]
    assert data.names == ["pic.bin", "notes.txt"]
    assert data.lengths == [float(len(JPEG)), float(len(b"hello world"))]
    assert data.extensions == ["jpg", "txt"]
    assert data.maps["doc"] == "hello world"


def test_file_data_without_boundary_logs(error_file):
    request = make_request(b"--x\r\n", "multipart/form-data")
    assert rb.file_data(request, 2).keys == []
    assert "boundary" in error_file.read_text()


def test_file_data_empty_body():
    request = make_request(b"", f"multipart/form-data; boundary={BOUNDARY}")
    assert rb.file_data(request, 1).names == []


def test_file_targets():
    request = multipart(files=[("upload", "a.txt", b"abc"), ("upload", "b.txt", b"de")])
    assert rb.file_keys(request, make_target("file-keys-request", "keys")) == ["upload"]
    assert rb.file_names(request, make_target("file-names-request", "names")) == ["a.txt", "b.txt"]
    assert rb.file_values(request, make_target("file-values-request", "values")) == ["abc", "de"]
    assert rb.file_extensions(request, make_target("file-extensions-request", "extensions")) == ["txt", "txt"]
    assert rb.file_size(request, make_target("file-size-request", "size")) == 1.0
    assert rb.file_name_size(request, make_target("file-name-size-request", "name-size")) == 2.0
    assert rb.file_length(request, make_target("file-length-request", "length")) == float(
        len(b"abc") + len(b"de")
    )


def test_body_targets():
    request = make_request(b'{"ab": "cd"}', "application/json")
    assert rb.body_keys(request, make_target("body-keys-request", "keys")) == ["ab"]
    assert rb.body_values(request, make_target("body-values-request", "values")) == ["cd"]
    assert rb.body_size(request, make_target("body-size-request", "size")) == 1.0
    assert rb.body_length(request, make_target("body-length-request", "length")) == 4.0


def test_full_body_returns_text():
    body = b'{"a": 1}'
    request = make_request(body, "application/json")
    assert rb.full_body(request, make_target("full-body-request", "raw")) == body.decode()


def test_wrong_alias_gives_empty():
    request = make_request(b'{"a": "b"}', "application/json")
    assert rb.body_keys(request, make_target("body-values-request", "keys")) == []
    assert rb.body_length(request, make_target("body-length-request", "size")) == 0.0
    assert rb.full_body(request, make_target("body-full-request", "raw")) == ""


def test_body_does_not_consume_request():
    request = make_request(b'{"a": "b"}', "application/json")
    first = rb.body_data(request, 1)
    second = rb.body_data(request, 1)
    assert first == second
    assert request.body == b'{"a": "b"}'