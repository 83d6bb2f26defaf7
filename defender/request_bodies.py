"""Immutable targets read from the incoming request body and uploaded files."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from email import errors as email_errors
from email import policy
from email.parser import BytesParser
from email.utils import collapse_rfc2231_value
from typing import Callable, Dict, List, Tuple
from urllib.parse import unquote_plus
from xml.parsers.expat import ExpatError

import yaml

from .bodies import BodyData, flatten_with_values, xml_to_data
from .errorlog import write_target_error
from .exchange import Request
from .models import Target

_STRUCTURED = ("application/json", "application/xml", "text/xml", "application/yaml")
_FORM_METHODS = ("POST", "PUT", "PATCH")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_HEAD_SIZE = 261

_ParseErrors = (ValueError, ExpatError, yaml.YAMLError)


@dataclass
class FileData:
    """Fields, contents, names, detected extensions and sizes of uploaded files."""

    keys: List[str] = field(default_factory=list)
    values: List[str] = field(default_factory=list)
    maps: Dict[str, str] = field(default_factory=dict)
    names: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    lengths: List[float] = field(default_factory=list)


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _from_lists(data: Dict[str, List[str]]) -> BodyData:
    result = BodyData()
    for key, values in data.items():
        result.keys.append(key)
        result.values.extend(values)
        result.maps[key.lower()] = ",".join(values)
    return result


def _structured(request: Request, content_type: str) -> BodyData:
    text = _text(request.body)
    if content_type == "application/json":
        data = json.loads(text)
    elif content_type in ("application/xml", "text/xml"):
        data = xml_to_data(text)
    else:
        data = yaml.safe_load(text)
    return BodyData.from_flat(flatten_with_values(data))


def _parse_form(text: str) -> Dict[str, List[str]]:
    result: Dict[str, List[str]] = {}
    for pair in text.split("&"):
        if not pair:
            continue
        if ";" in pair:
            raise ValueError("invalid semicolon separator in query")
        key, _, value = pair.partition("=")
        for part in (key, value):
            bad = _BAD_ESCAPE.search(part)
            if bad:
                raise ValueError(f'invalid URL escape "{part[bad.start():bad.start() + 3]}"')
        result.setdefault(unquote_plus(key), []).append(unquote_plus(value))
    return result


def _form(request: Request) -> BodyData:
    if request.method.upper() not in _FORM_METHODS:
        return BodyData()
    return _from_lists(_parse_form(_text(request.body)))


def _parse_multipart(
    request: Request,
) -> Tuple[Dict[str, List[str]], Dict[str, List[Tuple[str, bytes]]]]:
    """Split a multipart/form-data body into text fields and file uploads."""
    if request.content_type().lower() != "multipart/form-data":
        raise ValueError("request Content-Type isn't multipart/form-data")
    header = request.headers.get("Content-Type").encode("utf-8", errors="replace")
    message = BytesParser(policy=policy.default).parsebytes(
        b"Content-Type: " + header + b"\r\n\r\n" + request.body
    )
    if message.get_boundary() is None:
        raise ValueError("no multipart boundary param in Content-Type")
    broken = (
        email_errors.StartBoundaryNotFoundDefect,
        email_errors.CloseBoundaryNotFoundDefect,
    )
    if not message.is_multipart() or any(
        isinstance(defect, broken) for defect in message.defects
    ):
        raise ValueError("multipart: NextPart: EOF")
    values: Dict[str, List[str]] = {}
    files: Dict[str, List[Tuple[str, bytes]]] = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if isinstance(name, tuple):
            name = collapse_rfc2231_value(name)
        if not name:
            continue
        content = part.get_payload(decode=True) or b""
        filename = part.get_filename()
        if filename:
            files.setdefault(name, []).append((filename, content))
        else:
            values.setdefault(name, []).append(_text(content))
    return values, files


def _multipart_values(request: Request) -> BodyData:
    if (request.content_length or 0) <= 0:
        return BodyData()
    values, _ = _parse_multipart(request)
    return _from_lists(values)


def body_data(request: Request, target_id: int) -> BodyData:
    """Flattened keys and values of a JSON, XML, YAML, form or multipart body."""
    content_type = request.content_type().lower()
    if not content_type:
        return BodyData()
    try:
        if content_type in _STRUCTURED:
            return _structured(request, content_type)
        if content_type == "application/x-www-form-urlencoded":
            return _form(request)
        if content_type == "multipart/form-data":
            return _multipart_values(request)
    except _ParseErrors as exc:
        write_target_error(f"Target {target_id}: {exc}")
    return BodyData()


def _riff(kind: bytes) -> Callable[[bytes], bool]:
    return lambda head: head[:4] == b"RIFF" and head[8:12] == kind


_SIGNATURES: List[Tuple[str, Callable[[bytes], bool]]] = [
    ("jpg", lambda head: head[:3] == b"\xff\xd8\xff"),
    ("png", lambda head: head[:4] == b"\x89PNG"),
    ("gif", lambda head: head[:3] == b"GIF"),
    ("webp", _riff(b"WEBP")),
    ("wav", _riff(b"WAVE")),
    ("avi", _riff(b"AVI ")),
    ("tif", lambda head: head[:4] in (b"II*\x00", b"MM\x00*")),
    ("bmp", lambda head: head[:2] == b"BM"),
    ("ico", lambda head: head[:4] == b"\x00\x00\x01\x00"),
    ("pdf", lambda head: head[:4] == b"%PDF"),
    ("rtf", lambda head: head[:5] == b"{\\rtf"),
    ("ps", lambda head: head[:2] == b"%!"),
    ("zip", lambda head: head[:2] == b"PK" and head[2:3] in b"\x03\x05\x07" and head[3:4] in b"\x04\x06\x08" and len(head) >= 4),
    ("gz", lambda head: head[:3] == b"\x1f\x8b\x08"),
    ("bz2", lambda head: head[:3] == b"BZh"),
    ("7z", lambda head: head[:6] == b"7z\xbc\xaf\x27\x1c"),
    ("xz", lambda head: head[:6] == b"\xfd7zXZ\x00"),
    ("rar", lambda head: head[:6] == b"Rar!\x1a\x07"),
    ("tar", lambda head: head[257:262] == b"ustar"),
    ("exe", lambda head: head[:2] == b"MZ"),
    ("elf", lambda head: head[:4] == b"\x7fELF"),
    ("sqlite", lambda head: head[:16] == b"SQLite format 3\x00"),
    ("mp3", lambda head: head[:3] == b"ID3" or head[:2] == b"\xff\xfb"),
    ("ogg", lambda head: head[:4] == b"OggS"),
    ("flac", lambda head: head[:4] == b"fLaC"),
    ("mp4", lambda head: head[4:8] == b"ftyp"),
]


def _sniff_extension(head: bytes) -> str:
    return next((ext for ext, test in _SIGNATURES if test(head)), "")


def _filename_extension(filename: str) -> str:
    name = filename.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot + 1:] if dot >= 0 else ""


def file_data(request: Request, target_id: int) -> FileData:
    """Uploaded files of a multipart body; extensions come from content or name."""
    result = FileData()
    if (request.content_length or 0) <= 0:
        return result
    try:
        _, files = _parse_multipart(request)
    except ValueError as exc:
        write_target_error(f"Target {target_id}: {exc}")
        return result
    for key, uploads in files.items():
        result.keys.append(key)
        for filename, content in uploads:
            result.names.append(filename)
            result.lengths.append(float(len(content)))
            text = _text(content)
            result.values.append(text)
            result.maps[key.lower()] = text
            result.extensions.append(
                _sniff_extension(content[:_HEAD_SIZE]) or _filename_extension(filename)
            )
    return result


def _is(target: Target, alias: str, name: str) -> bool:
    return (
        target.phase == 2
        and target.alias == alias
        and target.name == name
        and target.immutable
        and target.target_id is None
    )


def body_keys(request: Request, target: Target) -> List[str]:
    if not _is(target, "body-keys-request", "keys"):
        return []
    return body_data(request, target.id).keys


def file_keys(request: Request, target: Target) -> List[str]:
    if not _is(target, "file-keys-request", "keys"):
        return []
    return file_data(request, target.id).keys


def body_values(request: Request, target: Target) -> List[str]:
    if not _is(target, "body-values-request", "values"):
        return []
    return body_data(request, target.id).values


def file_values(request: Request, target: Target) -> List[str]:
    if not _is(target, "file-values-request", "values"):
        return []
    return file_data(request, target.id).values


def file_names(request: Request, target: Target) -> List[str]:
    if not _is(target, "file-names-request", "names"):
        return []
    return file_data(request, target.id).names


def file_extensions(request: Request, target: Target) -> List[str]:
    if not _is(target, "file-extensions-request", "extensions"):
        return []
    return file_data(request, target.id).extensions


def body_size(request: Request, target: Target) -> float:
    if not _is(target, "body-size-request", "size"):
        return 0.0
    return float(len(body_data(request, target.id).keys))


def file_size(request: Request, target: Target) -> float:
    if not _is(target, "file-size-request", "size"):
        return 0.0
    return float(len(file_data(request, target.id).keys))


def file_name_size(request: Request, target: Target) -> float:
    if not _is(target, "file-name-size-request", "name-size"):
        return 0.0
    return float(len(file_data(request, target.id).names))


def body_length(request: Request, target: Target) -> float:
    """Sum of the UTF-8 lengths of every key and value in the body map."""
    if not _is(target, "body-length-request", "length"):
        return 0.0
    maps = body_data(request, target.id).maps
    return float(
        sum(len(key.encode("utf-8")) + len(value.encode("utf-8")) for key, value in maps.items())
    )


def file_length(request: Request, target: Target) -> float:
    if not _is(target, "file-length-request", "length"):
        return 0.0
    return float(sum(file_data(request, target.id).lengths))


def full_body(request: Request, target: Target) -> str:
    if not _is(target, "full-body-request", "raw"):
        return ""
    return _text(request.body)