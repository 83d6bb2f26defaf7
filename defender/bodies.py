"""Flattening, compression and content-type parsing of message bodies."""

from __future__ import annotations

import gzip
import json
import re
import zlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import brotli
import xmltodict
import yaml
import zstandard

from .exchange import Response

_FORMAT_RE = re.compile(r"\b(json|xml|yaml|html)\b", re.IGNORECASE)
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+(/[!#$%&'*+\-.^_`|~0-9A-Za-z]+)?")


def _sprint(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


@dataclass
class BodyData:
    """Keys, printed values and a lower-cased key map of a flattened body."""

    keys: List[str] = field(default_factory=list)
    values: List[str] = field(default_factory=list)
    maps: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_flat(cls, data: Dict[str, Any]) -> "BodyData":
        result = cls()
        for key, value in data.items():
            text = _sprint(value)
            result.keys.append(key)
            result.values.append(text)
            result.maps[key.lower()] = text
        return result


def flatten_with_values(data: Any, prefix: str = "") -> Dict[str, Any]:
    """Flatten nested dicts and lists into dotted keys."""
    out: Dict[str, Any] = {}

    def walk(value: Any, key: str) -> None:
        if isinstance(value, dict):
            for sub, item in value.items():
                walk(item, f"{key}.{sub}" if key else str(sub))
        elif isinstance(value, list):
            for index, item in enumerate(value):
                walk(item, f"{key}.{index}" if key else str(index))
        else:
            out[key] = value

    walk(data, prefix)
    return out


def decode_body(data: bytes, encoding: Optional[str]) -> bytes:
    encoding = (encoding or "").lower()
    if encoding == "gzip":
        return gzip.decompress(data)
    if encoding == "deflate":
        return zlib.decompress(data, -zlib.MAX_WBITS)
    if encoding in ("zlib", "compress"):
        return zlib.decompress(data)
    if encoding == "br":
        return brotli.decompress(data)
    if encoding == "zstd":
        return zstandard.ZstdDecompressor().decompressobj().decompress(data)
    return data


def encode_body(data: bytes, encoding: Optional[str]) -> bytes:
    encoding = (encoding or "").lower()
    if encoding == "gzip":
        return gzip.compress(data)
    if encoding == "deflate":
        compressor = zlib.compressobj(wbits=-zlib.MAX_WBITS)
        return compressor.compress(data) + compressor.flush()
    if encoding == "zlib":
        return zlib.compress(data)
    if encoding == "br":
        return brotli.compress(data)
    if encoding == "zstd":
        return zstandard.ZstdCompressor().compress(data)
    return data


def xml_to_data(text: str) -> Any:
    """Convert XML to plain data: attributes as '-name', text as '#content'."""
    return json.loads(
        json.dumps(xmltodict.parse(text, attr_prefix="-", cdata_key="#content"))
    )


def _media_type(content_type: str) -> str:
    media = content_type.split(";", 1)[0].strip().lower()
    if not _TOKEN_RE.fullmatch(media):
        raise ValueError("mime: no media type")
    return media


def parse_content(content_type: str, data: bytes) -> Tuple[str, Any]:
    """Parse a decoded body; return ('', None) for unsupported formats."""
    found = _FORMAT_RE.search(_media_type(content_type))
    if not found:
        return "", None
    kind = found.group(1).lower()
    text = data.decode("utf-8", errors="replace")
    if kind == "json":
        return kind, json.loads(text)
    if kind == "xml":
        return kind, xml_to_data(text)
    if kind == "yaml":
        return kind, yaml.safe_load(text)
    return kind, text


def decode_response_body(response: Response) -> bytes:
    return decode_body(response.body, response.headers.get("Content-Encoding"))


def encode_response_body(response: Response) -> None:
    """Re-compress the response body according to its Content-Encoding."""
    encoding = response.headers.get("Content-Encoding").lower()
    if encoding not in ("gzip", "deflate", "zlib", "br", "zstd"):
        response.content_length = len(response.body)
        return
    response.body = encode_body(response.body, encoding)
    response.headers.set("Content-Length", str(len(response.body)))


def response_body_content(response: Response) -> Tuple[str, Any]:
    content_type = response.headers.get("Content-Type")
    if not content_type:
        raise ValueError("Content-Type not found in Response Header")
    media = _media_type(content_type)
    if not _FORMAT_RE.search(media):
        return "", None
    return parse_content(media, decode_response_body(response))