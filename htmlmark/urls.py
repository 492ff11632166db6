"""Normalising link and image URLs, optionally against a base domain."""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote, quote_plus, unquote_to_bytes

__all__ = ["parse_base_domain", "default_assemble_absolute_url", "parse_and_encode_query"]

_PERCENT_REPLACEMENTS = str.maketrans({
    " ": "%20",
    "[": "%5B",
    "]": "%5D",
    "(": "%28",
    ")": "%29",
    "<": "%3C",
    ">": "%3E",
})

_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_HOST_EXTRA = set("-._~!$&'()*+,;=:[]<>\"%")
_PATH_SAFE = "!$&'()*+,;=:@[]/%"
_FRAGMENT_SAFE = _PATH_SAFE + "?"


@dataclass
class _URL:
    scheme: str = ""
    opaque: str = ""
    user: Optional[str] = None
    host: str = ""
    path: str = ""
    force_query: bool = False
    raw_query: str = ""
    fragment: str = ""

    def __str__(self) -> str:
        out = ""
        if self.scheme:
            out += self.scheme + ":"
        if self.opaque:
            out += self.opaque
        else:
            if self.scheme or self.host or self.user is not None:
                if self.host or self.path or self.user is not None:
                    out += "//"
                if self.user is not None:
                    out += self.user + "@"
                out += self.host
            path = quote(self.path, safe=_PATH_SAFE)
            if path and not path.startswith("/") and self.host:
                out += "/"
            if not out and ":" in path.partition("/")[0]:
                out += "./"
            out += path
        if self.force_query or self.raw_query:
            out += "?" + self.raw_query
        if self.fragment:
            out += "#" + quote(self.fragment, safe=_FRAGMENT_SAFE)
        return out


def _get_scheme(raw: str) -> tuple[str, str]:
    for index, char in enumerate(raw):
        if char.isascii() and char.isalpha():
            continue
        if char.isascii() and (char.isdigit() or char in "+-."):
            if index == 0:
                return "", raw
            continue
        if char == ":":
            if index == 0:
                raise ValueError("missing protocol scheme")
            return raw[:index], raw[index + 1:]
        return "", raw
    return "", raw


def _check_host(host: str) -> None:
    if _BAD_ESCAPE.search(host):
        raise ValueError(f"invalid URL escape in host {host!r}")
    for char in host:
        if char.isascii() and not char.isalnum() and char not in _HOST_EXTRA:
            raise ValueError(f"invalid character {char!r} in host name")
    if not host.startswith("[") and ":" in host:
        port = host.rpartition(":")[2]
        if port and not (port.isascii() and port.isdigit()):
            raise ValueError(f"invalid port {port!r}")


def _parse(raw: str) -> _URL:
    if _CONTROL.search(raw):
        raise ValueError("invalid control character in URL")
    rest, _, fragment = raw.partition("#")
    if _BAD_ESCAPE.search(fragment):
        raise ValueError("invalid URL escape in fragment")
    url = _URL(fragment=fragment)

    scheme, rest = _get_scheme(rest)
    url.scheme = scheme.lower()

    if rest.endswith("?") and rest.count("?") == 1:
        url.force_query = True
        rest = rest[:-1]
    else:
        rest, _, url.raw_query = rest.partition("?")

    if not rest.startswith("/"):
        if url.scheme:
            url.opaque = rest
            return url
        if ":" in rest.partition("/")[0]:
            raise ValueError("first path segment in URL cannot contain colon")

    if (url.scheme or not rest.startswith("///")) and rest.startswith("//"):
        authority, slash, path = rest[2:].partition("/")
        rest = slash + path
        userinfo, at, host = authority.rpartition("@")
        if at:
            url.user = userinfo
        _check_host(host)
        url.host = host

    if _BAD_ESCAPE.search(rest):
        raise ValueError("invalid URL escape in path")
    url.path = rest
    return url


def _resolve_path(base: str, ref: str) -> str:
    if not ref:
        full = base
    elif not ref.startswith("/"):
        full = base[: base.rfind("/") + 1] + ref
    else:
        full = ref
    if not full:
        return ""

    dst = "/"
    first = True
    elements = full.split("/")
    for elem in elements:
        if elem == ".":
            first = False
            continue
        if elem == "..":
            tail = dst[1:]
            index = tail.rfind("/")
            if index == -1:
                dst = "/"
                first = True
            else:
                dst = "/" + tail[:index]
        else:
            if not first:
                dst += "/"
            dst += elem
            first = False
    if elements[-1] in (".", ".."):
        dst += "/"
    if len(dst) > 1 and dst[1] == "/":
        dst = dst[1:]
    return dst


def _resolve(base: _URL, ref: _URL) -> _URL:
    url = dataclasses.replace(ref)
    if not ref.scheme:
        url.scheme = base.scheme
    if ref.scheme or ref.host or ref.user is not None:
        url.path = _resolve_path(ref.path, "")
        return url
    if ref.opaque:
        url.user = None
        url.host = ""
        url.path = ""
        return url
    if not ref.path and not ref.force_query and not ref.raw_query:
        url.raw_query = base.raw_query
        if not ref.fragment:
            url.fragment = base.fragment
    if not ref.path and base.opaque:
        url.opaque = base.opaque
        url.user = None
        url.host = ""
        url.path = ""
        return url
    url.host = base.host
    url.user = base.user
    url.path = _resolve_path(base.path, ref.path)
    return url


def parse_base_domain(raw_domain: str) -> Optional[_URL]:
    """Parse a domain, adding ``http://`` if needed; None if it has no host."""
    if not raw_domain:
        return None
    for candidate in (raw_domain, "http://" + raw_domain):
        try:
            url = _parse(candidate)
        except ValueError:
            continue
        if url.host:
            return url
    return None


def default_assemble_absolute_url(tag_name: str, raw_url: str, domain: str) -> str:
    """Clean up ``raw_url`` for markdown and make it absolute if a domain is given."""
    raw = raw_url.strip()
    if raw == "#":
        return raw

    raw = raw.replace("\n", "%0A").replace("\t", "%09")
    try:
        url = _parse(raw)
    except ValueError:
        return raw.translate(_PERCENT_REPLACEMENTS)

    if url.scheme == "data":
        return raw.translate(_PERCENT_REPLACEMENTS)

    # Keep the original parameter order; spaces become %20 rather than "+".
    url.raw_query = parse_and_encode_query(url.raw_query).replace("+", "%20")

    base = parse_base_domain(domain)
    if base is not None:
        url = _resolve(base, url)

    return str(url).translate(_PERCENT_REPLACEMENTS)


def _decode_and_encode(original: str) -> str:
    if _BAD_ESCAPE.search(original):
        return original
    return quote_plus(unquote_to_bytes(original.replace("+", " ")), safe="")


def parse_and_encode_query(raw_query: str) -> str:
    """Re-encode every key and value of a query string, keeping their order."""
    if not raw_query:
        return ""
    encoded = []
    for part in raw_query.split("&"):
        key, sep, value = part.partition("=")
        if not sep:
            encoded.append(_decode_and_encode(key))
        elif not value:
            encoded.append(_decode_and_encode(key) + "=")
        else:
            encoded.append(_decode_and_encode(key) + "=" + _decode_and_encode(value))
    return "&".join(encoded)