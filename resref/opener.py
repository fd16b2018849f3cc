"""Locate and read resources.

The opener turns user-supplied locations into canonical location strings,
resolves relative references between locations (RFC 3986) and reads the raw
bytes of a resource together with any MIME type the transport reports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union
from urllib.parse import urldefrag, urljoin, urlsplit
from urllib.request import url2pathname

import requests

from resref.config import LoaderConfig, get_default_config
from resref.errors import ResourceNotFoundError

logger = logging.getLogger(__name__)

Location = Union[str, Path]


@dataclass
class OpenedResource:
    """Raw content of a resource."""

    data: bytes
    mime_type: Optional[str] = None


class Opener(Protocol):
    """What the loader needs from a resource opener."""

    def canonicalize(self, location: Location) -> str: ...

    def resolve(self, base: str, relative: str) -> str: ...

    def open(self, location: str) -> OpenedResource: ...


def has_scheme(location: str) -> bool:
    """True if ``location`` starts with a URI scheme.

    Single-letter schemes are treated as Windows drive letters.
    """
    return len(urlsplit(location).scheme) > 1


def with_fragment(uri: str, fragment: Optional[str]) -> str:
    """Replace the fragment of a URI, or remove it when ``fragment`` is None.

    An empty string leaves a bare trailing ``#``.
    """
    base = urldefrag(uri).url
    if fragment is None:
        return base
    return f"{base}#{fragment}"


class DefaultOpener:
    """Opener for ``file:`` URIs, filesystem paths and HTTP(S) URLs."""

    def __init__(self, config: Optional[LoaderConfig] = None):
        self.config = config or get_default_config()

    def canonicalize(self, location: Location) -> str:
        """Return the canonical location string.

        Strings with a URI scheme are returned unchanged. Filesystem paths
        become absolute ``file:`` URIs.
        """
        if isinstance(location, Path):
            return self._path_uri(location)
        if has_scheme(location):
            return location
        return self._path_uri(Path(location))

    def resolve(self, base: str, relative: str) -> str:
        if has_scheme(relative):
            return relative
        return urljoin(base, relative)

    def open(self, location: str) -> OpenedResource:
        """Read a resource.

        Raises:
            ResourceNotFoundError: If the scheme is not allowed, the file is
                missing or unreadable, or the HTTP request fails.
        """
        scheme = urlsplit(location).scheme.lower()
        if scheme not in self.config.allowed_schemes:
            raise ResourceNotFoundError(location, f"unsupported scheme '{scheme}'")
        if scheme == "file":
            return self._open_file(location)
        if scheme in ("http", "https"):
            return self._open_http(location)
        raise ResourceNotFoundError(location, f"no handler for scheme '{scheme}'")

    def _path_uri(self, path: Path) -> str:
        path = path.expanduser()
        if not path.is_absolute():
            base_dir = Path(self.config.base_dir) if self.config.base_dir else Path.cwd()
            path = base_dir / path
        return path.resolve().as_uri()

    def _open_file(self, location: str) -> OpenedResource:
        path = Path(url2pathname(urlsplit(location).path))
        try:
            data = path.read_bytes()
        except FileNotFoundError as e:
            raise ResourceNotFoundError(location) from e
        except OSError as e:
            raise ResourceNotFoundError(location, e.strerror or type(e).__name__) from e
        logger.debug(f"Read {len(data)} bytes from {path}")
        return OpenedResource(data=data)

    def _open_http(self, location: str) -> OpenedResource:
        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": self.config.accept,
        }
        try:
            response = requests.get(location, headers=headers, timeout=self.config.http_timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout as e:
            raise ResourceNotFoundError(location, f"timed out after {self.config.http_timeout}s") from e
        except requests.exceptions.HTTPError as e:
            raise ResourceNotFoundError(location, f"HTTP {e.response.status_code}") from e
        except requests.exceptions.RequestException as e:
            raise ResourceNotFoundError(location, type(e).__name__) from e

        logger.debug(f"Fetched {len(response.content)} bytes from {location}")
        return OpenedResource(
            data=response.content,
            mime_type=response.headers.get("Content-Type"),
        )
