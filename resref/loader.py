"""Caching loader for JSON and YAML documents.

Parsed documents are cached by canonical location. A document whose root
Object declares a string ``$id`` is also cached under that identifier (with
any fragment removed), so later references can name it by identity rather
than by fetch location.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urldefrag

from resref.config import LoaderConfig, get_default_config, load_config
from resref.errors import ParseError
from resref.opener import DefaultOpener, Location, Opener
from resref.parser import DocumentFormat, parse_document
from resref.resource import Document, Resource

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def looks_like_yaml(location: str, mime_type: Optional[str] = None) -> bool:
    """Decide whether a resource should be parsed as YAML.

    A MIME type mentioning yaml/yml means YAML and one mentioning json means
    JSON; otherwise a ``.yaml``/``.yml`` suffix on the location means YAML.
    Everything else is JSON.
    """
    if mime_type:
        lowered = mime_type.lower()
        if "yaml" in lowered or "yml" in lowered:
            return True
        if "json" in lowered:
            return False
    return location.lower().endswith(YAML_SUFFIXES)


class DocumentLoader:
    """Load documents through an opener, caching them by location.

    Each loader owns its own cache; there is no shared global cache. The
    cache is a plain dict with no locking.
    """

    def __init__(
        self,
        opener: Optional[Opener] = None,
        config: Optional[LoaderConfig] = None,
    ):
        self.config = config or get_default_config()
        self.opener = opener or DefaultOpener(self.config)
        self._cache: dict[str, Document] = {}

    @classmethod
    def from_config(cls, config_path: Path | str) -> DocumentLoader:
        """Create a loader configured from a YAML file.

        Raises:
            ConfigError: If the file contains invalid configuration.
        """
        return cls(config=load_config(config_path))

    def resource(self, location: Union[Location, Resource]) -> Resource:
        """Return the Resource for a path, URL or location string."""
        if isinstance(location, Resource):
            return Resource(location.location, self)
        return Resource(self.opener.canonicalize(location), self)

    def load(self, location: Union[Location, Resource]) -> Document:
        """Return the document at ``location``, from the cache if present.

        Raises:
            ResourceNotFoundError: If the resource cannot be opened.
            ParseError: If the resource is not valid JSON or YAML.
        """
        key = self._key(location)
        if key in self._cache:
            logger.debug(f"Cache hit: {key}")
            return self._cache[key]

        logger.debug(f"Cache miss: {key}")
        opened = self.opener.open(key)
        document_format = (
            DocumentFormat.YAML if looks_like_yaml(key, opened.mime_type) else DocumentFormat.JSON
        )
        try:
            text = opened.data.decode(self.config.encoding)
        except UnicodeDecodeError as e:
            raise ParseError(
                f"Cannot decode document as {self.config.encoding}: {e}",
                key,
                document_format.value,
            ) from e
        # a JSON parser rejects the byte order mark
        text = text.lstrip("\ufeff")

        document = Document(key, parse_document(text, document_format, key))
        self._cache[key] = document
        logger.info(f"Loaded {document_format.value.upper()} document {key}")

        declared_id = document.declared_id
        if declared_id is not None:
            alias = urldefrag(declared_id).url
            self._cache[alias] = document
            logger.debug(f"Aliased {key} as {alias}")

        return document

    def _key(self, location: Union[Location, Resource]) -> str:
        return self.resource(location).location

    def add_to_cache(self, location: Union[Location, Resource], document: Document) -> None:
        """Store ``document`` under the canonical form of ``location``."""
        self._cache[self._key(location)] = document

    def remove_from_cache(self, location: Union[Location, Resource]) -> None:
        self._cache.pop(self._key(location), None)

    def clear_cache(self) -> None:
        self._cache.clear()

    def is_cached(self, location: Union[Location, Resource]) -> bool:
        return self._key(location) in self._cache

    def cached_keys(self) -> list[str]:
        return list(self._cache)

    def __contains__(self, location: object) -> bool:
        if not isinstance(location, (str, Path, Resource)):
            return False
        return self._key(location) in self._cache
