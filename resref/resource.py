"""Loaded documents and the resources they come from."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from resref.nodes import ANY, Expected
from resref.pointer import ROOT
from resref.reference import Reference

if TYPE_CHECKING:
    from resref.loader import DocumentLoader

ID_KEYWORD = "$id"


class Document:
    """A parsed document tree and the location it was loaded from.

    Documents compare by identity: the cache hands out the same instance for
    every load of the same key.
    """

    __slots__ = ("location", "root")

    def __init__(self, location: str, root: Any):
        self.location = location
        self.root = root

    @property
    def declared_id(self) -> Optional[str]:
        """The string ``$id`` member of an Object root, if there is one."""
        if isinstance(self.root, Mapping):
            declared = self.root.get(ID_KEYWORD)
            if isinstance(declared, str):
                return declared
        return None

    def __repr__(self) -> str:
        return f"Document({self.location!r})"


class Resource:
    """A canonical location bound to the loader that can fetch it.

    Two resources are equal when their canonical location strings are equal;
    no further URL normalization is attempted.
    """

    __slots__ = ("location", "loader")

    def __init__(self, location: str, loader: DocumentLoader):
        self.location = location
        self.loader = loader

    def resolve(self, relative: str) -> Resource:
        """Resolve a relative locator against this resource's location."""
        return Resource(self.loader.opener.resolve(self.location, relative), self.loader)

    def load(self) -> Document:
        return self.loader.load(self.location)

    def ref(self, expected: Expected = ANY) -> Reference:
        """Reference to the root of this resource's document.

        Raises:
            TypeMismatchError: If the root does not match ``expected``.
        """
        return Reference(self, self.load(), ROOT).as_ref(expected)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return self.location == other.location

    def __hash__(self) -> int:
        return hash(self.location)

    def __str__(self) -> str:
        return self.location

    def __repr__(self) -> str:
        return f"Resource({self.location!r})"
