"""References to nodes in loaded documents.

A ``Reference`` pairs a resource with a pointer into that resource's
document. All navigation is type checked against an ``Expected`` descriptor
and every operation returns a new ``Reference``; errors report the exact
document location of the failure.

Example:
    loader = DocumentLoader()
    root = loader.resource("openapi.yaml").ref(OBJECT)
    schema = root.resolve("#/components/schemas/Pet", OBJECT)
    for name, prop in schema.child("properties", OBJECT).items(OBJECT):
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional, TypeVar, Union

from resref.errors import (
    NodeNotFoundError,
    PointerError,
    PointerSyntaxError,
    ReferenceResolutionError,
    TypeMismatchError,
)
from resref.nodes import ANY, ARRAY, BOOLEAN, INT, OBJECT, STRING, STRUCTURE, Expected, NodeType, node_type
from resref.pointer import ROOT, Pointer, array_index

if TYPE_CHECKING:
    from resref.resource import Document, Resource

logger = logging.getLogger(__name__)

R = TypeVar("R")
Token = Union[str, int]

DECIMAL_OR_INT = Expected("Decimal", frozenset({NodeType.INT, NodeType.DECIMAL}))


class Reference:
    """Immutable (resource, pointer) pair naming one node of one document.

    The reference keeps the document it was created from, so it stays
    usable after the loader's cache is cleared. Equality and hashing use
    the resource location and the pointer only.
    """

    __slots__ = ("_resource", "_document", "_pointer", "_node")

    def __init__(self, resource: Resource, document: Document, pointer: Pointer = ROOT):
        """Create a reference.

        Raises:
            PointerNotFoundError: If ``pointer`` does not address a node.
        """
        self._resource = resource
        self._document = document
        self._pointer = pointer
        self._node = pointer.find(document.root)

    @classmethod
    def _at(cls, resource: Resource, document: Document, pointer: Pointer, node: Any) -> Reference:
        ref = cls.__new__(cls)
        ref._resource = resource
        ref._document = document
        ref._pointer = pointer
        ref._node = node
        return ref

    @property
    def resource(self) -> Resource:
        return self._resource

    @property
    def location(self) -> str:
        return self._resource.location

    @property
    def document(self) -> Document:
        return self._document

    @property
    def pointer(self) -> Pointer:
        return self._pointer

    @property
    def node(self) -> Any:
        return self._node

    @property
    def value(self) -> Any:
        return self._node

    # ------------------------------------------------------------------
    # Type checks
    # ------------------------------------------------------------------

    def is_ref(self, expected: Expected) -> bool:
        return expected.matches(self._node)

    def as_ref(self, expected: Expected, role: str = "Node") -> Reference:
        """Return this reference after checking the node type.

        Raises:
            TypeMismatchError: If the node does not match ``expected``.
        """
        if not expected.matches(self._node):
            raise TypeMismatchError(role, str(expected), self._node, self)
        return self

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _lookup(self, token: Token) -> tuple[str, Any]:
        if isinstance(token, bool) or not isinstance(token, (str, int)):
            raise TypeError(f"Child token must be str or int, not {type(token).__name__}")
        node = self._node
        if isinstance(node, Mapping):
            key = str(token)
            if key in node:
                return key, node[key]
            raise NodeNotFoundError(f"Can't locate JSON property \"{key}\"", self)
        if isinstance(node, (list, tuple)):
            index = token if isinstance(token, int) else array_index(token, self._pointer)
            if 0 <= index < len(node):
                return str(index), node[index]
            raise NodeNotFoundError(f"Can't locate JSON array index {token}", self)
        raise NodeNotFoundError(f"Can't locate child \"{token}\" of {node_type(node).value}", self)

    def _with_child(self, key: str, node: Any) -> Reference:
        return Reference._at(self._resource, self._document, self._pointer.child(key), node)

    def untyped_child(self, token: Token) -> Reference:
        """Reference to a child without any type check.

        Raises:
            NodeNotFoundError: If there is no such child.
        """
        return self._with_child(*self._lookup(token))

    def child(self, token: Token, expected: Expected = ANY) -> Reference:
        """Reference to a property of an Object or an element of an Array.

        Args:
            token: Property name, or array index (int or decimal string).
            expected: Type the child must have.

        Raises:
            NodeNotFoundError: If there is no such child.
            TypeMismatchError: If the child does not match ``expected``.
        """
        ref = self.untyped_child(token)
        return ref.as_ref(expected, "Child")

    def has_child(self, token: Token, expected: Expected = ANY) -> bool:
        """Whether a child exists and matches ``expected``.

        A missing or mistyped child gives False. A token that is neither
        str nor int raises TypeError, as it does for :meth:`child`.
        """
        try:
            _, node = self._lookup(token)
        except (NodeNotFoundError, PointerSyntaxError):
            return False
        return expected.matches(node)

    def optional_child(self, name: str, expected: Expected = ANY) -> Optional[Reference]:
        """Reference to a property, or None when it is absent or null.

        Raises:
            TypeMismatchError: If the property is present with another type.
        """
        obj = self.as_ref(OBJECT).node
        if obj.get(name) is None:
            return None
        return self.child(name, expected)

    def parent(self, expected: Expected = STRUCTURE) -> Reference:
        """Reference to the enclosing Object or Array.

        Raises:
            NodeNotFoundError: If this is the document root.
            TypeMismatchError: If the parent does not match ``expected``.
        """
        if self._pointer.is_root:
            raise NodeNotFoundError("Can't get parent of root JSON Pointer", self)
        pointer = self._pointer.parent()
        ref = Reference._at(self._resource, self._document, pointer, pointer.find(self._document.root))
        return ref.as_ref(expected, "Parent")

    # ------------------------------------------------------------------
    # Scalar properties of an Object
    # ------------------------------------------------------------------

    def _optional_value(self, name: str, expected: Expected) -> Any:
        obj = self.as_ref(OBJECT).node
        value = obj.get(name)
        if value is None:
            return None
        if not expected.matches(value):
            raise TypeMismatchError("Node", str(expected), value, self._with_child(name, value))
        return value

    def optional_string(self, name: str) -> Optional[str]:
        return self._optional_value(name, STRING)

    def optional_boolean(self, name: str) -> Optional[bool]:
        return self._optional_value(name, BOOLEAN)

    def optional_int(self, name: str) -> Optional[int]:
        return self._optional_value(name, INT)

    def optional_decimal(self, name: str) -> Optional[Decimal]:
        value = self._optional_value(name, DECIMAL_OR_INT)
        if value is None or isinstance(value, Decimal):
            return value
        if isinstance(value, float):
            return Decimal(repr(value))
        return Decimal(value)

    def if_present(
        self,
        name: str,
        expected: Expected,
        block: Callable[[Reference], R],
    ) -> Optional[R]:
        """Run ``block`` on a child only if it exists with the expected type."""
        if self.has_child(name, expected):
            return block(self.child(name, expected))
        return None

    def map_child(self, name: str, expected: Expected, block: Callable[[Reference], R]) -> R:
        return block(self.child(name, expected))

    # ------------------------------------------------------------------
    # Bulk operations, in document order
    # ------------------------------------------------------------------

    def elements(self, expected: Expected = ANY) -> Iterator[tuple[int, Reference]]:
        """Yield ``(index, child)`` for each element of an Array.

        Each element is checked as :meth:`child` would check it, so a bad
        element raises the same TypeMismatchError at the same location.
        """
        array = self.as_ref(ARRAY).node
        for index in range(len(array)):
            yield index, self.child(index, expected)

    def items(self, expected: Expected = ANY) -> Iterator[tuple[str, Reference]]:
        """Yield ``(key, child)`` for each property of an Object."""
        obj = self.as_ref(OBJECT).node
        for key in list(obj):
            yield key, self.child(key, expected)

    def map(
        self,
        expected: Expected = ANY,
        transform: Optional[Callable[[Reference, int], R]] = None,
    ) -> list:
        """Map the elements of an Array.

        Args:
            expected: Type every element must have.
            transform: Called with ``(child, index)``; by default the
                element value itself is collected.
        """
        if transform is None:
            return [ref.node for _, ref in self.elements(expected)]
        return [transform(ref, index) for index, ref in self.elements(expected)]

    def any(self, expected: Expected, predicate: Callable[[Reference], bool]) -> bool:
        return any(predicate(ref) for _, ref in self.elements(expected))

    def all(self, expected: Expected, predicate: Callable[[Reference], bool]) -> bool:
        return all(predicate(ref) for _, ref in self.elements(expected))

    def for_each(self, expected: Expected, block: Callable[[int, Reference], Any]) -> None:
        for index, ref in self.elements(expected):
            block(index, ref)

    def for_each_key(self, expected: Expected, block: Callable[[str, Reference], Any]) -> None:
        for key, ref in self.items(expected):
            block(key, ref)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, relative: str, expected: Expected = ANY) -> Reference:
        """Resolve a relative reference such as ``other.json#/a/b``.

        - ``other.json``: root of another resource.
        - ``#/a/b``: pointer into this reference's own document.
        - ``other.json#/a/b``: pointer into another resource.

        Raises:
            ReferenceResolutionError: If the fragment does not address a node;
                ``reference`` on the error is the deepest node reached.
            PointerSyntaxError: If the fragment is malformed.
            ResourceNotFoundError: If another resource cannot be opened.
            ParseError: If another resource cannot be parsed.
            TypeMismatchError: If the target does not match ``expected``.
        """
        hash_index = relative.find("#")
        if hash_index < 0:
            target = self._resource.resolve(relative)
            document = target.load()
            ref = Reference._at(target, document, ROOT, document.root)
            logger.debug(f"Resolved {relative!r} from {self} to {ref}")
            return ref.as_ref(expected)

        if hash_index == 0:
            target = self._resource
            document = self._document
        else:
            target = self._resource.resolve(relative[:hash_index])
            document = target.load()

        pointer = Pointer.from_uri_fragment(relative[hash_index + 1:])
        try:
            node = pointer.find(document.root)
        except PointerError as e:
            partial = Reference(target, document, e.pointer if e.pointer is not None else ROOT)
            raise ReferenceResolutionError(e.text, partial) from e

        ref = Reference._at(target, document, pointer, node)
        logger.debug(f"Resolved {relative!r} from {self} to {ref}")
        return ref.as_ref(expected)

    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Reference):
            return NotImplemented
        return self._resource == other._resource and self._pointer == other._pointer

    def __hash__(self) -> int:
        return hash((self._resource, self._pointer))

    def __str__(self) -> str:
        return f"{self._resource.location}#{self._pointer.to_uri_fragment()}"

    def __repr__(self) -> str:
        return f"Reference({str(self)!r})"
