"""JSON Pointer (RFC 6901) with URI fragment encoding (RFC 3986).

A ``Pointer`` is an immutable sequence of reference tokens. It knows how to
descend into a document tree one token at a time, reporting the deepest
valid prefix when a lookup fails, and how to convert itself to and from the
two textual forms: the plain pointer string (``/a/b``) and the URI fragment
(``#/a/b`` without the ``#``).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterable, Iterator, Optional, Union
from urllib.parse import quote, unquote

from resref.errors import PointerError, PointerNotFoundError, PointerSyntaxError
from resref.nodes import node_type

Token = Union[str, int]

# RFC 3986 fragment characters beyond the unreserved set, minus "/"
FRAGMENT_SAFE = "!$&'()*+,;=:@?"

ARRAY_INDEX_PATTERN = re.compile(r"0|[1-9][0-9]*")
BAD_ESCAPE_PATTERN = re.compile(r"~(?![01])")
BAD_PERCENT_PATTERN = re.compile(r"%(?![0-9A-Fa-f]{2})")


def encode_token(token: str) -> str:
    """Escape a reference token (``~`` as ``~0``, ``/`` as ``~1``)."""
    return token.replace("~", "~0").replace("/", "~1")


def decode_token(token: str) -> str:
    """Unescape a reference token.

    Raises:
        PointerSyntaxError: If the token holds a ``~`` not followed by 0 or 1.
    """
    if BAD_ESCAPE_PATTERN.search(token):
        raise PointerSyntaxError(f"Illegal escape sequence in JSON Pointer token \"{token}\"")
    return token.replace("~1", "/").replace("~0", "~")


class Pointer:
    """Immutable JSON Pointer.

    Tokens are held as strings; integer array indices are stored in their
    decimal form, so ``Pointer(["a", 0]) == Pointer(["a", "0"])``.
    """

    __slots__ = ("_tokens",)

    def __init__(self, tokens: Iterable[Token] = ()):
        self._tokens = tuple(_token_text(token) for token in tokens)

    @classmethod
    def _of(cls, tokens: tuple[str, ...]) -> Pointer:
        pointer = cls.__new__(cls)
        pointer._tokens = tokens
        return pointer

    @classmethod
    def parse(cls, text: str) -> Pointer:
        """Parse the RFC 6901 string form (``""`` or ``/token/...``)."""
        if text == "":
            return ROOT
        if not text.startswith("/"):
            raise PointerSyntaxError(f"JSON Pointer must start with \"/\": \"{text}\"")
        return cls._of(tuple(decode_token(token) for token in text[1:].split("/")))

    @classmethod
    def from_uri_fragment(cls, fragment: str) -> Pointer:
        """Decode a URI fragment (without the leading ``#``) into a Pointer.

        Raises:
            PointerSyntaxError: On bad percent escapes, bad UTF-8, bad ``~``
                escapes, or a non-empty fragment not starting with ``/``.
        """
        if BAD_PERCENT_PATTERN.search(fragment):
            raise PointerSyntaxError(f"Illegal percent escape in URI fragment \"{fragment}\"")
        try:
            text = unquote(fragment, encoding="utf-8", errors="strict")
        except UnicodeDecodeError as e:
            raise PointerSyntaxError(f"Illegal UTF-8 in URI fragment \"{fragment}\"") from e
        return cls.parse(text)

    @property
    def tokens(self) -> tuple[str, ...]:
        return self._tokens

    @property
    def depth(self) -> int:
        return len(self._tokens)

    @property
    def is_root(self) -> bool:
        return not self._tokens

    @property
    def last(self) -> Optional[str]:
        """Final token, or None for the root pointer."""
        return self._tokens[-1] if self._tokens else None

    def child(self, token: Token) -> Pointer:
        return Pointer._of(self._tokens + (_token_text(token),))

    def parent(self) -> Pointer:
        """Drop the last token.

        Raises:
            PointerNotFoundError: If this is the root pointer.
        """
        if not self._tokens:
            raise PointerNotFoundError("Can't get parent of root JSON Pointer")
        return Pointer._of(self._tokens[:-1])

    def to_uri_fragment(self) -> str:
        """Encode as a URI fragment; the root pointer encodes to ``""``."""
        return "".join("/" + quote(encode_token(token), safe=FRAGMENT_SAFE) for token in self._tokens)

    def find(self, tree: Any) -> Any:
        """Return the node this pointer addresses in ``tree``.

        Raises:
            PointerNotFoundError: If a token does not match; ``pointer`` on
                the error is the deepest prefix that did match.
            PointerSyntaxError: If an Array is addressed with a token that is
                not a valid index.
        """
        node = tree
        for depth, token in enumerate(self._tokens):
            node = child_node(node, token, Pointer._of(self._tokens[:depth]))
        return node

    def exists(self, tree: Any) -> bool:
        try:
            self.find(tree)
        except PointerError:
            return False
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Pointer):
            return NotImplemented
        return self._tokens == other._tokens

    def __hash__(self) -> int:
        return hash(self._tokens)

    def __str__(self) -> str:
        return "".join("/" + encode_token(token) for token in self._tokens)

    def __repr__(self) -> str:
        return f"Pointer({str(self)!r})"


ROOT = Pointer()


def array_index(token: str, pointer: Optional[Pointer] = None) -> int:
    """Convert a token to an array index.

    Raises:
        PointerSyntaxError: If the token is not a canonical decimal integer.
    """
    if not ARRAY_INDEX_PATTERN.fullmatch(token):
        raise PointerSyntaxError(f"Illegal array index \"{token}\"", pointer)
    return int(token)


def child_node(node: Any, token: str, pointer: Pointer) -> Any:
    """Return the child of ``node`` named by ``token``.

    Args:
        node: Object or Array node.
        token: Reference token.
        pointer: Pointer to ``node``, used in error reports.
    """
    if isinstance(node, Mapping):
        if token in node:
            return node[token]
        raise PointerNotFoundError(f"Can't locate JSON property \"{token}\"", pointer)
    if isinstance(node, (list, tuple)):
        # "-" names the element after the last one, which never exists
        if token == "-":
            raise PointerNotFoundError(f"Can't locate JSON array index {token}", pointer)
        index = array_index(token, pointer)
        if index < len(node):
            return node[index]
        raise PointerNotFoundError(f"Can't locate JSON array index {token}", pointer)
    raise PointerNotFoundError(
        f"Can't locate child \"{token}\" of {node_type(node).value}",
        pointer,
    )


def _token_text(token: Token) -> str:
    if isinstance(token, bool) or not isinstance(token, (str, int)):
        raise TypeError(f"JSON Pointer token must be str or int, not {type(token).__name__}")
    if isinstance(token, int):
        if token < 0:
            raise ValueError(f"JSON Pointer array index must not be negative: {token}")
        return str(token)
    return token
