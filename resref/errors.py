"""Error taxonomy for resource loading, pointer navigation and resolution.

Every error carries a human-readable message and a machine-readable
``error_type``. Errors that relate to a node in a document also carry the
full location (document URL plus pointer) so a failure can be diagnosed from
the message alone.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from resref.pointer import Pointer
    from resref.reference import Reference


class ResRefError(Exception):
    """Base class for all resref errors.

    Attributes:
        message: Human-readable error description.
        location: Canonical location of the resource involved, if known.
        error_type: Machine-readable error category.
    """

    error_type = "resref_error"

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def to_json(self) -> dict[str, Any]:
        """Serialize error to JSON format for machine parsing."""
        result: dict[str, Any] = {
            "error": self.error_type,
            "message": self.message,
        }
        if self.location:
            result["location"] = self.location
        return result

    def __str__(self) -> str:
        return self.message


class ResourceNotFoundError(ResRefError):
    """The opener could not locate or read a resource."""

    error_type = "resource_not_found"

    def __init__(self, location: str, reason: Optional[str] = None):
        message = f"Resource not found: {location}"
        if reason:
            message = f"Resource not found ({reason}): {location}"
        super().__init__(message, location)
        self.reason = reason


class ParseError(ResRefError):
    """Document text could not be parsed as JSON or YAML."""

    error_type = "parse_error"

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        document_format: Optional[str] = None,
    ):
        super().__init__(message, location)
        self.document_format = document_format

    def to_json(self) -> dict[str, Any]:
        result = super().to_json()
        if self.document_format:
            result["format"] = self.document_format
        return result

    def __str__(self) -> str:
        parts = [self.message]
        if self.document_format:
            parts.append(f"format: {self.document_format}")
        if self.location:
            parts.append(f"location: {self.location}")
        return " | ".join(parts)


class PointerError(ResRefError):
    """Base class for pointer syntax and lookup errors.

    Attributes:
        text: Description of the failure, without location.
        pointer: Deepest pointer that was valid before the failure.
    """

    def __init__(self, text: str, pointer: Optional[Pointer] = None):
        message = text if pointer is None else f"{text}, at #{pointer.to_uri_fragment()}"
        super().__init__(message)
        self.text = text
        self.pointer = pointer


class PointerSyntaxError(PointerError):
    """Malformed pointer, fragment or array index token."""

    error_type = "pointer_syntax"


class PointerNotFoundError(PointerError):
    """A pointer token does not match any node."""

    error_type = "pointer_not_found"


class ReferenceLookupError(ResRefError):
    """Base class for errors reported against a Reference.

    Attributes:
        text: Description of the failure, without location.
        reference: Reference to the deepest node reached, if any.
    """

    def __init__(self, text: str, reference: Optional[Reference] = None):
        message = text if reference is None else f"{text}, at {reference}"
        super().__init__(message, reference.location if reference is not None else None)
        self.text = text
        self.reference = reference

    @property
    def pointer(self) -> Optional[Pointer]:
        return self.reference.pointer if self.reference is not None else None

    def to_json(self) -> dict[str, Any]:
        result = super().to_json()
        if self.reference is not None:
            result["pointer"] = str(self.reference.pointer)
        return result


class NodeNotFoundError(ReferenceLookupError):
    """Navigation from a Reference found no node at the requested place."""

    error_type = "node_not_found"


class ReferenceResolutionError(ReferenceLookupError):
    """A relative reference string could not be resolved."""

    error_type = "resolution_failed"


class TypeMismatchError(ResRefError):
    """A node does not have the expected type.

    Attributes:
        role: Which node was checked ("Child", "Parent" or "Node").
        expected: Display form of the expected type, e.g. ``"String?"``.
        value: The actual node value.
        reference: Reference to the offending node.
    """

    error_type = "type_mismatch"

    def __init__(self, role: str, expected: str, value: Any, reference: Reference):
        super().__init__(
            f"{role} not correct type ({expected}), was {describe_value(value)}, at {reference}",
            reference.location,
        )
        self.role = role
        self.expected = expected
        self.value = value
        self.reference = reference

    def to_json(self) -> dict[str, Any]:
        result = super().to_json()
        result["role"] = self.role
        result["expected"] = self.expected
        result["pointer"] = str(self.reference.pointer)
        return result


class ConfigError(ResRefError):
    """Error in loader configuration."""

    error_type = "config_invalid"

    def __init__(self, message: str, file: Optional[str] = None):
        super().__init__(message)
        self.file = file

    def to_json(self) -> dict[str, Any]:
        result = super().to_json()
        if self.file:
            result["file"] = self.file
        return result

    def __str__(self) -> str:
        parts = [self.message]
        if self.file:
            parts.append(f"file: {self.file}")
        return " | ".join(parts)


MAX_VALUE_DISPLAY = 40


def describe_value(value: Any) -> str:
    """Render a node value for error messages, truncated to a short form."""
    if value is None:
        return "null"
    try:
        text = json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        text = repr(value)
    if len(text) > MAX_VALUE_DISPLAY:
        text = text[: MAX_VALUE_DISPLAY - 3] + "..."
    return text
