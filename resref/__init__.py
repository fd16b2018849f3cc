"""resref - navigate JSON and YAML documents that reference each other.

This package provides:
- A caching document loader, keyed by location and by declared ``$id``
- JSON Pointer navigation with type checks and precise error locations
- Resolution of relative references of the form ``resource#/pointer``

Usage:
    from resref import DocumentLoader, OBJECT

    loader = DocumentLoader()
    root = loader.resource("api/openapi.yaml").ref(OBJECT)
    pet = root.resolve("schemas/pet.json#/definitions/Pet", OBJECT)
"""

__version__ = "1.0.0"

from resref.errors import (
    ConfigError,
    NodeNotFoundError,
    ParseError,
    PointerError,
    PointerNotFoundError,
    PointerSyntaxError,
    ReferenceLookupError,
    ReferenceResolutionError,
    ResourceNotFoundError,
    ResRefError,
    TypeMismatchError,
)
from resref.nodes import (
    ANY,
    ARRAY,
    BOOLEAN,
    DECIMAL,
    INT,
    NUMBER,
    OBJECT,
    STRING,
    STRUCTURE,
    VALUE,
    Expected,
    NodeType,
    node_type,
)
from resref.pointer import ROOT, Pointer
from resref.reference import Reference
from resref.resource import Document, Resource
from resref.config import LoaderConfig, load_config
from resref.opener import DefaultOpener, OpenedResource
from resref.parser import DocumentFormat, parse_document
from resref.loader import DocumentLoader, looks_like_yaml
