"""Parse JSON and YAML document text into a document tree."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional

import yaml

from resref.errors import ParseError


class DocumentFormat(str, Enum):
    """Text formats a document can be parsed from."""

    JSON = "json"
    YAML = "yaml"


TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class DocumentYAMLLoader(yaml.SafeLoader):
    """Safe YAML loader producing JSON-shaped trees.

    Mapping keys keep their literal scalar text, so ``200:`` and ``"200":``
    both become the key ``"200"``. Timestamps stay strings.
    """

    def construct_mapping(self, node, deep=False):
        if not isinstance(node, yaml.MappingNode):
            raise yaml.constructor.ConstructorError(
                None, None, f"expected a mapping node, but found {node.id}", node.start_mark
            )
        self.flatten_mapping(node)
        mapping: dict[str, Any] = {}
        for key_node, value_node in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    "found non-scalar key",
                    key_node.start_mark,
                )
            mapping[key_node.value] = self.construct_object(value_node, deep=deep)
        return mapping


DocumentYAMLLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def parse_document(
    text: str,
    document_format: DocumentFormat,
    location: Optional[str] = None,
) -> Any:
    """Parse document text.

    Args:
        text: Document text.
        document_format: JSON or YAML.
        location: Source location for error reporting.

    Returns:
        The root node of the tree; ``None`` for an empty YAML document.

    Raises:
        ParseError: If the text is malformed; the parser's own exception is
            chained as the cause.
    """
    if document_format is DocumentFormat.YAML:
        try:
            return yaml.load(text, Loader=DocumentYAMLLoader)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}", location, document_format.value) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}", location, document_format.value) from e
