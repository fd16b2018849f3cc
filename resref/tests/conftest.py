"""Shared fixtures for resref tests."""

import json
from urllib.parse import urljoin

import pytest

from resref.errors import ResourceNotFoundError
from resref.loader import DocumentLoader
from resref.opener import OpenedResource

JSON1 = {
    "alpha": 123,
    "beta": 456,
    "gamma": 888,
    "delta": "A string",
    "epsilon": True,
    "phi": None,
    "sigma": 123456789123456789,
    "omicron": 1.5,
    "powersOfTen": [1, 10, 100, 1000, 10000],
    "heterogeneousArray": [1, "hello", True, None],
    "complexArray": [{"f1": "AAA"}, {"f1": "BBB"}, {"f1": "CCC"}, {"f1": "DDD"}],
    "substructure": {"one": 111, "two": 222},
}

JSON2 = {
    "field1": 12345,
    "field2": {"sub1": 10},
}

YAML1 = """\
openapi: 3.0.0
paths:
  /pets:
    get:
      responses:
        200:
          $ref: "json2.json#/field2"
"""


@pytest.fixture
def docs_dir(tmp_path):
    """Directory holding json1.json, json2.json and yaml1.yaml side by side."""
    (tmp_path / "json1.json").write_text(json.dumps(JSON1))
    (tmp_path / "json2.json").write_text(json.dumps(JSON2))
    (tmp_path / "yaml1.yaml").write_text(YAML1)
    return tmp_path


@pytest.fixture
def loader():
    return DocumentLoader()


@pytest.fixture
def json1_resource(loader, docs_dir):
    return loader.resource(docs_dir / "json1.json")


@pytest.fixture
def root_ref(json1_resource):
    """Reference to the root Object of json1.json."""
    return json1_resource.ref()


class FakeOpener:
    """In-memory opener that counts reads per location."""

    def __init__(self, resources=None):
        self.resources = dict(resources or {})
        self.opened = []

    def canonicalize(self, location):
        return str(location)

    def resolve(self, base, relative):
        return urljoin(base, relative)

    def open(self, location):
        self.opened.append(location)
        if location not in self.resources:
            raise ResourceNotFoundError(location)
        data, mime_type = self.resources[location]
        return OpenedResource(data=data.encode("utf-8"), mime_type=mime_type)


@pytest.fixture
def fake_opener():
    return FakeOpener()
