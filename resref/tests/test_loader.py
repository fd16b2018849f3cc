"""Tests for the caching document loader."""

import json

import pytest

from resref.errors import ParseError, ResourceNotFoundError
from resref.loader import DocumentLoader, looks_like_yaml
from resref.resource import Document


class TestLooksLikeYaml:
    """Tests for the YAML/JSON format decision."""

    def test_yaml_from_mime_type(self):
        assert looks_like_yaml("file.any", "application/yaml")
        assert looks_like_yaml("file.any", "application/config+yaml")
        assert looks_like_yaml("file.json", "text/yaml")
        assert looks_like_yaml("file.any", "text/x-YML; charset=utf-8")

    def test_yaml_from_filename_extension(self):
        assert looks_like_yaml("file.yaml", "text/string")
        assert looks_like_yaml("file.yml", None)
        assert looks_like_yaml("FILE.YAML")
        assert not looks_like_yaml("file.yml", "application/json")

    def test_json_by_default(self):
        assert not looks_like_yaml("file.txt", "text/string")
        assert not looks_like_yaml("file.txt", None)
        assert not looks_like_yaml("file.json", "application/json")


class TestLoadAndCache:
    """Tests for loading documents through the cache."""

    def test_load_using_cache(self, tmp_path):
        """A cached document is returned until the cache is cleared."""
        file1 = tmp_path / "temp1.json"
        file1.write_text(json.dumps({"value": 111}))
        loader = DocumentLoader()

        first = loader.load(file1)
        assert first.root["value"] == 111

        file1.write_text(json.dumps({"value": 999}))
        second = loader.load(file1)
        assert second is first
        assert second.root["value"] == 111

        loader.clear_cache()
        third = loader.load(file1)
        assert third is not first
        assert third.root["value"] == 999

    def test_string_and_path_share_key(self, tmp_path):
        file1 = tmp_path / "a.json"
        file1.write_text("{}")
        loader = DocumentLoader()
        assert loader.load(str(file1)) is loader.load(file1)
        assert loader.load(file1.resolve().as_uri()) is loader.load(file1)

    def test_document_records_location(self, tmp_path):
        file1 = tmp_path / "a.json"
        file1.write_text("[1, 2]")
        loader = DocumentLoader()
        document = loader.load(file1)
        assert document.location == file1.resolve().as_uri()
        assert loader.is_cached(document.location)
        assert document.location in loader

    def test_yaml_chosen_by_suffix(self, tmp_path):
        file1 = tmp_path / "a.yaml"
        file1.write_text("a:\n  b: 2\n")
        document = DocumentLoader().load(file1)
        assert document.root == {"a": {"b": 2}}

    def test_yaml_chosen_by_mime_type(self, fake_opener):
        fake_opener.resources["http://example.com/doc"] = ("a: 1\n", "application/yaml")
        loader = DocumentLoader(opener=fake_opener)
        assert loader.load("http://example.com/doc").root == {"a": 1}

    def test_json_mime_type_overrides_yaml_suffix(self, fake_opener):
        fake_opener.resources["http://example.com/doc.yaml"] = ('{"a": 1}', "application/json")
        loader = DocumentLoader(opener=fake_opener)
        assert loader.load("http://example.com/doc.yaml").root == {"a": 1}

    def test_empty_document_is_cached(self, fake_opener):
        """A document whose tree is null is still a cache hit."""
        fake_opener.resources["http://example.com/empty.yaml"] = ("", None)
        loader = DocumentLoader(opener=fake_opener)
        first = loader.load("http://example.com/empty.yaml")
        second = loader.load("http://example.com/empty.yaml")
        assert first.root is None
        assert second is first
        assert fake_opener.opened == ["http://example.com/empty.yaml"]

    def test_byte_order_mark_is_ignored(self, tmp_path):
        file1 = tmp_path / "bom.json"
        file1.write_bytes(b"\xef\xbb\xbf" + b'{"a": 1}')
        assert DocumentLoader().load(file1).root == {"a": 1}

    def test_missing_resource(self, tmp_path):
        with pytest.raises(ResourceNotFoundError):
            DocumentLoader().load(tmp_path / "nowhere.json")

    def test_parse_error_propagates(self, tmp_path):
        file1 = tmp_path / "bad.json"
        file1.write_text("{not json")
        loader = DocumentLoader()
        with pytest.raises(ParseError) as exc_info:
            loader.load(file1)
        assert exc_info.value.location == file1.resolve().as_uri()
        assert not loader.is_cached(file1.resolve().as_uri())

    def test_undecodable_bytes(self, tmp_path):
        file1 = tmp_path / "latin1.json"
        file1.write_bytes(b'{"a": "\xe9"}')
        with pytest.raises(ParseError, match="decode"):
            DocumentLoader().load(file1)


class TestIdAlias:
    """Tests for caching documents under their declared $id."""

    def test_alias_loads_without_refetch(self, fake_opener):
        fake_opener.resources["http://example.com/a.json"] = (
            json.dumps({"$id": "urn:X#frag", "a": 1}),
            None,
        )
        loader = DocumentLoader(opener=fake_opener)
        document = loader.load("http://example.com/a.json")

        assert loader.is_cached("urn:X")
        assert loader.load("urn:X") is document
        assert fake_opener.opened == ["http://example.com/a.json"]

    def test_non_string_id_is_ignored(self, fake_opener):
        fake_opener.resources["http://example.com/a.json"] = (json.dumps({"$id": 5}), None)
        loader = DocumentLoader(opener=fake_opener)
        loader.load("http://example.com/a.json")
        assert loader.cached_keys() == ["http://example.com/a.json"]

    def test_nested_id_is_ignored(self, fake_opener):
        fake_opener.resources["http://example.com/a.json"] = (
            json.dumps({"inner": {"$id": "urn:inner"}}),
            None,
        )
        loader = DocumentLoader(opener=fake_opener)
        loader.load("http://example.com/a.json")
        assert not loader.is_cached("urn:inner")

    def test_array_root_has_no_alias(self, fake_opener):
        fake_opener.resources["http://example.com/a.json"] = ('[{"$id": "urn:Y"}]', None)
        loader = DocumentLoader(opener=fake_opener)
        document = loader.load("http://example.com/a.json")
        assert document.declared_id is None
        assert loader.cached_keys() == ["http://example.com/a.json"]


class TestCacheMutation:
    """Tests for direct cache manipulation."""

    def test_add_and_remove_cache_entries(self, tmp_path):
        loader = DocumentLoader()
        resource = loader.resource(tmp_path / "unreal")
        dummy = Document(resource.location, {"value": 222})

        loader.add_to_cache(resource.location, dummy)
        assert loader.load(tmp_path / "unreal") is dummy
        assert resource.load().root["value"] == 222

        loader.remove_from_cache(resource.location)
        with pytest.raises(ResourceNotFoundError) as exc_info:
            loader.load(tmp_path / "unreal")
        assert str(exc_info.value).endswith("unreal")

    def test_add_with_relative_path(self, tmp_path, monkeypatch):
        """A path key is canonicalized the same way load() does it."""
        monkeypatch.chdir(tmp_path)
        loader = DocumentLoader()
        dummy = Document((tmp_path / "absent.json").resolve().as_uri(), {"value": 333})

        loader.add_to_cache("absent.json", dummy)
        assert loader.load("absent.json") is dummy
        assert loader.is_cached("absent.json")
        assert "absent.json" in loader
        assert loader.cached_keys() == [dummy.location]

    def test_remove_with_relative_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "a.json").write_text('{"a": 1}')
        loader = DocumentLoader()
        document = loader.load("a.json")

        loader.remove_from_cache("a.json")
        assert not loader.is_cached(document.location)
        assert not loader.is_cached(tmp_path / "a.json")

    def test_url_keys_are_unchanged(self, fake_opener):
        loader = DocumentLoader(opener=fake_opener)
        dummy = Document("urn:example:x", {})
        loader.add_to_cache("urn:example:x", dummy)
        assert loader.cached_keys() == ["urn:example:x"]
        assert loader.load("urn:example:x") is dummy

    def test_contains_ignores_non_location_keys(self):
        assert 42 not in DocumentLoader()

    def test_remove_missing_key_is_noop(self):
        loader = DocumentLoader()
        loader.remove_from_cache("file:///never/loaded.json")
        assert loader.cached_keys() == []

    def test_add_overwrites(self, fake_opener):
        fake_opener.resources["http://example.com/a.json"] = ('{"v": 1}', None)
        loader = DocumentLoader(opener=fake_opener)
        loader.load("http://example.com/a.json")
        replacement = Document("http://example.com/a.json", {"v": 2})
        loader.add_to_cache("http://example.com/a.json", replacement)
        assert loader.load("http://example.com/a.json") is replacement

    def test_loaders_do_not_share_cache(self, fake_opener):
        fake_opener.resources["http://example.com/a.json"] = ("{}", None)
        first = DocumentLoader(opener=fake_opener)
        second = DocumentLoader(opener=fake_opener)
        first.load("http://example.com/a.json")
        assert not second.is_cached("http://example.com/a.json")
