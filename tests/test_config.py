"""Tests for configuration loading."""

import pytest
from rdflib import URIRef
from rdflib.namespace import FOAF

from modelld.config import Config, SchemaConfig, TestConfig, load_schema
from modelld.errors import ConfigError

from .conftest import PROFILE, UNLISTED, WEB_ID

SCHEMA_YAML = f"""
prefixes:
  foaf: http://xmlns.com/foaf/0.1/
fields:
  name: foaf:name
  phone: <http://xmlns.com/foaf/0.1/phone>
  nick: http://xmlns.com/foaf/0.1/nick
sources:
  defaultSources:
    listed: {PROFILE}
    unlisted: {UNLISTED}
"""


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text(SCHEMA_YAML)
    return path


class TestLoadSchema:
    def test_expands_predicates(self, schema_file):
        schema = load_schema(schema_file)
        assert schema.fields == {
            "name": str(FOAF.name),
            "phone": str(FOAF.phone),
            "nick": str(FOAF.nick),
        }

    def test_indexes_default_sources(self, schema_file):
        sources = load_schema(schema_file).sources
        assert sources.is_listed(PROFILE)
        assert not sources.is_listed(UNLISTED)

    def test_builds_models(self, schema_file, dataset):
        model = load_schema(schema_file).build_model(dataset, WEB_ID)
        assert model.get("name") == ["Mr. Cool"]
        assert model.subject == URIRef(WEB_ID)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_schema(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("fields: [unclosed")
        with pytest.raises(ConfigError):
            load_schema(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- name\n- phone\n")
        with pytest.raises(ConfigError):
            load_schema(path)

    def test_unknown_prefix(self, tmp_path):
        path = tmp_path / "schema.yaml"
        path.write_text(SCHEMA_YAML.replace("foaf:name", "schema:name"))
        with pytest.raises(ConfigError, match="name"):
            load_schema(path)

    def test_missing_sources(self, tmp_path):
        path = tmp_path / "schema.yaml"
        path.write_text("fields:\n  name: http://xmlns.com/foaf/0.1/name\n")
        with pytest.raises(ConfigError):
            load_schema(path)

    def test_schema_is_frozen(self, schema_file):
        schema = load_schema(schema_file)
        with pytest.raises(Exception):
            schema.fields = {}


def test_schema_config_from_python():
    schema = SchemaConfig(
        fields={"name": str(FOAF.name)},
        sources={"defaultSources": {"listed": PROFILE, "unlisted": UNLISTED}},
    )
    assert schema.prefixes == {}
    assert schema.sources.default_for(True) == URIRef(PROFILE)


def test_config_defaults():
    assert Config.PATCH_MAX_RETRIES >= 1
    assert Config.PATCH_TIMEOUT > 0
    assert TestConfig.PATCH_INITIAL_BACKOFF == 0.0
    assert issubclass(TestConfig, Config)
