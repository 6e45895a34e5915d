"""
Schema configuration loader.

A schema file names the fields of a model, the predicate behind each
field, and the source graphs fields are read from and written to::

    prefixes:
      foaf: http://xmlns.com/foaf/0.1/
    fields:
      name: foaf:name
      phone: foaf:phone
    sources:
      defaultSources:
        listed: https://alice.example/profile/card
        unlisted: https://alice.example/settings/private
      sourceIndex:
        https://alice.example/profile/card: true
        https://alice.example/settings/private: false

Field predicates may be CURIEs over ``prefixes`` or full URIs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from rdflib import Graph
from rdflib.term import Node

from ..errors import ConfigError
from ..model import Model, build
from ..sources import SourceConfig
from ..utils import expand_curie

logger = logging.getLogger(__name__)

__all__ = [
    "SchemaConfig",
    "load_schema",
]


class SchemaConfig(BaseModel):
    """Field keys, their predicates, and the source configuration."""

    prefixes: Dict[str, str] = Field(default_factory=dict, description="CURIE prefixes")
    fields: Dict[str, str] = Field(..., description="Field key to predicate CURIE or URI")
    sources: SourceConfig = Field(..., description="Source classification and defaults")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("fields")
    @classmethod
    def expand_predicates(cls, v: Dict[str, str], info: ValidationInfo) -> Dict[str, str]:
        """Expand CURIEs and reject predicates that do not resolve to a URI."""
        prefixes = info.data.get("prefixes", {})
        expanded = {}
        for key, predicate in v.items():
            uri = expand_curie(predicate, prefixes)
            if not uri.startswith(("http://", "https://", "urn:")):
                raise ValueError(f"Field {key!r}: cannot resolve predicate {predicate!r}")
            expanded[key] = uri
        return expanded

    def build_model(self, graph: Graph, subject: Union[str, Node]) -> Model:
        """Build a model for *subject* from *graph* with this schema."""
        return build(graph, subject, self.fields, self.sources)


def load_schema(path: Union[str, Path]) -> SchemaConfig:
    """
    Load a schema configuration from a YAML file.

    Args:
        path: Path to the YAML schema file

    Returns:
        Validated SchemaConfig with predicates expanded to full URIs

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    try:
        with open(path, "r") as f:
            raw: Any = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Cannot read schema {path}: {e}") from e
    except yaml.YAMLError as e:
        logger.error("YAML Error loading %s: %s", path, e)
        raise ConfigError(f"Invalid YAML in schema {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Schema {path} must be a mapping")
    try:
        schema = SchemaConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid schema {path}: {e}") from e
    logger.debug("Loaded schema %s with %s field(s)", path, len(schema.fields))
    return schema
