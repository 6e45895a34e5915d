"""Source graph configuration and the source resolution policy.

Every field lives in a named graph ("source").  Sources are classified
as listed (public) or unlisted (private), and one default source per
classification receives newly written data.  :func:`resolve_source`
decides which graph a field's current state belongs in: the graph it
was loaded from while its visibility still matches that graph, the
default graph for its visibility otherwise.  A field toggled private ->
public -> private therefore lands back on its original private graph.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from rdflib import URIRef

__all__ = [
    "DefaultSources",
    "SourceConfig",
    "resolve_source",
]


class DefaultSources(BaseModel):
    """The graphs new listed and unlisted data is written to."""

    listed: str = Field(..., description="Default graph for listed (public) fields")
    unlisted: str = Field(..., description="Default graph for unlisted (private) fields")

    model_config = ConfigDict(frozen=True, extra="forbid")


class SourceConfig(BaseModel):
    """Default sources plus the listed/unlisted classification of every known graph.

    The default graphs are added to ``source_index`` when missing.  A
    default graph classified contrary to its role is rejected.
    """

    default_sources: DefaultSources = Field(..., alias="defaultSources")
    source_index: Dict[str, bool] = Field(default_factory=dict, alias="sourceIndex")

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def index_default_sources(cls, data: Any) -> Any:
        """Make sure both default graphs are classified in the index."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        defaults = data.get("default_sources", data.get("defaultSources"))
        if isinstance(defaults, DefaultSources):
            defaults = defaults.model_dump()
        if not isinstance(defaults, dict):
            return data
        index_key = "source_index" if "source_index" in data else "sourceIndex"
        index = dict(data.get(index_key) or {})
        for role, listed in (("listed", True), ("unlisted", False)):
            uri = defaults.get(role)
            if uri is None:
                continue
            if index.setdefault(uri, listed) != listed:
                raise ValueError(
                    f"Default {role} source {uri} is classified as "
                    f"{'listed' if index[uri] else 'unlisted'} in the source index"
                )
        data[index_key] = index
        return data

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SourceConfig":
        """Load a source configuration from a YAML file."""
        with open(path, "r") as f:
            return cls.model_validate(yaml.safe_load(f) or {})

    def is_listed(self, source: Optional[str]) -> bool:
        """Classification of *source*; absent and unknown graphs are unlisted."""
        if source is None:
            return False
        return self.source_index.get(str(source), False)

    def default_for(self, listed: bool) -> URIRef:
        """The default graph for the given visibility."""
        return URIRef(self.default_sources.listed if listed else self.default_sources.unlisted)


def resolve_source(
    listed: bool,
    original_source: Optional[str],
    source_config: SourceConfig,
) -> URIRef:
    """
    Choose the graph a field's current state should be written to.

    Args:
        listed: The field's current visibility
        original_source: The graph the field was loaded from, if any
        source_config: Source classification and defaults

    Returns:
        The original source when its classification equals *listed*,
        otherwise the default source for *listed*
    """
    if original_source is not None and source_config.is_listed(original_source) == listed:
        return URIRef(original_source)
    return source_config.default_for(listed)
