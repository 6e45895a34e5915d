"""modelld: immutable, schema-driven models over RDF subgraphs.

Main modules:
- field: immutable Field values and their factories
- model: Model collections, diffing and saving
- sources: source graph configuration and resolution policy
- codec: native value <-> RDF literal encoding
- transport: patch clients (LDP over HTTP, in-memory dataset)
- sync: the save/reconcile loop
- config: environment defaults and YAML schema loading (separate module)
"""

import logging

from . import codec, utils
from .diff import DiffMap, ResourceDiff
from .errors import (
    ArgumentError,
    ConfigError,
    DecodeError,
    ImmutabilityViolation,
    ModelldError,
    PartialSaveError,
    TransportError,
)
from .field import Field, FieldCreator, FieldFactory
from .model import Model, ModelFactory, build
from .rdf import Quad, statements_matching
from .sources import DefaultSources, SourceConfig, resolve_source
from .sync import save
from .transport import GraphPatchClient, LdpPatchClient, PatchClient, PatchResult

# Import version information
from .version import VERSION

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "VERSION",
    "ArgumentError",
    "ConfigError",
    "DecodeError",
    "DefaultSources",
    "DiffMap",
    "Field",
    "FieldCreator",
    "FieldFactory",
    "GraphPatchClient",
    "ImmutabilityViolation",
    "LdpPatchClient",
    "Model",
    "ModelFactory",
    "ModelldError",
    "PartialSaveError",
    "PatchClient",
    "PatchResult",
    "Quad",
    "ResourceDiff",
    "SourceConfig",
    "TransportError",
    "build",
    "codec",
    "resolve_source",
    "save",
    "statements_matching",
    "utils",
]
