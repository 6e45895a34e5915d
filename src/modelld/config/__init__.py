"""Configuration Module.

Environment-driven library defaults and the YAML schema loader used to
describe a model's fields and source graphs.
"""

from .schema_config import SchemaConfig, load_schema
from .settings import Config, TestConfig

__all__ = [
    "Config",
    "SchemaConfig",
    "TestConfig",
    "load_schema",
]
