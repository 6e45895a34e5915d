"""Per-resource change sets computed from a model.

A diff map is keyed by resource (graph) URI.  Each :class:`ResourceDiff`
holds the canonical statement strings to delete from and insert into that
resource, de-duplicated and sorted so two diffs compare equal regardless
of the order fields were visited in.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Set

from pydantic import BaseModel, ConfigDict, Field

from .rdf import Quad

logger = logging.getLogger(__name__)

__all__ = [
    "DiffBuilder",
    "DiffMap",
    "ResourceDiff",
]


class ResourceDiff(BaseModel):
    """Statements to delete from and insert into one resource."""

    to_delete: List[str] = Field(default_factory=list, description="Statements to delete")
    to_insert: List[str] = Field(default_factory=list, description="Statements to insert")

    model_config = ConfigDict(frozen=True)

    def is_empty(self) -> bool:
        """Whether the resource needs no patch."""
        return not self.to_delete and not self.to_insert


DiffMap = Dict[str, ResourceDiff]


class DiffBuilder:
    """Accumulates deletions and insertions, grouped by graph URI."""

    def __init__(self) -> None:
        self._deletions: Dict[str, Set[str]] = {}
        self._insertions: Dict[str, Set[str]] = {}

    def delete(self, quad: Quad) -> None:
        """Record that *quad* must be removed from its graph."""
        if quad.graph is None:
            logger.warning(f"Cannot delete statement without a source graph: {quad}")
            return
        self._deletions.setdefault(str(quad.graph), set()).add(str(quad))

    def insert(self, quad: Quad) -> None:
        """Record that *quad* must be added to its graph."""
        if quad.graph is None:
            logger.warning(f"Cannot insert statement without a source graph: {quad}")
            return
        self._insertions.setdefault(str(quad.graph), set()).add(str(quad))

    def build(self) -> DiffMap:
        """Net out statements both deleted and inserted per resource, drop empty resources."""
        diff: DiffMap = {}
        for uri in sorted(set(self._deletions) | set(self._insertions)):
            deletions = self._deletions.get(uri, set())
            insertions = self._insertions.get(uri, set())
            unchanged = deletions & insertions
            entry = ResourceDiff(
                to_delete=sorted(deletions - unchanged),
                to_insert=sorted(insertions - unchanged),
            )
            if not entry.is_empty():
                diff[uri] = entry
        logger.debug(f"Diff touches {len(diff)} resource(s)")
        return diff
