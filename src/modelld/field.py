"""
Fields: immutable (predicate, value, listed) values for an implicit subject.

A field is created either from a quad read out of a graph, in which case
it remembers that quad's object and graph as its *original* state, or ad
hoc from a value, in which case it has no original state and is always a
pending insertion.  Updating a field returns a new field that carries the
original state forward unchanged, so the difference between the two can
be turned into a diff later on.

Usage:
    from modelld import FieldFactory, SourceConfig

    field = FieldFactory(source_config)
    name = field("http://xmlns.com/foaf/0.1/name")

    ad_hoc = name("Mr. Cool", listed=True)
    loaded = name.from_quad(quad)
    renamed = loaded.set(value="Ms. Cool")
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional, Union

from rdflib import Literal, URIRef
from rdflib.term import Node

from .codec import from_term, to_literal
from .errors import ArgumentError, ImmutabilityViolation
from .rdf import Quad, as_node
from .sources import SourceConfig, resolve_source

__all__ = [
    "Field",
    "FieldCreator",
    "FieldFactory",
]

# Marks an argument that was not passed, as opposed to an explicit None
_UNSET: Any = object()


def _same_value(a: Any, b: Any) -> bool:
    # 1 == True and 1 == 1.0 in Python, but they encode differently
    return type(a) is type(b) and a == b


class Field:
    """
    One value of one predicate for an implicit subject.

    Attributes:
        predicate: The RDF predicate this field represents
        value: The current native value
        listed: Whether the field is currently listed (public)
        original_object: The RDF object term the field was parsed from, if any
        original_source: The graph URI the field was parsed from, if any
        original_value: ``original_object`` decoded to a native value
        id: Unique identifier, fresh for every constructed field
        source_config: Shared source classification and defaults

    Fields are immutable.  Writing an attribute raises
    :class:`~modelld.errors.ImmutabilityViolation`; use :meth:`set` or
    :meth:`toggle_listed` to derive an updated field.
    """

    __slots__ = (
        "predicate",
        "value",
        "listed",
        "original_object",
        "original_source",
        "original_value",
        "id",
        "source_config",
    )

    def __init__(
        self,
        predicate: Union[str, URIRef, None],
        value: Any,
        listed: bool = False,
        *,
        source_config: SourceConfig,
        original_object: Optional[Node] = None,
        original_source: Optional[str] = None,
    ) -> None:
        if predicate is None:
            raise ArgumentError("A field requires a predicate")
        if value is None:
            raise ArgumentError("A field requires a value")
        if not isinstance(listed, bool):
            raise ArgumentError(f"listed must be a bool, got {listed!r}")
        if not isinstance(source_config, SourceConfig):
            raise ArgumentError("A field requires a SourceConfig")

        init = object.__setattr__
        init(self, "predicate", URIRef(predicate))
        init(self, "value", value)
        init(self, "listed", listed)
        init(self, "original_object", original_object)
        init(self, "original_source", URIRef(original_source) if original_source else None)
        init(
            self,
            "original_value",
            from_term(original_object) if original_object is not None else None,
        )
        init(self, "id", str(uuid.uuid4()))
        init(self, "source_config", source_config)

    @classmethod
    def from_quad(cls, quad: Quad, source_config: SourceConfig) -> Field:
        """Create a field whose original state is *quad*.

        Raises:
            DecodeError: If the quad's literal is malformed for its datatype
        """
        return cls(
            quad.predicate,
            from_term(quad.object),
            source_config.is_listed(quad.graph),
            source_config=source_config,
            original_object=quad.object,
            original_source=quad.graph,
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutabilityViolation(
            "Fields are immutable. Use Field.set() to create new fields with different values."
        )

    def __delattr__(self, name: str) -> None:
        raise ImmutabilityViolation("Fields are immutable.")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Field):
            return NotImplemented
        return (
            self.id == other.id
            and self.predicate == other.predicate
            and _same_value(self.value, other.value)
            and self.listed == other.listed
            and self.original_object == other.original_object
            and self.original_source == other.original_source
        )

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return (
            f"Field({str(self.predicate)!r}, {self.value!r}, listed={self.listed}, "
            f"original_source={self.original_source and str(self.original_source)!r})"
        )

    @property
    def has_original(self) -> bool:
        """Whether the field was parsed from a quad (or promoted after a save)."""
        return self.original_object is not None

    @property
    def source(self) -> URIRef:
        """The graph this field's current state resolves to."""
        return resolve_source(self.listed, self.original_source, self.source_config)

    def set(self, value: Any = _UNSET, listed: Any = _UNSET) -> Field:
        """
        Return a field with the given current state.

        Only an omitted argument means "no change".  An explicit None is
        applied as given, and rejected like any other missing value.

        Args:
            value: The new value
            listed: The new visibility

        Returns:
            A new field with the original state carried over
        """
        return Field(
            self.predicate,
            self.value if value is _UNSET else value,
            self.listed if listed is _UNSET else listed,
            source_config=self.source_config,
            original_object=self.original_object,
            original_source=self.original_source,
        )

    def toggle_listed(self) -> Field:
        """Return a field with the opposite visibility."""
        return self.set(listed=not self.listed)

    def current_object(self) -> Node:
        """The RDF object term for the field's current value.

        An unchanged value keeps the original term as-is.  A changed value
        keeps the kind of the original term: named nodes stay named nodes
        and literals keep their datatype or language.
        """
        original = self.original_object
        if original is not None and _same_value(self.value, self.original_value):
            return original
        if isinstance(self.value, Node):
            return self.value
        if isinstance(original, Literal):
            return to_literal(self.value, original.datatype, original.language)
        if original is not None:
            return URIRef(str(self.value))
        return to_literal(self.value)

    def to_quad(self, subject: Union[str, Node]) -> Quad:
        """The field's current state as a quad in its resolved source graph."""
        return Quad(as_node(subject), self.predicate, self.current_object(), self.source)

    def original_quad(self, subject: Union[str, Node]) -> Optional[Quad]:
        """The field's original state as a quad, or None for ad hoc fields."""
        if self.original_object is None:
            return None
        return Quad(as_node(subject), self.predicate, self.original_object, self.original_source)

    def from_current_state(self, subject: Union[str, Node]) -> Field:
        """Return a field whose original state is this field's current state."""
        quad = self.to_quad(subject)
        return Field(
            self.predicate,
            self.value,
            self.listed,
            source_config=self.source_config,
            original_object=quad.object,
            original_source=quad.graph,
        )


class FieldCreator:
    """Creates fields for one predicate, sharing one :class:`SourceConfig`."""

    def __init__(self, predicate: Union[str, URIRef], source_config: SourceConfig) -> None:
        if predicate is None:
            raise ArgumentError("A field creator requires a predicate")
        self.predicate = URIRef(predicate)
        self.source_config = source_config

    def __call__(self, value: Any, listed: bool = False) -> Field:
        """Create an ad hoc field, which is always a pending insertion."""
        return Field(self.predicate, value, listed, source_config=self.source_config)

    def from_quad(self, quad: Quad) -> Field:
        """Create a field tracking *quad* as its original state."""
        return Field.from_quad(quad, self.source_config)

    def __repr__(self) -> str:
        return f"FieldCreator({str(self.predicate)!r})"


class FieldFactory:
    """
    Generates field creators bound to one source configuration.

    Args:
        source_config: A :class:`SourceConfig`, or a mapping with
            ``defaultSources``/``sourceIndex`` (or snake_case) keys
    """

    def __init__(self, source_config: Union[SourceConfig, Dict[str, Any]]) -> None:
        if not isinstance(source_config, SourceConfig):
            source_config = SourceConfig.model_validate(source_config)
        self.source_config = source_config

    def __call__(self, predicate: Union[str, URIRef]) -> FieldCreator:
        return FieldCreator(predicate, self.source_config)
