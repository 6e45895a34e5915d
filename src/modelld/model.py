"""
Models: immutable views of the subgraph anchored at one subject.

A model groups the fields of one subject under application-chosen keys,
each key standing for one predicate.  Every operation returns a new
model; fields removed from the live view go to a graveyard until the
removal has been written back.  :meth:`Model.diff` turns the difference
between each field's original and current state into per-resource
insertions and deletions, and :meth:`Model.save` applies them.

Usage:
    from rdflib import Dataset
    from modelld import build

    model = build(dataset, "https://alice.example/profile/card#me", {
        "name": "http://xmlns.com/foaf/0.1/name",
        "phone": "http://xmlns.com/foaf/0.1/phone",
    }, source_config)

    model = model.set(model.fields("name")[0], value="Alice")
    model = model.add("phone", model.field_creators["phone"]("tel:555"))
    model = model.save(LdpPatchClient())
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from rdflib import Graph, URIRef
from rdflib.term import Node

from .diff import DiffBuilder, DiffMap
from .errors import ArgumentError, ImmutabilityViolation
from .field import _UNSET, Field, FieldCreator, FieldFactory
from .rdf import as_node, statements_matching
from .sources import SourceConfig

logger = logging.getLogger(__name__)

__all__ = [
    "Model",
    "ModelFactory",
    "build",
]


class Model:
    """
    The subgraph of one subject, as named groups of fields.

    Rather than instantiate a Model directly, use :func:`build` or a
    :class:`ModelFactory`.

    Attributes:
        subject: The subject of every field in the model
        graveyard: Fields removed from the live view, not yet deleted from storage
        field_creators: Mapping of field keys to their field creators
        source_config: The source configuration shared by every field
    """

    __slots__ = (
        "subject",
        "_fields",
        "graveyard",
        "field_creators",
        "source_config",
        "_reverse_field_map",
    )

    def __init__(
        self,
        subject: Union[str, Node],
        fields: Mapping[str, Sequence[Field]],
        graveyard: Sequence[Field] = (),
        field_creators: Optional[Mapping[str, FieldCreator]] = None,
    ) -> None:
        creators = dict(field_creators or {})
        configs = [c.source_config for c in creators.values()]
        if any(config != configs[0] for config in configs[1:]):
            raise ArgumentError("All field creators of a model must share one source configuration")
        init = object.__setattr__
        init(self, "subject", as_node(subject))
        init(self, "_fields", MappingProxyType({k: tuple(v) for k, v in fields.items()}))
        init(self, "graveyard", tuple(graveyard))
        init(self, "field_creators", MappingProxyType(creators))
        init(self, "source_config", configs[0] if configs else None)
        init(
            self,
            "_reverse_field_map",
            MappingProxyType({str(c.predicate): key for key, c in creators.items()}),
        )

    def _evolve(
        self,
        fields: Optional[Mapping[str, Sequence[Field]]] = None,
        graveyard: Optional[Sequence[Field]] = None,
    ) -> Model:
        return Model(
            self.subject,
            self._fields if fields is None else fields,
            self.graveyard if graveyard is None else graveyard,
            self.field_creators,
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise ImmutabilityViolation(
            "Models are immutable. Use add(), remove() or set() to derive a new model."
        )

    def __delattr__(self, name: str) -> None:
        raise ImmutabilityViolation("Models are immutable.")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return (
            self.subject == other.subject
            and dict(self._fields) == dict(other._fields)
            and self.graveyard == other.graveyard
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        counts = ", ".join(f"{k}={len(v)}" for k, v in self._fields.items())
        return f"Model({str(self.subject)!r}, {counts}, graveyard={len(self.graveyard)})"

    # ── Queries ─────────────────────────────────────────────────────

    def keys(self) -> List[str]:
        """All field keys, in schema order."""
        return list(self._fields)

    def fields(self, key: str) -> Tuple[Field, ...]:
        """All live fields for *key*; empty for unknown keys."""
        return self._fields.get(key, ())

    def get(self, key: str) -> List[Any]:
        """The values of all live fields for *key*."""
        return [field.value for field in self.fields(key)]

    def any(self, key: str) -> Any:
        """The value of the first live field for *key*, or None."""
        fields = self.fields(key)
        return fields[0].value if fields else None

    def key_for(self, predicate: Union[str, URIRef]) -> Optional[str]:
        """The field key mapped to *predicate*, if any."""
        return self._reverse_field_map.get(str(predicate))

    def iter_fields(self) -> Iterator[Tuple[str, Field]]:
        """Iterate over ``(key, field)`` for every live field."""
        for key, fields in self._fields.items():
            for field in fields:
                yield key, field

    def _locate(self, field: Field) -> Optional[Tuple[str, int]]:
        for key, fields in self._fields.items():
            for index, candidate in enumerate(fields):
                if candidate.id == field.id:
                    return key, index
        return None

    # ── Updates ─────────────────────────────────────────────────────

    def _check_field(self, field: Any) -> None:
        if not isinstance(field, Field):
            raise ArgumentError(f"Expected a Field, got {field!r}")
        if self.source_config is not None and field.source_config != self.source_config:
            raise ArgumentError("Field was created with a different source configuration")

    def add(self, key: str, field: Field) -> Model:
        """Append *field* to the fields for *key*."""
        self._check_field(field)
        fields = dict(self._fields)
        fields[key] = fields.get(key, ()) + (field,)
        return self._evolve(fields=fields)

    def remove(self, field: Field) -> Model:
        """Move *field* to the graveyard; a field not in the model is ignored."""
        location = self._locate(field)
        if location is None:
            return self
        key, index = location
        fields = dict(self._fields)
        group = fields[key]
        removed = group[index]
        fields[key] = group[:index] + group[index + 1:]
        return self._evolve(fields=fields, graveyard=self.graveyard + (removed,))

    def set(self, old_field: Field, value: Any = _UNSET, listed: Any = _UNSET) -> Model:
        """
        Replace *old_field* with an updated copy of itself.

        Args:
            old_field: The live field to update, matched by id
            value: The new value, unchanged when omitted
            listed: The new visibility, unchanged when omitted

        Returns:
            The updated model, or this model if *old_field* is not live
        """
        location = self._locate(old_field)
        if location is None:
            return self
        key, index = location
        fields = dict(self._fields)
        group = fields[key]
        updated = group[index].set(value=value, listed=listed)
        fields[key] = group[:index] + (updated,) + group[index + 1:]
        return self._evolve(fields=fields)

    def set_any(self, key: str, value: Any, listed: Any = _UNSET) -> Model:
        """Update the first field for *key*, or add a new one if there is none.

        Which field is "first" is not meaningful across graph reloads;
        use :meth:`set` to target a specific field.
        """
        existing = self.fields(key)
        if existing:
            return self.set(existing[0], value=value, listed=listed)
        creator = self.field_creators.get(key)
        if creator is None:
            raise ArgumentError(f"No field creator for key {key!r}")
        return self.add(key, creator(value, listed=False if listed is _UNSET else listed))

    def map(self, fn: Callable[[Field], Field]) -> Model:
        """Apply *fn* to every live field, keeping the key grouping."""
        fields: Dict[str, Tuple[Field, ...]] = {}
        for key, group in self._fields.items():
            mapped = tuple(fn(field) for field in group)
            unchanged = all(a is b for a, b in zip(mapped, group))
            fields[key] = group if unchanged else mapped
        return self._evolve(fields=fields)

    def filter_to_graveyard(self, predicate: Callable[[Field], bool]) -> Model:
        """Move every live field matching *predicate* to the graveyard."""
        fields: Dict[str, Tuple[Field, ...]] = {}
        buried: List[Field] = []
        for key, group in self._fields.items():
            kept = tuple(field for field in group if not predicate(field))
            buried.extend(field for field in group if predicate(field))
            fields[key] = group if len(kept) == len(group) else kept
        if not buried:
            return self
        return self._evolve(fields=fields, graveyard=self.graveyard + tuple(buried))

    # ── Reconciliation ─────────────────────────────────────────────

    def diff(self) -> DiffMap:
        """
        Compute the per-resource statements needed to persist the model.

        Changed fields delete their original quad from its graph and
        insert their current quad into its resolved graph; ad hoc fields
        only insert; graveyard fields only delete.

        Returns:
            Mapping of resource URI to :class:`~modelld.diff.ResourceDiff`
        """
        builder = DiffBuilder()
        for _, field in self.iter_fields():
            new_quad = field.to_quad(self.subject)
            original_quad = field.original_quad(self.subject)
            if original_quad is not None and new_quad == original_quad:
                continue
            if original_quad is not None:
                builder.delete(original_quad)
            builder.insert(new_quad)
        for field in self.graveyard:
            original_quad = field.original_quad(self.subject)
            if original_quad is not None:
                builder.delete(original_quad)
        return builder.build()

    def save(self, patch_client: Any, max_workers: Optional[int] = None) -> Model:
        """Write the model's diff through *patch_client*.

        See :func:`modelld.sync.save`.
        """
        from .sync import save

        return save(self, patch_client, max_workers=max_workers)


class ModelFactory:
    """
    Builds models for a fixed schema of field creators.

    Args:
        field_creators: Mapping of field keys to field creators
    """

    def __init__(self, field_creators: Mapping[str, FieldCreator]) -> None:
        self.field_creators = dict(field_creators)

    def __call__(self, graph: Graph, subject: Union[str, Node]) -> Model:
        """Read the fields of *subject* out of *graph*."""
        subject_node = as_node(subject)
        fields: Dict[str, List[Field]] = {}
        unsourced = 0
        for key, creator in self.field_creators.items():
            quads = list(statements_matching(graph, subject_node, creator.predicate))
            unsourced += sum(1 for quad in quads if quad.graph is None)
            fields[key] = [creator.from_quad(quad) for quad in quads]
        if unsourced:
            logger.warning(
                f"{unsourced} statement(s) about {subject_node} have no source graph; "
                "they will be rewritten to the default sources on save"
            )
        logger.debug(
            f"Built model for {subject_node} with "
            f"{sum(len(v) for v in fields.values())} field(s)"
        )
        return Model(subject_node, fields, field_creators=self.field_creators)


def build(
    graph: Graph,
    subject: Union[str, Node],
    schema: Mapping[str, Union[str, URIRef]],
    source_config: Union[SourceConfig, Dict[str, Any]],
) -> Model:
    """
    Build a model for *subject* from *graph*.

    Args:
        graph: rdflib Graph, ConjunctiveGraph or Dataset to read from
        subject: The subject URI
        schema: Mapping of field keys to predicate URIs
        source_config: Source classification and defaults

    Returns:
        A model with one (possibly empty) field group per schema key
    """
    field = FieldFactory(source_config)
    creators = {key: field(predicate) for key, predicate in schema.items()}
    return ModelFactory(creators)(graph, subject)
