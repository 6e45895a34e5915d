"""RDF adapter: the minimal quad interface the reconciliation engine needs.

The engine only needs four things from an RDF library: term
constructors, "all statements matching subject and predicate", quad
equality, and a canonical statement string.  :class:`Quad` provides the
last two on top of rdflib terms; :func:`statements_matching` provides the
lookup over rdflib ``Graph``, ``ConjunctiveGraph`` and ``Dataset``.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple, Optional, Union

from rdflib import Graph, URIRef
from rdflib.graph import DATASET_DEFAULT_GRAPH_ID
from rdflib.term import Node

__all__ = [
    "Quad",
    "as_node",
    "graph_term",
    "statements_matching",
]


class Quad(NamedTuple):
    """A subject-predicate-object-graph statement.

    ``graph`` is None when the statement is not attributed to any named
    graph.  ``str(quad)`` is the canonical single-statement N-Triples form
    used both as the diff comparison key and on the wire; the graph is
    not part of it because it names the resource being patched.
    """

    subject: Node
    predicate: URIRef
    object: Node
    graph: Optional[URIRef] = None

    def __str__(self) -> str:
        return f"{self.subject.n3()} {self.predicate.n3()} {self.object.n3()} ."


def as_node(value: Union[str, Node]) -> Node:
    """Coerce a URI string into a URIRef; rdflib terms pass through."""
    if isinstance(value, Node):
        return value
    return URIRef(value)


def graph_term(context: object) -> Optional[URIRef]:
    """Normalize the context rdflib reports for a quad into a graph URI.

    Depending on the graph class, rdflib yields a ``Graph`` object or its
    identifier.  Blank-node identifiers and the dataset default graph do
    not name an addressable resource and map to None.
    """
    identifier = getattr(context, "identifier", context)
    if not isinstance(identifier, URIRef):
        return None
    if identifier == DATASET_DEFAULT_GRAPH_ID:
        return None
    return identifier


def statements_matching(
    graph: Graph,
    subject: Union[str, Node],
    predicate: Union[str, Node],
) -> Iterator[Quad]:
    """Yield every quad in *graph* matching ``(subject, predicate, *, *)``.

    Args:
        graph: An rdflib Graph, ConjunctiveGraph or Dataset
        subject: Subject URI or term
        predicate: Predicate URI or term

    Yields:
        Quad instances with the graph resolved by :func:`graph_term`
    """
    s = as_node(subject)
    p = as_node(predicate)
    if getattr(graph, "context_aware", False):
        for _, _, o, context in graph.quads((s, p, None, None)):
            yield Quad(s, p, o, graph_term(context))
        return
    source = graph_term(graph)
    for _, _, o in graph.triples((s, p, None)):
        yield Quad(s, p, o, source)
