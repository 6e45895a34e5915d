"""Command line interface for :mod:`modelld`."""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from rdflib import Dataset, URIRef
from rdflib.util import guess_format

from .config import SchemaConfig, load_schema
from .errors import ConfigError, PartialSaveError
from .model import Model
from .transport import LdpPatchClient
from .utils import shorten_for_display

__all__ = [
    "main",
]


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    r"""modelld - view and edit the RDF fields of one subject.

    Fields are described by a YAML schema mapping field keys to
    predicates, together with the listed (public) and unlisted
    (private) source graphs.


    Typical workflow: show > edit > edit --apply
    """
    import logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
        logging.getLogger("modelld").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s", force=True)


def _load(document: str, schema_path: str, subject: str, base: Optional[str]) -> Tuple[SchemaConfig, Model]:
    """Parse *document* into a graph named by its base URI and build the model."""
    try:
        schema = load_schema(schema_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    base_uri = base or Path(document).resolve().as_uri()
    dataset = Dataset()
    dataset.graph(URIRef(base_uri)).parse(
        document, format=guess_format(document) or "turtle", publicID=base_uri
    )
    return schema, schema.build_model(dataset, subject)


def _model_to_dict(model: Model, prefixes: Dict[str, str]) -> Dict[str, Any]:
    return {
        key: [
            {
                "value": field.value,
                "listed": field.listed,
                "source": str(field.source),
                "predicate": shorten_for_display(str(field.predicate), prefixes),
            }
            for field in model.fields(key)
        ]
        for key in model.keys()
    }


def _split_assignment(assignment: str, model: Model) -> Tuple[str, str]:
    key, sep, value = assignment.partition("=")
    if not sep:
        raise click.BadParameter(f"Expected KEY=VALUE, got {assignment!r}")
    if key not in model.field_creators:
        raise click.BadParameter(f"Unknown field key {key!r}")
    return key, value


def _matching(model: Model, key: str, value: str):
    matches = [field for field in model.fields(key) if str(field.value) == value]
    if not matches:
        raise click.BadParameter(f"No {key!r} field with value {value!r}")
    return matches


@main.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--schema", "schema_path", required=True, type=click.Path(exists=True), help="YAML schema file")
@click.option("--subject", required=True, help="Subject URI of the model")
@click.option("--base", default=None, help="Base URI of the document (default: file URI)")
def show(document: str, schema_path: str, subject: str, base: Optional[str]) -> None:
    """Print the fields of SUBJECT in DOCUMENT as JSON.

    Example:
      modelld show card.ttl --schema profile.yaml --subject https://alice.example/profile/card#me
    """
    schema, model = _load(document, schema_path, subject, base)
    click.echo(json.dumps(_model_to_dict(model, schema.prefixes), indent=2, default=str))


@main.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--schema", "schema_path", required=True, type=click.Path(exists=True), help="YAML schema file")
@click.option("--subject", required=True, help="Subject URI of the model")
@click.option("--base", default=None, help="Base URI of the document (default: file URI)")
@click.option("--add", "adds", multiple=True, help="Add a field, as KEY=VALUE")
@click.option("--remove", "removes", multiple=True, help="Remove fields, as KEY=VALUE")
@click.option("--toggle", "toggles", multiple=True, help="Toggle listed on fields, as KEY=VALUE")
@click.option("--listed/--unlisted", default=False, help="Visibility of added fields")
@click.option("--apply", "apply_", is_flag=True, help="PATCH the changes to their resources")
@click.option("--header", "headers", multiple=True, help="Extra HTTP header, as 'Name: value'")
def edit(
    document: str,
    schema_path: str,
    subject: str,
    base: Optional[str],
    adds: Tuple[str, ...],
    removes: Tuple[str, ...],
    toggles: Tuple[str, ...],
    listed: bool,
    apply_: bool,
    headers: Tuple[str, ...],
) -> None:
    """Edit the fields of SUBJECT and print the resulting diff.

    Without --apply nothing is written.  With --apply each changed
    resource receives a SPARQL Update PATCH; the command exits with an
    error if any resource fails.

    Example:
      modelld edit card.ttl --schema profile.yaml --subject https://alice.example/profile/card#me \\
        --add nick=ali --listed --remove phone=tel:555-0100
    """
    _, model = _load(document, schema_path, subject, base)

    for assignment in removes:
        key, value = _split_assignment(assignment, model)
        for field in _matching(model, key, value):
            model = model.remove(field)
    for assignment in toggles:
        key, value = _split_assignment(assignment, model)
        for field in _matching(model, key, value):
            model = model.set(field, listed=not field.listed)
    for assignment in adds:
        key, value = _split_assignment(assignment, model)
        model = model.add(key, model.field_creators[key](value, listed=listed))

    diff = model.diff()
    click.echo(json.dumps({uri: entry.model_dump() for uri, entry in diff.items()}, indent=2))

    if not apply_ or not diff:
        return

    extra_headers = {}
    for header in headers:
        name, sep, value = header.partition(":")
        if not sep:
            raise click.BadParameter(f"Expected 'Name: value', got {header!r}")
        extra_headers[name.strip()] = value.strip()

    with LdpPatchClient(headers=extra_headers) as client:
        try:
            model.save(client)
        except PartialSaveError as e:
            raise click.ClickException(
                f"Failed to patch: {', '.join(sorted(e.failed_uris))}"
            ) from e
    click.echo(f"Patched {len(diff)} resource(s)")


if __name__ == "__main__":
    main()
