"""Shared fixtures: a small FOAF profile split over listed and unlisted graphs."""

from __future__ import annotations

import pytest
from rdflib import Dataset, URIRef
from rdflib.namespace import FOAF

from modelld import FieldFactory, SourceConfig, build

WEB_ID = "http://mr-cool.example.com/profile/card#me"
PROFILE = "http://mr-cool.example.com/profile/card"
LISTED = "http://mr-cool.example.com/listed"
UNLISTED = "http://mr-cool.example.com/unlisted"
ANOTHER_UNLISTED = "http://mr-cool.example.com/another-unlisted"

PROFILE_TTL = """
@prefix foaf: <http://xmlns.com/foaf/0.1/> .
<>
    a foaf:PersonalProfileDocument ;
    foaf:maker <#me> ;
    foaf:primaryTopic <#me> .
<#me>
    a foaf:Person ;
    foaf:familyName "Cool" ;
    foaf:givenName "Mr." ;
    foaf:img <mr_cool.jpg> ;
    foaf:mbox <mailto:mr_cool@example.com> ;
    foaf:name "Mr. Cool" ;
    foaf:phone <tel:123-456-7890> ;
    foaf:phone <tel:098-765-4321> .
"""

PRIVATE_TTL = """
@prefix foaf: <http://xmlns.com/foaf/0.1/> .
<http://mr-cool.example.com/profile/card#me> foaf:nick "coolio" .
"""

SCHEMA = {
    "name": FOAF.name,
    "phone": FOAF.phone,
    "nick": FOAF.nick,
    "age": FOAF.age,
}


@pytest.fixture
def source_config():
    """Profile document as default listed source, plus a few other graphs."""
    return SourceConfig(
        defaultSources={"listed": PROFILE, "unlisted": UNLISTED},
        sourceIndex={
            PROFILE: True,
            LISTED: True,
            UNLISTED: False,
            ANOTHER_UNLISTED: False,
        },
    )


@pytest.fixture
def field(source_config):
    """Field factory bound to the test source configuration."""
    return FieldFactory(source_config)


@pytest.fixture
def name(field):
    return field(FOAF.name)


@pytest.fixture
def phone(field):
    return field(FOAF.phone)


@pytest.fixture
def subject():
    return URIRef(WEB_ID)


@pytest.fixture
def dataset():
    """Profile document parsed into its own graph, private data into another."""
    ds = Dataset()
    ds.graph(URIRef(PROFILE)).parse(data=PROFILE_TTL, format="turtle", publicID=PROFILE)
    ds.graph(URIRef(ANOTHER_UNLISTED)).parse(data=PRIVATE_TTL, format="turtle")
    return ds


@pytest.fixture
def model(dataset, source_config):
    """Freshly built model for the profile subject."""
    return build(dataset, WEB_ID, SCHEMA, source_config)
