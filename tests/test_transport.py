"""Tests for patch clients."""

from unittest.mock import MagicMock

import pytest
import rdflib
import requests
from rdflib import Dataset, Literal, URIRef
from rdflib.namespace import FOAF, XSD

from modelld.config import TestConfig
from modelld.transport import (
    GraphPatchClient,
    LdpPatchClient,
    PatchClient,
    PatchResult,
    build_sparql_update,
)

from .conftest import PROFILE, WEB_ID

NAME = f'<{WEB_ID}> <{FOAF.name}> "Mr. Cool" .'
NICK = f'<{WEB_ID}> <{FOAF.nick}> "coolio" .'


def response(status_code):
    resp = MagicMock()
    resp.status_code = status_code
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} Error")
        error.response = resp
        resp.raise_for_status.side_effect = error
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def ldp(session):
    return LdpPatchClient(session=session, config=TestConfig)


class TestBuildSparqlUpdate:
    def test_both_clauses(self):
        body = build_sparql_update([NAME], [NICK])
        assert body == f"DELETE DATA {{ {NAME} }};\nINSERT DATA {{ {NICK} }};"

    def test_empty_clauses_are_omitted(self):
        assert build_sparql_update([], [NICK]) == f"INSERT DATA {{ {NICK} }};"
        assert build_sparql_update([NAME], []) == f"DELETE DATA {{ {NAME} }};"
        assert build_sparql_update([], []) == ""


class TestLdpPatchClient:
    def test_is_a_patch_client(self, ldp):
        assert isinstance(ldp, PatchClient)

    def test_settings_from_config(self, ldp):
        assert ldp.timeout == TestConfig.PATCH_TIMEOUT
        assert ldp.max_retries == TestConfig.PATCH_MAX_RETRIES

    def test_sends_sparql_update(self, ldp, session):
        session.patch.return_value = response(205)
        result = ldp.patch(PROFILE, [NAME], [NICK])

        assert result == PatchResult(uri=PROFILE, ok=True, status_code=205)
        args, kwargs = session.patch.call_args
        assert args == (PROFILE,)
        assert kwargs["data"] == build_sparql_update([NAME], [NICK]).encode("utf-8")
        assert kwargs["headers"]["Content-Type"] == "application/sparql-update"
        assert kwargs["timeout"] == TestConfig.PATCH_TIMEOUT

    def test_extra_headers(self, session):
        session.patch.return_value = response(200)
        client = LdpPatchClient(session=session, headers={"Authorization": "Bearer t"}, config=TestConfig)
        client.patch(PROFILE, [], [NICK])
        assert session.patch.call_args.kwargs["headers"]["Authorization"] == "Bearer t"

    def test_retries_server_errors(self, ldp, session):
        session.patch.side_effect = [response(503), response(200)]
        result = ldp.patch(PROFILE, [], [NICK])
        assert result.ok
        assert session.patch.call_count == 2

    def test_gives_up_after_max_retries(self, ldp, session):
        session.patch.side_effect = [response(503), response(503), response(200)]
        result = ldp.patch(PROFILE, [], [NICK])
        assert not result.ok
        assert result.status_code == 503
        assert session.patch.call_count == TestConfig.PATCH_MAX_RETRIES

    def test_client_errors_are_not_retried(self, ldp, session):
        session.patch.return_value = response(403)
        result = ldp.patch(PROFILE, [], [NICK])
        assert not result.ok
        assert result.status_code == 403
        assert "403" in result.error
        assert session.patch.call_count == 1

    def test_network_errors_are_retried(self, ldp, session):
        session.patch.side_effect = requests.exceptions.ConnectionError("refused")
        result = ldp.patch(PROFILE, [], [NICK])
        assert not result.ok
        assert result.status_code is None
        assert session.patch.call_count == TestConfig.PATCH_MAX_RETRIES

    def test_context_manager_closes_session(self, session):
        with LdpPatchClient(session=session, config=TestConfig):
            pass
        session.close.assert_called_once()


class TestGraphPatchClient:
    def test_applies_statements(self):
        dataset = Dataset()
        graph = dataset.graph(URIRef(PROFILE))
        graph.add((URIRef(WEB_ID), FOAF.name, Literal("Mr. Cool")))
        client = GraphPatchClient(dataset)

        result = client.patch(PROFILE, [NAME], [NICK])

        assert result.ok
        assert (URIRef(WEB_ID), FOAF.name, Literal("Mr. Cool")) not in graph
        assert (URIRef(WEB_ID), FOAF.nick, Literal("coolio")) in graph
        assert client.calls == [result]

    def test_keeps_lexical_forms(self):
        flag = URIRef("http://example.com/flag")
        client = GraphPatchClient()
        client.patch(PROFILE, [], [f'<{WEB_ID}> <{flag}> "1"^^<{XSD.boolean}> .'])

        stored = list(client.dataset.graph(URIRef(PROFILE)).objects(URIRef(WEB_ID), flag))
        assert [str(term) for term in stored] == ["1"]
        assert rdflib.NORMALIZE_LITERALS is True

        client.patch(PROFILE, [f'<{WEB_ID}> <{flag}> "1"^^<{XSD.boolean}> .'], [])
        assert len(client.dataset.graph(URIRef(PROFILE))) == 0

    def test_configured_failures(self):
        client = GraphPatchClient(fail=[PROFILE])
        result = client.patch(PROFILE, [], [NICK])
        assert not result.ok
        assert len(client.dataset.graph(URIRef(PROFILE))) == 0

    def test_unparseable_statements(self):
        result = GraphPatchClient().patch(PROFILE, [], ["not a statement"])
        assert not result.ok
        assert result.error
