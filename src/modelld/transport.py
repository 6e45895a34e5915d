"""
Patch transport - writes per-resource diffs to storage.

A patch client receives one resource URI with the statements to delete
from and insert into it, and reports success or failure for that
resource.  Two clients are provided:

- :class:`LdpPatchClient` sends an HTTP ``PATCH`` with a SPARQL Update
  body to a Linked Data Platform server (e.g. a Solid pod), retrying
  transient failures with exponential backoff.
- :class:`GraphPatchClient` applies the statements to named graphs of an
  in-process rdflib ``Dataset``.

Usage:
    from modelld.transport import LdpPatchClient

    with LdpPatchClient(headers={"Authorization": f"Bearer {token}"}) as client:
        model = model.save(client)
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

import rdflib
import requests
from pydantic import BaseModel, Field
from rdflib import Dataset, Graph, URIRef

from .config.settings import Config
from .errors import TransportError
from .version import VERSION

logger = logging.getLogger(__name__)

__all__ = [
    "GraphPatchClient",
    "LdpPatchClient",
    "PatchClient",
    "PatchResult",
    "build_sparql_update",
]

SPARQL_UPDATE = "application/sparql-update"

# Guards rdflib.NORMALIZE_LITERALS, which is process-wide
_NORMALIZE_LOCK = threading.Lock()


class PatchResult(BaseModel):
    """Outcome of patching one resource."""

    uri: str = Field(..., description="The patched resource URI")
    ok: bool = Field(..., description="Whether the patch was applied")
    status_code: Optional[int] = Field(None, description="HTTP status, when there was one")
    error: Optional[str] = Field(None, description="Failure reason")


@runtime_checkable
class PatchClient(Protocol):
    """Anything that can patch one resource with statement deletions and insertions.

    ``patch`` should return a :class:`PatchResult`.  ``True`` and ``None``
    are also read as success; any other return value, including ``False``
    or a raw HTTP response, is recorded as a failed patch.
    """

    def patch(self, uri: str, to_delete: List[str], to_insert: List[str]) -> PatchResult:
        ...


def build_sparql_update(to_delete: Iterable[str], to_insert: Iterable[str]) -> str:
    """
    Build a SPARQL Update body from serialized statements.

    Args:
        to_delete: Statements for the ``DELETE DATA`` clause
        to_insert: Statements for the ``INSERT DATA`` clause

    Returns:
        The update string; empty clauses are omitted
    """
    clauses = []
    to_delete = list(to_delete)
    to_insert = list(to_insert)
    if to_delete:
        clauses.append(f"DELETE DATA {{ {' '.join(to_delete)} }};")
    if to_insert:
        clauses.append(f"INSERT DATA {{ {' '.join(to_insert)} }};")
    return "\n".join(clauses)


class LdpPatchClient:
    """
    HTTP PATCH client for LDP resources accepting SPARQL Update.

    Attributes:
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts per patch
        initial_backoff: Initial backoff delay in seconds
        max_backoff: Maximum backoff delay in seconds
        headers: Extra headers sent with every request (e.g. authorization)

    Example:
        >>> client = LdpPatchClient(timeout=10)
        >>> result = client.patch(
        ...     "https://alice.example/profile/card",
        ...     [],
        ...     ['<#me> <http://xmlns.com/foaf/0.1/nick> "ali" .'],
        ... )
        >>> result.ok
        True
    """

    # HTTP status codes that warrant a retry
    RETRY_STATUS_CODES = (500, 502, 503, 504, 429)

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        initial_backoff: Optional[float] = None,
        max_backoff: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        config: type = Config,
    ) -> None:
        self.timeout = config.PATCH_TIMEOUT if timeout is None else timeout
        self.max_retries = config.PATCH_MAX_RETRIES if max_retries is None else max_retries
        self.initial_backoff = (
            config.PATCH_INITIAL_BACKOFF if initial_backoff is None else initial_backoff
        )
        self.max_backoff = config.PATCH_MAX_BACKOFF if max_backoff is None else max_backoff
        self.headers = dict(headers or {})

        # Session for connection pooling
        self._session = session or requests.Session()

        logger.debug(f"LdpPatchClient initialized (timeout={self.timeout}s)")

    def patch(self, uri: str, to_delete: List[str], to_insert: List[str]) -> PatchResult:
        """
        Apply deletions and insertions to one resource.

        Failures never raise; they are reported in the returned result.

        Args:
            uri: Resource URI to patch
            to_delete: Serialized statements to delete
            to_insert: Serialized statements to insert

        Returns:
            PatchResult for *uri*
        """
        body = build_sparql_update(to_delete, to_insert)
        logger.debug(f"PATCH {uri}: -{len(to_delete)} +{len(to_insert)}")
        try:
            status_code = self._execute(uri, body)
        except TransportError as e:
            logger.error(f"PATCH {uri} failed: {e}")
            return PatchResult(uri=uri, ok=False, status_code=e.status_code, error=str(e))
        return PatchResult(uri=uri, ok=True, status_code=status_code)

    def _execute(self, uri: str, body: str) -> int:
        """
        Send the PATCH request, retrying transient failures.

        Returns:
            The HTTP status code of the successful response

        Raises:
            TransportError: If the request fails after all retries or with
                a non-retryable status
        """
        headers = {
            "Content-Type": SPARQL_UPDATE,
            "User-Agent": f"modelld/{VERSION} (LDP patch client)",
            **self.headers,
        }

        for attempt in range(1, self.max_retries + 1):
            try:
                response = self._session.patch(
                    uri,
                    data=body.encode("utf-8"),
                    headers=headers,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                return response.status_code

            except requests.exceptions.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else 0

                # Check for retryable status codes
                if status_code in self.RETRY_STATUS_CODES:
                    self._handle_retry(attempt, uri, e, status_code)
                    continue

                # Non-retryable HTTP error
                raise TransportError(f"HTTP {status_code}: {e}", status_code) from e

            except requests.exceptions.RequestException as e:
                # Handle transient network errors with retry
                self._handle_retry(attempt, uri, e, None)

        raise TransportError(f"PATCH {uri} was never attempted (max_retries={self.max_retries})")

    def _handle_retry(
        self,
        attempt: int,
        uri: str,
        error: Exception,
        status_code: Optional[int],
    ) -> None:
        """
        Handle retry logic with exponential backoff.

        Raises:
            TransportError: If max retries exceeded
        """
        logger.warning(f"PATCH attempt {attempt}/{self.max_retries} for {uri} failed: {error}")

        if attempt >= self.max_retries:
            raise TransportError(
                f"PATCH failed after {self.max_retries} attempts: {error}", status_code
            ) from error

        backoff = min(self.initial_backoff * (2 ** (attempt - 1)), self.max_backoff)
        jitter = secrets.randbelow(int(backoff * 0.1 * 1000) + 1) / 1000
        sleep_time = backoff + jitter

        logger.info(f"Retrying in {sleep_time:.1f}s (attempt {attempt + 1}/{self.max_retries})")
        time.sleep(sleep_time)

    def close(self) -> None:
        """Close the underlying requests session."""
        self._session.close()

    def __enter__(self) -> LdpPatchClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"LdpPatchClient(timeout={self.timeout}, max_retries={self.max_retries})"


class GraphPatchClient:
    """
    Patch client that applies statements to named graphs of a local Dataset.

    Useful offline and in tests: the dataset can be handed straight back
    to :func:`modelld.build`.  Literals keep the lexical form they were
    sent with, so ``"1"^^xsd:boolean`` is not rewritten to ``"true"``.

    Args:
        dataset: The dataset to patch; a new empty one when omitted
        fail: Resource URIs whose patches are reported as failed
    """

    def __init__(self, dataset: Optional[Dataset] = None, fail: Iterable[str] = ()) -> None:
        self.dataset = dataset if dataset is not None else Dataset()
        self.fail = frozenset(str(uri) for uri in fail)
        self.calls: List[PatchResult] = []
        self._lock = threading.Lock()

    @staticmethod
    def _parse(statements: List[str]) -> Graph:
        graph = Graph()
        if not statements:
            return graph
        with _NORMALIZE_LOCK:
            normalize = rdflib.NORMALIZE_LITERALS
            rdflib.NORMALIZE_LITERALS = False
            try:
                graph.parse(data="\n".join(statements), format="nt")
            finally:
                rdflib.NORMALIZE_LITERALS = normalize
        return graph

    def patch(self, uri: str, to_delete: List[str], to_insert: List[str]) -> PatchResult:
        """Remove *to_delete* from and add *to_insert* to the graph named *uri*."""
        if uri in self.fail:
            result = PatchResult(uri=uri, ok=False, error="Rejected by configuration")
        else:
            try:
                deletions = self._parse(to_delete)
                insertions = self._parse(to_insert)
            except Exception as e:
                logger.error(f"Cannot parse patch for {uri}: {e}")
                result = PatchResult(uri=uri, ok=False, error=str(e))
            else:
                with self._lock:
                    target = self.dataset.graph(URIRef(uri))
                    for triple in deletions:
                        target.remove(triple)
                    for triple in insertions:
                        target.add(triple)
                result = PatchResult(uri=uri, ok=True)
        with self._lock:
            self.calls.append(result)
        return result
