"""Exception hierarchy for modelld.

Construction, decoding and immutability errors signal misuse and are
never caught inside the library.  :class:`PartialSaveError` is the only
error meant to be handled: it carries everything needed to retry the
resources whose patch failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .diff import DiffMap
    from .model import Model
    from .transport import PatchResult


class ModelldError(Exception):
    """Base exception for modelld errors."""

    pass


class ArgumentError(ModelldError, ValueError):
    """Raised when a field is constructed with missing or invalid arguments."""

    pass


class DecodeError(ModelldError, ValueError):
    """Raised when a literal cannot be parsed as its declared datatype."""

    def __init__(self, lexical: str, datatype: str, reason: str = "") -> None:
        self.lexical = lexical
        self.datatype = datatype
        message = f"Cannot decode {lexical!r} as <{datatype}>"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ImmutabilityViolation(ModelldError, AttributeError):
    """Raised on direct attribute writes to a Field or Model."""

    pass


class ConfigError(ModelldError):
    """Raised when a schema or source configuration is malformed."""

    pass


class TransportError(ModelldError):
    """Raised by a patch client when a request fails after all retries."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class PartialSaveError(ModelldError):
    """Raised by ``save`` when some, but not all, resource patches failed.

    Attributes:
        model: The model with every successful patch already applied.
        diff: The diff map that was attempted.
        failed_uris: Resource URIs whose patch failed.
        results: Per-resource patch results, keyed by resource URI.
    """

    def __init__(
        self,
        model: Model,
        diff: DiffMap,
        failed_uris: frozenset[str],
        results: dict[str, PatchResult] | None = None,
    ) -> None:
        self.model = model
        self.diff = diff
        self.failed_uris = failed_uris
        self.results: dict[str, Any] = results or {}
        failed = ", ".join(sorted(failed_uris))
        super().__init__(
            f"{len(failed_uris)} of {len(diff)} resource(s) failed to save: {failed}"
        )
