"""
Synchronizer - saves a model's diff through a patch client.

Saving issues one patch per resource in the diff, all of them
concurrently, waits for every one, and folds the outcomes back into a
new model:

* a live field is promoted (its current state becomes its original
  state) once every resource it touched was patched successfully;
* a graveyard field is forgotten once its deletion was applied;
* anything whose patch failed stays pending, so the next ``diff`` and
  ``save`` retry exactly what is missing.

If any resource failed, :class:`~modelld.errors.PartialSaveError` is
raised carrying the partially reconciled model.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional

from .config.settings import Config
from .errors import PartialSaveError
from .field import Field
from .transport import PatchClient, PatchResult

if TYPE_CHECKING:
    from .diff import DiffMap
    from .model import Model

logger = logging.getLogger(__name__)

__all__ = [
    "apply_results",
    "save",
]


def _coerce_result(uri: str, outcome: Any) -> PatchResult:
    """Accept PatchResult, a bool, or None (success) from a client."""
    if isinstance(outcome, PatchResult):
        if outcome.uri != uri:
            logger.warning(f"Patch client answered for {outcome.uri} when patching {uri}")
            return outcome.model_copy(update={"uri": uri})
        return outcome
    if outcome is None or outcome is True:
        return PatchResult(uri=uri, ok=True)
    if outcome is not False:
        logger.warning(
            f"Patch client returned {type(outcome).__name__} for {uri}; "
            "only PatchResult, True or None count as success"
        )
    return PatchResult(uri=uri, ok=False, error=f"Patch client returned {outcome!r}")


def _patch_one(client: PatchClient, uri: str, to_delete: List[str], to_insert: List[str]) -> PatchResult:
    try:
        outcome = client.patch(uri, to_delete, to_insert)
    except Exception as e:
        # A failing resource must not abort the other patches
        logger.error(f"Patch client raised for {uri}: {e}")
        return PatchResult(uri=uri, ok=False, error=str(e))
    return _coerce_result(uri, outcome)


def _patch_all(
    client: PatchClient,
    diff: DiffMap,
    max_workers: Optional[int],
) -> Dict[str, PatchResult]:
    if not max_workers:
        max_workers = Config.SAVE_MAX_WORKERS or len(diff)
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="modelld-patch") as pool:
        futures = {
            uri: pool.submit(_patch_one, client, uri, list(entry.to_delete), list(entry.to_insert))
            for uri, entry in diff.items()
        }
        return {uri: future.result() for uri, future in futures.items()}


def apply_results(model: Model, succeeded: FrozenSet[str]) -> Model:
    """
    Fold successfully patched resources back into *model*.

    Args:
        model: The model that was saved
        succeeded: Resource URIs whose patch succeeded

    Returns:
        A model where promoted fields track their persisted state and
        graveyard fields whose deletion was applied are gone
    """
    subject = model.subject

    def promote(field: Field) -> Field:
        new_quad = field.to_quad(subject)
        original_quad = field.original_quad(subject)
        if original_quad is not None and original_quad == new_quad:
            return field
        if str(new_quad.graph) not in succeeded:
            return field
        # A field moved between graphs also needs its old statement deleted
        if original_quad is not None and original_quad.graph is not None:
            if str(original_quad.graph) not in succeeded:
                return field
        return field.from_current_state(subject)

    def still_pending(field: Field) -> bool:
        original_quad = field.original_quad(subject)
        if original_quad is None or original_quad.graph is None:
            return False
        return str(original_quad.graph) not in succeeded

    updated = model.map(promote)
    return updated._evolve(graveyard=[f for f in model.graveyard if still_pending(f)])


def save(model: Model, client: PatchClient, max_workers: Optional[int] = None) -> Model:
    """
    Persist *model*'s diff through *client*.

    Args:
        model: The model to save
        client: Patch client; one ``patch`` call is made per resource
        max_workers: Maximum concurrent patches (default: one per resource)

    Returns:
        The reconciled model, whose ``diff()`` is empty; *model* itself
        when there was nothing to save

    Raises:
        PartialSaveError: If any resource failed to patch
    """
    diff = model.diff()
    if not diff:
        logger.debug(f"Nothing to save for {model.subject}")
        return model

    logger.info(f"Saving {model.subject}: patching {len(diff)} resource(s)")
    results = _patch_all(client, diff, max_workers)
    succeeded = frozenset(uri for uri, result in results.items() if result.ok)
    failed = frozenset(diff) - succeeded

    updated = apply_results(model, succeeded)
    if failed:
        logger.error(f"Failed to save {len(failed)} of {len(diff)} resource(s) for {model.subject}")
        raise PartialSaveError(updated, diff, failed, results)
    logger.info(f"Saved {model.subject}")
    return updated
