"""
L4 Execution — Reversible source patches.

A patch is scoped: the target file is backed up, transformed, the
caller builds, and the original is restored from the backup no matter
how the build ended. Patched files never outlive the project's build.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from sdrbuild.core.models.manifest import PatchDescriptor
from sdrbuild.core.models.result import StageResult
from sdrbuild.core.services.installer.data.constants import STAGE_PATCH
from sdrbuild.core.services.installer.domain.patching import TransformError, apply_transforms

logger = logging.getLogger(__name__)


def backup_and_apply(
    patch: PatchDescriptor,
    workspace: Path,
    target_name: str = "",
) -> StageResult:
    """Copy the target to its backup path, then apply every transform.

    The patched contents are computed in memory before the target is
    written, so a rejected transform leaves the target untouched.
    """
    target = patch.target_path(workspace)
    backup = patch.backup_path(workspace)
    label = target_name or patch.target

    try:
        shutil.copy2(target, backup)
    except OSError as e:
        logger.error("Cannot back up %s: %s", target, e)
        return StageResult.failure(
            STAGE_PATCH, label, f"Cannot back up {patch.target}: {e}",
            error="PatchError",
            hint=f"Check that {target} exists in the upstream checkout",
        )

    if patch.reason:
        logger.info("Patching %s (%s)...", patch.target, patch.reason)
    else:
        logger.info("Patching %s...", patch.target)

    try:
        patched = apply_transforms(target.read_bytes(), patch.transforms)
        target.write_bytes(patched)
    except TransformError as e:
        logger.error("Patch does not fit %s: %s", patch.target, e)
        return StageResult.failure(
            STAGE_PATCH, label, f"Patch does not fit {patch.target}: {e}",
            error="PatchError",
            hint="Upstream changed; update the line ranges in the manifest",
        )
    except OSError as e:
        logger.error("Cannot write %s: %s", target, e)
        return StageResult.failure(
            STAGE_PATCH, label, f"Cannot write {patch.target}: {e}",
            error="PatchError",
            hint=f"Check permissions on {target.parent}",
        )

    ranges = ", ".join(f"{t.start}-{t.end}" for t in patch.transforms)
    return StageResult.success(
        STAGE_PATCH, label, f"Neutralised lines {ranges} of {patch.target}",
        metadata={"backup": str(backup)},
    )


def restore_patch(
    patch: PatchDescriptor,
    workspace: Path,
    target_name: str = "",
) -> StageResult | None:
    """Move the backup back over the target.

    Returns:
        None when there is no backup (nothing was patched), otherwise
        the restore result.
    """
    target = patch.target_path(workspace)
    backup = patch.backup_path(workspace)
    label = target_name or patch.target

    if not backup.exists():
        return None

    try:
        os.replace(backup, target)
    except OSError as e:
        logger.error("Cannot restore %s: %s", target, e)
        return StageResult.failure(
            STAGE_PATCH, label, f"Cannot restore {patch.target} from {backup.name}: {e}",
            error="PatchError",
            hint=f"Restore it by hand: mv {backup} {target}",
        )

    logger.debug("Restored %s from %s", target, backup)
    return StageResult.success(
        STAGE_PATCH, label, f"Restored original {patch.target}",
        metadata={"restored": True},
    )


@contextmanager
def applied_patch(
    patch: PatchDescriptor,
    workspace: Path,
    record: Callable[[StageResult], StageResult],
    target_name: str = "",
) -> Iterator[StageResult]:
    """Apply ``patch`` for the duration of the ``with`` block.

    Usage::

        with applied_patch(project.patch, ws, report.record) as applied:
            if applied.failed:
                ...
            build(...)

    Both the apply result and the restore result are passed to
    ``record``. The restore runs on every exit path once a backup
    exists, including when the block raises.
    """
    applied = record(backup_and_apply(patch, workspace, target_name))
    try:
        yield applied
    finally:
        restored = restore_patch(patch, workspace, target_name)
        if restored is not None:
            record(restored)
