"""Turn a flat listing of a remote repository into an ordered, complete creation plan.

Planning is pure: no I/O, and the same input always produces the same plan.
"""

from collections.abc import Iterable, Sequence

from fastmcp.utilities.logging import get_logger

from github_workspace_sync.sync.models import RepoEntry, SyncPlan
from github_workspace_sync.utilities.paths import normalize_repository_path

logger = get_logger(__name__)

# Placeholder files some malformed repositories report that must never be materialized.
SENTINEL_FILE_NAMES: frozenset[str] = frozenset({"index.file"})


def is_sentinel_path(path: str, sentinel_names: Iterable[str] = SENTINEL_FILE_NAMES) -> bool:
    """Whether the path is, or ends with, a sentinel file name: `index.file` and `a/b/index.file` both match."""

    name = normalize_repository_path(path).rsplit("/", 1)[-1]

    return name in sentinel_names


def repository_ancestors(path: str) -> list[str]:
    """The folders containing a repository path, nearest to the root first. `a/b/c.py` yields `a` and `a/b`."""

    parts = path.split("/")[:-1]

    return ["/".join(parts[: index + 1]) for index in range(len(parts))]


def plan_sync(entries: Sequence[RepoEntry], sentinel_names: Iterable[str] = SENTINEL_FILE_NAMES) -> SyncPlan:
    """Build the plan for materializing `entries` into an empty workspace.

    - Paths are normalized and empty paths dropped.
    - Files named like a sentinel are dropped.
    - Repeated paths keep their first occurrence.
    - Every folder that contains an entry but has no entry of its own is added, so each parent is in the plan.
    - Folders are stably sorted by depth, so a parent always precedes its children. Files keep discovery order.
    """

    sentinel_names = frozenset(sentinel_names)

    seen_paths: set[str] = set()
    skipped_paths: list[str] = []
    synthesized_folders: list[str] = []
    synthesized_paths: set[str] = set()

    folders: list[RepoEntry] = []
    files: list[RepoEntry] = []

    for entry in entries:
        path = normalize_repository_path(entry.path)

        if not path:
            continue

        if entry.type == "file" and is_sentinel_path(path, sentinel_names):
            logger.info(f"Skipping sentinel file {path}")
            skipped_paths.append(path)
            continue

        if path in seen_paths:
            # Already planned because a nested entry arrived first.
            if entry.type == "folder" and path in synthesized_paths:
                continue

            logger.warning(f"Skipping duplicate {entry.type} {path}")
            skipped_paths.append(path)
            continue

        for ancestor in repository_ancestors(path):
            if ancestor not in seen_paths:
                seen_paths.add(ancestor)
                synthesized_folders.append(ancestor)
                synthesized_paths.add(ancestor)
                folders.append(RepoEntry(path=ancestor, type="folder"))

        seen_paths.add(path)

        if path != entry.path:
            entry = entry.model_copy(update={"path": path})

        if entry.type == "folder":
            folders.append(entry)
        else:
            files.append(entry)

    if synthesized_folders:
        logger.info(f"Added {len(synthesized_folders)} folders that were implied by nested paths")

    return SyncPlan(
        folders=sorted(folders, key=lambda folder: folder.depth),
        files=files,
        skipped_paths=skipped_paths,
        synthesized_folders=synthesized_folders,
    )
