from collections.abc import Mapping

from github_workspace_sync.stores.base import StoreEntry


class WorkspaceBaseline:
    """The content each workspace file had when it was last imported or committed.

    A file is modified when its content differs from the baseline, or when it has no baseline at all.
    """

    def __init__(self) -> None:
        self.contents: dict[str, str] = {}

    def replace(self, contents: Mapping[str, str]) -> None:
        self.contents = dict(contents)

    def update(self, contents: Mapping[str, str]) -> None:
        self.contents.update(contents)

    def is_modified(self, entry: StoreEntry) -> bool:
        if entry.type != "file":
            return False

        return self.contents.get(entry.path) != entry.content

    def modified_files(self, entries: list[StoreEntry]) -> list[StoreEntry]:
        return [entry for entry in entries if self.is_modified(entry)]
