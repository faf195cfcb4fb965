from github_workspace_sync.stores.base import (
    EntryExistsError,
    EntryNotFoundError,
    FileStore,
    ParentFolderMissingError,
    StoreEntry,
    validate_entry_name,
)
from github_workspace_sync.sync.models import EntryType
from github_workspace_sync.utilities.paths import ROOT_PATH, join_local_path


class InMemoryFileStore(FileStore):
    """A workspace that only lives as long as the process."""

    def __init__(self) -> None:
        self.entries: dict[str, StoreEntry] = {}

    def _require_folder(self, path: str) -> None:
        if path == ROOT_PATH:
            return

        entry = self.entries.get(path)

        if entry is None or entry.type != "folder":
            raise ParentFolderMissingError(parent_path=path)

    def _add(self, parent_path: str, name: str, entry_type: EntryType, content: str | None) -> None:
        self._require_folder(parent_path)

        path = join_local_path(parent_path, validate_entry_name(name))

        if path in self.entries:
            raise EntryExistsError(path=path)

        self.entries[path] = StoreEntry(path=path, type=entry_type, content=content)

    async def create_folder(self, parent_path: str, name: str) -> None:
        self._add(parent_path=parent_path, name=name, entry_type="folder", content=None)

    async def create_file(self, parent_path: str, name: str, content: str) -> None:
        self._add(parent_path=parent_path, name=name, entry_type="file", content=content)

    async def delete_all(self) -> None:
        self.entries.clear()

    async def list_entries(self) -> list[StoreEntry]:
        return [self.entries[path] for path in sorted(self.entries)]

    async def read_file(self, path: str) -> str:
        entry = self.entries.get(path)

        if entry is None or entry.type != "file" or entry.content is None:
            raise EntryNotFoundError(path=path)

        return entry.content
