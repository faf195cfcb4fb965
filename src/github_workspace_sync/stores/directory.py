import shutil
from pathlib import Path

from anyio import Path as AsyncPath
from anyio import open_file, to_thread
from fastmcp.utilities.logging import get_logger

from github_workspace_sync.stores.base import (
    EntryExistsError,
    EntryNotFoundError,
    FileStore,
    FileStoreError,
    ParentFolderMissingError,
    StoreEntry,
    UnreadableFileError,
    validate_entry_name,
)
from github_workspace_sync.utilities.paths import ROOT_PATH, join_local_path, to_repository_path

logger = get_logger(__name__)


class DirectoryFileStore(FileStore):
    """A workspace materialized below a directory on the local disk."""

    def __init__(self, root_dir: Path):
        self.root_dir: Path = root_dir.resolve()

    def _resolve(self, local_path: str) -> AsyncPath:
        resolved = (self.root_dir / to_repository_path(local_path)).resolve()

        if not resolved.is_relative_to(self.root_dir):
            raise FileStoreError(message="The path escapes the workspace.", extra_info={"path": local_path})

        return AsyncPath(resolved)

    async def _require_folder(self, parent_path: str) -> AsyncPath:
        if parent_path == ROOT_PATH:
            root = AsyncPath(self.root_dir)
            await root.mkdir(parents=True, exist_ok=True)
            return root

        parent = self._resolve(parent_path)

        if not await parent.is_dir():
            raise ParentFolderMissingError(parent_path=parent_path)

        return parent

    async def create_folder(self, parent_path: str, name: str) -> None:
        parent = await self._require_folder(parent_path)

        try:
            await (parent / validate_entry_name(name)).mkdir()
        except FileExistsError as e:
            raise EntryExistsError(path=join_local_path(parent_path, name)) from e

    async def create_file(self, parent_path: str, name: str, content: str) -> None:
        parent = await self._require_folder(parent_path)

        try:
            async with await open_file(file=parent / validate_entry_name(name), mode="x", encoding="utf-8") as file:
                await file.write(content)
        except FileExistsError as e:
            raise EntryExistsError(path=join_local_path(parent_path, name)) from e

    async def delete_all(self) -> None:
        root = AsyncPath(self.root_dir)

        if not await root.exists():
            return

        async for child in root.iterdir():
            if await child.is_dir() and not await child.is_symlink():
                await to_thread.run_sync(shutil.rmtree, Path(child))
            else:
                await child.unlink()

        logger.info(f"Cleared workspace directory {self.root_dir}")

    async def list_entries(self) -> list[StoreEntry]:
        root = AsyncPath(self.root_dir)

        if not await root.exists():
            return []

        entries: list[StoreEntry] = []

        async for child in root.rglob("*"):
            local_path = ROOT_PATH + Path(child).relative_to(self.root_dir).as_posix()

            if await child.is_dir():
                entries.append(StoreEntry(path=local_path, type="folder"))
            else:
                try:
                    content: str | None = await child.read_text(encoding="utf-8")
                except UnicodeDecodeError:
                    logger.warning(f"Listing {local_path} without content, it is not UTF-8 text")
                    content = None

                entries.append(StoreEntry(path=local_path, type="file", content=content))

        return sorted(entries, key=lambda entry: entry.path)

    async def read_file(self, path: str) -> str:
        file_path = self._resolve(path)

        if not await file_path.is_file():
            raise EntryNotFoundError(path=path)

        try:
            return await file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise UnreadableFileError(path=path) from e
