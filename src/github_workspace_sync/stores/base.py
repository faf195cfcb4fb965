from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from github_workspace_sync.sync.models import EntryType
from github_workspace_sync.utilities.paths import to_repository_path

ExtraInfoType = dict[str, str | None]


class FileStoreError(Exception):
    """An error from a workspace file store."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class ParentFolderMissingError(FileStoreError):
    def __init__(self, parent_path: str):
        super().__init__(message="The parent folder does not exist.", extra_info={"parent_path": parent_path})


class EntryExistsError(FileStoreError):
    def __init__(self, path: str):
        super().__init__(message="A file or folder with this name already exists.", extra_info={"path": path})


class EntryNotFoundError(FileStoreError):
    def __init__(self, path: str):
        super().__init__(message="The file could not be found.", extra_info={"path": path})


class InvalidEntryNameError(FileStoreError):
    def __init__(self, name: str):
        super().__init__(message="The name is not a valid file or folder name.", extra_info={"name": name})


class UnreadableFileError(FileStoreError):
    def __init__(self, path: str):
        super().__init__(message="The file is not UTF-8 text.", extra_info={"path": path})


def validate_entry_name(name: str) -> str:
    if not name or name in {".", ".."} or "/" in name or "\\" in name:
        raise InvalidEntryNameError(name=name)
    return name


class StoreEntry(BaseModel):
    """A file or folder in the workspace."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="The absolute workspace path of the entry, for example '/src/app.py'.")
    type: EntryType = Field(description="Whether the entry is a file or a folder.")
    content: str | None = Field(
        default=None, description="The content of the file. Always None for folders and for files that are not UTF-8 text."
    )

    @property
    def repository_path(self) -> str:
        return to_repository_path(self.path)


class FileStore(ABC):
    """A hierarchical workspace of files and folders rooted at `/`.

    Creation never overwrites: it fails when the parent folder is missing or when the name is already taken.
    """

    @abstractmethod
    async def create_folder(self, parent_path: str, name: str) -> None: ...

    @abstractmethod
    async def create_file(self, parent_path: str, name: str, content: str) -> None: ...

    @abstractmethod
    async def delete_all(self) -> None:
        """Remove every file and folder below the root."""

    @abstractmethod
    async def list_entries(self) -> list[StoreEntry]:
        """List every entry sorted by path. File entries include their content when it is UTF-8 text."""

    @abstractmethod
    async def read_file(self, path: str) -> str: ...
