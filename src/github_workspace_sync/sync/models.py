from datetime import datetime
from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field

from github_workspace_sync.utilities.paths import path_depth, split_local_path, to_local_path

EntryType = Literal["file", "folder"]


class RepoEntry(BaseModel):
    """One node of a remote repository tree."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="The repository relative path of the entry, for example 'src/app.py'.")
    type: EntryType = Field(description="Whether the entry is a file or a folder.")
    content: str | None = Field(
        default=None, description="The content of the file when the host returned it inline. A hint only, most files omit it."
    )

    @property
    def depth(self) -> int:
        return path_depth(self.path)

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def local_path(self) -> str:
        return to_local_path(self.path)

    @property
    def local_parent_path(self) -> str:
        parent_path, _ = split_local_path(self.local_path)
        return parent_path


class SyncPlan(BaseModel):
    """An ordered plan for materializing a repository tree: all folders, parents first, then all files."""

    model_config = ConfigDict(frozen=True)

    folders: list[RepoEntry] = Field(default_factory=list, description="Folders ordered by ascending depth.")
    files: list[RepoEntry] = Field(default_factory=list, description="Files in discovery order.")
    skipped_paths: list[str] = Field(default_factory=list, description="Sentinel and duplicate paths that were dropped.")
    synthesized_folders: list[str] = Field(
        default_factory=list, description="Folders that had no entry of their own and were added because an entry lives inside them."
    )


class SyncOutcome(BaseModel):
    """The result of one sync run, or of a rejected request for one."""

    created_folders: int = Field(default=0, description="The number of folders created in the workspace.")
    created_files: int = Field(default=0, description="The number of files created in the workspace.")
    failed_folders: list[str] = Field(default_factory=list, description="Workspace paths of folders that could not be created.")
    failed_files: list[str] = Field(default_factory=list, description="Workspace paths of files that could not be created.")
    skipped_paths: list[str] = Field(default_factory=list, description="Repository paths that were intentionally not imported.")
    planned_folders: int = Field(default=0, description="The number of folders in the sync plan.")
    planned_files: int = Field(default=0, description="The number of files in the sync plan.")
    rejected: bool = Field(default=False, description="Whether the request was rejected before any work was attempted.")
    error: str | None = Field(default=None, description="Why the run failed as a whole, if it did.")

    @classmethod
    def rejected_request(cls, reason: str) -> Self:
        return cls(rejected=True, error=reason)

    @classmethod
    def failed_run(cls, reason: str) -> Self:
        return cls(error=reason)

    @computed_field
    @property
    def failed_paths(self) -> list[str]:
        return [*self.failed_folders, *self.failed_files]

    @computed_field
    @property
    def succeeded(self) -> bool:
        """Lenient: true when the run produced anything visible at all."""
        return self.created_folders + self.created_files > 0

    @computed_field
    @property
    def fully_succeeded(self) -> bool:
        return self.succeeded and not self.failed_paths and self.error is None

    @computed_field
    @property
    def message(self) -> str:
        if self.rejected or (self.error is not None and not self.succeeded):
            return self.error or "The sync did not run."

        if not self.succeeded:
            return "No files or folders were created."

        summary = f"Imported {self.created_files} files and {self.created_folders} folders"

        if failed_count := len(self.failed_paths):
            summary += f" ({failed_count} errors)"

        return summary


class SyncSessionState(BaseModel):
    """What the session guard knows about the sync it protects."""

    in_flight: bool = Field(default=False, description="Whether a sync is currently running.")
    last_attempt_at: float | None = Field(default=None, description="Clock reading of the last accepted sync request.")
    last_outcome: SyncOutcome | None = Field(default=None, description="The outcome of the last completed sync.")
    last_completed_at: datetime | None = Field(default=None, description="When the last sync completed.")
