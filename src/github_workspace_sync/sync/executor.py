import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from logging import Logger
from typing import Protocol

from fastmcp.utilities.logging import get_logger
from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, wait_fixed

from github_workspace_sync.stores.base import FileStore
from github_workspace_sync.sync.models import RepoEntry, SyncOutcome, SyncPlan
from github_workspace_sync.sync.planner import plan_sync
from github_workspace_sync.utilities.config import DEFAULT_SYNC_RETRY_ATTEMPTS, DEFAULT_SYNC_RETRY_DELAY_SECONDS
from github_workspace_sync.utilities.paths import ROOT_PATH, local_ancestors, split_local_path

SYNC_IN_PROGRESS_MESSAGE = "A sync is already in progress. Please wait for it to complete."
EMPTY_REPOSITORY_MESSAGE = "No files were found in the repository, or you may not have access to it."


class RepositoryContentSource(Protocol):
    async def fetch_directory_contents(self, owner: str, repo: str, path: str, branch: str) -> list[RepoEntry]: ...

    async def fetch_file_content(self, repo_full_name: str, path: str, branch: str) -> str: ...


class SyncPhase(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    PLANNING = "planning"
    CREATING_FOLDERS = "creating_folders"
    CREATING_FILES = "creating_files"
    REPORTING = "reporting"


class SyncProgress:
    """Counters and folder status for one run. Discarded when the run ends."""

    def __init__(self) -> None:
        self.folder_status: dict[str, bool] = {ROOT_PATH: True}
        self.created_folders: int = 0
        self.created_files: int = 0
        self.failed_folders: list[str] = []
        self.failed_files: list[str] = []
        self.imported_contents: dict[str, str] = {}

    def folder_exists(self, local_path: str) -> bool:
        return self.folder_status.get(local_path, False)


class SyncExecutor:
    """Materialize a remote repository into a file store, one run at a time.

    Folders are created before files, parents before children. A folder or file that cannot be created after the
    configured attempts is recorded as failed and the run carries on; a failed folder still counts as present so that
    its children are attempted. Only a failure to list the repository ends a run early.
    """

    def __init__(
        self,
        source: RepositoryContentSource,
        store: FileStore,
        attempts: int = DEFAULT_SYNC_RETRY_ATTEMPTS,
        retry_delay: float = DEFAULT_SYNC_RETRY_DELAY_SECONDS,
        empty_content_on_fetch_error: bool = False,
        logger: Logger | None = None,
    ):
        self.source: RepositoryContentSource = source
        self.store: FileStore = store
        self.attempts: int = attempts
        self.retry_delay: float = retry_delay
        self.empty_content_on_fetch_error: bool = empty_content_on_fetch_error
        self.logger: Logger = logger or get_logger(name=__name__)
        self._phase: SyncPhase = SyncPhase.IDLE
        # Content of every file created by the latest run, keyed by workspace path.
        self.imported_contents: dict[str, str] = {}

    @property
    def phase(self) -> SyncPhase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._phase is not SyncPhase.IDLE

    async def run(self, owner: str, repo: str, branch: str) -> SyncOutcome:
        """Copy `owner/repo` at `branch` into the store. Always returns an outcome, never raises."""

        if self.is_running:
            self.logger.warning(f"Rejecting sync of {owner}/{repo} ({branch}), a sync is already {self._phase}")
            return SyncOutcome.rejected_request(SYNC_IN_PROGRESS_MESSAGE)

        self._phase = SyncPhase.FETCHING
        self.imported_contents = {}

        try:
            return await self._run(owner=owner, repo=repo, branch=branch)
        finally:
            self._phase = SyncPhase.IDLE

    async def _run(self, owner: str, repo: str, branch: str) -> SyncOutcome:
        self.logger.info(f"Fetching contents of {owner}/{repo} ({branch})")

        try:
            entries: list[RepoEntry] = await self.source.fetch_directory_contents(owner=owner, repo=repo, path="", branch=branch)
        except Exception as e:
            self.logger.exception(f"Failed to fetch contents of {owner}/{repo} ({branch})")
            return SyncOutcome.failed_run(str(e) or f"Failed to access repository contents: {type(e).__name__}")

        if not entries:
            self.logger.warning(f"Repository {owner}/{repo} ({branch}) is empty or inaccessible")
            return SyncOutcome.failed_run(EMPTY_REPOSITORY_MESSAGE)

        self._phase = SyncPhase.PLANNING

        plan: SyncPlan = plan_sync(entries)

        self.logger.info(f"Planned {len(plan.folders)} folders and {len(plan.files)} files from {len(entries)} entries")

        progress = SyncProgress()

        self._phase = SyncPhase.CREATING_FOLDERS

        for folder in plan.folders:
            if progress.folder_exists(folder.local_path):
                continue

            await self._ensure_folder(folder.local_path, progress)

        self._phase = SyncPhase.CREATING_FILES

        for file in plan.files:
            await self._create_file(f"{owner}/{repo}", branch, file, progress)

        self._phase = SyncPhase.REPORTING

        outcome = SyncOutcome(
            created_folders=progress.created_folders,
            created_files=progress.created_files,
            failed_folders=progress.failed_folders,
            failed_files=progress.failed_files,
            skipped_paths=plan.skipped_paths,
            planned_folders=len(plan.folders),
            planned_files=len(plan.files),
        )

        self.imported_contents = progress.imported_contents

        self.logger.info(f"Sync of {owner}/{repo} ({branch}) finished: {outcome.message}")

        return outcome

    async def _retry(self, operation: Callable[..., Awaitable[None]], *args: str) -> None:
        """Run a store operation, retrying with a fixed delay. Raises the last error once the attempts are exhausted."""

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.retry_delay),
            before_sleep=before_sleep_log(self.logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                await operation(*args)

    async def _ensure_folder(self, local_path: str, progress: SyncProgress) -> None:
        """Create a folder and any of its ancestors that are not yet marked as present."""

        for folder_path in local_ancestors(local_path):
            if progress.folder_exists(folder_path):
                continue

            parent_path, name = split_local_path(folder_path)

            try:
                await self._retry(self.store.create_folder, parent_path, name)
            except Exception:
                self.logger.exception(f"Failed to create folder {folder_path} after {self.attempts} attempts")
                progress.failed_folders.append(folder_path)
            else:
                progress.created_folders += 1

            progress.folder_status[folder_path] = True

    async def _create_file(self, repo_full_name: str, branch: str, file: RepoEntry, progress: SyncProgress) -> None:
        parent_path, name = split_local_path(file.local_path)

        if not progress.folder_exists(parent_path):
            self.logger.info(f"Creating missing parent folder {parent_path} for {file.local_path}")
            await self._ensure_folder(parent_path, progress)

        content: str | None = file.content

        if content is None:
            try:
                content = await self.source.fetch_file_content(repo_full_name=repo_full_name, path=file.path, branch=branch)
            except Exception as e:
                self.logger.warning(f"Failed to fetch content for {file.path}: {e}")

                if not self.empty_content_on_fetch_error:
                    progress.failed_files.append(file.local_path)
                    return

                content = ""

        try:
            await self._retry(self.store.create_file, parent_path, name, content)
        except Exception:
            self.logger.exception(f"Failed to create file {file.local_path} after {self.attempts} attempts")
            progress.failed_files.append(file.local_path)
            return

        progress.created_files += 1
        progress.imported_contents[file.local_path] = content
