import time
from collections.abc import Callable, Sequence
from logging import Logger
from typing import Protocol, Self

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field, computed_field

from github_workspace_sync.notifications import LoggingNotifier, Notification, Notifier
from github_workspace_sync.stores.base import StoreEntry
from github_workspace_sync.sync.baseline import WorkspaceBaseline
from github_workspace_sync.utilities.config import DEFAULT_COMMIT_COOLDOWN_SECONDS

logger = get_logger(__name__)

DEFAULT_COMMIT_MESSAGE = "Update file from workspace"
COMMIT_IN_PROGRESS_MESSAGE = "A commit is already in progress. Please wait for it to complete."


class FileSaver(Protocol):
    async def save_file(self, repo_full_name: str, path: str, content: str, message: str, branch: str) -> bool: ...


class CommitOutcome(BaseModel):
    """The result of committing workspace files, one commit per file."""

    committed: list[str] = Field(default_factory=list, description="Repository paths that were committed.")
    failed: list[str] = Field(default_factory=list, description="Repository paths that could not be committed.")
    skipped: list[str] = Field(default_factory=list, description="Repository paths that were not committed because they are empty.")
    rejected: bool = Field(default=False, description="Whether the request was rejected before any file was committed.")
    error: str | None = Field(default=None, description="Why the request was rejected, if it was.")

    @classmethod
    def rejected_request(cls, reason: str) -> Self:
        return cls(rejected=True, error=reason)

    @computed_field
    @property
    def succeeded(self) -> bool:
        return bool(self.committed) and not self.failed

    @computed_field
    @property
    def message(self) -> str:
        if self.rejected:
            return self.error or "The commit did not run."

        if not self.committed and not self.failed:
            return "No files to commit."

        if not self.committed:
            return f"Failed to commit {len(self.failed)} files."

        if self.failed:
            return f"Committed {len(self.committed)} files, {len(self.failed)} failed."

        return f"Committed {len(self.committed)} files."


async def commit_files(
    saver: FileSaver,
    repo_full_name: str,
    branch: str,
    files: Sequence[StoreEntry],
    message: str = DEFAULT_COMMIT_MESSAGE,
) -> CommitOutcome:
    """Commit each workspace file to `branch` in turn. A failure never stops the remaining files."""

    outcome = CommitOutcome()

    for file in files:
        path = file.repository_path

        if not file.content:
            logger.warning(f"Skipping empty file {path}")
            outcome.skipped.append(path)
            continue

        try:
            saved = await saver.save_file(repo_full_name=repo_full_name, path=path, content=file.content, message=message, branch=branch)
        except Exception:
            logger.exception(f"Error committing {path} to {repo_full_name} ({branch})")
            saved = False

        if saved:
            outcome.committed.append(path)
        else:
            outcome.failed.append(path)

    logger.info(f"Commit to {repo_full_name} ({branch}) finished: {outcome.message}")

    return outcome


class CommitSessionGuard:
    """Serialize and debounce commits of workspace files.

    A request is rejected while another commit is running, and again within `cooldown` seconds of the last commit that
    had files to send. Committed files become the new baseline so they no longer count as modified.
    """

    def __init__(
        self,
        saver: FileSaver,
        baseline: WorkspaceBaseline | None = None,
        notifier: Notifier | None = None,
        cooldown: float = DEFAULT_COMMIT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        logger: Logger | None = None,
    ):
        self.saver: FileSaver = saver
        self.baseline: WorkspaceBaseline = baseline or WorkspaceBaseline()
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.cooldown: float = cooldown
        self.clock: Callable[[], float] = clock
        self.logger: Logger = logger or get_logger(name=__name__)
        self.in_flight: bool = False
        self.last_attempt_at: float | None = None

    def _reject(self, title: str, reason: str) -> CommitOutcome:
        self.notifier.notify(Notification(title=title, description=reason))
        return CommitOutcome.rejected_request(reason)

    async def request_commit(
        self, repo_full_name: str, branch: str, files: Sequence[StoreEntry], message: str = DEFAULT_COMMIT_MESSAGE
    ) -> CommitOutcome:
        if self.in_flight:
            self.logger.info(f"Commit to {repo_full_name} ({branch}) rejected: a commit is already in progress")
            return self._reject(title="Commit in progress", reason=COMMIT_IN_PROGRESS_MESSAGE)

        if not files:
            return CommitOutcome()

        now = self.clock()

        if self.last_attempt_at is not None and now - self.last_attempt_at < self.cooldown:
            self.logger.info(f"Commit to {repo_full_name} ({branch}) rejected: requested within the cooldown window")
            return self._reject(title="Please wait", reason=f"Please wait {self.cooldown:g} seconds between commit attempts.")

        self.in_flight = True
        self.last_attempt_at = now

        try:
            outcome = await commit_files(saver=self.saver, repo_full_name=repo_full_name, branch=branch, files=files, message=message)
        finally:
            self.in_flight = False

        committed_paths = set(outcome.committed)
        self.baseline.update({file.path: file.content for file in files if file.repository_path in committed_paths and file.content})

        if outcome.succeeded:
            self.notifier.notify(Notification(title="Files committed", description=outcome.message))
        elif outcome.failed:
            self.notifier.notify(Notification(title="Commit failed", description=outcome.message, variant="destructive"))

        return outcome
