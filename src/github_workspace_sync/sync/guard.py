import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime
from logging import Logger

from fastmcp.utilities.logging import get_logger

from github_workspace_sync.notifications import LoggingNotifier, Notification, Notifier
from github_workspace_sync.sync.baseline import WorkspaceBaseline
from github_workspace_sync.sync.executor import SYNC_IN_PROGRESS_MESSAGE, SyncExecutor
from github_workspace_sync.sync.models import SyncOutcome, SyncSessionState
from github_workspace_sync.utilities.config import DEFAULT_SYNC_COOLDOWN_SECONDS, DEFAULT_SYNC_RELEASE_DELAY_SECONDS


class SyncSessionGuard:
    """Debounce and serialize user triggered syncs in front of a `SyncExecutor`.

    A request is rejected while another sync is in flight, and again within `cooldown` seconds of the last accepted
    request. Rejected requests do no I/O and are not recorded as outcomes. Every accepted sync resets the baseline of
    imported file contents, or extends it when existing files are kept.
    """

    def __init__(
        self,
        executor: SyncExecutor,
        notifier: Notifier | None = None,
        cooldown: float = DEFAULT_SYNC_COOLDOWN_SECONDS,
        release_delay: float = DEFAULT_SYNC_RELEASE_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        baseline: WorkspaceBaseline | None = None,
        logger: Logger | None = None,
    ):
        self.executor: SyncExecutor = executor
        self.baseline: WorkspaceBaseline = baseline or WorkspaceBaseline()
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.cooldown: float = cooldown
        self.release_delay: float = release_delay
        self.clock: Callable[[], float] = clock
        self.logger: Logger = logger or get_logger(name=__name__)
        self._state: SyncSessionState = SyncSessionState()
        self._release_handle: asyncio.TimerHandle | None = None

    @property
    def state(self) -> SyncSessionState:
        return self._state.model_copy()

    @property
    def in_flight(self) -> bool:
        return self._state.in_flight

    @property
    def last_outcome(self) -> SyncOutcome | None:
        return self._state.last_outcome

    def reset_sync_state(self) -> None:
        """Forget the last outcome. Does not affect a sync that is in flight."""

        self._state.last_outcome = None
        self._state.last_completed_at = None

    def _reject(self, title: str, reason: str) -> SyncOutcome:
        self.notifier.notify(Notification(title=title, description=reason))
        return SyncOutcome.rejected_request(reason)

    def _release(self) -> None:
        self._release_handle = None
        self._state.in_flight = False
        self.logger.info("Sync lock released")

    async def request_sync(self, owner: str, repo: str, branch: str, replace_existing: bool = True) -> SyncOutcome:
        """Replace the workspace with `owner/repo` at `branch`.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            branch: The branch to import.
            replace_existing: Whether to delete every file in the workspace before importing.
        """

        if self._state.in_flight or self.executor.is_running:
            self.logger.info(f"Sync of {owner}/{repo} ({branch}) rejected: a sync is already in progress")
            return self._reject(title="Sync in progress", reason=SYNC_IN_PROGRESS_MESSAGE)

        now = self.clock()

        if self._state.last_attempt_at is not None and now - self._state.last_attempt_at < self.cooldown:
            self.logger.info(f"Sync of {owner}/{repo} ({branch}) rejected: requested within the cooldown window")
            return self._reject(title="Please wait", reason=f"Please wait {self.cooldown:g} seconds between sync attempts.")

        self._state.in_flight = True
        self._state.last_attempt_at = now

        try:
            outcome = await self._sync(owner=owner, repo=repo, branch=branch, replace_existing=replace_existing)

            if not outcome.rejected:
                self._state.last_outcome = outcome
                self._state.last_completed_at = datetime.now(tz=UTC)

            self._notify_outcome(repo=repo, outcome=outcome)

            return outcome
        finally:
            if self.release_delay > 0:
                self._release_handle = asyncio.get_running_loop().call_later(self.release_delay, self._release)
            else:
                self._release()

    async def _sync(self, owner: str, repo: str, branch: str, replace_existing: bool) -> SyncOutcome:
        if replace_existing:
            self.logger.info("Deleting all existing files before syncing")

            try:
                await self.executor.store.delete_all()
            except Exception as e:
                self.logger.exception("Failed to delete existing files")
                return SyncOutcome.failed_run(f"Failed to delete existing files: {e}")

        self.logger.info(f"Syncing repository {owner}/{repo} ({branch})")

        outcome = await self.executor.run(owner=owner, repo=repo, branch=branch)

        if outcome.rejected:
            return outcome

        if replace_existing:
            self.baseline.replace(self.executor.imported_contents)
        else:
            self.baseline.update(self.executor.imported_contents)

        return outcome

    def _notify_outcome(self, repo: str, outcome: SyncOutcome) -> None:
        if outcome.succeeded:
            self.notifier.notify(Notification(title="Repository synced", description=outcome.message))
        elif outcome.rejected:
            self.notifier.notify(Notification(title="Sync in progress", description=outcome.message))
        else:
            self.notifier.notify(
                Notification(
                    title="Sync failed", description=f"Failed to import repository {repo}: {outcome.message}", variant="destructive"
                )
            )
