import asyncio
from collections import defaultdict
from collections.abc import Sequence
from typing import Any

import pytest
from pydantic import BaseModel

from github_workspace_sync.notifications import Notification
from github_workspace_sync.stores.memory import InMemoryFileStore
from github_workspace_sync.sync.executor import SyncExecutor
from github_workspace_sync.sync.guard import SyncSessionGuard
from github_workspace_sync.sync.models import RepoEntry
from github_workspace_sync.utilities.paths import join_local_path


class StoreCall(BaseModel):
    operation: str
    parent_path: str
    name: str
    succeeded: bool


class RecordingFileStore(InMemoryFileStore):
    """An in-memory store that records every create call and can be told to fail for specific paths."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[StoreCall] = []
        self.delete_all_calls: int = 0
        self.fail_delete_all: bool = False
        # Remaining failures per workspace path; -1 fails forever.
        self.failures: dict[str, int] = defaultdict(int)

    def fail(self, path: str, times: int = -1) -> None:
        self.failures[path] = times

    def _should_fail(self, path: str) -> bool:
        remaining = self.failures.get(path, 0)

        if remaining == 0:
            return False

        if remaining > 0:
            self.failures[path] = remaining - 1

        return True

    async def create_folder(self, parent_path: str, name: str) -> None:
        try:
            if self._should_fail(join_local_path(parent_path, name)):
                msg = f"Injected failure creating folder {name} in {parent_path}"
                raise OSError(msg)

            await super().create_folder(parent_path=parent_path, name=name)
        except Exception:
            self.calls.append(StoreCall(operation="create_folder", parent_path=parent_path, name=name, succeeded=False))
            raise

        self.calls.append(StoreCall(operation="create_folder", parent_path=parent_path, name=name, succeeded=True))

    async def create_file(self, parent_path: str, name: str, content: str) -> None:
        try:
            if self._should_fail(join_local_path(parent_path, name)):
                msg = f"Injected failure creating file {name} in {parent_path}"
                raise OSError(msg)

            await super().create_file(parent_path=parent_path, name=name, content=content)
        except Exception:
            self.calls.append(StoreCall(operation="create_file", parent_path=parent_path, name=name, succeeded=False))
            raise

        self.calls.append(StoreCall(operation="create_file", parent_path=parent_path, name=name, succeeded=True))

    async def delete_all(self) -> None:
        self.delete_all_calls += 1

        if self.fail_delete_all:
            msg = "Injected failure deleting files"
            raise OSError(msg)

        await super().delete_all()

    def calls_for(self, operation: str) -> list[StoreCall]:
        return [call for call in self.calls if call.operation == operation]


class FakeContentSource:
    """Serves a fixed repository listing and file contents, optionally pausing inside the listing call."""

    def __init__(self, entries: Sequence[RepoEntry] | None = None, contents: dict[str, str] | None = None):
        self.entries: list[RepoEntry] = list(entries or [])
        self.contents: dict[str, str] = contents or {}
        self.listing_error: Exception | None = None
        self.content_errors: set[str] = set()
        self.listing_calls: int = 0
        self.content_calls: list[str] = []
        self.listing_started: asyncio.Event = asyncio.Event()
        self.release_listing: asyncio.Event = asyncio.Event()
        self.release_listing.set()

    async def fetch_directory_contents(self, owner: str, repo: str, path: str, branch: str) -> list[RepoEntry]:
        self.listing_calls += 1
        self.listing_started.set()

        await self.release_listing.wait()

        if self.listing_error is not None:
            raise self.listing_error

        return self.entries

    async def fetch_file_content(self, repo_full_name: str, path: str, branch: str) -> str:
        self.content_calls.append(path)

        if path in self.content_errors:
            msg = f"Content of {path} is unavailable"
            raise RuntimeError(msg)

        return self.contents.get(path, f"content of {path}")


class RecordingNotifier:
    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def titles(self) -> list[str]:
        return [notification.title for notification in self.notifications]


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now: float = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def folder(path: str) -> RepoEntry:
    return RepoEntry(path=path, type="folder")


def file(path: str, content: str | None = None) -> RepoEntry:
    return RepoEntry(path=path, type="file", content=content)


@pytest.fixture
def store() -> RecordingFileStore:
    return RecordingFileStore()


@pytest.fixture
def source() -> FakeContentSource:
    return FakeContentSource()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def executor(source: FakeContentSource, store: RecordingFileStore) -> SyncExecutor:
    return SyncExecutor(source=source, store=store, attempts=3, retry_delay=0)


@pytest.fixture
def guard(executor: SyncExecutor, notifier: RecordingNotifier, clock: FakeClock) -> SyncSessionGuard:
    return SyncSessionGuard(executor=executor, notifier=notifier, cooldown=10, clock=clock)


def dump_list_for_snapshot(
    basemodel: None | Sequence[BaseModel],
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> list[dict[str, Any]] | None:
    if basemodel is None:
        return None

    dumped: list[dict[str, Any]] = [item.model_dump(exclude_none=exclude_none, **dump_kwargs) for item in basemodel]

    if exclude_keys is None:
        return dumped

    return [{key: value for key, value in item.items() if key not in exclude_keys} for item in dumped]
