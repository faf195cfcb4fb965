from logging import Logger
from typing import Any

from fastmcp.server import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger

from github_workspace_sync.clients.github import GitHubRepoClient
from github_workspace_sync.clients.models.github import Branch, Repository
from github_workspace_sync.servers.shared.annotations import (
    BRANCH,
    COMMIT_MESSAGE,
    OWNER,
    REPLACE_EXISTING,
    REPO,
    REPO_FULL_NAME,
    WORKSPACE_PATH,
    WORKSPACE_PATHS,
)
from github_workspace_sync.servers.shared.errors import WorkspaceFilesMissingError
from github_workspace_sync.stores.base import FileStore, StoreEntry
from github_workspace_sync.stores.memory import InMemoryFileStore
from github_workspace_sync.sync.commit import DEFAULT_COMMIT_MESSAGE, CommitOutcome, CommitSessionGuard
from github_workspace_sync.sync.executor import SyncExecutor
from github_workspace_sync.sync.guard import SyncSessionGuard
from github_workspace_sync.sync.models import SyncOutcome
from github_workspace_sync.utilities.paths import normalize_repository_path


class WorkspaceServer:
    """Tools for importing a GitHub repository into the workspace and committing workspace files back."""

    repo_client: GitHubRepoClient
    store: FileStore
    guard: SyncSessionGuard
    commit_guard: CommitSessionGuard
    logger: Logger

    def __init__(
        self,
        repo_client: GitHubRepoClient | None = None,
        store: FileStore | None = None,
        guard: SyncSessionGuard | None = None,
        commit_guard: CommitSessionGuard | None = None,
        logger: Logger | None = None,
    ):
        self.logger = logger or get_logger(name=__name__)
        self.repo_client = repo_client or GitHubRepoClient()
        self.store = store or InMemoryFileStore()
        self.guard = guard or SyncSessionGuard(executor=SyncExecutor(source=self.repo_client, store=self.store))
        self.commit_guard = commit_guard or CommitSessionGuard(saver=self.repo_client, baseline=self.guard.baseline)

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.list_repositories))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.list_branches))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.import_repository))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_last_sync))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.reset_sync_state))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.list_workspace_files))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.read_workspace_file))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.commit_workspace_files))

        return fastmcp

    async def list_repositories(self) -> list[Repository]:
        """List the GitHub repositories the configured token can access."""

        return await self.repo_client.list_repositories()

    async def list_branches(self, repo_full_name: REPO_FULL_NAME) -> list[Branch]:
        """List the branches of a GitHub repository."""

        return await self.repo_client.list_branches(repo_full_name=repo_full_name)

    async def import_repository(self, owner: OWNER, repo: REPO, branch: BRANCH, replace_existing: REPLACE_EXISTING = True) -> SyncOutcome:
        """Replace the workspace with the files of a GitHub repository branch."""

        return await self.guard.request_sync(owner=owner, repo=repo, branch=branch, replace_existing=replace_existing)

    async def get_last_sync(self) -> SyncOutcome | None:
        """Get the outcome of the last repository import, if any."""

        return self.guard.last_outcome

    async def reset_sync_state(self) -> None:
        """Forget the outcome of the last repository import."""

        self.guard.reset_sync_state()

    async def list_workspace_files(self) -> list[StoreEntry]:
        """List every file and folder in the workspace."""

        return await self.store.list_entries()

    async def read_workspace_file(self, path: WORKSPACE_PATH) -> str:
        """Read the content of a file in the workspace."""

        return await self.store.read_file(path=path)

    async def commit_workspace_files(
        self,
        owner: OWNER,
        repo: REPO,
        branch: BRANCH,
        paths: WORKSPACE_PATHS = None,
        message: COMMIT_MESSAGE = DEFAULT_COMMIT_MESSAGE,
    ) -> CommitOutcome:
        """Commit workspace files to a GitHub repository branch, one commit per file."""

        files: list[StoreEntry] = [entry for entry in await self.store.list_entries() if entry.type == "file"]

        if paths is None:
            files = self.guard.baseline.modified_files(files)
        else:
            requested_paths: list[str] = [normalize_repository_path(path) for path in paths]
            files_by_path: dict[str, StoreEntry] = {file.repository_path: file for file in files}

            if missing_paths := [path for path in requested_paths if path not in files_by_path]:
                raise WorkspaceFilesMissingError(paths=missing_paths)

            files = [files_by_path[path] for path in requested_paths]

        self.logger.info(f"Committing {len(files)} workspace files to {owner}/{repo} ({branch})")

        return await self.commit_guard.request_commit(repo_full_name=f"{owner}/{repo}", branch=branch, files=files, message=message)
