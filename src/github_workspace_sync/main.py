from logging import Logger
from pathlib import Path
from typing import Literal

import click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.utilities.logging import get_logger

from github_workspace_sync.clients.github import GitHubRepoClient
from github_workspace_sync.notifications import LoggingNotifier
from github_workspace_sync.servers.workspace import WorkspaceServer
from github_workspace_sync.stores.base import FileStore
from github_workspace_sync.stores.directory import DirectoryFileStore
from github_workspace_sync.stores.memory import InMemoryFileStore
from github_workspace_sync.sync.commit import CommitSessionGuard
from github_workspace_sync.sync.executor import SyncExecutor
from github_workspace_sync.sync.guard import SyncSessionGuard
from github_workspace_sync.utilities.config import (
    get_commit_cooldown_seconds,
    get_sync_cooldown_seconds,
    get_sync_release_delay_seconds,
    get_sync_retry_attempts,
    get_sync_retry_delay_seconds,
    get_workspace_dir,
)

logger: Logger = get_logger(name=__name__)


def build_store(workspace_dir: Path | None) -> FileStore:
    if workspace_dir is None:
        logger.info("No workspace directory configured, keeping the workspace in memory.")
        return InMemoryFileStore()

    return DirectoryFileStore(root_dir=workspace_dir)


def build_workspace_server(workspace_dir: Path | None = None) -> WorkspaceServer:
    repo_client: GitHubRepoClient = GitHubRepoClient()
    store: FileStore = build_store(workspace_dir=workspace_dir)

    executor: SyncExecutor = SyncExecutor(
        source=repo_client,
        store=store,
        attempts=get_sync_retry_attempts(),
        retry_delay=get_sync_retry_delay_seconds(),
        logger=logger,
    )

    notifier: LoggingNotifier = LoggingNotifier(logger=logger)

    guard: SyncSessionGuard = SyncSessionGuard(
        executor=executor,
        notifier=notifier,
        cooldown=get_sync_cooldown_seconds(),
        release_delay=get_sync_release_delay_seconds(),
        logger=logger,
    )

    commit_guard: CommitSessionGuard = CommitSessionGuard(
        saver=repo_client,
        baseline=guard.baseline,
        notifier=notifier,
        cooldown=get_commit_cooldown_seconds(),
        logger=logger,
    )

    return WorkspaceServer(repo_client=repo_client, store=store, guard=guard, commit_guard=commit_guard, logger=logger)


mcp: FastMCP[None] = FastMCP[None](name="GitHub Workspace Sync")

mcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

workspace_server: WorkspaceServer = build_workspace_server(workspace_dir=get_workspace_dir())
_ = workspace_server.register_tools(fastmcp=mcp)


@click.command()
@click.option(
    "--mcp-transport",
    type=click.Choice(["stdio", "streamable-http"]),
    default="stdio",
    help="The transport to run the MCP server on",
)
def run_mcp(mcp_transport: Literal["stdio", "streamable-http"]):
    mcp.run(transport=mcp_transport)


if __name__ == "__main__":
    run_mcp()
