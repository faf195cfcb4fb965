from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
from fastmcp.client import Client
from fastmcp.client.transports import FastMCPTransport
from inline_snapshot import snapshot

from github_workspace_sync.main import build_store, build_workspace_server, mcp
from github_workspace_sync.stores.directory import DirectoryFileStore
from github_workspace_sync.stores.memory import InMemoryFileStore
from tests.conftest import dump_list_for_snapshot


def test_main():
    assert mcp is not None


def test_build_store(tmp_path: Path):
    assert isinstance(build_store(workspace_dir=None), InMemoryFileStore)
    assert isinstance(build_store(workspace_dir=tmp_path), DirectoryFileStore)


def test_build_workspace_server_reads_the_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SYNC_COOLDOWN_SECONDS", "2.5")
    monkeypatch.setenv("SYNC_RETRY_ATTEMPTS", "5")

    workspace_server = build_workspace_server()

    assert workspace_server.guard.cooldown == 2.5
    assert workspace_server.guard.executor.attempts == 5
    assert workspace_server.guard.executor.store is workspace_server.store


@pytest.fixture
async def main_mcp_client() -> AsyncGenerator[Client[FastMCPTransport], Any]:
    async with Client[FastMCPTransport](transport=mcp) as mcp_client:
        yield mcp_client


async def test_list_tools(main_mcp_client: Client[FastMCPTransport]):
    list_tools = await main_mcp_client.list_tools()
    assert dump_list_for_snapshot(list_tools, exclude_keys=["inputSchema", "outputSchema", "meta", "annotations"]) == snapshot(
        [
            {"name": "list_repositories", "description": "List the GitHub repositories the configured token can access."},
            {"name": "list_branches", "description": "List the branches of a GitHub repository."},
            {"name": "import_repository", "description": "Replace the workspace with the files of a GitHub repository branch."},
            {"name": "get_last_sync", "description": "Get the outcome of the last repository import, if any."},
            {"name": "reset_sync_state", "description": "Forget the outcome of the last repository import."},
            {"name": "list_workspace_files", "description": "List every file and folder in the workspace."},
            {"name": "read_workspace_file", "description": "Read the content of a file in the workspace."},
            {
                "name": "commit_workspace_files",
                "description": "Commit workspace files to a GitHub repository branch, one commit per file.",
            },
        ]
    )
