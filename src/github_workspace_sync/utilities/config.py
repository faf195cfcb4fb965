import os
from pathlib import Path

DEFAULT_SYNC_COOLDOWN_SECONDS = 10.0
DEFAULT_SYNC_RETRY_ATTEMPTS = 3
DEFAULT_SYNC_RETRY_DELAY_SECONDS = 0.5
DEFAULT_SYNC_RELEASE_DELAY_SECONDS = 0.0
DEFAULT_COMMIT_COOLDOWN_SECONDS = 10.0


def get_github_token() -> str | None:
    env_vars: tuple[str, ...] = ("GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN")
    for env_var in env_vars:
        if token := os.environ.get(env_var):
            return token
    return None


def get_workspace_dir() -> Path | None:
    if workspace_dir := os.getenv("WORKSPACE_DIR"):
        return Path(workspace_dir)
    return None


def get_sync_cooldown_seconds() -> float:
    return float(os.getenv("SYNC_COOLDOWN_SECONDS", str(DEFAULT_SYNC_COOLDOWN_SECONDS)))


def get_sync_retry_attempts() -> int:
    return int(os.getenv("SYNC_RETRY_ATTEMPTS", str(DEFAULT_SYNC_RETRY_ATTEMPTS)))


def get_sync_retry_delay_seconds() -> float:
    return float(os.getenv("SYNC_RETRY_DELAY_SECONDS", str(DEFAULT_SYNC_RETRY_DELAY_SECONDS)))


def get_sync_release_delay_seconds() -> float:
    return float(os.getenv("SYNC_RELEASE_DELAY_SECONDS", str(DEFAULT_SYNC_RELEASE_DELAY_SECONDS)))


def get_commit_cooldown_seconds() -> float:
    return float(os.getenv("COMMIT_COOLDOWN_SECONDS", str(DEFAULT_COMMIT_COOLDOWN_SECONDS)))
