ROOT_PATH = "/"


def normalize_repository_path(path: str) -> str:
    """Strip surrounding slashes and collapse empty segments: `/src//app/` becomes `src/app`."""

    return "/".join(part for part in path.split("/") if part)


def path_depth(path: str) -> int:
    return path.count("/")


def to_local_path(repository_path: str) -> str:
    """Map a repository relative path onto the absolute workspace path."""

    normalized = normalize_repository_path(repository_path)

    return f"{ROOT_PATH}{normalized}"


def to_repository_path(local_path: str) -> str:
    return normalize_repository_path(local_path)


def split_local_path(local_path: str) -> tuple[str, str]:
    """Split an absolute workspace path into its parent path and its name. `/a/b` splits into `/a` and `b`."""

    last_slash = local_path.rfind("/")

    parent_path = local_path[:last_slash] if last_slash > 0 else ROOT_PATH

    return parent_path, local_path[last_slash + 1 :]


def join_local_path(parent_path: str, name: str) -> str:
    if parent_path == ROOT_PATH:
        return f"{ROOT_PATH}{name}"

    return f"{parent_path}/{name}"


def local_ancestors(local_path: str) -> list[str]:
    """Every ancestor of an absolute workspace path, nearest to the root first, including the path itself.

    `/a/b/c` yields `/a`, `/a/b`, `/a/b/c`. The root yields nothing."""

    ancestors: list[str] = []
    current_path = ""

    for part in local_path.split("/"):
        if not part:
            continue
        current_path = f"{current_path}/{part}"
        ancestors.append(current_path)

    return ancestors


def split_repository_full_name(repo_full_name: str) -> tuple[str, str]:
    """Split `owner/repo` into its owner and repository name."""

    owner, _, repo = repo_full_name.partition("/")

    if not owner or not repo or "/" in repo:
        msg = f"Expected a repository name of the form owner/repo, got {repo_full_name!r}"
        raise ValueError(msg)

    return owner, repo
