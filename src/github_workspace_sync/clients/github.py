from collections.abc import Awaitable, Callable, Sequence
from logging import Logger
from typing import Any, Literal, overload

import httpx
from fastmcp.utilities.logging import get_logger
from githubkit import GitHub as GitHubKit
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse
from githubkit.retry import RetryChainDecision, RetryRateLimit, RetryServerError
from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile

from github_workspace_sync.clients.errors.github import (
    AuthenticationError,
    ContentDecodeError,
    RateLimitError,
    RequestError,
    ResourceNotFoundError,
    ResourceTypeMismatchError,
)
from github_workspace_sync.clients.models.github import Branch, Repository
from github_workspace_sync.servers.shared.utility import GITHUBKIT_RESPONSE_TYPE, decode_content, encode_content, extract_response
from github_workspace_sync.sync.models import RepoEntry
from github_workspace_sync.utilities.config import get_github_token
from github_workspace_sync.utilities.paths import normalize_repository_path, split_repository_full_name

DEFAULT_PER_PAGE = 100
DEFAULT_MAX_PAGES = 10


def get_githubkit_client(token: str | None = None) -> GitHubKit[Any]:
    # Retry server errors up to 3 times
    retry_server_error = RetryServerError()

    retry_rate_limit = RetryRateLimit(max_retry=3)

    retry_chain = RetryChainDecision(
        retry_server_error,
        retry_rate_limit,
    )

    token = token or get_github_token()

    if token is None:
        get_logger(name=__name__).warning("No GitHub token configured, only public repositories will be reachable.")
        return GitHubKit(auto_retry=retry_chain)

    return GitHubKit[TokenAuthStrategy](auth=TokenAuthStrategy(token=token), auto_retry=retry_chain)


def is_rate_limited(status_code: int, headers: httpx.Headers | dict[str, str]) -> bool:
    if status_code == httpx.codes.TOO_MANY_REQUESTS:
        return True

    return status_code == httpx.codes.FORBIDDEN and headers.get("x-ratelimit-remaining") == "0"


class GitHubRepoClient:
    """Authenticated access to the repository, branch, and contents endpoints of the GitHub REST API."""

    githubkit_client: GitHubKit[Any]
    logger: Logger

    log_requests: bool
    log_responses: bool
    log_on_error: bool

    def __init__(
        self,
        githubkit_client: GitHubKit[Any] | None = None,
        logger: Logger | None = None,
        log_requests: bool = True,
        log_responses: bool = False,
        log_on_error: bool = True,
    ):
        self.githubkit_client = githubkit_client or get_githubkit_client()
        self.logger = logger or get_logger(name=__name__)
        self.log_requests = log_requests
        self.log_responses = log_responses
        self.log_on_error = log_on_error

    def _get_loggers(
        self, log_request: bool | None = None, log_response: bool | None = None, log_on_error: bool | None = None
    ) -> tuple[Callable[[str], Any], Callable[[str], Any], Callable[[str], Any]]:
        request_logger = self.logger.info if log_request or self.log_requests else self.logger.debug
        response_logger = self.logger.info if log_response or self.log_responses else self.logger.debug
        error_logger = self.logger.error if log_on_error or self.log_on_error else self.logger.debug
        return request_logger, response_logger, error_logger

    @overload
    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: Literal[False] = False,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None: ...

    @overload
    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: Literal[True] = True,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T: ...

    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        log_request: bool | None = None,
        log_response: bool | None = None,
        log_on_error: bool | None = None,
        error_on_not_found: bool | None = None,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None:
        """Perform a request and extract the response.

        Args:
            action: The action being performed.
            log_request: Whether to log the request.
            log_response: Whether to log the response.
            log_on_error: Whether to log on error.
            error_on_not_found: Whether to raise an error if the resource is not found.

        Raises:
            ResourceNotFoundError: If the resource is not found and error_on_not_found is True.
            AuthenticationError: If GitHub rejects the token.
            RateLimitError: If GitHub is throttling the token.
            RequestError: If the request fails for any other reason.
        """

        request_logger, response_logger, error_logger = self._get_loggers(
            log_request=log_request, log_response=log_response, log_on_error=log_on_error
        )

        request_logger(f"Performing {action} using {method.__name__} with kwargs {request_args}")

        try:
            response: GitHubKitResponse[T] = await method(**request_args)
        except GitHubKitRequestFailed as e:
            status_code: int = e.response.status_code

            if status_code == httpx.codes.NOT_FOUND:
                if error_on_not_found:
                    raise ResourceNotFoundError(action=action, resource=e.request.url.path) from e

                return None

            error_logger(f"RequestFailed error performing {action} using {method.__name__}: status code {status_code}")

            if is_rate_limited(status_code=status_code, headers=e.response.headers):
                raise RateLimitError(action=action, retry_after=e.response.headers.get("retry-after")) from e

            if status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
                raise AuthenticationError(action=action, status_code=status_code) from e

            raise RequestError(action=action, message=f"GitHub responded with status code {status_code}") from e
        except GitHubKitGitHubException as e:
            error_logger(f"Error performing {action} using {method.__name__}: {e!r}")

            raise RequestError(action=action, message=repr(e)) from e

        extracted_response = extract_response(response)

        response_logger(f"Extracted response for {action} using {method.__name__}: {extracted_response}")

        return extracted_response

    async def _paginate[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        method: Callable[..., Awaitable[GitHubKitResponse[Sequence[T]]]],
        per_page: int = DEFAULT_PER_PAGE,
        max_pages: int = DEFAULT_MAX_PAGES,
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> list[T]:
        """Collect every page of a list endpoint, stopping at the first short page or after `max_pages`."""

        results: list[T] = []

        for page in range(1, max_pages + 1):
            page_results: Sequence[T] = await self._perform_rest_request(
                action=f"{action} (page {page})",
                error_on_not_found=True,
                method=method,
                per_page=per_page,
                page=page,
                **request_args,
            )

            results.extend(page_results)

            if len(page_results) < per_page:
                break

        return results

    async def list_repositories(self) -> list[Repository]:
        """List the repositories the authenticated user can access."""

        githubkit_repositories = await self._paginate(
            action="List repositories",
            method=self.githubkit_client.rest.repos.async_list_for_authenticated_user,
        )

        return [Repository.from_repository(repository=repository) for repository in githubkit_repositories]

    async def list_branches(self, repo_full_name: str) -> list[Branch]:
        """List the branches of a repository.

        Args:
            repo_full_name: The owner and name of the repository, for example 'octocat/hello-world'.
        """

        owner, repo = split_repository_full_name(repo_full_name)

        short_branches = await self._paginate(
            action="List branches",
            method=self.githubkit_client.rest.repos.async_list_branches,
            owner=owner,
            repo=repo,
        )

        return [Branch.from_short_branch(short_branch=short_branch) for short_branch in short_branches]

    async def fetch_directory_contents(self, owner: str, repo: str, path: str, branch: str) -> list[RepoEntry]:
        """Recursively list a directory of a repository, depth first.

        Each folder is listed immediately before its own contents. File entries never carry inline content, callers
        fetch it with `fetch_file_content`.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The directory to start from. An empty path lists the root of the repository.
            branch: The branch, tag, or commit to read from.
        """

        path = normalize_repository_path(path)

        contents = await self._perform_rest_request(
            action="Get directory contents",
            error_on_not_found=True,
            method=self.githubkit_client.rest.repos.async_get_content,
            owner=owner,
            repo=repo,
            path=path,
            ref=branch,
        )

        items = contents if isinstance(contents, list) else [contents]

        entries: list[RepoEntry] = []

        for item in items:
            if item.type == "file":
                entries.append(RepoEntry(path=item.path, type="file"))
            elif item.type == "dir":
                entries.append(RepoEntry(path=item.path, type="folder"))
                entries.extend(await self.fetch_directory_contents(owner=owner, repo=repo, path=item.path, branch=branch))
            else:
                self.logger.info(f"Skipping {item.type} {item.path} in {owner}/{repo}")

        return entries

    async def fetch_file_content(self, repo_full_name: str, path: str, branch: str) -> str:
        """Fetch the decoded content of a single file.

        Raises:
            ResourceNotFoundError: If the path does not exist at that ref.
            ResourceTypeMismatchError: If the path is not a file or its content is not inlined by the API.
            ContentDecodeError: If the file is binary.
        """

        owner, repo = split_repository_full_name(repo_full_name)

        content_file = await self._perform_rest_request(
            action="Get file content",
            error_on_not_found=True,
            method=self.githubkit_client.rest.repos.async_get_content,
            owner=owner,
            repo=repo,
            path=normalize_repository_path(path),
            ref=branch,
        )

        if not isinstance(content_file, GitHubKitContentFile):
            raise ResourceTypeMismatchError(
                action="Get file content", resource=path, expected_type=GitHubKitContentFile, actual_type=type(content_file)
            )

        if content_file.encoding != "base64":
            raise RequestError(action="Get file content", message=f"{path}: unsupported content encoding {content_file.encoding!r}")

        try:
            return decode_content(content_file.content)
        except UnicodeDecodeError as e:
            raise ContentDecodeError(action="Get file content", resource=path) from e

    async def save_file(self, repo_full_name: str, path: str, content: str, message: str, branch: str) -> bool:
        """Create or update a single file as one commit on a branch.

        Returns False instead of raising when GitHub rejects the request so that callers can aggregate results
        across many files.
        """

        owner, repo = split_repository_full_name(repo_full_name)
        path = normalize_repository_path(path)

        try:
            existing_file = await self._perform_rest_request(
                action="Get existing file",
                error_on_not_found=False,
                method=self.githubkit_client.rest.repos.async_get_content,
                owner=owner,
                repo=repo,
                path=path,
                ref=branch,
            )

            commit_args: dict[str, str] = {"message": message, "content": encode_content(content), "branch": branch}

            if isinstance(existing_file, GitHubKitContentFile):
                commit_args["sha"] = existing_file.sha

            await self._perform_rest_request(
                action="Save file",
                error_on_not_found=True,
                method=self.githubkit_client.rest.repos.async_create_or_update_file_contents,
                owner=owner,
                repo=repo,
                path=path,
                **commit_args,
            )
        except RequestError as e:
            self.logger.warning(f"Could not save {path} to {repo_full_name} ({branch}): {e}")
            return False

        return True
