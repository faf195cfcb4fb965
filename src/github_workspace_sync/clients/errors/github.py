ExtraInfoType = dict[str, str | None]


class ClientError(Exception):
    """An error from the GitHub repository client."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class RequestError(ClientError):
    """A request to the GitHub API failed."""

    def __init__(self, action: str, message: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(message="A request error occured.", extra_info={"action": action, "message": message, **extra_info})


class ResourceNotFoundError(RequestError):
    """The requested repository, branch, or path does not exist."""

    def __init__(self, action: str, resource: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The resource could not be found.",
            extra_info={"resource": resource, **extra_info},
        )


class AuthenticationError(RequestError):
    """The token is missing, invalid, expired, or lacks access to the resource."""

    def __init__(self, action: str, status_code: int, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The GitHub token is invalid, expired, or not authorized for this resource.",
            extra_info={"status_code": str(status_code), **extra_info},
        )


class RateLimitError(RequestError):
    """GitHub is throttling requests made with this token."""

    def __init__(self, action: str, retry_after: str | None = None, extra_info: ExtraInfoType | None = None):
        if not extra_info:
            extra_info = {}
        super().__init__(
            action=action,
            message="The GitHub API rate limit has been exceeded.",
            extra_info={"retry_after": retry_after, **extra_info},
        )


class ResourceTypeMismatchError(RequestError):
    """The API returned a different kind of object than the one requested."""

    def __init__(self, action: str, resource: str, expected_type: type, actual_type: type):
        super().__init__(action, f"{resource}: Expected {expected_type.__name__}, got {actual_type.__name__}")


class ContentDecodeError(RequestError):
    """A file does not hold UTF-8 text, for example an image or an archive."""

    def __init__(self, action: str, resource: str):
        super().__init__(action=action, message="The file content is not UTF-8 text.", extra_info={"resource": resource})
