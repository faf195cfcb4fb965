ExtraInfoType = dict[str, str | None]


class ServerError(Exception):
    """An error from the workspace server."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class WorkspaceFilesMissingError(ServerError):
    """Files requested for a commit do not exist in the workspace."""

    def __init__(self, paths: list[str]):
        super().__init__(message="Some files are not in the workspace.", extra_info={"paths": ", ".join(paths)})
