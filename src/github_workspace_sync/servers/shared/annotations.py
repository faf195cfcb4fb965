from typing import Annotated

from pydantic import Field

OWNER_DESCRIPTION = "The owner of the repository."
OWNER = Annotated[str, Field(description=OWNER_DESCRIPTION)]

REPO_DESCRIPTION = "The name of the repository."
REPO = Annotated[str, Field(description=REPO_DESCRIPTION)]

BRANCH_DESCRIPTION = "The branch of the repository."
BRANCH = Annotated[str, Field(description=BRANCH_DESCRIPTION)]

REPO_FULL_NAME_DESCRIPTION = "The owner and name of the repository, for example 'octocat/hello-world'."
REPO_FULL_NAME = Annotated[str, Field(description=REPO_FULL_NAME_DESCRIPTION)]

REPLACE_EXISTING = Annotated[bool, Field(description="Whether to delete every file in the workspace before importing.")]

WORKSPACE_PATH = Annotated[str, Field(description="The absolute workspace path of a file, for example '/src/app.py'.")]
WORKSPACE_PATHS_DESCRIPTION = (
    "The repository paths of the workspace files to commit, for example 'src/app.py'. "
    "If None, every file changed since the last import or commit is committed."
)
WORKSPACE_PATHS = Annotated[list[str] | None, Field(description=WORKSPACE_PATHS_DESCRIPTION)]
COMMIT_MESSAGE = Annotated[str, Field(description="The commit message to use for each file.")]
