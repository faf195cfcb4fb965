from typing import Self

from githubkit.versions.v2022_11_28.models import Repository as GitHubKitRepository
from githubkit.versions.v2022_11_28.models import ShortBranch as GitHubKitShortBranch
from pydantic import BaseModel, ConfigDict, Field


class Repository(BaseModel):
    """A repository the authenticated user can access."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int = Field(description="The numeric id of the repository.")
    name: str = Field(description="The name of the repository.")
    full_name: str = Field(description="The owner and name of the repository, for example 'octocat/hello-world'.")
    private: bool = Field(description="Whether the repository is private.")
    url: str = Field(description="The URL of the repository.")
    description: str | None = Field(default=None, description="The description of the repository.")
    default_branch: str = Field(description="The default branch of the repository.")

    @property
    def owner(self) -> str:
        return self.full_name.split("/", 1)[0]

    @classmethod
    def from_repository(cls, repository: GitHubKitRepository) -> Self:
        return cls(
            id=repository.id,
            name=repository.name,
            full_name=repository.full_name,
            private=repository.private,
            url=repository.html_url,
            description=repository.description,
            default_branch=repository.default_branch,
        )


class Branch(BaseModel):
    """A branch of a repository."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(description="The name of the branch.")
    sha: str = Field(description="The SHA of the commit at the head of the branch.")
    protected: bool = Field(default=False, description="Whether the branch is protected.")

    @classmethod
    def from_short_branch(cls, short_branch: GitHubKitShortBranch) -> Self:
        return cls(name=short_branch.name, sha=short_branch.commit.sha, protected=short_branch.protected)
