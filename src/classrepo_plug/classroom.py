"""Local representations of the classroom entities that a provisioning
attempt is performed for.
"""
import dataclasses

from typing import Optional

MAX_NAME_LENGTH = 100

__all__ = [
    "Organization",
    "Assignment",
    "User",
    "ProvisioningRequest",
    "MAX_NAME_LENGTH",
]


@dataclasses.dataclass(frozen=True)
class Organization:
    """Local representation of an organization on the platform.

    Attributes:
        login: The organization's login, i.e. the owner part of the full
            name of its repositories.
        id: The platform's numeric id of the organization.
    """

    login: str
    id: Optional[int] = None

    def __str__(self):
        return self.login


@dataclasses.dataclass(frozen=True)
class Assignment:
    """Local representation of an assignment.

    Attributes:
        slug: The url-safe name of the assignment.
        organization: The organization that owns the assignment.
        private: Whether student repositories should be private.
        starter_code_repo_id: Id of a repository with starter code to copy
            into each student repository, if any.
        students_are_repo_admins: Whether students are granted admin
            permission on their repositories.
    """

    slug: str
    organization: Organization
    private: bool
    starter_code_repo_id: Optional[int] = None
    students_are_repo_admins: bool = False

    def __post_init__(self):
        if not self.slug:
            raise ValueError("assignment slug must not be empty")

    @property
    def public(self) -> bool:
        return not self.private

    @property
    def starter_code(self) -> bool:
        return self.starter_code_repo_id is not None

    def __str__(self):
        return self.slug


@dataclasses.dataclass(frozen=True)
class User:
    """Local representation of a student.

    Attributes:
        login: The student's username on the platform.
        token: An access token for the student, used to accept repository
            invitations on their behalf.
    """

    login: str
    token: str = dataclasses.field(repr=False)

    def __post_init__(self):
        if not self.login:
            raise ValueError("user login must not be empty")

    def __str__(self):
        return self.login


@dataclasses.dataclass(frozen=True)
class ProvisioningRequest:
    """The input to one provisioning attempt."""

    assignment: Assignment
    user: User

    @property
    def organization(self) -> Organization:
        return self.assignment.organization
