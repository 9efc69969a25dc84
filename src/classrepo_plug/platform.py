# mypy: ignore-errors
"""Platform API specification and wrappers for the objects it returns.

.. module:: platform
    :synopsis: Platform API specification and wrappers.
"""
import dataclasses
import enum
import inspect
import itertools
from typing import Any, Optional

from classrepo_plug import exceptions


class APIObject:
    """Base wrapper class for platform API objects."""

    def __getattribute__(self, name: str):
        """Raise an AttributeError on access to an ``implementation``
        attribute that is None. Only API objects returned by a platform API
        can have a reasonable value for the implementation, so accessing it on
        a locally constructed object is always a programming error.
        """
        attr = object.__getattribute__(self, name)
        if attr is None and name == "implementation":
            raise AttributeError(
                "invalid access to 'implementation': not initialized"
            )
        return attr


class RepoPermission(enum.Enum):
    """Permission granted to a collaborator of a repository."""

    PUSH = "push"
    ADMIN = "admin"


@dataclasses.dataclass(frozen=True)
class OrganizationPlan(APIObject):
    """The private repository figures of an organization's plan."""

    owned_private_repos: int
    private_repos: int


@dataclasses.dataclass(frozen=True)
class RemoteRepo(APIObject):
    """Wrapper class for a repository API object."""

    id: int
    node_id: str
    name: str
    full_name: str
    private: bool
    url: str
    implementation: Any = dataclasses.field(
        compare=False, repr=False, default=None
    )


@dataclasses.dataclass(frozen=True)
class Invitation(APIObject):
    """Wrapper class for a pending repository invitation."""

    id: int
    repo_id: int
    invitee: str
    implementation: Any = dataclasses.field(
        compare=False, repr=False, default=None
    )


class _APISpec:
    """Wrapper class for API method stubs.

    .. important::

        This class should not be inherited from directly, it serves only to
        document the behavior of a platform API. Classes that implement this
        behavior should inherit from :py:class:`PlatformAPI`.
    """

    def __init__(self, base_url, token, org_name, user):
        _not_implemented()

    def get_organization_plan(self) -> OrganizationPlan:
        """Fetch the private repository figures of the target organization.

        Returns:
            The organization's plan.
        Raises:
            :py:class:`exceptions.PlatformError`: If something goes wrong in
                communicating with the platform, or if the plan is not
                visible with the current credentials.
        """
        _not_implemented()

    def repo_exists(self, full_name: str) -> bool:
        """Check if a repository exists. This always issues a request, the
        answer is never cached.

        Args:
            full_name: Name of the repository on the form ``<owner>/<name>``.
        Returns:
            True if the repository exists.
        Raises:
            :py:class:`exceptions.PlatformError`: If something goes wrong in
                communicating with the platform.
        """
        _not_implemented()

    def create_repo(
        self, name: str, description: str, private: bool
    ) -> RemoteRepo:
        """Create a repository in the target organization.

        Unlike some bulk-creation APIs, an existing repository is *not*
        fetched in place of the new one: a name conflict is an error.

        Args:
            name: Name of the repository.
            description: Description of the repository.
            private: Visibility of the repository.
        Returns:
            The created repository.
        Raises:
            :py:class:`exceptions.PlatformError`: If something goes wrong in
                communicating with the platform, in particular if the
                repository already exists.
        """
        _not_implemented()

    def delete_repo(self, repo_id: int) -> None:
        """Delete a repository. Deleting a repository that does not exist is
        not an error.

        Args:
            repo_id: Id of the repository to delete.
        Raises:
            :py:class:`exceptions.PlatformError`: If something goes wrong in
                communicating with the platform.
        """
        _not_implemented()

    def invite_collaborator(
        self,
        repo_id: int,
        username: str,
        permission: RepoPermission = RepoPermission.PUSH,
    ) -> Optional[Invitation]:
        """Invite a user as a collaborator on a repository.

        Args:
            repo_id: Id of the repository.
            username: Username of the invitee.
            permission: The permission to grant the invitee.
        Returns:
            The pending invitation, or None if the user got access directly
            (e.g. because they already were a collaborator).
        Raises:
            :py:class:`exceptions.PlatformError`: If something goes wrong in
                communicating with the platform.
        """
        _not_implemented()

    def accept_invitation(self, invitation: Invitation, token: str) -> None:
        """Accept an invitation on behalf of the invitee.

        Args:
            invitation: The invitation to accept.
            token: The invitee's access token.
        Raises:
            :py:class:`exceptions.PlatformError`: If something goes wrong in
                communicating with the platform.
        """
        _not_implemented()

    def import_content(self, target_repo_id: int, source_repo_id: int) -> None:
        """Copy the content (all branches and tags) of one repository into
        another.

        Args:
            target_repo_id: Id of the repository to copy into.
            source_repo_id: Id of the repository to copy from.
        Raises:
            :py:class:`exceptions.PlatformError`: If something goes wrong in
                communicating with the platform, in particular if the source
                repository does not exist.
        """
        _not_implemented()

    @staticmethod
    def verify_settings(user: str, org_name: str, base_url: str, token: str):
        """Verify the following (to the extent that is possible and makes sense
        for the specific platform):

        1. Base url is correct
        2. The token has sufficient access privileges
        3. Target organization (specified by ``org_name``) exists
        4. User is owner in organization

        Should raise an appropriate subclass of
        :py:class:`~classrepo_plug.PlatformError` when a problem is
        encountered.

        Args:
            user: The username to try to fetch.
            org_name: Name of the target organization.
            base_url: A base url to the platform's API.
            token: An access token.
        Raises:
            :py:class:`~classrepo_plug.PlatformError`
        """
        _not_implemented()


def _not_implemented():
    raise NotImplementedError(
        "The chosen API does not currently support this functionality"
    )


def methods(attrdict):
    """Return all public methods and __init__ for some class."""
    return {
        name: method
        for name, method in attrdict.items()
        if callable(method)
        and (not name.startswith("_") or name == "__init__")
    }


def parameters(function):
    """Extract parameter names and default arguments from a function."""
    return [
        (param.name, param.default)
        for param in inspect.signature(function).parameters.values()
    ]


def check_init_params(reference_params, compare_params):
    """Check that the compare __init__'s parameters are a subset of the
    reference class's version.
    """
    extra = set(compare_params) - set(reference_params)
    if extra:
        raise exceptions.APIImplementationError(
            "unexpected arguments to __init__: {}".format(extra)
        )


def check_parameters(reference, compare):
    """Check if the parameters match, one by one. Stop at the first diff and
    raise an exception for that parameter.

    __init__ is exempt from the strict check: its parameters may be any
    subset of the reference, in any order.
    """
    reference_params = parameters(reference)
    compare_params = parameters(compare)
    if reference.__name__ == "__init__":
        check_init_params(reference_params, compare_params)
        return

    for ref, cmp in itertools.zip_longest(reference_params, compare_params):
        if ref != cmp:
            raise exceptions.APIImplementationError(
                "{}: expected parameter '{}', found '{}'".format(
                    reference.__name__, ref, cmp
                )
            )


class _APIMeta(type):
    """Metaclass for an API implementation. All public methods must be a
    specified api method, but all api methods do not need to be implemented.
    """

    def __new__(mcs, name, bases, attrdict):
        api_methods = methods(_APISpec.__dict__)
        implemented_methods = methods(attrdict)
        non_api_methods = set(implemented_methods.keys()) - set(
            api_methods.keys()
        )
        if non_api_methods:
            raise exceptions.APIImplementationError(
                "non-API methods may not be public: {}".format(non_api_methods)
            )
        for method_name, method in api_methods.items():
            if method_name in implemented_methods:
                check_parameters(method, implemented_methods[method_name])
        return super().__new__(mcs, name, bases, attrdict)


class PlatformAPI(_APISpec, metaclass=_APIMeta):
    """API base class that all API implementations should inherit from. This
    class functions similarly to an abstract base class, but with a few key
    distinctions that affect the inheriting class.

    1. Public methods *must* override one of the public methods of
       :py:class:`_APISpec`. If an inheriting class defines any other public
       method, an :py:class:`~classrepo_plug.APIImplementationError` is raised
       when the class is defined.
    2. All public methods in :py:class:`_APISpec` have a default implementation
       that simply raise a :py:class:`NotImplementedError`. There is no
       requirement to implement any of them.
    """
