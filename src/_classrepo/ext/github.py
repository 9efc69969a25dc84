"""GitHub API module.

This module contains the :py:class:`GitHubAPI` class, which is the means of
interacting with the GitHub API in ``classrepo``. Each instance is bound to a
target organization, in which student repositories are provisioned.

.. module:: github
    :synopsis: Implementation of the platform API for GitHub.
"""
import contextlib
from socket import gaierror
from typing import Iterable, Optional

import daiquiri
import github

import classrepo_plug as plug

from _classrepo import exception
from _classrepo import git

REQUIRED_TOKEN_SCOPES = {"admin:org", "repo", "delete_repo"}

LOGGER = daiquiri.getLogger(__file__)

_REPO_PERMISSION_MAPPING = {
    plug.RepoPermission.PUSH: "push",
    plug.RepoPermission.ADMIN: "admin",
}


@contextlib.contextmanager
def _convert_404_to_not_found_error(msg):
    """Catch a github.GithubException with status 404 and convert to
    plug.NotFoundError with the provided message. If the GithubException
    does not have status 404, instead raise plug.UnexpectedException.
    """
    try:
        yield
    except github.GithubException as exc:
        if exc.status == 404:
            raise plug.NotFoundError(msg, status=404)
        raise plug.UnexpectedException(
            "An unexpected exception occured. {.__name__}: {}".format(
                type(exc), str(exc)
            )
        )


@contextlib.contextmanager
def _try_api_request(ignore_statuses: Optional[Iterable[int]] = None):
    """Context manager for trying API requests.

    Args:
        ignore_statuses: One or more status codes to ignore (only
            applicable if the exception is a github.GithubException).

    Raises:
        plug.NotFoundError
        plug.BadCredentials
        plug.PlatformError
        plug.ServiceNotFoundError
        plug.UnexpectedException
    """
    try:
        yield
    except github.GithubException as e:
        if ignore_statuses and e.status in ignore_statuses:
            return

        if e.status == 404:
            raise plug.NotFoundError(str(e), status=404)
        elif e.status == 401:
            raise plug.BadCredentials(
                "credentials rejected, verify that token has correct access.",
                status=401,
            )
        else:
            raise plug.PlatformError(str(e), status=e.status)
    except gaierror:
        raise plug.ServiceNotFoundError(
            "GitHub service could not be found, check the url"
        )
    except plug.PlatformError:
        raise
    except Exception as e:
        raise plug.UnexpectedException(
            "a {} occured unexpectedly: {}".format(type(e).__name__, str(e))
        )


class GitHubAPI(plug.PlatformAPI):
    """A GitHub API class for provisioning student repositories. The API is
    affiliated both with an organization, and with the whole GitHub
    instance. All repositories are created in the target organization.
    """

    def __init__(self, base_url: str, token: str, org_name: str, user: str):
        """Set up the GitHub API object.

        Args:
            base_url: The base url to a GitHub REST api (e.g.
                https://api.github.com for GitHub or https://<HOST>/api/v3 for
                Enterprise).
            token: A GitHub access token.
            org_name: Name of the target organization.
            user: Name of the current user of the API.
        """
        if not user:
            raise TypeError("argument 'user' must not be empty")
        if not (
            base_url == "https://api.github.com"
            or base_url.endswith("/api/v3")
        ):
            raise plug.PlugError(
                "invalid base url, should either be https://api.github.com or "
                "end with '/api/v3'"
            )
        self._github = github.Github(login_or_token=token, base_url=base_url)
        self._org_name = org_name
        self._base_url = base_url
        self._token = token
        self._user = user
        with _try_api_request():
            self._org = self._github.get_organization(self._org_name)

    def __repr__(self):
        return "GitHubAPI(base_url={}, token=xxxxxxxxx, org_name={})".format(
            self._base_url, self._org_name
        )

    @property
    def org(self):
        return self._org

    @property
    def token(self):
        return self._token

    def get_organization_plan(self) -> plug.OrganizationPlan:
        """See
        :py:meth:`classrepo_plug.PlatformAPI.get_organization_plan`.
        """
        with _try_api_request():
            plan = self._org.plan
            owned_private_repos = self._org.owned_private_repos

        if plan is None or owned_private_repos is None:
            raise plug.PlatformError(
                "plan of organization {} is not visible, the token must "
                "belong to an organization owner".format(self._org_name)
            )
        return plug.OrganizationPlan(
            owned_private_repos=owned_private_repos,
            private_repos=plan.private_repos,
        )

    def repo_exists(self, full_name: str) -> bool:
        """See :py:meth:`classrepo_plug.PlatformAPI.repo_exists`."""
        with _try_api_request(ignore_statuses=[404]):
            self._github.get_repo(full_name)
            return True
        return False

    def create_repo(
        self, name: str, description: str, private: bool
    ) -> plug.RemoteRepo:
        """See :py:meth:`classrepo_plug.PlatformAPI.create_repo`."""
        with _try_api_request():
            repo = self._org.create_repo(
                name, description=description, private=private
            )
        LOGGER.info("Created {}".format(repo.full_name))
        return self._wrap_repo(repo)

    def delete_repo(self, repo_id: int) -> None:
        """See :py:meth:`classrepo_plug.PlatformAPI.delete_repo`."""
        deleted = False
        with _try_api_request(ignore_statuses=[404]):
            self._github.get_repo(repo_id).delete()
            deleted = True

        if deleted:
            LOGGER.info("Deleted repo with id {}".format(repo_id))
        else:
            LOGGER.warning(
                "Repo with id {} does not exist, nothing to delete".format(
                    repo_id
                )
            )

    def invite_collaborator(
        self,
        repo_id: int,
        username: str,
        permission: plug.RepoPermission = plug.RepoPermission.PUSH,
    ) -> Optional[plug.Invitation]:
        """See :py:meth:`classrepo_plug.PlatformAPI.invite_collaborator`."""
        raw_permission = _REPO_PERMISSION_MAPPING[permission]
        with _try_api_request():
            repo = self._github.get_repo(repo_id)
            invitation = repo.add_to_collaborators(
                username, permission=raw_permission
            )

        if invitation is None:
            LOGGER.info(
                "{} already has access to {}".format(username, repo.full_name)
            )
            return None

        LOGGER.info(
            "Invited {} to {} with '{}' permission".format(
                username, repo.full_name, raw_permission
            )
        )
        return plug.Invitation(
            id=invitation.id,
            repo_id=repo_id,
            invitee=username,
            implementation=invitation,
        )

    def accept_invitation(
        self, invitation: plug.Invitation, token: str
    ) -> None:
        """See :py:meth:`classrepo_plug.PlatformAPI.accept_invitation`."""
        invitee_github = github.Github(
            login_or_token=token, base_url=self._base_url
        )
        with _try_api_request():
            invitee_github.get_user().accept_invitation(invitation.id)
        LOGGER.info(
            "Accepted invitation {} on behalf of {}".format(
                invitation.id, invitation.invitee
            )
        )

    def import_content(self, target_repo_id: int, source_repo_id: int) -> None:
        """See :py:meth:`classrepo_plug.PlatformAPI.import_content`."""
        with _try_api_request():
            source = self._github.get_repo(source_repo_id)
            target = self._github.get_repo(target_repo_id)

        try:
            git.copy_repository(
                self._insert_auth(source.clone_url),
                self._insert_auth(target.clone_url),
            )
        except exception.ImportFailedError as exc:
            raise plug.PlatformError(str(exc)) from exc

    def _wrap_repo(self, repo) -> plug.RemoteRepo:
        return plug.RemoteRepo(
            id=repo.id,
            node_id=repo.node_id,
            name=repo.name,
            full_name=repo.full_name,
            private=repo.private,
            url=repo.html_url,
            implementation=repo,
        )

    def _insert_auth(self, repo_url: str) -> str:
        """Insert an authentication token into the url.

        Args:
            repo_url: A HTTPS url to a repository.
        Returns:
            the input url with an authentication token inserted.
        """
        if not repo_url.startswith("https://"):
            raise ValueError(
                "unsupported protocol in '{}', please use https:// ".format(
                    repo_url
                )
            )
        auth = "{}:{}".format(self._user, self.token)
        return repo_url.replace("https://", "https://{}@".format(auth))

    @staticmethod
    def verify_settings(user: str, org_name: str, base_url: str, token: str):
        """See :py:meth:`classrepo_plug.PlatformAPI.verify_settings`."""
        LOGGER.info("Verifying settings ...")
        if not token:
            raise plug.BadCredentials(
                msg="token is empty. Check that CLASSREPO_TOKEN environment "
                "variable is properly set, or add a token to the config file."
            )

        g = github.Github(login_or_token=token, base_url=base_url)

        LOGGER.info("Trying to fetch user information ...")
        user_not_found_msg = (
            "user {} could not be found. Possible reasons: "
            "bad base url, bad username or bad access token permissions"
        ).format(user)
        with _convert_404_to_not_found_error(user_not_found_msg):
            user_ = g.get_user(user)
            if user_.login != user:
                raise plug.UnexpectedException(
                    "Specified login is {}, but the fetched user's login is "
                    "{}. Possible reasons: bad api url that points to a "
                    "GitHub instance, but not to the api endpoint.".format(
                        user, user_.login
                    )
                )
        LOGGER.info("SUCCESS: found user {}".format(user))

        LOGGER.info("Verifying access token scopes ...")
        scopes = set(g.oauth_scopes or [])
        if not REQUIRED_TOKEN_SCOPES.issubset(scopes):
            raise plug.BadCredentials(
                "missing one or more access token scopes. "
                "Actual: {}. Required {}".format(
                    sorted(scopes), sorted(REQUIRED_TOKEN_SCOPES)
                )
            )
        LOGGER.info("SUCCESS: access token scopes look okay")

        LOGGER.info("Trying to fetch organization {} ...".format(org_name))
        org_not_found_msg = (
            "organization {} could not be found. Possible "
            "reasons: org does not exist, user does not have "
            "sufficient access to organization."
        ).format(org_name)
        with _convert_404_to_not_found_error(org_not_found_msg):
            org = g.get_organization(org_name)
        LOGGER.info("SUCCESS: found organization {}".format(org_name))

        owner_usernames = {
            owner.login for owner in org.get_members(role="admin")
        }
        if user not in owner_usernames:
            raise plug.BadCredentials(
                "user {} is not an owner of organization {}".format(
                    user, org_name
                )
            )
        LOGGER.info(
            "SUCCESS: user {} is an owner of organization {}".format(
                user, org_name
            )
        )
