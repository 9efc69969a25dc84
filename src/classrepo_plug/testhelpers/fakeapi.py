"""An in-memory implementation of the :py:class:`classrepo_plug.PlatformAPI`
specification that can be used to test classrepo.

Every API call is recorded, and any API method can be made to fail with a
given exception.

.. danger::

    This module is in alpha version, and its behavior may change without
    notice.
"""
import collections
import inspect
import dataclasses
import itertools

from typing import Dict, List, Optional, Tuple, Any

import classrepo_plug as plug

BASE_URL = "https://fake.classrepo.test"

Call = collections.namedtuple("Call", "method args")


@dataclasses.dataclass
class Repo:
    id: int
    name: str
    owner: str
    description: str
    private: bool
    files: Dict[str, str] = dataclasses.field(default_factory=dict)
    collaborators: Dict[str, plug.RepoPermission] = dataclasses.field(
        default_factory=dict
    )

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def to_plug_repo(self) -> plug.RemoteRepo:
        return plug.RemoteRepo(
            id=self.id,
            node_id=f"R_{self.id}",
            name=self.name,
            full_name=self.full_name,
            private=self.private,
            url=f"{BASE_URL}/{self.full_name}",
            implementation=self,
        )


@dataclasses.dataclass
class Invitation:
    id: int
    repo: Repo
    invitee: str
    permission: plug.RepoPermission
    accepted: bool = False

    def to_plug_invitation(self) -> plug.Invitation:
        return plug.Invitation(
            id=self.id,
            repo_id=self.repo.id,
            invitee=self.invitee,
            implementation=self,
        )


class FakeAPI(plug.PlatformAPI):
    """A fake implementation of the :py:class:`classrepo_plug.PlatformAPI`
    specification, which emulates a GitHub-like platform.
    """

    def __init__(self, base_url: str, token: str, org_name: str, user: str):
        self._org_name = org_name
        self._token = token
        self._user = user

        self._repos: Dict[int, Repo] = {}
        self._invitations: Dict[int, Invitation] = {}
        self._plan = plug.OrganizationPlan(
            owned_private_repos=0, private_repos=100
        )
        self._failures: Dict[str, Exception] = {}
        self._direct_access = False
        self._calls: List[Call] = []
        self._ids = itertools.count(start=1000)

    def get_organization_plan(self) -> plug.OrganizationPlan:
        return self._plan

    def repo_exists(self, full_name: str) -> bool:
        return self._find_by_full_name(full_name) is not None

    def create_repo(
        self, name: str, description: str, private: bool
    ) -> plug.RemoteRepo:
        if self._find_by_full_name(f"{self._org_name}/{name}"):
            raise plug.PlatformError(
                "name already exists on this account", status=422
            )

        repo = Repo(
            id=next(self._ids),
            name=name,
            owner=self._org_name,
            description=description,
            private=private,
        )
        self._repos[repo.id] = repo
        if private:
            self._plan = dataclasses.replace(
                self._plan,
                owned_private_repos=self._plan.owned_private_repos + 1,
            )
        return repo.to_plug_repo()

    def delete_repo(self, repo_id: int) -> None:
        repo = self._repos.pop(repo_id, None)
        if repo and repo.private:
            self._plan = dataclasses.replace(
                self._plan,
                owned_private_repos=self._plan.owned_private_repos - 1,
            )

    def invite_collaborator(
        self,
        repo_id: int,
        username: str,
        permission: plug.RepoPermission = plug.RepoPermission.PUSH,
    ) -> Optional[plug.Invitation]:
        repo = self._get_repo(repo_id)
        if self._direct_access:
            repo.collaborators[username] = permission
            return None

        invitation = Invitation(
            id=next(self._ids),
            repo=repo,
            invitee=username,
            permission=permission,
        )
        self._invitations[invitation.id] = invitation
        return invitation.to_plug_invitation()

    def accept_invitation(
        self, invitation: plug.Invitation, token: str
    ) -> None:
        if not token:
            raise plug.BadCredentials("token is empty", status=401)
        stored = self._invitations.get(invitation.id)
        if stored is None:
            raise plug.NotFoundError(
                f"no such invitation: {invitation.id}", status=404
            )
        stored.accepted = True
        stored.repo.collaborators[stored.invitee] = stored.permission

    def import_content(self, target_repo_id: int, source_repo_id: int) -> None:
        target = self._get_repo(target_repo_id)
        source = self._get_repo(source_repo_id)
        target.files.update(source.files)

    @staticmethod
    def verify_settings(user: str, org_name: str, base_url: str, token: str):
        pass

    def __getattribute__(self, key):
        attr = object.__getattribute__(self, key)

        if (
            not key.startswith("_")
            and hasattr(plug.PlatformAPI, key)
            and callable(attr)
        ):
            # record every API call, and raise injected failures
            failures = object.__getattribute__(self, "_failures")
            calls = object.__getattribute__(self, "_calls")

            def _func(*args, **kwargs):
                bound = inspect.signature(attr).bind(*args, **kwargs)
                calls.append(Call(key, tuple(bound.arguments.values())))
                if key in failures:
                    raise failures[key]
                return attr(*args, **kwargs)

            return _func

        return attr

    def _fail(self, method: str, exc: Exception) -> None:
        """Make an API method raise the given exception. The call is still
        recorded, but has no side effects.

        .. note::

            This function is public for use in testing.
        """
        self._failures[method] = exc

    def _set_plan(self, owned_private_repos: int, private_repos: int) -> None:
        self._plan = plug.OrganizationPlan(
            owned_private_repos=owned_private_repos,
            private_repos=private_repos,
        )

    def _add_repo(
        self,
        name: str,
        private: bool = False,
        files: Optional[Dict[str, str]] = None,
    ) -> plug.RemoteRepo:
        """Add a repo to the organization without recording a call."""
        repo = Repo(
            id=next(self._ids),
            name=name,
            owner=self._org_name,
            description="",
            private=private,
            files=dict(files or {}),
        )
        self._repos[repo.id] = repo
        return repo.to_plug_repo()

    def _repo(self, repo_id: int) -> Optional[Repo]:
        return self._repos.get(repo_id)

    def _calls_to(self, method: str) -> List[Tuple[Any, ...]]:
        return [call.args for call in self._calls if call.method == method]

    def _find_by_full_name(self, full_name: str) -> Optional[Repo]:
        return next(
            (
                repo
                for repo in self._repos.values()
                if repo.full_name == full_name
            ),
            None,
        )

    def _get_repo(self, repo_id: int) -> Repo:
        if repo_id not in self._repos:
            raise plug.NotFoundError(f"no such repo: {repo_id}", status=404)
        return self._repos[repo_id]
