"""Provisioning of per-student assignment repositories.

A provisioning attempt runs the following steps in order, each blocking on
the platform before the next one starts:

1. Check the organization's private repository quota.
2. Resolve an unused name and create the repository.
3. Add the student as a collaborator and accept the invitation on their
   behalf.
4. Import the assignment's starter code, if it has any.
5. Save a :py:class:`~_classrepo.provisioning.records.ProvisioningRecord`.

How far an attempt has come is tracked as a
:py:class:`~_classrepo.provisioning.outcome.Stage` on the
:py:class:`ProvisioningAttempt`. If the attempt fails after the repository
has been created, the repository is deleted again. Nothing is retried.

.. module:: creator
    :synopsis: Orchestration of repository provisioning, with compensation
        on failure.
"""
import dataclasses
import functools
import time
from typing import Optional

import classrepo_plug as plug

from _classrepo import constants
from _classrepo.provisioning import naming, quota
from _classrepo.provisioning.metrics import StatsRecorder
from _classrepo.provisioning.outcome import (
    Failed,
    FailureKind,
    Pending,
    ProvisioningError,
    ProvisioningOutcome,
    Stage,
    Success,
)
from _classrepo.provisioning.records import ProvisioningRecord, RecordStore

DEFAULT_ERROR_MESSAGE = "Assignment could not be created, please try again"
REPOSITORY_CREATION_FAILED = (
    "GitHub repository could not be created, please try again"
)
REPOSITORY_STARTER_CODE_IMPORT_FAILED = (
    "We were not able to import you the starter code to your assignment, "
    "please try again."
)
REPOSITORY_COLLABORATOR_ADDITION_FAILED = (
    "We were not able to add you to the Assignment as a collaborator, "
    "please try again."
)
REPOSITORY_CREATION_COMPLETE = "Your GitHub repository was created."

REPO_DESCRIPTION_TEMPLATE = "{} created by classrepo"


@dataclasses.dataclass
class ProvisioningAttempt:
    """Mutable state of a single provisioning attempt.

    Attributes:
        request: What is being provisioned.
        stage: The last stage that completed.
        repo: The created repository, once ``stage >= Stage.REPO_CREATED``.
        record: The record to persist, once built.
        started: Start time as given by :py:func:`time.perf_counter`.
        outcome: The outcome of the attempt, pending until it terminates.
    """

    request: plug.ProvisioningRequest
    stage: Stage = Stage.INIT
    repo: Optional[plug.RemoteRepo] = None
    record: Optional[ProvisioningRecord] = None
    started: float = dataclasses.field(default_factory=time.perf_counter)
    outcome: ProvisioningOutcome = dataclasses.field(default_factory=Pending)

    def advance(self, stage: Stage) -> None:
        if stage < self.stage:
            raise ValueError(
                f"can't go back from {self.stage.name} to {stage.name}"
            )
        self.stage = stage

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000


class Creator:
    """Provisions student repositories in a single organization."""

    def __init__(
        self,
        api: plug.PlatformAPI,
        store: RecordStore,
        stats: Optional[StatsRecorder] = None,
    ):
        """
        Args:
            api: A platform API bound to the organization.
            store: Where provisioning records are saved.
            stats: Recorder for timings and counts. Defaults to a recorder
                shared by the whole process.
        """
        self._api = api
        self._store = store
        self._stats = stats or default_stats_recorder()

    def provision(
        self, assignment: plug.Assignment, user: plug.User
    ) -> ProvisioningOutcome:
        """Provision a repository for the user, for the given assignment.

        This function never raises. Any failure is reported as a
        :py:class:`~_classrepo.provisioning.outcome.Failed` outcome, after
        the created repository (if any) has been deleted.

        Args:
            assignment: The assignment to provision a repository for.
            user: The student to provision a repository for.
        Returns:
            The outcome of the attempt.
        """
        attempt = ProvisioningAttempt(
            request=plug.ProvisioningRequest(assignment=assignment, user=user)
        )
        try:
            self._check_quota(attempt)
            self._create_repo(attempt)
            self._add_collaborator(attempt)
            self._import_starter_code(attempt)
            self._persist(attempt)
        except ProvisioningError as exc:
            self._fail(attempt, exc.msg, exc.kind)
        except Exception as exc:
            plug.log.exception(
                f"Unexpected error while provisioning {assignment.slug} for "
                f"{user.login}"
            )
            self._fail(attempt, f"{DEFAULT_ERROR_MESSAGE} ({exc})", None)
        else:
            self._succeed(attempt)

        return attempt.outcome

    def _check_quota(self, attempt: ProvisioningAttempt) -> None:
        quota.verify_private_repos_available(
            self._api, attempt.request.assignment
        )
        attempt.advance(Stage.QUOTA_CHECKED)

    def _create_repo(self, attempt: ProvisioningAttempt) -> None:
        assignment = attempt.request.assignment
        base_name = naming.base_repo_name(assignment, attempt.request.user)
        try:
            name = naming.resolve_repo_name(
                self._api, attempt.request.organization.login, base_name
            )
            repo = self._api.create_repo(
                name,
                description=REPO_DESCRIPTION_TEMPLATE.format(name),
                private=assignment.private,
            )
        except plug.PlatformError as exc:
            raise ProvisioningError(
                FailureKind.REMOTE_CREATION_FAILED,
                REPOSITORY_CREATION_FAILED,
                str(exc),
            ) from exc

        attempt.repo = repo
        attempt.advance(Stage.REPO_CREATED)
        plug.log.info(f"Created {repo.full_name}")

    def _add_collaborator(self, attempt: ProvisioningAttempt) -> None:
        assignment = attempt.request.assignment
        user = attempt.request.user
        permission = (
            plug.RepoPermission.ADMIN
            if assignment.students_are_repo_admins
            else plug.RepoPermission.PUSH
        )
        try:
            invitation = self._api.invite_collaborator(
                attempt.repo.id, user.login, permission=permission
            )
            if invitation is not None:
                self._api.accept_invitation(invitation, user.token)
        except plug.PlatformError as exc:
            raise ProvisioningError(
                FailureKind.COLLABORATOR_ADDITION_FAILED,
                REPOSITORY_COLLABORATOR_ADDITION_FAILED,
                str(exc),
            ) from exc

        attempt.advance(Stage.COLLABORATOR_ADDED)
        plug.log.debug(
            f"Added {user.login} to {attempt.repo.full_name} with "
            f"{permission.value} permission"
        )

    def _import_starter_code(self, attempt: ProvisioningAttempt) -> None:
        assignment = attempt.request.assignment
        if not assignment.starter_code:
            return

        try:
            self._api.import_content(
                attempt.repo.id, assignment.starter_code_repo_id
            )
        except plug.PlatformError as exc:
            raise ProvisioningError(
                FailureKind.STARTER_CODE_IMPORT_FAILED,
                REPOSITORY_STARTER_CODE_IMPORT_FAILED,
                str(exc),
            ) from exc

        attempt.advance(Stage.STARTER_CODE_IMPORTED)

    def _persist(self, attempt: ProvisioningAttempt) -> None:
        attempt.record = ProvisioningRecord.build(
            attempt.request, attempt.repo
        )
        try:
            self._store.save(attempt.record)
        except Exception as exc:
            raise ProvisioningError(
                FailureKind.PERSISTENCE_FAILED, DEFAULT_ERROR_MESSAGE, str(exc)
            ) from exc

        attempt.advance(Stage.PERSISTED)

    def _succeed(self, attempt: ProvisioningAttempt) -> None:
        attempt.outcome = Success(record=attempt.record)
        self._record_metric(
            self._stats.timing, constants.REPO_CREATE_TIME, attempt.elapsed_ms
        )
        self._record_metric(
            self._stats.increment, constants.REPO_CREATE_SUCCESS
        )
        plug.log.info(
            f"{attempt.repo.full_name}: {REPOSITORY_CREATION_COMPLETE}"
        )

    def _fail(
        self,
        attempt: ProvisioningAttempt,
        message: str,
        kind: Optional[FailureKind],
    ) -> None:
        request = attempt.request
        plug.log.error(
            f"Failed to provision {request.assignment.slug} for "
            f"{request.user.login} after {attempt.stage.name}: {message}"
        )
        if attempt.stage.owes_compensation:
            self._compensate(attempt)

        attempt.outcome = Failed(message=message, kind=kind)
        self._record_metric(self._stats.increment, constants.REPO_CREATE_FAIL)

    def _record_metric(self, emit, name: str, *args) -> None:
        """Record a metric. A metric that can't be recorded is logged, it
        never changes the outcome of the attempt.
        """
        try:
            emit(name, *args)
        except Exception as exc:
            plug.log.warning(f"Could not record metric {name}: {exc}")

    def _compensate(self, attempt: ProvisioningAttempt) -> None:
        """Delete the repository created by the attempt. Deletion failures
        are logged and otherwise ignored.
        """
        repo = attempt.repo
        try:
            self._api.delete_repo(repo.id)
        except Exception as exc:
            plug.log.warning(
                f"Could not delete orphaned repository {repo.full_name}: "
                f"{exc}"
            )
        else:
            plug.log.info(f"Deleted {repo.full_name}")


@functools.lru_cache(maxsize=None)
def default_stats_recorder() -> StatsRecorder:
    """The process-wide recorder, registered in the global Prometheus
    registry. Only one recorder per registry may create a given metric.
    """
    return StatsRecorder()


def provision(
    assignment: plug.Assignment,
    user: plug.User,
    api: plug.PlatformAPI,
    store: RecordStore,
    stats: Optional[StatsRecorder] = None,
) -> ProvisioningOutcome:
    """Provision a repository for the user, for the given assignment. See
    :py:meth:`Creator.provision`.
    """
    return Creator(api, store, stats).provision(assignment, user)
