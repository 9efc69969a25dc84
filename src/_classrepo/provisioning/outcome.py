"""Outcomes of provisioning attempts, and the stages an attempt moves through.

.. module:: outcome
    :synopsis: Outcome and stage types for provisioning attempts.
"""
import dataclasses
import enum

from typing import ClassVar, Optional, Union

from _classrepo.provisioning.records import ProvisioningRecord


class Status(enum.Enum):
    """Status of a provisioning outcome."""

    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


class Stage(enum.IntEnum):
    """How far a provisioning attempt has come. The stages are ordered, so
    ``stage >= Stage.REPO_CREATED`` means that a remote repository exists.
    """

    INIT = 0
    QUOTA_CHECKED = 1
    REPO_CREATED = 2
    COLLABORATOR_ADDED = 3
    STARTER_CODE_IMPORTED = 4
    PERSISTED = 5

    @property
    def owes_compensation(self) -> bool:
        return self >= Stage.REPO_CREATED


class FailureKind(enum.Enum):
    QUOTA_EXCEEDED = "quota_exceeded"
    REMOTE_CREATION_FAILED = "remote_creation_failed"
    COLLABORATOR_ADDITION_FAILED = "collaborator_addition_failed"
    STARTER_CODE_IMPORT_FAILED = "starter_code_import_failed"
    PERSISTENCE_FAILED = "persistence_failed"


class ProvisioningError(Exception):
    """A failed provisioning step.

    Never escapes :py:meth:`Creator.provision`, it is always converted into
    a :py:class:`Failed` outcome.
    """

    def __init__(
        self, kind: FailureKind, msg: str, remote_detail: Optional[str] = None
    ):
        if remote_detail:
            msg = f"{msg} ({remote_detail})"
        super().__init__(msg)
        self.kind = kind
        self.msg = msg

    def __str__(self):
        return self.msg


class _OutcomeMixin:
    status: ClassVar[Status]

    def success(self) -> bool:
        return self.status is Status.SUCCESS

    def failed(self) -> bool:
        return self.status is Status.FAILED

    def pending(self) -> bool:
        return self.status is Status.PENDING


@dataclasses.dataclass(frozen=True)
class Success(_OutcomeMixin):
    """The repository was provisioned and recorded."""

    status: ClassVar[Status] = Status.SUCCESS

    record: ProvisioningRecord


@dataclasses.dataclass(frozen=True)
class Failed(_OutcomeMixin):
    """The attempt failed. ``message`` is meant for the student."""

    status: ClassVar[Status] = Status.FAILED

    message: str
    kind: Optional[FailureKind] = None


@dataclasses.dataclass(frozen=True)
class Pending(_OutcomeMixin):
    """No step has run yet."""

    status: ClassVar[Status] = Status.PENDING


ProvisioningOutcome = Union[Success, Failed, Pending]
