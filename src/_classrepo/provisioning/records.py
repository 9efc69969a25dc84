"""Durable records of provisioned repositories.

A :py:class:`ProvisioningRecord` binds a remote repository to the
(assignment, user) pair it was provisioned for. There is at most one record
per pair within an organization.

.. module:: records
    :synopsis: Provisioning records and the stores that persist them.
"""
import dataclasses
import datetime
import json
import os
import pathlib
import tempfile
from typing import Iterator, List, Optional, Tuple, Union

import filelock
from typing_extensions import Protocol

import classrepo_plug as plug

from _classrepo import exception


@dataclasses.dataclass(frozen=True)
class ProvisioningRecord:
    organization: str
    assignment_slug: str
    user_login: str
    repo_id: int
    repo_node_id: str
    repo_name: str
    created_at: str = dataclasses.field(
        default_factory=lambda: datetime.datetime.now(
            datetime.timezone.utc
        ).isoformat()
    )

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.organization, self.assignment_slug, self.user_login)

    @staticmethod
    def build(
        request: plug.ProvisioningRequest, repo: plug.RemoteRepo
    ) -> "ProvisioningRecord":
        """Build an unsaved record for a request and the repository that was
        created for it.
        """
        return ProvisioningRecord(
            organization=request.organization.login,
            assignment_slug=request.assignment.slug,
            user_login=request.user.login,
            repo_id=repo.id,
            repo_node_id=repo.node_id,
            repo_name=repo.name,
        )

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @staticmethod
    def from_dict(asdict: dict) -> "ProvisioningRecord":
        """Take a dictionary produced by ProvisioningRecord.to_dict and
        reconstruct the corresponding instance.
        """
        return ProvisioningRecord(**asdict)


class RecordStore(Protocol):
    """Protocol defining how provisioning records are persisted."""

    def save(self, record: ProvisioningRecord) -> None:
        """Persist a record.

        Raises:
            exception.RecordValidationError: If the record is invalid, or if
                a record for the same (organization, assignment, user) already
                exists.
        """
        ...

    def get(
        self, organization: str, assignment_slug: str, user_login: str
    ) -> Optional[ProvisioningRecord]:
        ...

    def __iter__(self) -> Iterator[ProvisioningRecord]:
        ...


def validate_record(record: ProvisioningRecord) -> None:
    """Check that a record is well formed.

    Raises:
        exception.RecordValidationError
    """
    errors = []
    if not record.organization:
        errors.append("organization can't be blank")
    if not record.assignment_slug:
        errors.append("assignment can't be blank")
    if not record.user_login:
        errors.append("user can't be blank")
    if (
        not isinstance(record.repo_id, int)
        or isinstance(record.repo_id, bool)
        or record.repo_id <= 0
    ):
        errors.append("repository id must be a positive integer")
    if not record.repo_node_id:
        errors.append("repository global relay id can't be blank")

    if errors:
        raise exception.RecordValidationError(
            "Validation failed: {}".format(", ".join(errors))
        )


class JSONRecordStore:
    """Record store that keeps all records in a single JSON file. Each save
    rewrites the file atomically, holding a lock file next to the record file
    from reading the existing records until the new file is in place. Saves
    from other threads and processes sharing the file are serialized.
    """

    def __init__(self, path: Union[str, pathlib.Path]):
        self._path = pathlib.Path(path)
        self._lock = filelock.FileLock(
            str(self._path.with_name(self._path.name + ".lock"))
        )

    @property
    def path(self) -> pathlib.Path:
        return self._path

    def save(self, record: ProvisioningRecord) -> None:
        validate_record(record)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise exception.FileError(
                "could not create directory for record file at "
                f"{self._path}: {exc}"
            ) from exc

        with self._lock:
            records = self._read()
            if any(existing.key == record.key for existing in records):
                raise exception.RecordValidationError(
                    "Validation failed: user {} already has a repository "
                    "for assignment {}".format(
                        record.user_login, record.assignment_slug
                    )
                )
            if any(
                existing.repo_id == record.repo_id for existing in records
            ):
                raise exception.RecordValidationError(
                    "Validation failed: repository id {} has already been "
                    "taken".format(record.repo_id)
                )

            self._write(records + [record])

        plug.log.debug(
            "Stored record of {}/{} for {}".format(
                record.organization, record.repo_name, record.user_login
            )
        )

    def get(
        self, organization: str, assignment_slug: str, user_login: str
    ) -> Optional[ProvisioningRecord]:
        key = (organization, assignment_slug, user_login)
        return next(
            (record for record in self._read() if record.key == key), None
        )

    def __iter__(self) -> Iterator[ProvisioningRecord]:
        return iter(self._read())

    def __len__(self) -> int:
        return len(self._read())

    def _read(self) -> List[ProvisioningRecord]:
        if not self._path.is_file():
            return []

        try:
            content = json.loads(self._path.read_text(encoding="utf8"))
            return [
                ProvisioningRecord.from_dict(asdict)
                for asdict in content["records"]
            ]
        except (ValueError, KeyError, TypeError) as exc:
            raise exception.FileError(
                f"record file at {self._path} is corrupt: {exc}"
            ) from exc

    def _write(self, records: List[ProvisioningRecord]) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=self._path.name, suffix=".tmp"
            )
            with os.fdopen(fd, mode="w", encoding="utf8") as f:
                json.dump(
                    {"records": [record.to_dict() for record in records]},
                    f,
                    indent=4,
                    ensure_ascii=False,
                )
            os.replace(tmp_name, self._path)
        except OSError as exc:
            raise exception.FileError(
                f"could not write record file at {self._path}: {exc}"
            ) from exc
