"""Provisioning of student repositories.

.. module:: provisioning
    :synopsis: Quota checks, naming, orchestration and records for
        repository provisioning.
"""
from _classrepo.provisioning.creator import (  # noqa: F401
    Creator,
    ProvisioningAttempt,
    provision,
)
from _classrepo.provisioning.metrics import StatsRecorder  # noqa: F401
from _classrepo.provisioning.outcome import (  # noqa: F401
    Failed,
    FailureKind,
    Pending,
    ProvisioningError,
    ProvisioningOutcome,
    Stage,
    Status,
    Success,
)
from _classrepo.provisioning.records import (  # noqa: F401
    JSONRecordStore,
    ProvisioningRecord,
    RecordStore,
)
