from classrepo_plug.__version import __version__  # noqa: F401

from classrepo_plug import log
from classrepo_plug.config import Config

# API wrappers
from classrepo_plug.platform import (
    RemoteRepo,
    Invitation,
    OrganizationPlan,
    RepoPermission,
    PlatformAPI,
    _APISpec,
)

# Exceptions
from classrepo_plug.exceptions import (
    PlugError,
    APIImplementationError,
    PlatformError,
    NotFoundError,
    ServiceNotFoundError,
    BadCredentials,
    UnexpectedException,
)

# Local representations
from classrepo_plug.classroom import (
    Organization,
    Assignment,
    User,
    ProvisioningRequest,
    MAX_NAME_LENGTH,
)

__all__ = [
    # API wrappers
    "RemoteRepo",
    "Invitation",
    "OrganizationPlan",
    "RepoPermission",
    "PlatformAPI",
    "_APISpec",
    # Exceptions
    "PlugError",
    "APIImplementationError",
    "PlatformError",
    "NotFoundError",
    "ServiceNotFoundError",
    "BadCredentials",
    "UnexpectedException",
    # Local representations
    "Organization",
    "Assignment",
    "User",
    "ProvisioningRequest",
    "MAX_NAME_LENGTH",
    # Helpers
    "Config",
    # Modules/Packages
    "log",
]
