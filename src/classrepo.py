from _classrepo.main import run, setup_logging, verify_settings
from _classrepo.provisioning import provision

__all__ = [
    "run",
    "provision",
    "setup_logging",
    "verify_settings",
]
