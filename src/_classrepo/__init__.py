"""classrepo: provision per-student assignment repositories.

.. module:: _classrepo
    :synopsis: Implementation package of classrepo.
"""
from classrepo_plug import __version__  # noqa: F401

_external_package_name = "classrepo"
__author__ = "classrepo developers"
