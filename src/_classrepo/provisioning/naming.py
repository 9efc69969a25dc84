"""Derive a repository name that is unused in the organization.

The base name of a student repository is ``<assignment-slug>-<user-login>``.
If that name is taken, the suffixes ``-1``, ``-2``, ... are tried in turn.
Every candidate is checked against the platform, nothing is cached: other
actors may create repositories in between calls.

The check is best-effort. A concurrent attempt may take the resolved name
before the repository is created, in which case creation fails on the
platform's uniqueness constraint.

.. module:: naming
    :synopsis: Repository name generation with collision resolution.
"""
import itertools

import classrepo_plug as plug


def base_repo_name(assignment: plug.Assignment, user: plug.User) -> str:
    return "{}-{}".format(assignment.slug, user.login)


def suffixed_repo_name(
    base_name: str,
    suffix_count: int,
    max_length: int = plug.MAX_NAME_LENGTH,
) -> str:
    """Append a numeric suffix to the base name, truncating the base name so
    that the result is at most ``max_length`` characters long. The suffix is
    never truncated.

    Args:
        base_name: The repository name to suffix.
        suffix_count: The number to suffix with. 0 means no suffix.
        max_length: Maximum length of the result.
    Returns:
        The suffixed name.
    """
    if suffix_count < 0:
        raise ValueError(f"suffix count must be >= 0, was {suffix_count}")
    if suffix_count == 0:
        return base_name[:max_length]

    suffix = f"-{suffix_count}"
    if len(suffix) >= max_length:
        raise ValueError(
            f"suffix {suffix} leaves no room for a name of at most "
            f"{max_length} characters"
        )
    return base_name[: max_length - len(suffix)] + suffix


def resolve_repo_name(
    api: plug.PlatformAPI,
    owner: str,
    base_name: str,
    max_length: int = plug.MAX_NAME_LENGTH,
) -> str:
    """Find the first unused name among ``base_name``, ``base_name-1``,
    ``base_name-2``, ...

    Args:
        api: A platform API.
        owner: The owner of the repository (i.e. the organization).
        base_name: The preferred repository name.
        max_length: Maximum length of the name.
    Returns:
        A name that was unused at the time of the check.
    Raises:
        classrepo_plug.PlatformError: If an existence check fails.
    """
    for suffix_count in itertools.count():
        name = suffixed_repo_name(base_name, suffix_count, max_length)
        if not api.repo_exists(f"{owner}/{name}"):
            if suffix_count:
                plug.log.info(
                    f"{owner}/{base_name} is taken, using {owner}/{name}"
                )
            return name
        plug.log.debug(f"{owner}/{name} already exists")
