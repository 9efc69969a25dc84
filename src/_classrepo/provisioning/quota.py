"""Check that an organization may create another private repository.

.. module:: quota
    :synopsis: Private repository quota check.
"""
import classrepo_plug as plug

from _classrepo.provisioning.outcome import FailureKind, ProvisioningError

PLAN_UPGRADE_URL = "https://education.github.com/discount"


def has_private_repo_capacity(plan: plug.OrganizationPlan) -> bool:
    return plan.owned_private_repos < plan.private_repos


def verify_private_repos_available(
    api: plug.PlatformAPI, assignment: plug.Assignment
) -> None:
    """Ensure that a repository for the assignment can be created without
    exceeding the organization's private repository limit. Public
    assignments are always permitted, without asking the platform.

    Args:
        api: A platform API bound to the assignment's organization.
        assignment: The assignment to create a repository for.
    Raises:
        ProvisioningError: If the plan could not be fetched, or if the limit
            has been reached.
    """
    if assignment.public:
        return

    try:
        plan = api.get_organization_plan()
    except plug.PlatformError as exc:
        raise ProvisioningError(
            FailureKind.REMOTE_CREATION_FAILED, str(exc)
        ) from exc

    if has_private_repo_capacity(plan):
        return

    limit = plan.private_repos
    raise ProvisioningError(
        FailureKind.QUOTA_EXCEEDED,
        "Cannot make this private assignment, your limit of {} {} has been "
        "reached. You can request a larger plan for free at {}".format(
            limit,
            "repository" if limit == 1 else "repositories",
            PLAN_UPGRADE_URL,
        ),
    )
