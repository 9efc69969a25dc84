"""Exceptions raised by platform APIs and the config file reader.

.. module:: exceptions
    :synopsis: Platform and config errors for classrepo_plug.
"""


class PlugError(Exception):
    """Base class for all classrepo_plug exceptions. Keyword arguments name
    the values that caused the error, and are included in the message.
    """

    def __init__(self, *args, **kwargs):
        """
        Args:
            args: Passed on to :py:class:`Exception`, usually just the
                error message.
            kwargs: The values that caused the error, e.g.
                ``config_file=path`` for a config file that can't be read.
        """
        super().__init__(*args)
        self._kwargs = kwargs

    @property
    def kwargs(self):
        return dict(self._kwargs)

    def __str__(self):
        formatted_args = super().__str__()
        formatted_kwargs = (
            ""
            if not self._kwargs
            else ". Passed arguments: "
            + ", ".join(
                "{}={}".format(key, value)
                for key, value in self._kwargs.items()
            )
        )
        return "{}{}".format(formatted_args, formatted_kwargs)


class APIImplementationError(PlugError):
    """Raised when a platform API class doesn't match the
    :py:class:`~classrepo_plug.PlatformAPI` methods that provisioning calls.
    """


class PlatformError(PlugError):
    """Raised by a platform API call made while provisioning. The creator
    turns it into a failed outcome for the step that made the call, so it
    never escapes a provisioning attempt.

    Attributes:
        status: The HTTP status of the platform's response, if there was a
            response.
    """

    def __init__(self, msg="", status=None):
        super().__init__(msg)
        self.status = status


class NotFoundError(PlatformError):
    """Raised when the organization, a repository or an invitation doesn't
    exist on the platform. A starter code repository that has been deleted
    also ends up here.
    """


class ServiceNotFoundError(PlatformError):
    """Raised when nothing answers at the configured ``base_url``."""


class BadCredentials(PlatformError):
    """Raised when the platform rejects the organization's token, or the
    student's token when their invitation is accepted.
    """


class UnexpectedException(PlatformError):
    """Raised when a platform request fails in a way that none of the other
    platform errors describe.
    """
