"""Modules for all custom classrepo exceptions.

All exceptions extend the :py:class:`ClassRepoException` base class, which
itself extends :py:class:`Exception`. In other words, exceptions raised within
``classrepo`` can all be caught by catching :py:class:`ClassRepoException`.

Platform errors are not part of this hierarchy, see
:py:class:`classrepo_plug.PlatformError`.

.. module:: exception
    :synopsis: Custom exceptions for _classrepo.
"""
import re


class ClassRepoException(Exception):
    """Base exception for all classrepo exceptions."""

    def __init__(self, msg="", *args, **kwargs):
        super().__init__(self, msg, *args, **kwargs)
        self.msg = msg

    def __str__(self):
        return self.msg

    def __repr__(self):
        return "<{}(msg='{}')>".format(type(self).__name__, str(self.msg))


class FileError(ClassRepoException):
    """Raise when reading or writing to a file errors out."""


class RecordValidationError(ClassRepoException):
    """Raise when a provisioning record is rejected by the record store."""


class GitError(ClassRepoException):
    """A generic error to raise when a git command exits with a non-zero exit
    status.
    """

    def __init__(self, msg: str, returncode: int, stderr: str):
        # either fatal reason or first line of error message
        fatal = re.findall("fatal:.*", stderr)
        err = fatal[0] if fatal else stderr.strip().split("\n")[0]

        # sanitize from secure token
        err = re.sub("https://.*?@", "https://", err)
        msg = re.sub("https://.*?@", "https://", msg)

        msg_ = "{} (return code: {}){}".format(
            msg, returncode, ": " + err if err else ""
        )
        super().__init__(msg_)
        self.returncode = returncode
        self.stderr = stderr


class ImportFailedError(GitError):
    """Raise when copying content from one repository into another fails."""

    def __init__(self, msg: str, returncode: int, stderr: str, url: str):
        self.url = re.sub("https://.*?@", "https://", url)
        super().__init__(msg, returncode, stderr)
