"""Wrapper functions for the git commands used to copy starter code.

.. module:: git
    :synopsis: Wrapper functions for git commands that copy the content of one
        remote repository into another.
"""
import pathlib
import re
import tempfile
from typing import Optional, Union

import git

import classrepo_plug as plug
from _classrepo import exception


def copy_repository(
    source_url: str,
    target_url: str,
    workdir: Optional[Union[str, pathlib.Path]] = None,
) -> None:
    """Copy all branches and tags of the source repository into the target
    repository, by means of a bare clone followed by a mirror push. The
    clone is made in a temporary directory that is removed afterwards.

    Args:
        source_url: Url to the repository to copy from, with any required
            credentials inserted.
        target_url: Url to the repository to copy into, with any required
            credentials inserted.
        workdir: Directory in which to create the temporary clone.
    Raises:
        exception.ImportFailedError: If either the clone or the push fails.
    """
    with tempfile.TemporaryDirectory(dir=workdir) as tmpdir:
        clone_path = pathlib.Path(tmpdir) / "starter-code.git"
        try:
            repo = git.Repo.clone_from(source_url, clone_path, bare=True)
        except git.GitCommandError as exc:
            raise exception.ImportFailedError(
                f"Failed to clone {source_url}",
                exc.status or -1,
                str(exc.stderr),
                source_url,
            ) from exc

        try:
            repo.git.push("--mirror", target_url)
        except git.GitCommandError as exc:
            raise exception.ImportFailedError(
                f"Failed to push to {target_url}",
                exc.status or -1,
                str(exc.stderr),
                target_url,
            ) from exc
        finally:
            repo.close()

    plug.log.info(
        "Copied {} into {}".format(
            _strip_auth(source_url), _strip_auth(target_url)
        )
    )


def _strip_auth(url: str) -> str:
    return re.sub("https://.*?@", "https://", url)
