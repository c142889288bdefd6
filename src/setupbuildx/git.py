"""
Remote ref resolution for source builds
"""

import logging
from typing import Tuple

import git

from . import constants
from .exceptions import ExternalCommandError, NotFoundError
from .utils.util import is_commit_sha, is_short_hash

logger = logging.getLogger(__name__)


def split_git_context(git_context: str) -> Tuple[str, str]:
    """
    `https://github.com/docker/buildx.git#v0.11.2` -> (repo, ref); the ref
    defaults to `master`. A bare short hash is a ref of the upstream buildx repo.
    """
    if is_short_hash(git_context):
        return constants.BUILDX_REPO_URL, git_context
    repo, _, ref = git_context.partition("#")
    return repo, ref or "master"


def get_remote_sha(repo: str, ref: str) -> str:
    """
    Resolve `ref` of `repo` to a commit with `git ls-remote`.

    Raises:
        ExternalCommandError: If git fails
        NotFoundError: If the ref does not exist on the remote
    """
    try:
        output = git.cmd.Git().ls_remote(repo, ref)
    except git.exc.GitCommandError as e:
        raise ExternalCommandError(
            f"git ls-remote {repo} {ref} failed: {e.stderr.strip() if e.stderr else e}",
            command=["git", "ls-remote", repo, ref],
            exit_code=e.status if isinstance(e.status, int) else None,
            stderr=str(e.stderr or ""),
        ) from e
    tokens = output.strip().split()
    if not tokens:
        raise NotFoundError(f"Cannot find remote ref for {repo}#{ref}")
    logger.debug(f"[Git] {repo}#{ref} resolved to {tokens[0]}")
    return tokens[0]


def resolve_commit(repo: str, ref: str) -> str:
    """Full commits are used as-is, anything else goes through ls-remote"""
    if is_commit_sha(ref):
        return ref
    return get_remote_sha(repo, ref)
