"""Public package surface for lazystatus.

Answers "what is the git status of this path?" for every entry of a directory
listing while walking each repository at most once.
"""

from __future__ import annotations

import logging

from .cache import GitCache, build
from .config import StatusSettings, load_settings
from .errors import GitCommandError, LazyStatusError, RepositoryNotFound
from .flags import NO_STATUS, GitFileStatus, GitStatus, GitStatusFlag
from .subdir import SubdirGitRepo, SubdirStatus, summarize

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "GitCache",
    "GitCommandError",
    "GitFileStatus",
    "GitStatus",
    "GitStatusFlag",
    "LazyStatusError",
    "NO_STATUS",
    "RepositoryNotFound",
    "StatusSettings",
    "SubdirGitRepo",
    "SubdirStatus",
    "build",
    "load_settings",
    "summarize",
]
