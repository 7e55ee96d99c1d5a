"""
Service-layer exceptions and the storage-failure guard.
Domain rule violations raise; storage failures are logged and turned into
the operation's safe default (None / False / empty collection).
"""
from __future__ import annotations

import copy
import functools
import logging
import sqlite3
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])


# ---------- Exceptions ----------


class InvalidTeamNameError(ValueError):
    """Team name has no characters usable in its slug id."""


class DuplicateLineupPlayerError(ValueError):
    """The same player appears more than once in a lineup."""


class LineupFullError(ValueError):
    """A lineup holds at most 11 players."""


class PlayerNotInTeamError(ValueError):
    """Player does not exist or belongs to another team."""


class InvalidRoleError(ValueError):
    """Role must be Fan, Coach or Admin."""


class EmptyMessageError(ValueError):
    """Chat message is blank after trimming."""


class NotMessageOwnerError(PermissionError):
    """Only the author may delete a chat message."""


# ---------- Guard ----------


def returns_on_storage_error(default: Any) -> Callable[[F], F]:
    """
    Log sqlite3 errors raised by the wrapped call and return a copy of default instead.
    Other exceptions propagate.
    """
    def decorator(fn: F) -> F:
        log = logging.getLogger(fn.__module__)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except sqlite3.Error:
                log.exception("%s failed (args=%r, kwargs=%r)", fn.__qualname__, args[2:], kwargs)
                return copy.copy(default)

        return wrapper  # type: ignore[return-value]

    return decorator
