"""Hooks fired when a match finishes or is reopened by an undo.

Scoring only emits these signals. Bracket advancement, notifications and the
like register a listener::

    @on_match_completed
    async def advance_bracket(match):
        ...

Listeners run after the scoring transaction has committed. A failing
listener is logged and does not affect the scoring result or other listeners.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, List, Union

from ..models import Match

logger = logging.getLogger(__name__)

Listener = Callable[[Match], Union[Awaitable[Any], Any]]

_completed: List[Listener] = []
_reopened: List[Listener] = []


def on_match_completed(fn: Listener) -> Listener:
    _completed.append(fn)
    return fn


def on_match_reopened(fn: Listener) -> Listener:
    _reopened.append(fn)
    return fn


def clear_listeners() -> None:
    _completed.clear()
    _reopened.clear()


async def _dispatch(listeners: List[Listener], match: Match, event: str) -> None:
    for fn in list(listeners):
        try:
            result = fn(match)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(
                "Match %s listener %r failed for match %s",
                event,
                getattr(fn, "__name__", fn),
                match.id,
            )


async def notify_completed(match: Match) -> None:
    await _dispatch(_completed, match, "completed")


async def notify_reopened(match: Match) -> None:
    await _dispatch(_reopened, match, "reopened")
