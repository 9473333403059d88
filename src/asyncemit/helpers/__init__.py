"""Composition helpers built on the public emitter interface."""

from asyncemit.helpers.bind import (
    ListenerSource,
    bind,
    bind_errors,
    unbind,
    unbind_errors,
)
from asyncemit.helpers.clone import clone
from asyncemit.helpers.filter import filter, filter_value  # noqa: A004
from asyncemit.helpers.merge import MergedEvent, merge

__all__ = [
    "ListenerSource",
    "MergedEvent",
    "bind",
    "bind_errors",
    "clone",
    "filter",
    "filter_value",
    "merge",
    "unbind",
    "unbind_errors",
]
