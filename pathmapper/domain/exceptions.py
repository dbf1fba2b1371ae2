"""Exception taxonomy for pathmapper.

Validation errors (patterns, bindings, registration) are raised eagerly,
before anything is buffered, and are never retried: the caller must fix its
inputs. CommitFailed is the only error that leaves retryable state behind.
"""

from __future__ import annotations


class PathMapperError(Exception):
    """Base exception for all pathmapper errors."""


class MalformedPattern(PathMapperError, ValueError):
    """A path pattern could not be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Malformed path pattern {pattern!r}: {reason}")


class BindingError(PathMapperError, ValueError):
    """Base class for errors resolving a pattern against a binding map."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message)


class MissingBinding(BindingError):
    """A bound segment has no value (absent, None or empty string)."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Missing value for binding {name!r}")


class UnusedBinding(BindingError):
    """A binding was supplied that the pattern does not declare."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Binding {name!r} is not declared by the pattern")


class ExtraBinding(BindingError):
    """An id was supplied where a collection path was expected."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Binding {name!r} is not allowed for a collection path")


class NotRegistered(PathMapperError, LookupError):
    """A record type has no registered path pattern."""

    def __init__(self, cls: type) -> None:
        self.cls = cls
        super().__init__(f"{cls.__name__} has no registered path pattern")


class CommitFailed(PathMapperError):
    """The store rejected the atomic update; buffered writes are kept."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Commit failed: {cause}")


class InvalidRecordData(PathMapperError, ValueError):
    """The value stored at a record path is not an object."""

    def __init__(self, path: str, value: object) -> None:
        self.path = path
        self.value = value
        super().__init__(f"Value at {path!r} is not a record: {value!r}")
