"""
Exception taxonomy for formstate.

Path, contract and missing-callback faults are caller bugs and propagate.
Validation, load and submission faults never leave the orchestrators; they
are stored on the form state instead (``validate_error``, ``load_error``,
``submit_error``).
"""

from dataclasses import dataclass


class FormError(Exception):
    """Base exception for all formstate errors."""


@dataclass
class PathError(FormError):
    """Raised when a path cannot be applied."""
    path: str
    reason: str

    def __str__(self) -> str:
        return f"Invalid path '{self.path}': {self.reason}"


class PathSyntaxError(PathError):
    """Raised when a path string is malformed."""


class PathTypeError(PathError):
    """Raised when a path step does not fit the container it reaches."""


@dataclass
class CallbackContractError(FormError):
    """Raised when an async callback returns something that cannot be awaited."""
    callback: str
    received: str

    def __str__(self) -> str:
        return f"'{self.callback}' must return an awaitable, got {self.received}"


@dataclass
class MissingCallbackError(FormError):
    """Raised when an operation needs a callback that was not configured."""
    callback: str

    def __str__(self) -> str:
        return f"No '{self.callback}' callback configured"
