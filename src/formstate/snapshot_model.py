"""
Immutable capture of a whole form state.

A ``FormSnapshot`` holds deep copies of the value trees and flat maps plus
every status flag, so it stays valid however the form changes afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import time
import uuid


def _describe(error: Any) -> Any:
    """Exceptions are exported by their text; plain error values as they are."""
    return str(error) if isinstance(error, BaseException) else error


@dataclass(frozen=True)
class FormSnapshot:
    """Point-in-time copy of a form.

    ``initial_values`` is ``None`` while the form is not initialized.
    """
    values: Dict[str, Any]
    initial_values: Optional[Dict[str, Any]]
    errors: Dict[str, Any]
    modified: Dict[str, bool]
    touched: Dict[str, bool]
    initialized: bool
    loading: bool
    load_error: Optional[BaseException]
    validating: bool
    validated: bool
    validate_error: Optional[BaseException]
    submitting: bool
    submitted: bool
    submit_count: int
    submit_error: Optional[BaseException]
    submit_result: Any
    disabled: bool
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)

    @property
    def has_error(self) -> bool:
        return bool(self.errors)

    @property
    def is_modified(self) -> bool:
        return any(self.modified.values())

    @property
    def is_touched(self) -> bool:
        return any(self.touched.values())

    def to_dict(self) -> Dict[str, Any]:
        """Export to a plain dict; exception fields become their message."""
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'values': self.values,
            'initial_values': self.initial_values,
            'errors': {path: _describe(error) for path, error in self.errors.items()},
            'modified': self.modified,
            'touched': self.touched,
            'initialized': self.initialized,
            'loading': self.loading,
            'load_error': _describe(self.load_error),
            'validating': self.validating,
            'validated': self.validated,
            'validate_error': _describe(self.validate_error),
            'submitting': self.submitting,
            'submitted': self.submitted,
            'submit_count': self.submit_count,
            'submit_error': _describe(self.submit_error),
            'submit_result': self.submit_result,
            'disabled': self.disabled,
        }
