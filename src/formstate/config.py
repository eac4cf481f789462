"""
Form configuration.

``FormOptions`` carries every behavioural switch and callback of a form.
Process-wide defaults can be changed once (e.g. at application start) with
``set_default_options``; each form starts from those defaults and applies
its own overrides.
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class AfterSubmit(Enum):
    """What happens to the values after a successful submission."""
    KEEP = "keep"
    CLEAR = "clear"
    RESET = "reset"
    INITIALIZE = "initialize"


Values = Mapping[str, Any]
Errors = Dict[str, Any]

_CALLBACK_FIELDS = (
    'load', 'on_submit', 'on_success', 'on_error', 'on_values_change',
    'transform', 'validate', 'validate_field',
)


@dataclass
class FormOptions:
    """Options of a single form.

    Async callbacks (``load``, ``on_submit``, ``validate``, ``validate_field``)
    must return an awaitable; the others are called synchronously.
    """
    # Baselines
    initial_values: Optional[Values] = None
    initial_errors: Optional[Mapping[str, Any]] = None
    initial_modified: Optional[Mapping[str, bool]] = None
    initial_touched: Optional[Mapping[str, bool]] = None
    disabled: bool = False

    # Callbacks
    load: Optional[Callable[[], Awaitable[Optional[Values]]]] = None
    on_submit: Optional[Callable[[Dict[str, Any]], Awaitable[Any]]] = None
    on_success: Optional[Callable[[Any, Dict[str, Any]], None]] = None
    on_error: Optional[Callable[[Exception], None]] = None
    on_values_change: Optional[Callable[[Dict[str, Any], Dict[str, Any]], None]] = None
    transform: Optional[Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]]] = None
    validate: Optional[Callable[[Dict[str, Any], Dict[str, bool]], Awaitable[Optional[Errors]]]] = None
    validate_field: Optional[Callable[[str, Any, Dict[str, Any]], Awaitable[Any]]] = None

    # Validation triggers
    validate_on_change: bool = False
    validate_on_init: bool = False
    validate_on_submit: bool = True
    validate_on_touch: bool = False
    validate_delay: float = 0.0

    # Submission
    after_submit: Union[AfterSubmit, str] = AfterSubmit.KEEP
    nullify: bool = False
    trim_on_submit: bool = False
    disable_submit_if_not_modified: bool = False
    disable_submit_if_not_valid: bool = False

    debug: bool = False

    def __post_init__(self):
        for name in _CALLBACK_FIELDS:
            value = getattr(self, name)
            if value is not None and not callable(value):
                raise TypeError(f"FormOptions.{name} must be callable, got {type(value).__name__}")
        if self.validate_delay < 0:
            raise ValueError("FormOptions.validate_delay must not be negative")
        if not isinstance(self.after_submit, AfterSubmit):
            self.after_submit = AfterSubmit(self.after_submit)

    def replace(self, **changes) -> 'FormOptions':
        """Copy of these options with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


_default_options = FormOptions()


def get_default_options() -> FormOptions:
    """Options every new form starts from."""
    return _default_options


def set_default_options(**changes) -> FormOptions:
    """
    Change the process-wide defaults.

    Args:
        **changes: ``FormOptions`` fields to override

    Returns:
        The new defaults
    """
    global _default_options
    _default_options = _default_options.replace(**changes)
    logger.debug(f"Default form options changed: {sorted(changes)}")
    return _default_options


def reset_default_options() -> None:
    """Restore the built-in defaults."""
    global _default_options
    _default_options = FormOptions()


def resolve_options(options: Optional[FormOptions] = None, **overrides) -> FormOptions:
    """Combine explicit options (or the defaults) with keyword overrides."""
    base = options if options is not None else get_default_options()
    return base.replace(**overrides) if overrides else base
