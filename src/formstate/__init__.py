"""
Path-addressable form state.

A form keeps its values in a nested tree addressed by paths such as
``address.lines[0]`` and tracks, per path, validation errors and whether the
value was modified or touched. List operations keep those flat maps aligned
with the list elements, and asynchronous loading, validation and submission
only ever commit the outcome of their most recent run.

Quick Start:
    >>> from formstate import Form
    >>>
    >>> async def check_field(path, value, values):
    ...     return 'required' if not value else None
    >>>
    >>> form = Form(initial_values={'name': '', 'tags': ['a']}, validate_field=check_field)
    >>> form.append_list_item('tags', 'b')
    >>> await form.validate_field('name')
    'required'

Modules:
    - path_resolver: path syntax, resolve and copy-on-write build
    - flatten: nested tree <-> {path: value}
    - reindex: flat-map key rewriting for list splices
    - form_state: the synchronous state store
    - validation / submission / loader: asynchronous orchestration
    - form: store plus orchestration plus lifecycle
    - config: options and process-wide defaults
"""

__version__ = "1.0.0"

from formstate.config import (
    AfterSubmit,
    FormOptions,
    get_default_options,
    reset_default_options,
    set_default_options,
)
from formstate.errors import (
    CallbackContractError,
    FormError,
    MissingCallbackError,
    PathError,
    PathSyntaxError,
    PathTypeError,
)
from formstate.flatten import flatten, normalize, reconstruct
from formstate.form import Form
from formstate.form_state import FieldStatus, FormState, filter_errors, values_equal
from formstate.path_resolver import UNSET, build, check_path_syntax, clone, parse_path, resolve
from formstate.reindex import (
    insert_path_indices,
    move_path_indices,
    remove_path_indices,
    swap_path_indices,
)
from formstate.snapshot_model import FormSnapshot

__all__ = [
    # Form
    'Form',
    'FormState',
    'FieldStatus',
    'FormSnapshot',
    # Configuration
    'AfterSubmit',
    'FormOptions',
    'get_default_options',
    'set_default_options',
    'reset_default_options',
    # Paths
    'UNSET',
    'check_path_syntax',
    'parse_path',
    'resolve',
    'build',
    'clone',
    'flatten',
    'reconstruct',
    'normalize',
    # Reindexing
    'insert_path_indices',
    'remove_path_indices',
    'move_path_indices',
    'swap_path_indices',
    # Helpers
    'filter_errors',
    'values_equal',
    # Errors
    'FormError',
    'PathError',
    'PathSyntaxError',
    'PathTypeError',
    'CallbackContractError',
    'MissingCallbackError',
]
