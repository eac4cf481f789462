"""
FormState: the path-addressable state store behind a form.

Holds four parallel structures, all addressed by path:
- values: the current value tree
- initial values: the baseline used for modified detection and reset
- errors, modified, touched: flat maps keyed by full path

plus the status flags of the form (initialized, loading, validating,
submitting, ...). Trees are never mutated in place: every mutation builds a
new tree with ``path_resolver.build`` and swaps it in, so anything handed out
earlier stays valid.

The store is synchronous. Asynchronous orchestration (loading, validation,
submission) lives in ``Form``, which builds on this class.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generator, Iterable, List, Mapping, Optional

from formstate.config import FormOptions, resolve_options
from formstate.errors import PathTypeError
from formstate.flatten import flatten, normalize
from formstate.generation import GenerationCache
from formstate.path_resolver import UNSET, build, check_path_syntax, clone, is_empty, resolve
from formstate.reindex import insert_path_indices, move_path_indices, remove_path_indices, swap_path_indices
from formstate.snapshot_model import FormSnapshot

logger = logging.getLogger(__name__)


def values_equal(first: Any, second: Any) -> bool:
    """
    Equality used for modified detection.

    ``None`` and ``UNSET`` are both empty and equal to each other; an empty
    value never equals a non-empty one; otherwise types must match exactly.
    """
    if is_empty(first) or is_empty(second):
        return is_empty(first) and is_empty(second)
    return type(first) is type(second) and first == second


def filter_errors(errors: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Drop entries that do not describe an error (``None`` and ``False``)."""
    return {
        path: error for path, error in (errors or {}).items()
        if error is not None and error is not False
    }


def is_within(key: str, path: str) -> bool:
    """True when ``key`` is ``path`` itself or a path below it."""
    return key == path or key.startswith(f'{path}.') or key.startswith(f'{path}[')


def _without(flat: Mapping[str, Any], paths: Iterable[str]) -> Dict[str, Any]:
    paths = list(paths)
    return {key: value for key, value in flat.items() if not any(is_within(key, p) for p in paths)}


def _only(flat: Mapping[str, Any], paths: Iterable[str]) -> Dict[str, Any]:
    paths = list(paths)
    return {key: value for key, value in flat.items() if any(is_within(key, p) for p in paths)}


def _public(value: Any) -> Any:
    return None if value is UNSET else value


@dataclass(frozen=True)
class FieldStatus:
    """Passed to field watchers when the value at a watched path changes."""
    name: str
    value: Any
    previous_value: Any
    modified: bool
    touched: bool


class FormState:
    """
    Synchronous state store of one form.

    Values are read and written by path (``a.b[2].c``). Mappings given to
    ``set_values`` are interpreted as ``{path: value}``; initial values are
    nested trees whose keys are taken literally.

    Derived state:
    - modified[p] -> value at p differs from the initial value at p
    - disabled -> explicitly disabled, not initialized, or busy
    """

    def __init__(self, options: Optional[FormOptions] = None, **overrides):
        """
        Args:
            options: Form options (default: the process-wide defaults)
            **overrides: ``FormOptions`` fields overriding ``options``
        """
        self.options = resolve_options(options, **overrides)
        self._log_level = logging.INFO if self.options.debug else logging.DEBUG

        # === Value trees ===
        initial_values = self.options.initial_values
        self.initialized = initial_values is not None
        self._values: Dict[str, Any] = normalize(initial_values) if initial_values is not None else {}
        self._initial_values: Dict[str, Any] = clone(self._values)
        self._values_generation = 0
        self._flat_values: GenerationCache[Dict[str, Any]] = GenerationCache(lambda: self._values_generation)

        # === Flat maps and their baselines ===
        self._initial_errors = filter_errors(self.options.initial_errors)
        self._initial_modified = dict(self.options.initial_modified or {})
        self._initial_touched = dict(self.options.initial_touched or {})
        self._errors: Dict[str, Any] = dict(self._initial_errors)
        self._modified: Dict[str, bool] = dict(self._initial_modified)
        self._touched: Dict[str, bool] = dict(self._initial_touched)

        # === Status flags ===
        self.loading = self.options.load is not None
        self.load_error: Optional[BaseException] = None
        self.validating = False
        self.validated = False
        self.validate_error: Optional[BaseException] = None
        self.submitting = False
        self.submitted = False
        self.submit_count = 0
        self.submit_error: Optional[BaseException] = None
        self.submit_result: Any = None
        self._disabled = self.options.disabled

        # === Observers ===
        self._on_state_changed_callbacks: List[Callable[[], None]] = []
        self._watchers: Dict[str, List[Callable[[FieldStatus], None]]] = {}
        self._atomic_depth = 0
        self._pending_notification = False

    # ==================== NOTIFICATION ====================

    def on_state_changed(self, callback: Callable[[], None]) -> None:
        """Subscribe to state change notifications."""
        if callback not in self._on_state_changed_callbacks:
            self._on_state_changed_callbacks.append(callback)

    def off_state_changed(self, callback: Callable[[], None]) -> None:
        """Unsubscribe from state change notifications."""
        if callback in self._on_state_changed_callbacks:
            self._on_state_changed_callbacks.remove(callback)

    def watch(self, path: str, callback: Callable[[FieldStatus], None]) -> None:
        """
        Call ``callback`` whenever a value mutation changes the value at ``path``.

        Args:
            path: Path to watch, exactly as it is written in mutations
            callback: Receives a ``FieldStatus``
        """
        check_path_syntax(path)
        callbacks = self._watchers.setdefault(path, [])
        if callback not in callbacks:
            callbacks.append(callback)

    def unwatch(self, path: str, callback: Callable[[FieldStatus], None]) -> None:
        callbacks = self._watchers.get(path)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)
            if not callbacks:
                del self._watchers[path]

    def _notify_state_changed(self) -> None:
        """Fire state change callbacks (best-effort)."""
        for callback in list(self._on_state_changed_callbacks):
            try:
                callback()
            except Exception as e:
                logger.warning(f"Error in state_changed callback: {e}")

    def _mark_changed(self) -> None:
        if self._atomic_depth:
            self._pending_notification = True
        else:
            self._notify_state_changed()

    @contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """Coalesce the notifications of every mutation inside the block into one.

        Nested blocks are supported; only the outermost one notifies.

        Example:
            with form.atomic():
                form.set_value('name', 'Ada')
                form.set_touched_field('name')
            # a single state_changed notification here
        """
        self._atomic_depth += 1
        try:
            yield
        finally:
            self._atomic_depth -= 1
            if self._atomic_depth == 0 and self._pending_notification:
                self._pending_notification = False
                self._notify_state_changed()

    def _set_status(self, label: str, **changes) -> None:
        """Single entry point for status flag transitions."""
        for name, value in changes.items():
            setattr(self, name, value)
        logger.log(self._log_level, f"{label}: {changes}")
        self._mark_changed()

    # ==================== DERIVED STATUS ====================

    @property
    def disabled(self) -> bool:
        """True while explicitly disabled, busy, or not yet initialized."""
        return (
            self._disabled
            or self.loading
            or self.validating
            or self.submitting
            or not self.initialized
        )

    def set_disabled(self, disabled: bool) -> None:
        self._set_status('disabled' if disabled else 'enabled', _disabled=disabled)

    @property
    def has_error(self) -> bool:
        return bool(self._errors)

    @property
    def submit_disabled(self) -> bool:
        """Whether a submit control should be disabled."""
        if self.disabled:
            return True
        if self.options.disable_submit_if_not_modified and not self.is_modified():
            return True
        return self.options.disable_submit_if_not_valid and self.has_error

    def snapshot(self) -> FormSnapshot:
        """Immutable copy of the whole state."""
        return FormSnapshot(
            values=clone(self._values),
            initial_values=self.get_initial_values(),
            errors=dict(self._errors),
            modified=dict(self._modified),
            touched=dict(self._touched),
            initialized=self.initialized,
            loading=self.loading,
            load_error=self.load_error,
            validating=self.validating,
            validated=self.validated,
            validate_error=self.validate_error,
            submitting=self.submitting,
            submitted=self.submitted,
            submit_count=self.submit_count,
            submit_error=self.submit_error,
            submit_result=self.submit_result,
            disabled=self.disabled,
        )

    # ==================== VALUES ====================

    def get_value(self, path: str, default: Any = None) -> Any:
        """Value at ``path`` (a copy), or ``default`` when nothing is stored there."""
        value = resolve(path, self._values)
        return default if value is UNSET else clone(value)

    def get_initial_value(self, path: str, default: Any = None) -> Any:
        value = resolve(path, self._initial_values) if self.initialized else UNSET
        return default if value is UNSET else clone(value)

    def get_values(self) -> Dict[str, Any]:
        """Deep copy of the value tree."""
        return clone(self._values)

    def get_initial_values(self) -> Optional[Dict[str, Any]]:
        """Deep copy of the initial values, or None before initialization."""
        return clone(self._initial_values) if self.initialized else None

    def get_flat_values(self) -> Dict[str, Any]:
        """Values as ``{path: value}`` for every composite and leaf."""
        return clone(self._flat(self._values))

    def _flat(self, tree: Dict[str, Any]) -> Dict[str, Any]:
        if tree is self._values:
            return self._flat_values.get_or_compute(lambda: flatten(self._values))
        return flatten(tree)

    def set_value(
        self,
        path: str,
        value: Any,
        validate: Optional[bool] = None,
        force_update: bool = False,
        update_modified: bool = True,
    ) -> None:
        """
        Set the value at ``path``.

        Nothing happens when the value is unchanged, unless ``force_update``.

        Args:
            path: Path to set
            value: New value (``''`` is stored as None with the nullify option)
            validate: Validate the field afterwards (default: validate_on_change)
            force_update: Apply and notify even when the value is unchanged
            update_modified: Recompute the modified flag of ``path``
        """
        if self.options.nullify and isinstance(value, str) and value == '':
            value = None
        if not force_update and values_equal(resolve(path, self._values), value):
            return
        self.set_values({path: value}, partial=True, validate=validate, update_modified=update_modified)

    def set_values(
        self,
        values: Mapping[str, Any],
        partial: bool = False,
        validate: Optional[bool] = None,
        update_modified: bool = True,
        initialize: bool = False,
    ) -> None:
        """
        Set several values at once.

        Args:
            values: ``{path: value}``; ``UNSET`` removes the path
            partial: Merge into the current tree instead of replacing it
            validate: Validate the mutated paths (default: validate_on_change)
            update_modified: Recompute modified flags
            initialize: Also make the result the new initial values
        """
        mutation = dict(values)
        base = self._values if partial else {}
        next_values = self._build_values(mutation, base)
        if self.options.transform is not None:
            mutation = dict(self.options.transform(clone(mutation), clone(next_values)))
            next_values = self._build_values(mutation, base)

        self._commit_values(next_values, mutation, partial, update_modified, initialize)

        if validate is None:
            validate = self.options.validate_on_change
        if validate and mutation:
            self._request_validation(list(mutation))

    def clear_values(self, paths: Optional[Iterable[str]] = None) -> None:
        """Set ``paths`` to None, or empty the whole tree when no paths are given."""
        if paths is None:
            self._commit_values({}, {}, partial=False)
            return
        mutation = {path: None for path in paths}
        self._commit_values(self._build_values(mutation, self._values), mutation, partial=True)

    def remove_values(self, paths: Iterable[str]) -> None:
        """Delete ``paths`` from the values and from the initial values."""
        paths = list(paths)
        previous = self._values
        values, initial_values = self._values, self._initial_values
        for path in paths:
            values = build(path, UNSET, values)
            initial_values = build(path, UNSET, initial_values)

        with self.atomic():
            self._replace_values(values)
            self._initial_values = initial_values
            self._errors = _without(self._errors, paths)
            self._modified = _without(self._modified, paths)
            self._touched = _without(self._touched, paths)
            self._set_status('values removed', validated=False, submitted=False)
        self._emit_values_change(previous, paths)

    def reset_values(self, paths: Optional[Iterable[str]] = None) -> None:
        """Restore ``paths`` (or every value) from the initial values."""
        if paths is None:
            self._commit_values(clone(self._initial_values), {}, partial=False)
            return
        mutation = {path: clone(resolve(path, self._initial_values)) for path in paths}
        self._commit_values(self._build_values(mutation, self._values), mutation, partial=True)

    def set_initial_values(self, values: Mapping[str, Any]) -> None:
        """
        Re-baseline the form.

        Values and initial values both become ``values``; errors, modified
        and touched flags are cleared and the form counts as initialized.
        """
        self._reinitialize(normalize(values))

    def _reinitialize(self, tree: Dict[str, Any]) -> None:
        previous = self._values
        with self.atomic():
            self._replace_values(tree)
            self._initial_values = clone(tree)
            self._errors = {}
            self._modified = {}
            self._touched = {}
            self._set_status(
                'initialized',
                initialized=True,
                validated=False,
                validate_error=None,
                submitted=False,
            )
        self._emit_values_change(previous, self._changed_paths(previous, self._values))

    def _build_values(self, mutation: Mapping[str, Any], base: Dict[str, Any]) -> Dict[str, Any]:
        tree = base
        for path, value in mutation.items():
            tree = build(path, clone(value), tree)
        return tree

    def _replace_values(self, values: Dict[str, Any]) -> None:
        self._values = values
        self._values_generation += 1

    def _commit_values(
        self,
        next_values: Dict[str, Any],
        mutation: Mapping[str, Any],
        partial: bool,
        update_modified: bool = True,
        initialize: bool = False,
    ) -> None:
        previous = self._values
        with self.atomic():
            self._replace_values(next_values)
            if initialize:
                self._initial_values = clone(next_values)
                self.initialized = True

            # Before initialization there is no baseline to compare against
            if update_modified and self.initialized:
                if partial:
                    modified = dict(self._modified)
                    for path in mutation:
                        modified = self._refresh_modified(modified, path, next_values)
                    self._modified = modified
                else:
                    self._modified = self._diff_modified()

            self._set_status('values changed', validated=False, submitted=False)

        changed = list(mutation) if partial else self._changed_paths(previous, next_values)
        self._emit_values_change(previous, changed)

    def _diff_modified(self) -> Dict[str, bool]:
        """Modified map of every path whose value differs from its initial value."""
        flat_values = self._flat(self._values)
        flat_initial = flatten(self._initial_values)
        return {
            path: True
            for path in list(flat_values) + [p for p in flat_initial if p not in flat_values]
            if not values_equal(flat_values.get(path, UNSET), flat_initial.get(path, UNSET))
        }

    def _refresh_modified(self, modified: Dict[str, bool], path: str, values: Dict[str, Any]) -> Dict[str, bool]:
        """Recompute the flags of ``path``, of every path below it and of its flagged ancestors."""
        modified = {key: flag for key, flag in modified.items() if not is_within(key, path)}
        value = resolve(path, values)
        initial = resolve(path, self._initial_values)
        modified[path] = not values_equal(value, initial)

        below_value = flatten(value, path)
        below_initial = flatten(initial, path)
        for key in list(below_value) + [p for p in below_initial if p not in below_value]:
            if not values_equal(below_value.get(key, UNSET), below_initial.get(key, UNSET)):
                modified[key] = True

        for key in list(modified):
            if key != path and is_within(path, key):
                modified[key] = not values_equal(resolve(key, values), resolve(key, self._initial_values))
        return modified

    def _changed_paths(self, previous: Dict[str, Any], current: Dict[str, Any]) -> List[str]:
        flat_previous = flatten(previous)
        flat_current = self._flat(current)
        paths = list(flat_current) + [p for p in flat_previous if p not in flat_current]
        return [
            path for path in paths
            if not values_equal(flat_current.get(path, UNSET), flat_previous.get(path, UNSET))
        ]

    def _emit_values_change(self, previous: Dict[str, Any], paths: Iterable[str]) -> None:
        if self.options.on_values_change is not None:
            self.options.on_values_change(clone(self._values), clone(previous))

        for path in paths:
            callbacks = self._watchers.get(path)
            if not callbacks:
                continue
            value = resolve(path, self._values)
            previous_value = resolve(path, previous)
            if values_equal(value, previous_value):
                continue
            status = FieldStatus(
                name=path,
                value=clone(_public(value)),
                previous_value=clone(_public(previous_value)),
                modified=self.is_modified(path),
                touched=self.is_touched(path),
            )
            for callback in list(callbacks):
                try:
                    callback(status)
                except Exception as e:
                    logger.warning(f"Error in watcher callback for '{path}': {e}")

    def _request_validation(self, paths: Optional[List[str]] = None) -> None:
        """Hook for change/touch triggered validation; the bare store has no validators."""

    # ==================== ERRORS ====================

    def get_error(self, path: str) -> Any:
        return self._errors.get(path)

    def get_errors(self) -> Dict[str, Any]:
        return dict(self._errors)

    def get_initial_error(self, path: str) -> Any:
        return self._initial_errors.get(path)

    def get_initial_errors(self) -> Dict[str, Any]:
        return dict(self._initial_errors)

    def set_error(self, path: str, error: Any) -> None:
        """Set (or, with None/False, remove) the error of a single path."""
        check_path_syntax(path)
        self.set_errors({path: error}, partial=True)

    def set_errors(self, errors: Mapping[str, Any], partial: bool = False) -> None:
        """
        Replace the errors, or merge them into the current ones.

        Entries whose error is None or False are removed.
        """
        merged = {**self._errors, **errors} if partial else dict(errors)
        self._errors = filter_errors(merged)
        self._mark_changed()

    def clear_errors(self, paths: Optional[Iterable[str]] = None) -> None:
        """Remove the errors of ``paths`` (and below), or all errors."""
        self._errors = {} if paths is None else _without(self._errors, paths)
        self._mark_changed()

    def reset_errors(self, paths: Optional[Iterable[str]] = None) -> None:
        """Restore the initial errors of ``paths``, or all initial errors."""
        self._errors = self._restore(self._errors, self._initial_errors, paths)
        self._mark_changed()

    @staticmethod
    def _restore(current: Mapping[str, Any], initial: Mapping[str, Any], paths: Optional[Iterable[str]]) -> Dict[str, Any]:
        if paths is None:
            return dict(initial)
        paths = list(paths)
        restored = _without(current, paths)
        restored.update(_only(initial, paths))
        return restored

    # ==================== MODIFIED ====================

    def get_modified(self) -> Dict[str, bool]:
        return dict(self._modified)

    def is_modified(self, path: Optional[str] = None) -> bool:
        """Whether ``path`` (or any path when omitted) is modified."""
        if path is None:
            return any(self._modified.values())
        return bool(self._modified.get(path))

    def set_modified(self, modified: Mapping[str, bool], partial: bool = False) -> None:
        self._modified = {**self._modified, **modified} if partial else dict(modified)
        self._mark_changed()

    def set_modified_field(self, path: str, modified: bool = True) -> None:
        check_path_syntax(path)
        self.set_modified({path: modified}, partial=True)

    def clear_modified(self, paths: Optional[Iterable[str]] = None) -> None:
        self._modified = {} if paths is None else _without(self._modified, paths)
        self._mark_changed()

    def reset_modified(self, paths: Optional[Iterable[str]] = None) -> None:
        self._modified = self._restore(self._modified, self._initial_modified, paths)
        self._mark_changed()

    # ==================== TOUCHED ====================

    def get_touched(self) -> Dict[str, bool]:
        return dict(self._touched)

    def is_touched(self, path: Optional[str] = None) -> bool:
        """Whether ``path`` (or any path when omitted) was touched."""
        if path is None:
            return any(self._touched.values())
        return bool(self._touched.get(path))

    def set_touched(self, touched: Mapping[str, bool], partial: bool = False) -> None:
        self._touched = {**self._touched, **touched} if partial else dict(touched)
        self._mark_changed()

    def set_touched_field(self, path: str, touched: bool = True) -> None:
        """Mark a field as touched (usually when it loses focus)."""
        check_path_syntax(path)
        self.set_touched({path: touched}, partial=True)

    def clear_touched_fields(self, paths: Optional[Iterable[str]] = None) -> None:
        self._touched = {} if paths is None else _without(self._touched, paths)
        self._mark_changed()

    def reset_touched(self, paths: Optional[Iterable[str]] = None) -> None:
        self._touched = self._restore(self._touched, self._initial_touched, paths)
        self._mark_changed()

    # ==================== LIST OPERATIONS ====================

    def _get_list(self, path: str) -> List[Any]:
        current = resolve(path, self._values)
        if is_empty(current):
            return []
        if not isinstance(current, (list, tuple)):
            raise PathTypeError(path, f"expected a list, found {type(current).__name__}")
        return list(current)

    @staticmethod
    def _check_index(path: str, items: List[Any], index: int) -> None:
        if not 0 <= index < len(items):
            raise IndexError(f"list index {index} out of range for '{path}' (length {len(items)})")

    def _splice(
        self,
        path: str,
        items: List[Any],
        reindex: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None,
        marked_indices: Iterable[int] = (),
    ) -> None:
        """Store the spliced list, then move the flat-map keys after their elements."""
        with self.atomic():
            self.set_values({path: items}, partial=True, update_modified=False)
            if reindex is not None:
                self._errors = reindex(self._errors)
                self._touched = reindex(self._touched)
                self._modified = reindex(self._modified)
            # Before initialization there is no baseline to compare against
            if self.initialized:
                modified = dict(self._modified)
                for index in marked_indices:
                    modified[f'{path}[{index}]'] = True
                modified[path] = True
                self._modified = modified
            self._mark_changed()

    def append_list_item(self, path: str, *items: Any) -> None:
        """Append ``items`` to the list at ``path``."""
        self.insert_list_item(path, len(self._get_list(path)), *items)

    def prepend_list_item(self, path: str, *items: Any) -> None:
        """Insert ``items`` at the start of the list at ``path``."""
        self.insert_list_item(path, 0, *items)

    def insert_list_item(self, path: str, index: int, *items: Any) -> None:
        """
        Insert ``items`` at ``index`` in the list at ``path``.

        The index is clamped into the list. Errors, modified and touched keys
        of the following elements shift with them.
        """
        current = self._get_list(path)
        if not items:
            return
        index = max(0, min(index, len(current)))
        count = len(items)
        current[index:index] = list(items)
        self._splice(
            path,
            current,
            lambda flat: insert_path_indices(flat, path, index, count),
            range(index, index + count),
        )

    def remove_list_item(self, path: str, *indexes: int) -> None:
        """Remove the elements at ``indexes`` from the list at ``path``."""
        current = self._get_list(path)
        targets = sorted(set(indexes), reverse=True)
        for index in targets:
            self._check_index(path, current, index)
        if not targets:
            return
        for index in targets:
            del current[index]

        def reindex(flat: Dict[str, Any]) -> Dict[str, Any]:
            # Highest first, so lower indices are still valid
            for index in targets:
                flat = remove_path_indices(flat, path, index)
            return flat

        self._splice(path, current, reindex)

    def move_list_item(self, path: str, from_index: int, to_index: int) -> None:
        """
        Move one element of the list at ``path``.

        ``to_index`` is clamped into the list; every slot between the two
        positions is marked as modified.
        """
        current = self._get_list(path)
        self._check_index(path, current, from_index)
        to_index = max(0, min(to_index, len(current) - 1))
        if from_index == to_index:
            return
        current.insert(to_index, current.pop(from_index))
        low, high = sorted((from_index, to_index))
        self._splice(
            path,
            current,
            lambda flat: move_path_indices(flat, path, from_index, to_index),
            range(low, high + 1),
        )

    def swap_list_item(self, path: str, first: int, second: int) -> None:
        """Exchange two elements of the list at ``path``."""
        current = self._get_list(path)
        self._check_index(path, current, first)
        self._check_index(path, current, second)
        if first == second:
            return
        current[first], current[second] = current[second], current[first]
        self._splice(
            path,
            current,
            lambda flat: swap_path_indices(flat, path, first, second),
            (first, second),
        )

    def replace_list_item(self, path: str, index: int, item: Any) -> None:
        """Replace one element of the list at ``path`` and drop its errors."""
        if index < 0:
            raise IndexError(f"list index {index} out of range for '{path}'")
        current = self._get_list(path)
        while len(current) <= index:
            current.append(None)
        current[index] = item
        slot = f'{path}[{index}]'
        with self.atomic():
            self._splice(path, current, marked_indices=(index,))
            self.clear_errors([slot])

    # ==================== RESET / CLEAR ====================

    def reset(self, paths: Optional[Iterable[str]] = None) -> None:
        """
        Restore values, errors, modified and touched flags to their initial state.

        Ignored while a validation is running.

        Args:
            paths: Only reset these paths (default: the whole form)
        """
        if self.validating:
            logger.debug("Reset ignored while validating")
            return
        if paths is not None:
            paths = list(paths)
            with self.atomic():
                self.reset_values(paths)
                self.reset_errors(paths)
                self.reset_modified(paths)
                self.reset_touched(paths)
            return

        with self.atomic():
            self.reset_values()
            self._errors = dict(self._initial_errors)
            self._modified = dict(self._initial_modified)
            self._touched = dict(self._initial_touched)
            self._set_status(
                'reset',
                validated=False,
                validate_error=None,
                submitted=False,
                submit_count=0,
                submit_error=None,
                submit_result=None,
            )

    def clear(self, paths: Optional[Iterable[str]] = None) -> None:
        """
        Clear values, errors, modified and touched flags.

        Initial values are kept, so ``reset`` can still restore them.

        Args:
            paths: Only clear these paths (default: the whole form)
        """
        if paths is not None:
            paths = list(paths)
        with self.atomic():
            self.clear_values(paths)
            self.clear_errors(paths)
            self.clear_modified(paths)
            self.clear_touched_fields(paths)
            if paths is None:
                self._set_status(
                    'cleared',
                    validated=False,
                    validate_error=None,
                    submitted=False,
                    submit_error=None,
                    submit_result=None,
                )
