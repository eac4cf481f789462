"""
Validation orchestration.

Runs the whole-form validator (``validate``) and the per-field validator
(``validate_field``) and commits their results to the form.

Ordering guarantee: each run takes a generation token for its scope (the
whole form, or one field path) when it starts. A run that finishes after a
newer run of the same scope was started is dropped: the stale validator is
not cancelled, its result is simply never applied. Nothing is committed
once the form has been unmounted.
"""

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Dict, Hashable, Iterable, List, Optional

from formstate.debounce import Debouncer
from formstate.errors import CallbackContractError
from formstate.form_state import filter_errors
from formstate.generation import GenerationCounter

if TYPE_CHECKING:
    from formstate.form import Form

logger = logging.getLogger(__name__)

# Scope of whole-form runs; field runs use their path as scope
FORM_SCOPE = ('form',)


def _close_pending(awaitables: Iterable[Any]) -> None:
    for awaitable in awaitables:
        if inspect.iscoroutine(awaitable):
            awaitable.close()


class ValidationOrchestrator:
    """Sequences validation runs of one form."""

    def __init__(self, form: 'Form'):
        self._form = form
        # One entry per field path, so bounded by the fields of the form
        self._generations = GenerationCounter()
        self._debouncer = Debouncer(form.options.validate_delay)
        self._in_flight: Dict[Hashable, int] = {}

    # ==================== PUBLIC API ====================

    async def validate(self) -> Optional[Dict[str, Any]]:
        """
        Validate the whole form.

        Returns:
            The errors found, or None when the validator failed
        """
        return await self._debouncer.call(FORM_SCOPE, self._run_form)

    async def validate_fields(self, paths: Iterable[str]) -> Optional[Dict[str, Any]]:
        """
        Validate several fields in parallel and merge their errors into the form.

        Returns:
            Errors of the validated fields, or None when a validator failed
        """
        paths = list(dict.fromkeys(paths))
        return await self._debouncer.call(('fields', tuple(paths)), self._run_fields, paths)

    async def validate_field(self, path: str) -> Any:
        """Validate one field and return its error (None when valid)."""
        errors = await self.validate_fields([path])
        return (errors or {}).get(path)

    # ==================== RUN BOOKKEEPING ====================

    def _begin(self, scope: Hashable) -> int:
        token = self._generations.issue(scope)
        self._in_flight[scope] = token
        return token

    def _finish(self, tokens: Dict[Hashable, int]) -> Dict[Hashable, int]:
        """Close runs; returns the ones that are still the newest of their scope."""
        current = {}
        for scope, token in tokens.items():
            if self._generations.is_current(scope, token):
                current[scope] = token
            if self._in_flight.get(scope) == token:
                del self._in_flight[scope]
        return current

    def _start_status(self) -> None:
        if self._form.alive:
            self._form._set_status('validate', validating=True, validate_error=None)

    def _settle_status(self, **changes) -> None:
        if not self._form.alive:
            return
        self._form._set_status('validate done', validating=bool(self._in_flight), **changes)

    def _fail(self, tokens: Dict[Hashable, int], error: Exception) -> None:
        current = self._finish(tokens)
        logger.warning(f"Validation failed: {error!r}")
        if current:
            self._settle_status(validate_error=error, validated=False)
        else:
            self._settle_status()

    # ==================== RUNS ====================

    async def _run_form(self) -> Optional[Dict[str, Any]]:
        form = self._form
        validator = form.options.validate
        if validator is None:
            if form.options.validate_field is not None:
                paths = list(dict.fromkeys([*form.get_modified(), *form.get_touched()]))
                return await self._run_fields(paths, whole_form=True)
            if form.alive:
                form._set_status('validated (no validator)', validated=True, validate_error=None)
            return {}

        tokens = {FORM_SCOPE: self._begin(FORM_SCOPE)}
        self._start_status()
        pending = validator(form.get_values(), form.get_modified())
        if not inspect.isawaitable(pending):
            self._finish(tokens)
            self._settle_status()
            raise CallbackContractError('validate', type(pending).__name__)

        try:
            result = await pending
        except Exception as exc:
            self._fail(tokens, exc)
            return None

        errors = filter_errors(result)
        current = self._finish(tokens)
        if not form.alive:
            return errors
        if not current:
            logger.debug("Discarding result of a superseded form validation")
            self._settle_status()
            return errors

        with form.atomic():
            form.set_errors(errors)
            self._settle_status(validated=not errors)
        return errors

    async def _run_fields(self, paths: List[str], whole_form: bool = False) -> Optional[Dict[str, Any]]:
        form = self._form
        validator = form.options.validate_field
        if validator is None:
            return None

        tokens = {path: self._begin(path) for path in paths}
        self._start_status()
        values = form.get_values()
        awaitables = []
        for path in paths:
            pending = validator(path, form.get_value(path), values)
            if not inspect.isawaitable(pending):
                _close_pending(awaitables)
                self._finish(tokens)
                self._settle_status()
                raise CallbackContractError('validate_field', type(pending).__name__)
            awaitables.append(pending)

        try:
            results = await asyncio.gather(*awaitables)
        except Exception as exc:
            self._fail(tokens, exc)
            return None

        errors = dict(zip(paths, results))
        current = self._finish(tokens)
        if not form.alive:
            return filter_errors(errors)

        stale = [path for path in paths if path not in current]
        if stale:
            logger.debug(f"Discarding superseded field validation results: {stale}")

        with form.atomic():
            form.set_errors({path: errors[path] for path in current}, partial=True)
            changes = {}
            if form.has_error:
                changes['validated'] = False
            elif whole_form:
                changes['validated'] = True
            self._settle_status(**changes)
        return filter_errors(errors)
