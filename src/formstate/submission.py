"""
Submission orchestration: validate, then submit a snapshot of the values.

Only one submission runs at a time. A ``submit()`` issued while another one
is in progress joins it and receives the same result, so rapid repeated
triggers (a double click) make a single logical submission.
"""

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from formstate.config import AfterSubmit
from formstate.errors import CallbackContractError, MissingCallbackError
from formstate.flatten import flatten
from formstate.path_resolver import build, clone

if TYPE_CHECKING:
    from formstate.form import Form

logger = logging.getLogger(__name__)


class SubmissionOrchestrator:
    """Drives the validate-then-submit pipeline of one form."""

    def __init__(self, form: 'Form'):
        self._form = form
        self._pending: Optional[asyncio.Future] = None

    async def submit(self) -> Any:
        """
        Submit the form.

        Returns:
            The submit callback's result, or None when validation blocked the
            submission or the callback failed (see ``submit_error``)

        Raises:
            MissingCallbackError: If no ``on_submit`` callback is configured
            CallbackContractError: If ``on_submit`` does not return an awaitable
        """
        if self._pending is not None and not self._pending.done():
            logger.debug("Submission already in progress, joining it")
        else:
            self._pending = asyncio.ensure_future(self._run())
        return await asyncio.shield(self._pending)

    def _prepare(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Apply the trim/nullify options to a snapshot of the values."""
        options = self._form.options
        if not (options.trim_on_submit or options.nullify):
            return values
        for path, value in flatten(values).items():
            if isinstance(value, str):
                cleaned = value.strip() if options.trim_on_submit else value
                values = build(path, None if cleaned == '' else cleaned, values)
        return values

    def _apply_after_submit(self, values: Dict[str, Any]) -> None:
        form = self._form
        policy = form.options.after_submit
        if policy is AfterSubmit.INITIALIZE:
            form._reinitialize(clone(values))
        elif policy is AfterSubmit.RESET:
            form.reset_values()
        elif policy is AfterSubmit.CLEAR:
            form.clear_values()
        form.clear_errors()
        form.clear_modified()
        form.clear_touched_fields()

    async def _run(self) -> Any:
        form = self._form
        options = form.options
        if options.on_submit is None:
            raise MissingCallbackError('on_submit')

        if options.validate_on_submit and not form.validated:
            await form.validate()
            if not form.alive:
                return None
            if form.has_error or form.validate_error is not None:
                logger.debug(f"Submission blocked by validation: {sorted(form.get_errors())}")
                return None

        # Later edits must not leak into what is submitted
        values = self._prepare(form.get_values())
        pending = options.on_submit(clone(values))
        if not inspect.isawaitable(pending):
            raise CallbackContractError('on_submit', type(pending).__name__)

        if form.alive:
            form._set_status('submit', submitting=True, submitted=False, submit_error=None)
        try:
            result = await pending
        except Exception as exc:
            logger.warning(f"Submission failed: {exc!r}")
            if form.alive:
                form._set_status('submit failed', submitting=False, submit_error=exc)
                if options.on_error is not None:
                    options.on_error(exc)
            return None

        if not form.alive:
            return result
        with form.atomic():
            self._apply_after_submit(values)
            form._set_status(
                'submitted',
                submitting=False,
                submitted=True,
                submit_count=form.submit_count + 1,
                submit_result=result,
            )
        if options.on_success is not None:
            options.on_success(result, clone(values))
        return result
