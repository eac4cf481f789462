"""
Asynchronous loading of initial values.

The ``load`` callback returns an awaitable of the initial values. On success
the form is (re)initialized with them; on failure the error is stored in
``load_error`` and the form stays uninitialized. Only the most recent load
may commit, and nothing is committed after the form was unmounted.
"""

import inspect
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from formstate.errors import CallbackContractError
from formstate.generation import GenerationCounter

if TYPE_CHECKING:
    from formstate.form import Form

logger = logging.getLogger(__name__)

LOAD_SCOPE = 'load'


class FormLoader:
    """Runs the ``load`` callback of one form."""

    def __init__(self, form: 'Form'):
        self._form = form
        self._generations = GenerationCounter()

    async def load(self) -> Optional[Dict[str, Any]]:
        """
        Load initial values.

        Returns:
            The loaded values, or None when there is no loader or it failed
        """
        form = self._form
        loader = form.options.load
        if loader is None:
            return None

        token = self._generations.issue(LOAD_SCOPE)
        pending = loader()
        if not inspect.isawaitable(pending):
            raise CallbackContractError('load', type(pending).__name__)

        if form.alive:
            form._set_status('load', loading=True, load_error=None)
        try:
            values = await pending
        except Exception as exc:
            logger.warning(f"Loading initial values failed: {exc!r}")
            if form.alive and self._generations.is_current(LOAD_SCOPE, token):
                form._set_status('load failed', loading=False, load_error=exc)
            return None

        if not form.alive:
            logger.debug("Form unmounted while loading, dropping loaded values")
            return None
        if not self._generations.is_current(LOAD_SCOPE, token):
            logger.debug("Discarding values of a superseded load")
            return None

        try:
            with form.atomic():
                if values is not None:
                    form.set_initial_values(values, validate=False)
                form._set_status('loaded', loading=False)
        except Exception as exc:
            logger.warning(f"Loaded values could not be applied: {exc!r}")
            form._set_status('load failed', loading=False, load_error=exc)
            return None

        if values is not None and form.options.validate_on_init:
            await form.validate()
        return values
