"""
Form: a ``FormState`` with its asynchronous collaborators.

Adds loading, validation and submission on top of the synchronous store,
and the mount/unmount lifecycle that guards them: once a form is unmounted,
results of operations still in flight are dropped instead of committed.

Example:
    async def save(values):
        return await api.save_user(values)

    async with Form(initial_values={'name': ''}, on_submit=save) as form:
        form.set_value('name', 'Ada')
        await form.submit()
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, Iterable, List, Mapping, Optional, Set

from formstate.config import FormOptions
from formstate.form_state import FormState
from formstate.loader import FormLoader
from formstate.submission import SubmissionOrchestrator
from formstate.validation import ValidationOrchestrator

logger = logging.getLogger(__name__)


class Form(FormState):
    """State store of one form plus its loader, validation and submission."""

    def __init__(self, options: Optional[FormOptions] = None, **overrides):
        super().__init__(options, **overrides)
        self._unmounted = False
        self._tasks: Set[asyncio.Task] = set()
        self.validation = ValidationOrchestrator(self)
        self.submission = SubmissionOrchestrator(self)
        self.loader = FormLoader(self)

    # ==================== LIFECYCLE ====================

    @property
    def alive(self) -> bool:
        """False once the form has been unmounted."""
        return not self._unmounted

    async def mount(self) -> None:
        """Load initial values, or run the initial validation when configured."""
        if self.options.load is not None:
            await self.load()
        elif self.initialized and self.options.validate_on_init:
            await self.validate()

    def unmount(self) -> None:
        """
        Tear the form down.

        Operations still in flight run to completion but no longer change
        the state.
        """
        if self._unmounted:
            return
        self._unmounted = True
        logger.debug(f"Form unmounted with {len(self._tasks)} background task(s) pending")

    async def __aenter__(self) -> 'Form':
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    # ==================== ASYNC OPERATIONS ====================

    async def load(self) -> Optional[Dict[str, Any]]:
        """Run the ``load`` callback and initialize the form with its result."""
        return await self.loader.load()

    async def validate(self) -> Optional[Dict[str, Any]]:
        """Validate the whole form; returns the errors found."""
        return await self.validation.validate()

    async def validate_field(self, path: str) -> Any:
        """Validate one field; returns its error, None when valid."""
        return await self.validation.validate_field(path)

    async def validate_fields(self, paths: Iterable[str]) -> Optional[Dict[str, Any]]:
        """Validate several fields in parallel; returns their errors."""
        return await self.validation.validate_fields(paths)

    async def submit(self) -> Any:
        """Validate if needed, then submit; returns the submit result."""
        return await self.submission.submit()

    async def drain(self) -> None:
        """Wait until every validation triggered in the background has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ==================== TRIGGERS ====================

    def set_initial_values(self, values: Mapping[str, Any], validate: Optional[bool] = None) -> None:
        """
        Re-baseline the form.

        Args:
            values: New initial values as a nested tree
            validate: Validate afterwards (default: validate_on_init)
        """
        super().set_initial_values(values)
        if validate is None:
            validate = self.options.validate_on_init
        if validate:
            self._request_validation()

    def set_touched_field(self, path: str, touched: bool = True) -> None:
        super().set_touched_field(path, touched)
        if touched and self.options.validate_on_touch:
            self._request_validation([path])

    def _request_validation(self, paths: Optional[List[str]] = None) -> None:
        if paths is None or self.options.validate_field is None:
            self._schedule(self.validate())
        else:
            self._schedule(self.validate_fields(paths))

    def _schedule(self, coroutine: Coroutine[Any, Any, Any]) -> Optional[asyncio.Task]:
        if not self.alive:
            coroutine.close()
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coroutine.close()
            logger.debug("No running event loop, skipping triggered validation")
            return None
        task = loop.create_task(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background validation raised: {error!r}")
