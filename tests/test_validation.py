"""Tests for validation orchestration."""
import asyncio

import pytest

from formstate import CallbackContractError, Form


def required(path, value, values):
    async def check():
        return 'required' if not value else None
    return check()


class TestFieldValidation:
    """Test validate_field / validate_fields."""

    @pytest.mark.asyncio
    async def test_validate_field_stores_error(self):
        form = Form(initial_values={'name': ''}, validate_field=required)

        error = await form.validate_field('name')

        assert error == 'required'
        assert form.get_error('name') == 'required'
        assert not form.validated
        assert not form.validating

    @pytest.mark.asyncio
    async def test_valid_field_clears_error(self):
        form = Form(initial_values={'name': ''}, validate_field=required)
        await form.validate_field('name')

        form.set_value('name', 'Ada')
        assert await form.validate_field('name') is None
        assert form.get_errors() == {}

    @pytest.mark.asyncio
    async def test_validate_fields_merges(self):
        form = Form(initial_values={'a': '', 'b': 'x', 'c': ''}, validate_field=required)
        form.set_error('other', 'kept')

        errors = await form.validate_fields(['a', 'b'])

        assert errors == {'a': 'required'}
        assert form.get_errors() == {'a': 'required', 'other': 'kept'}

    @pytest.mark.asyncio
    async def test_fields_run_in_parallel(self):
        """Every field validator is started before any finishes."""
        started = []
        release = asyncio.Event()

        async def slow(path, value, values):
            started.append(path)
            await release.wait()
            return None

        form = Form(initial_values={'a': 1, 'b': 2}, validate_field=slow)
        task = asyncio.ensure_future(form.validate_fields(['a', 'b']))
        while len(started) < 2:
            await asyncio.sleep(0)
        assert form.validating

        release.set()
        await task
        assert not form.validating

    @pytest.mark.asyncio
    async def test_latest_run_wins(self):
        """A stale result arriving last is dropped."""
        release_first = asyncio.Event()

        async def check(path, value, values):
            if value == 'first':
                await release_first.wait()
                return 'stale error'
            return 'fresh error'

        form = Form(initial_values={'x': 'first'}, validate_field=check)
        first = asyncio.ensure_future(form.validate_field('x'))
        await asyncio.sleep(0)

        form.set_value('x', 'second')
        assert await form.validate_field('x') == 'fresh error'

        release_first.set()
        assert await first == 'stale error'
        assert form.get_error('x') == 'fresh error'
        assert not form.validating

    @pytest.mark.asyncio
    async def test_validator_fault(self):
        """A failing validator sets validate_error, not field errors."""
        async def broken(path, value, values):
            raise RuntimeError('validator down')

        form = Form(initial_values={'a': 1}, validate_field=broken)
        assert await form.validate_fields(['a']) is None
        assert isinstance(form.validate_error, RuntimeError)
        assert form.get_errors() == {}
        assert not form.validating

    @pytest.mark.asyncio
    async def test_synchronous_validator_is_rejected(self):
        form = Form(initial_values={'a': 1}, validate_field=lambda path, value, values: None)
        with pytest.raises(CallbackContractError):
            await form.validate_field('a')
        assert not form.validating

    @pytest.mark.asyncio
    async def test_without_field_validator(self):
        form = Form(initial_values={'a': 1})
        assert await form.validate_field('a') is None


class TestFormValidation:
    """Test whole-form validate()."""

    @pytest.mark.asyncio
    async def test_validate_replaces_errors(self):
        seen = []

        async def validate(values, modified):
            seen.append((values, modified))
            return {'email': 'invalid', 'name': None}

        form = Form(initial_values={'name': 'Ada', 'email': 'nope'}, validate=validate)
        form.set_error('stale', 'old')
        form.set_value('name', 'Grace')

        errors = await form.validate()

        assert errors == {'email': 'invalid'}
        assert form.get_errors() == {'email': 'invalid'}
        assert not form.validated
        assert seen == [({'name': 'Grace', 'email': 'nope'}, {'name': True})]

    @pytest.mark.asyncio
    async def test_validate_success(self):
        async def validate(values, modified):
            return {}

        form = Form(initial_values={'a': 1}, validate=validate)
        form.set_error('a', 'old')

        assert await form.validate() == {}
        assert form.validated
        assert form.get_errors() == {}

    @pytest.mark.asyncio
    async def test_stale_failure_does_not_downgrade_newer_success(self):
        release_first = asyncio.Event()
        calls = []

        async def validate(values, modified):
            calls.append(values['a'])
            if len(calls) == 1:
                await release_first.wait()
                return {'a': 'bad'}
            return None

        form = Form(initial_values={'a': 1}, validate=validate)
        first = asyncio.ensure_future(form.validate())
        await asyncio.sleep(0)
        await form.validate()
        assert form.validated

        release_first.set()
        await first
        assert form.validated
        assert form.get_errors() == {}

    @pytest.mark.asyncio
    async def test_validate_fault(self):
        async def validate(values, modified):
            raise ValueError('schema missing')

        form = Form(initial_values={'a': 1}, validate=validate)
        form.set_error('a', 'kept')

        assert await form.validate() is None
        assert isinstance(form.validate_error, ValueError)
        assert form.get_errors() == {'a': 'kept'}

    @pytest.mark.asyncio
    async def test_falls_back_to_field_validator(self):
        """Without a form validator, modified and touched fields are validated."""
        checked = []

        async def check(path, value, values):
            checked.append(path)
            return 'required' if not value else None

        form = Form(initial_values={'a': 'x', 'b': 'y', 'c': 'z'}, validate_field=check)
        form.set_value('a', '')
        form.set_touched_field('b')

        errors = await form.validate()

        assert sorted(checked) == ['a', 'b']
        assert errors == {'a': 'required'}
        assert not form.validated

        form.set_value('a', 'back')
        await form.validate()
        assert form.validated

    @pytest.mark.asyncio
    async def test_without_any_validator(self):
        form = Form(initial_values={'a': 1})
        assert await form.validate() == {}
        assert form.validated


class TestTriggers:
    """Test change, touch and init triggered validation."""

    @pytest.mark.asyncio
    async def test_validate_on_change(self):
        form = Form(initial_values={'name': 'Ada'}, validate_field=required, validate_on_change=True)

        form.set_value('name', '')
        await form.drain()

        assert form.get_error('name') == 'required'

    @pytest.mark.asyncio
    async def test_validate_argument_overrides_option(self):
        form = Form(initial_values={'name': 'Ada'}, validate_field=required)

        form.set_value('name', '', validate=True)
        await form.drain()
        assert form.get_error('name') == 'required'

        form.set_value('name', 'x')
        await form.drain()
        assert form.get_error('name') == 'required'

    @pytest.mark.asyncio
    async def test_validate_on_touch(self):
        form = Form(initial_values={'name': ''}, validate_field=required, validate_on_touch=True)

        form.set_touched_field('name', False)
        await form.drain()
        assert form.get_errors() == {}

        form.set_touched_field('name')
        await form.drain()
        assert form.get_error('name') == 'required'

    @pytest.mark.asyncio
    async def test_validate_on_init(self):
        async def validate(values, modified):
            return {'name': 'required'} if not values.get('name') else {}

        form = Form(initial_values={'name': ''}, validate=validate, validate_on_init=True)
        await form.mount()
        assert form.get_error('name') == 'required'

        form.set_initial_values({'name': 'Ada'})
        await form.drain()
        assert form.validated

    def test_without_event_loop(self):
        """Triggers outside an event loop are skipped, not raised."""
        form = Form(initial_values={'name': 'Ada'}, validate_field=required, validate_on_change=True)
        form.set_value('name', '')
        assert form.get_errors() == {}


class TestDebounce:
    """Test time-window debouncing of validation."""

    @pytest.mark.asyncio
    async def test_burst_runs_validator_once(self):
        calls = []

        async def check(path, value, values):
            calls.append(value)
            return None

        form = Form(initial_values={'name': ''}, validate_field=check, validate_delay=0.01)
        results = await asyncio.gather(*(form.validate_field('name') for _ in range(3)))

        assert calls == ['']
        assert results == [None, None, None]

    @pytest.mark.asyncio
    async def test_burst_uses_latest_values(self):
        calls = []

        async def check(path, value, values):
            calls.append(value)
            return None

        form = Form(initial_values={'name': ''}, validate_field=check, validate_delay=0.01)
        first = asyncio.ensure_future(form.validate_field('name'))
        await asyncio.sleep(0)
        form.set_value('name', 'Ada')
        await asyncio.gather(first, form.validate_field('name'))

        assert calls == ['Ada']
