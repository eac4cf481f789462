"""Pytest configuration and shared fixtures."""
import pytest

import formstate.config as config_module
from formstate import Form, FormState


@pytest.fixture(autouse=True)
def restore_default_options():
    """Restore process-wide default options after each test."""
    original = config_module._default_options

    yield

    config_module._default_options = original


@pytest.fixture
def user_values():
    """Nested values of a typical user form."""
    return {
        'name': 'Ada',
        'email': 'ada@example.com',
        'address': {'city': 'London', 'lines': ['12 Crescent', 'Flat 3']},
        'tags': ['math', 'poetry', 'engines'],
    }


@pytest.fixture
def state(user_values):
    """Initialized store without validators."""
    return FormState(initial_values=user_values)


@pytest.fixture
def form(user_values):
    """Initialized form without validators."""
    return Form(initial_values=user_values)
