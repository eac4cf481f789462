"""
Sign-up form wired to a fake backend.

Shows loading a draft, editing nested values and list items, per-field
validation on change and a submission that re-baselines the form.

Run with:
    python examples/signup_form.py
"""

import asyncio
import logging
from typing import Any, Dict

from formstate import AfterSubmit, Form

logger = logging.getLogger(__name__)

TAKEN_EMAILS = {'ada@example.com'}


async def load_draft() -> Dict[str, Any]:
    """Pretend to fetch a saved draft."""
    await asyncio.sleep(0.01)
    return {
        'name': '',
        'email': 'ada@example.com',
        'address': {'city': 'London', 'lines': ['12 Crescent']},
        'interests': ['math'],
    }


async def check_field(path: str, value: Any, values: Dict[str, Any]) -> Any:
    if path == 'name' and not value:
        return 'Name is required'
    if path == 'email':
        await asyncio.sleep(0.01)  # uniqueness lookup
        if value in TAKEN_EMAILS:
            return 'Email is already registered'
    return None


async def save(values: Dict[str, Any]) -> Dict[str, Any]:
    await asyncio.sleep(0.01)
    return {'id': 42, **values}


async def main() -> None:
    form = Form(
        load=load_draft,
        validate_field=check_field,
        validate_on_change=True,
        validate_delay=0.05,
        after_submit=AfterSubmit.INITIALIZE,
        trim_on_submit=True,
        on_success=lambda result, values: logger.info(f"Saved user {result['id']}"),
    )

    async with form:
        form.set_value('name', '  Ada Lovelace ')
        form.set_value('email', 'countess@example.com')
        form.append_list_item('address.lines', 'Marylebone')
        form.insert_list_item('interests', 0, 'poetry')
        await form.drain()

        logger.info(f"Modified: {sorted(form.get_modified())}")
        logger.info(f"Errors: {form.get_errors()}")

        result = await form.submit()
        logger.info(f"Submitted: {result}")
        logger.info(f"Modified after submit: {form.is_modified()}")


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
