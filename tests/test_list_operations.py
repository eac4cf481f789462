"""Tests for list operations and the flat maps that follow them."""
import pytest

from formstate import FormState, PathTypeError


@pytest.fixture
def numbers():
    return FormState(initial_values={'a': [1, 2, 3, 4, 5]})


class TestInsertion:
    """Test append, prepend and insert."""

    def test_append(self, numbers):
        numbers.append_list_item('a', 6, 7)
        assert numbers.get_value('a') == [1, 2, 3, 4, 5, 6, 7]
        assert numbers.is_modified('a')
        assert numbers.is_modified('a[5]')
        assert numbers.is_modified('a[6]')

    def test_append_creates_missing_list(self, numbers):
        numbers.append_list_item('b', 'x')
        assert numbers.get_value('b') == ['x']

    def test_prepend_shifts_flags(self, numbers):
        numbers.set_errors({'a[0]': 'bad'})
        numbers.set_touched_field('a[1]')

        numbers.prepend_list_item('a', 0)

        assert numbers.get_value('a') == [0, 1, 2, 3, 4, 5]
        assert numbers.get_errors() == {'a[1]': 'bad'}
        assert numbers.get_touched() == {'a[2]': True}
        assert numbers.is_modified('a[0]')

    def test_insert(self, numbers):
        numbers.set_errors({'a[0]': 'x', 'a[1]': 'y'})
        numbers.insert_list_item('a', 1, 'p', 'q')

        assert numbers.get_value('a') == [1, 'p', 'q', 2, 3, 4, 5]
        assert numbers.get_errors() == {'a[0]': 'x', 'a[3]': 'y'}
        assert numbers.is_modified('a[1]') and numbers.is_modified('a[2]')

    def test_insert_clamps_index(self, numbers):
        numbers.insert_list_item('a', 99, 6)
        assert numbers.get_value('a')[-1] == 6

    def test_insert_nothing(self, numbers):
        numbers.insert_list_item('a', 0)
        assert not numbers.is_modified()

    def test_before_initialization_nothing_is_modified(self):
        state = FormState()
        state.set_value('tags', ['a'])

        state.append_list_item('tags', 'b')

        assert state.get_value('tags') == ['a', 'b']
        assert state.get_modified() == {}
        assert not state.is_modified()

    def test_list_operation_on_non_list(self):
        state = FormState(initial_values={'a': 'text'})
        with pytest.raises(PathTypeError):
            state.append_list_item('a', 1)


class TestRemoval:
    """Test remove."""

    def test_remove_several(self):
        state = FormState(initial_values={'a': [1, 2, 3, 4]})
        state.set_errors({'a[0]': 'invalid', 'a[1]': 'invalid'})

        state.remove_list_item('a', 0, 2)

        assert state.get_value('a') == [2, 4]
        assert state.get_errors() == {'a[0]': 'invalid'}
        assert state.is_modified('a')

    def test_remove_shifts_descendant_keys(self):
        state = FormState(initial_values={'people': [{'name': 'A'}, {'name': 'B'}]})
        state.set_error('people[1].name', 'taken')

        state.remove_list_item('people', 0)

        assert state.get_value('people') == [{'name': 'B'}]
        assert state.get_errors() == {'people[0].name': 'taken'}

    def test_remove_out_of_range(self, numbers):
        with pytest.raises(IndexError):
            numbers.remove_list_item('a', 5)
        assert numbers.get_value('a') == [1, 2, 3, 4, 5]


class TestMoveAndSwap:
    """Test move, swap and replace."""

    def test_move(self, numbers):
        numbers.move_list_item('a', 3, 1)
        assert numbers.get_value('a') == [1, 4, 2, 3, 5]

    def test_move_follows_errors(self):
        state = FormState(initial_values={'a': [1, 2, 3, 4]})
        state.set_errors({'a[0]': 'invalid', 'a[1]': 'invalid', 'a[2]': 'invalid'})

        state.move_list_item('a', 3, 1)

        assert state.get_errors() == {'a[0]': 'invalid', 'a[2]': 'invalid', 'a[3]': 'invalid'}
        assert state.get_error('a[1]') is None

    def test_move_marks_window(self, numbers):
        numbers.move_list_item('a', 0, 2)
        assert numbers.get_value('a') == [2, 3, 1, 4, 5]
        assert all(numbers.is_modified(f'a[{i}]') for i in range(3))
        assert not numbers.is_modified('a[3]')

    def test_move_clamps_target(self, numbers):
        numbers.move_list_item('a', 0, 42)
        assert numbers.get_value('a') == [2, 3, 4, 5, 1]

    def test_move_invalid_source(self, numbers):
        with pytest.raises(IndexError):
            numbers.move_list_item('a', 9, 0)

    def test_swap(self, numbers):
        numbers.set_touched_field('a[0]')
        numbers.swap_list_item('a', 0, 4)

        assert numbers.get_value('a') == [5, 2, 3, 4, 1]
        assert numbers.get_touched() == {'a[4]': True}
        assert numbers.get_modified() == {'a[0]': True, 'a[4]': True, 'a': True}

    def test_replace(self):
        state = FormState(initial_values={'people': [{'name': 'A'}, {'name': 'B'}]})
        state.set_errors({'people[1]': 'bad', 'people[1].name': 'bad', 'people[0].name': 'bad'})

        state.replace_list_item('people', 1, {'name': 'C'})

        assert state.get_value('people') == [{'name': 'A'}, {'name': 'C'}]
        assert state.get_errors() == {'people[0].name': 'bad'}
        assert state.is_modified('people[1]')

    def test_list_operations_notify_once(self, numbers):
        calls = []
        numbers.on_state_changed(lambda: calls.append(1))
        numbers.move_list_item('a', 0, 1)
        assert calls == [1]
