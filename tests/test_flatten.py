"""Tests for flatten/reconstruct."""
import pytest

from formstate import flatten, reconstruct
from formstate.flatten import path_depth


class TestFlatten:
    """Test nested tree -> {path: value}."""

    def test_emits_composites_and_leaves(self):
        """Every composite is listed alongside its descendants."""
        tree = {'a': {'b': 1}, 'c': [10, {'d': 2}]}
        assert flatten(tree) == {
            'a': {'b': 1},
            'a.b': 1,
            'c': [10, {'d': 2}],
            'c[0]': 10,
            'c[1]': {'d': 2},
            'c[1].d': 2,
        }

    def test_brackets_special_keys(self):
        """Keys with spaces or dots are bracket-wrapped."""
        tree = {'a': {'b c': {'d': 1}}, 'e': {'f.g': 2}, 'h i': 3}
        flat = flatten(tree)
        assert flat['a[b c].d'] == 1
        assert flat['e[f.g]'] == 2
        assert flat['[h i]'] == 3

    def test_preserve_keys(self):
        """Root keys are kept as they are when asked to."""
        flat = flatten({'a.b': {'c': 1}}, preserve_keys=True)
        assert flat == {'a.b': {'c': 1}, 'a.b.c': 1}

    def test_prefix(self):
        assert flatten([1, 2], prefix='items') == {'items[0]': 1, 'items[1]': 2}

    def test_scalars_and_empty_containers(self):
        """Empty composites are still emitted; scalars have no entries."""
        assert flatten({'a': [], 'b': {}}) == {'a': [], 'b': {}}
        assert flatten(5) == {}

    def test_path_depth(self):
        assert path_depth('a.b[2].c') == 4
        assert path_depth('[x y]') == 1


class TestReconstruct:
    """Test {path: value} -> nested tree."""

    def test_builds_nested_tree(self):
        flat = {'a.b': 1, 'c[1]': 'y', 'c[0]': 'x', 'd[e f]': True}
        assert reconstruct(flat) == {'a': {'b': 1}, 'c': ['x', 'y'], 'd': {'e f': True}}

    def test_leaf_entries_win_over_parent_copies(self):
        """Deeper entries are applied after their parents, whatever the order."""
        flat = {'a.b': 2, 'a': {'b': 1, 'c': 3}}
        assert reconstruct(flat) == {'a': {'b': 2, 'c': 3}}

    def test_does_not_alias_input(self):
        """Reconstructed containers are copies."""
        inner = {'b': [1, 2]}
        tree = reconstruct({'a': inner})
        tree['a']['b'].append(3)
        assert inner == {'b': [1, 2]}

    def test_accepts_nested_mapping(self):
        """A nested mapping with plain keys is its own reconstruction."""
        assert reconstruct({'a': {'b': [1]}}) == {'a': {'b': [1]}}

    @pytest.mark.parametrize('tree', [
        {},
        {'a': 1, 'b': 'text', 'c': None},
        {'a': {'b': {'c': {'d': [1, 2, {'e': 3}]}}}},
        {'list': [[1, 2], [3, [4, 5]]], 'empty': [], 'obj': {}},
        {'first name': 'Ada', 'address': {'zip.code': '123', 'line 1': 'x'}},
        {'rows': [{'cells': [{'v': 1}, {'v': None}]}, {'cells': []}]},
    ])
    def test_round_trip(self, tree):
        """reconstruct(flatten(t)) == t."""
        assert reconstruct(flatten(tree)) == tree
