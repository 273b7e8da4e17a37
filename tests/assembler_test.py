import pytest

from megamind.core.assembler import AssemblyMode
from megamind.core.assembler import assemble


@pytest.mark.unit
class TestReplace:
    @pytest.mark.parametrize(
        "previous, incoming",
        [
            (None, {"items": [1]}),
            ({"items": [1, 2]}, {"items": [3, 4]}),
            ("naruto", "sasuke"),
        ],
    )
    def test_replace_returns_incoming(self, previous, incoming):
        assert assemble(previous, incoming, AssemblyMode.REPLACE) is incoming

    def test_default_mode_is_replace(self):
        assert assemble({"items": [1]}, {"items": [2]}) == {"items": [2]}


@pytest.mark.unit
class TestAppend:
    def test_concatenates_common_sequence_field(self):
        merged = assemble(
            {"items": [1, 2]},
            {"items": [3, 4]},
            AssemblyMode.APPEND,
        )
        assert merged == {"items": [1, 2, 3, 4]}

    def test_other_fields_come_from_incoming(self):
        merged = assemble(
            {"page": 1, "items": ["a"], "total": 10},
            {"page": 2, "items": ["b"], "total": 12},
            AssemblyMode.APPEND,
        )
        assert merged == {"page": 2, "items": ["a", "b"], "total": 12}

    def test_inputs_are_not_mutated(self):
        previous, incoming = {"items": [1]}, {"items": [2]}
        assemble(previous, incoming, AssemblyMode.APPEND)
        assert previous == {"items": [1]}
        assert incoming == {"items": [2]}

    def test_only_first_matching_field_is_merged(self):
        merged = assemble(
            {"users": [1], "posts": ["x"]},
            {"users": [2], "posts": ["y"]},
            AssemblyMode.APPEND,
        )
        assert merged == {"users": [1, 2], "posts": ["y"]}

    def test_tuples_count_as_sequences(self):
        merged = assemble(
            {"items": (1,)},
            {"items": (2,)},
            AssemblyMode.APPEND,
        )
        assert merged == {"items": [1, 2]}

    @pytest.mark.parametrize(
        "previous, incoming",
        [
            ({"items": [1, 2]}, {"results": [3, 4]}),
            ({"name": "ab"}, {"name": "cd"}),
            ({"items": [1]}, {"items": "not a list"}),
            (None, {"items": [1]}),
            ([1, 2], [3, 4]),
            ({"items": [1]}, [3, 4]),
        ],
    )
    def test_falls_back_to_replace(self, previous, incoming):
        assert assemble(previous, incoming, AssemblyMode.APPEND) == incoming
