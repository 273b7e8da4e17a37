import functools

import pytest

from megamind.core.keys import PLACEHOLDER
from megamind.core.keys import build_key
from megamind.core.keys import operation_name


async def fetch_user(user_id):
    return user_id


class Greeter:
    def __call__(self, name):
        return f"hello {name}"


@pytest.mark.unit
class TestOperationName:
    def test_function_is_qualified_by_module(self):
        assert operation_name(fetch_user) == f"{__name__}.fetch_user"

    def test_method_uses_qualname(self):
        assert operation_name(Greeter.__call__) == (
            f"{__name__}.Greeter.__call__"
        )

    def test_closures_from_one_factory_are_distinct(self):
        def make_fetch(offset):
            async def fetch(page):
                return page + offset

            return fetch

        first, second = make_fetch(1), make_fetch(2)
        assert operation_name(first) != operation_name(second)
        assert operation_name(first) == operation_name(first)
        assert operation_name(first).startswith(
            f"{__name__}.TestOperationName."
        )

    def test_lambdas_in_one_scope_are_distinct(self):
        double, triple = (lambda x: x * 2), (lambda x: x * 3)
        assert operation_name(double) != operation_name(triple)

    def test_callable_without_qualname_falls_back_to_repr(self):
        partial = functools.partial(fetch_user, 1)
        assert operation_name(partial) == repr(partial)


@pytest.mark.unit
class TestBuildKey:
    def test_same_arguments_same_key(self):
        assert build_key("op", [1, "two", {"b": 2, "a": 1}]) == build_key(
            "op", (1, "two", {"a": 1, "b": 2})
        )

    def test_different_arguments_different_key(self):
        assert build_key("op", [10]) != build_key("op", [20])

    def test_different_operations_different_key(self):
        assert build_key("first", [1]) != build_key("second", [1])

    @pytest.mark.parametrize("args", [None, [], ()])
    def test_no_arguments(self, args):
        assert build_key("op", args) == "op:[]"

    def test_canonical_format(self):
        assert build_key("op", [{"z": [1, 2], "a": None}]) == (
            'op:[{"a":null,"z":[1,2]}]'
        )

    def test_unserialisable_value_degrades_to_placeholder(self):
        key = build_key("op", [object(), 1])
        assert key == f'op:["{PLACEHOLDER}",1]'

    def test_unserialisable_sequence_degrades_to_placeholder(self):
        circular = []
        circular.append(circular)
        assert build_key("op", [circular]) == f"op:{PLACEHOLDER}"

    def test_mixed_key_types_degrade_to_placeholder(self):
        assert build_key("op", [{1: "a", "b": 2}]) == f"op:{PLACEHOLDER}"
