"""Tests for the string, sequence and standalone operation library."""

import pytest

from aql.evaluate._builtins import (
    SEQUENCE_OPERATIONS,
    STRING_OPERATIONS,
    call_builtin,
    reflect_type,
)
from aql.evaluate._values import AQLTypeError, InvalidOperationError
from aql.model.types import ObjectReference


def string_op(source, method, *args):
    return call_builtin(source, True, method, list(args))


def function(method, *args):
    return call_builtin(None, False, method, list(args))


# ---------------------------------------------------------------------------
# String operations
# ---------------------------------------------------------------------------

class TestStringOperations:
    @pytest.mark.parametrize("method", ["size", "length"])
    def test_size(self, method):
        assert string_op("hello", method) == 5

    @pytest.mark.parametrize("method", ["toUpperCase", "upper"])
    def test_upper(self, method):
        assert string_op("Hello", method) == "HELLO"

    @pytest.mark.parametrize("method", ["toLowerCase", "lower"])
    def test_lower(self, method):
        assert string_op("Hello", method) == "hello"

    def test_substring_half_open(self):
        assert string_op("hello", "substring", 1, 3) == "el"
        assert string_op("hello", "substring", 0, 5) == "hello"
        assert string_op("hello", "substring", 2, 2) == ""

    def test_substring_out_of_bounds(self):
        with pytest.raises(AQLTypeError, match="out of bounds"):
            string_op("hello", "substring", 2, 9)
        with pytest.raises(AQLTypeError):
            string_op("hello", "substring", 3, 1)
        with pytest.raises(AQLTypeError):
            string_op("hello", "substring", -1, 2)

    def test_substring_requires_integers(self):
        with pytest.raises(AQLTypeError, match="integer"):
            string_op("hello", "substring", "1", 3)
        with pytest.raises(AQLTypeError, match="two integer arguments"):
            string_op("hello", "substring", 1)
        with pytest.raises(AQLTypeError):
            string_op("hello", "substring", 1.0, 3)

    def test_prefix_suffix_contains(self):
        assert string_op("model.ecore", "startsWith", "model") is True
        assert string_op("model.ecore", "endsWith", ".ecore") is True
        assert string_op("model.ecore", "contains", "l.e") is True
        assert string_op("model.ecore", "contains", "xmi") is False

    @pytest.mark.parametrize("method", ["startsWith", "endsWith", "contains"])
    def test_prefix_suffix_contains_require_string(self, method):
        with pytest.raises(AQLTypeError, match=f"{method} requires string argument"):
            string_op("abc", method, 1)
        with pytest.raises(AQLTypeError):
            string_op("abc", method)

    def test_trim(self):
        assert string_op("  padded \t", "trim") == "padded"

    def test_trim_keeps_line_breaks(self):
        assert string_op("\n line \n", "trim") == "\n line \n"
        assert string_op(" line\n ", "trim") == "line\n"

    def test_trim_unicode_spaces(self):
        assert string_op("\u00a0\u3000word\u2009", "trim") == "word"

    def test_replace_all_occurrences(self):
        assert string_op("a-b-c", "replace", "-", "+") == "a+b+c"

    def test_replace_empty_target_is_noop(self):
        assert string_op("abc", "replace", "", "x") == "abc"

    def test_replace_requires_strings(self):
        with pytest.raises(AQLTypeError, match="replace requires two string arguments"):
            string_op("abc", "replace", "a")
        with pytest.raises(AQLTypeError):
            string_op("abc", "replace", "a", 1)

    def test_unknown_string_operation(self):
        with pytest.raises(InvalidOperationError, match="Unknown string operation: reverse"):
            string_op("abc", "reverse")

    def test_table_has_aliases(self):
        assert {"size", "length", "upper", "toUpperCase"} <= set(STRING_OPERATIONS)


# ---------------------------------------------------------------------------
# Sequence operations
# ---------------------------------------------------------------------------

class TestSequenceOperations:
    def test_size_and_emptiness(self):
        assert string_op((1, 2, 3), "size") == 3
        assert string_op((), "isEmpty") is True
        assert string_op((1,), "notEmpty") is True

    def test_first_last(self):
        assert string_op((1, 2, 3), "first") == 1
        assert string_op((1, 2, 3), "last") == 3
        assert string_op((), "first") is None

    def test_at_zero_based(self):
        assert string_op(("a", "b"), "at", 1) == "b"

    def test_at_out_of_range_is_null(self):
        assert string_op(("a", "b"), "at", 2) is None
        assert string_op(("a", "b"), "at", -1) is None

    def test_at_requires_integer(self):
        with pytest.raises(AQLTypeError, match="at requires integer argument"):
            string_op(("a",), "at", "0")

    def test_index_of_uses_textual_equality(self):
        assert string_op((1, 2, 3), "indexOf", 2) == 1
        assert string_op((1, 2, 3), "indexOf", "2") == 1
        assert string_op((1, 2, 3), "indexOf", 9) == -1

    def test_includes(self):
        assert string_op(("a", None), "includes", None) is True
        assert string_op(("a",), "contains", "a") is True
        assert string_op(("a",), "includes", "b") is False

    def test_includes_requires_argument(self):
        with pytest.raises(AQLTypeError, match="includes requires an argument"):
            string_op(("a",), "includes")

    def test_unknown_sequence_operation(self):
        with pytest.raises(InvalidOperationError, match="Unknown collection operation: sum"):
            string_op((1, 2), "sum")

    def test_table_contents(self):
        assert set(SEQUENCE_OPERATIONS) >= {"at", "indexOf", "includes", "contains"}


# ---------------------------------------------------------------------------
# Other sources
# ---------------------------------------------------------------------------

class TestSourceDispatch:
    def test_null_source_yields_null(self):
        assert string_op(None, "toUpperCase") is None

    def test_null_source_unknown_method(self):
        with pytest.raises(InvalidOperationError, match="Unknown method: reverse"):
            string_op(None, "reverse")

    def test_object_source_rejected(self):
        with pytest.raises(InvalidOperationError, match="cannot be invoked on Circle objects"):
            string_op(ObjectReference("Circle"), "area")

    def test_integer_source_has_no_methods(self):
        with pytest.raises(InvalidOperationError, match="Unknown method: size on Integer"):
            string_op(5, "size")


# ---------------------------------------------------------------------------
# Standalone functions
# ---------------------------------------------------------------------------

class TestStandaloneFunctions:
    def test_min_max_integers(self):
        assert function("min", 3, 7) == 3
        assert function("max", 3, 7) == 7
        assert isinstance(function("max", 3, 7), int)

    def test_min_max_widen(self):
        result = function("max", 3, 2.5)
        assert result == 3.0
        assert isinstance(result, float)

    def test_min_requires_two_arguments(self):
        with pytest.raises(AQLTypeError, match="min requires exactly 2 arguments"):
            function("min", 1)

    def test_max_requires_numbers(self):
        with pytest.raises(AQLTypeError, match="max requires numeric arguments"):
            function("max", "a", "b")

    def test_abs(self):
        assert function("abs", -4) == 4
        assert function("abs", -0.5) == 0.5

    def test_abs_errors(self):
        with pytest.raises(AQLTypeError, match="abs requires an argument"):
            function("abs")
        with pytest.raises(AQLTypeError, match="abs requires numeric argument"):
            function("abs", "x")

    def test_to_string(self):
        assert function("toString", 12) == "12"
        assert function("toString", None) == "null"
        assert function("toString") == "null"
        assert function("toString", (True, 1.5)) == "[true, 1.5]"

    def test_unknown_function(self):
        with pytest.raises(InvalidOperationError, match="Unknown function: sqrt"):
            function("sqrt", 4)


# ---------------------------------------------------------------------------
# Type reflection
# ---------------------------------------------------------------------------

class TestReflectType:
    def setup_method(self):
        self.square = ObjectReference("Square", ("Rectangle", "Shape"))

    def test_kind_of_object(self):
        assert reflect_type("oclIsKindOf", self.square, "Shape") is True
        assert reflect_type("oclIsKindOf", self.square, "Circle") is False

    def test_type_of_object(self):
        assert reflect_type("oclIsTypeOf", self.square, "Square") is True
        assert reflect_type("oclIsTypeOf", self.square, "Rectangle") is False

    def test_as_type_is_identity(self):
        assert reflect_type("oclAsType", self.square, "Shape") is self.square
        assert reflect_type("oclAsType", 3, "String") == 3
        assert reflect_type("oclAsType", None, "Shape") is None

    def test_null_source(self):
        assert reflect_type("oclIsKindOf", None, "Shape") is False
        assert reflect_type("oclIsTypeOf", None, "Shape") is False

    def test_primitive_kind_names(self):
        assert reflect_type("oclIsKindOf", "s", "String") is True
        assert reflect_type("oclIsTypeOf", 3, "Integer") is True
        assert reflect_type("oclIsKindOf", 3, "Real") is False
        assert reflect_type("oclIsTypeOf", True, "Boolean") is True

    def test_unknown_operation(self):
        with pytest.raises(InvalidOperationError):
            reflect_type("oclIsUndefined", 1, "Integer")
