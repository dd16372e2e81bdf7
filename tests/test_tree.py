"""Tests for value shape classification."""
import pytest

from ploonbench.errors import UnsupportedValueError
from ploonbench.tree import Shape, classify, depth_of, is_inline, is_region, is_scalar


class TestClassifyScalars:
    """Scalars map onto their own shapes."""

    def test_null(self):
        assert classify(None) is Shape.NULL

    def test_bool_before_number(self):
        assert classify(True) is Shape.BOOLEAN
        assert classify(False) is Shape.BOOLEAN

    def test_numbers(self):
        assert classify(0) is Shape.NUMBER
        assert classify(-3.5) is Shape.NUMBER

    def test_string(self):
        assert classify("") is Shape.STRING

    def test_nan_rejected(self):
        with pytest.raises(UnsupportedValueError):
            classify(float("nan"))

    def test_infinity_rejected(self):
        with pytest.raises(UnsupportedValueError):
            classify(float("inf"))


class TestClassifyContainers:
    """Arrays are split by what their elements are."""

    def test_object(self):
        assert classify({"a": 1}) is Shape.OBJECT

    def test_non_string_key_rejected(self):
        with pytest.raises(UnsupportedValueError, match="keys must be strings"):
            classify({1: "a"})

    def test_empty_array_is_scalar_array(self):
        assert classify([]) is Shape.ARRAY_OF_SCALARS

    def test_nested_scalar_arrays(self):
        assert classify([1, [2, 3], None]) is Shape.ARRAY_OF_SCALARS

    def test_array_of_objects(self):
        assert classify([{"a": 1}, {}]) is Shape.ARRAY_OF_OBJECTS

    def test_array_of_arrays(self):
        assert classify([[{"a": 1}], []]) is Shape.ARRAY_OF_ARRAYS

    def test_mixed(self):
        assert classify([{"a": 1}, 2]) is Shape.ARRAY_OF_MIXED

    def test_inline_next_to_object_array_is_mixed(self):
        assert classify([[1, 2], [{"a": 1}]]) is Shape.ARRAY_OF_MIXED

    def test_tuple_rejected(self):
        with pytest.raises(UnsupportedValueError):
            classify((1, 2))

    def test_bad_element_rejected(self):
        with pytest.raises(UnsupportedValueError):
            classify([1, {2}])


class TestPredicates:
    """Helpers built on classify()."""

    def test_is_scalar(self):
        assert is_scalar("x")
        assert not is_scalar([])

    def test_is_inline(self):
        assert is_inline([1, 2])
        assert is_inline(None)
        assert not is_inline({"a": 1})

    def test_is_region(self):
        assert is_region({"a": 1})
        assert is_region([{"a": 1}])
        assert not is_region([1])

    def test_depth_of_scenario(self, concrete_scenario):
        # root -> products -> colors -> sizes
        assert depth_of(concrete_scenario) == 4

    def test_depth_of_leaf(self):
        assert depth_of(3) == 0
        assert depth_of([1, 2]) == 0
