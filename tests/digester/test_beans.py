"""Tests for property and method access helpers."""

import pytest

from digester.beans import convert, find_method, has_property, python_name, set_property
from digester.errors import PropertyError


class Target:
    """Target object with plain attributes and a setter."""

    def __init__(self) -> None:
        self.first_name = ""
        self.enabled = False
        self.count = 0
        self.upper = ""

    def set_upper(self, value: str) -> None:
        self.upper = value.upper()


class TestPythonName:
    """Tests for python_name."""

    def test_dashes_and_dots(self) -> None:
        """Test that XML name characters are mapped to underscores."""
        assert python_name("first-name") == "first_name"
        assert python_name("a.b") == "a_b"


class TestConvert:
    """Tests for convert."""

    @pytest.mark.parametrize("text", ["true", "Yes", " on ", "1"])
    def test_true_values(self, text: str) -> None:
        """Test accepted true spellings."""
        assert convert(text, False) is True

    def test_false_value(self) -> None:
        """Test a false spelling."""
        assert convert("no", True) is False

    def test_invalid_boolean(self) -> None:
        """Test that other text is not a boolean."""
        with pytest.raises(ValueError, match="Invalid boolean value"):
            convert("maybe", False)

    def test_numbers(self) -> None:
        """Test int and float conversion."""
        assert convert(" 12 ", 0) == 12
        assert convert("2.5", 0.0) == 2.5

    def test_other_types_unchanged(self) -> None:
        """Test that strings and non-string values pass through."""
        assert convert("x", "") == "x"
        assert convert(5, "") == 5
        assert convert("x", None) == "x"


class TestSetProperty:
    """Tests for set_property and friends."""

    def test_setter_method_preferred(self) -> None:
        """Test that set_<name> is called when present."""
        target = Target()
        set_property(target, "upper", "abc")
        assert target.upper == "ABC"

    def test_dashed_attribute(self) -> None:
        """Test that dashed names set underscored attributes."""
        target = Target()
        set_property(target, "first-name", "Ann")
        assert target.first_name == "Ann"

    def test_typed_attribute(self) -> None:
        """Test that values are converted to the existing type."""
        target = Target()
        set_property(target, "enabled", "true")
        set_property(target, "count", "4")
        assert target.enabled is True
        assert target.count == 4

    def test_unknown_property(self) -> None:
        """Test that unknown properties raise unless ignored."""
        target = Target()
        with pytest.raises(PropertyError, match="Cannot set property 'colour' on Target"):
            set_property(target, "colour", "red")
        assert set_property(target, "colour", "red", ignore_missing=True) is False

    def test_conversion_failure(self) -> None:
        """Test that a bad value is reported as a PropertyError."""
        with pytest.raises(PropertyError, match="count"):
            set_property(Target(), "count", "lots")

    def test_mapping_target(self) -> None:
        """Test that mappings receive items under the original name."""
        target: dict = {}
        set_property(target, "first-name", "Ann")
        assert target == {"first-name": "Ann"}

    def test_has_property(self) -> None:
        """Test property detection."""
        assert has_property(Target(), "first-name")
        assert has_property(Target(), "upper")
        assert not has_property(Target(), "colour")
        assert has_property({}, "anything")

    def test_find_method(self) -> None:
        """Test finding methods by XML or Python name."""
        assert find_method(Target(), "set-upper") is not None
        assert find_method(Target(), "count") is None
