import math
import pytest
import sys
import pathlib

# Add project root to path for imports
HERE = pathlib.Path(__file__).parent
PROJECT_ROOT = HERE.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.sizes import expand_sizes, format_size, split_list

CHILD_SIZES = [
    "6", "6.5", "7", "7.5", "8", "8.5", "9", "9.5", "10", "10.5",
    "11", "11.5", "12", "12.5", "13", "13.5", "1", "1.5", "2", "2.5",
]


class TestSentinelAndLists:
    """Sentinel sizes, labeled enumerations and plain lists"""

    @pytest.mark.parametrize("spec", ["OS", "ONE", " os ", "one"])
    def test_sentinel_sizes(self, spec):
        assert expand_sizes(spec) == ["ONE"]

    def test_labeled_enumeration(self):
        assert expand_sizes("Kids: S, M, L") == ["Kids S", "Kids M", "Kids L"]

    def test_labeled_enumeration_keeps_label_text(self):
        assert expand_sizes("Adult :XS,S") == ["Adult XS", "Adult S"]

    def test_comma_list_in_given_order(self):
        assert expand_sizes("L, S , M") == ["L", "S", "M"]

    def test_comma_list_drops_blank_segments(self):
        assert expand_sizes("S,,M,") == ["S", "M"]

    def test_comma_list_of_ranges_is_concatenated(self):
        assert expand_sizes("6 - 13.5, 1 - 2.5") == CHILD_SIZES


class TestNumericRanges:
    """Dash ranges in half-size steps"""

    def test_basic_range(self):
        assert expand_sizes("5 - 8") == ["5", "5.5", "6", "6.5", "7", "7.5", "8"]

    def test_range_without_spaces(self):
        assert expand_sizes("3-4") == ["3", "3.5", "4"]

    @pytest.mark.parametrize(
        "start,end",
        [(1, 1), (3, 4.5), (5.5, 9), (0, 13.5), (6, 6.5), (2, 2.75)],
    )
    def test_token_count(self, start, end):
        spec = f"{format_size(start)} - {format_size(end)}"
        assert len(expand_sizes(spec)) == math.floor(2 * (end - start)) + 1

    def test_reversed_range_is_swapped(self):
        assert expand_sizes("8 - 5") == expand_sizes("5 - 8")

    def test_whole_sizes_only_marker(self):
        assert expand_sizes("3 - 6 whole sizes only") == ["3", "4", "5", "6"]

    def test_whole_sizes_only_in_parentheses(self):
        assert expand_sizes("3 - 14 (Whole Sizes Only)") == [str(n) for n in range(3, 15)]

    def test_half_start_whole_only(self):
        assert expand_sizes("5.5 - 7.5 whole sizes only") == ["6", "7"]


class TestWraparound:
    """Cyclic (child) size charts wrap through 13.5 back to 1"""

    def test_child_style_wraps(self):
        assert expand_sizes("6 - 2.5", "S000V720C") == CHILD_SIZES

    def test_product_object_context(self, catalog):
        product = catalog.product("S000V720C")
        assert expand_sizes("6 - 2.5", product) == CHILD_SIZES

    def test_forward_range_on_child_style_does_not_wrap(self):
        assert expand_sizes("10 - 11", "S000V720C") == ["10", "10.5", "11"]

    def test_non_cyclic_style_swaps_instead(self):
        assert expand_sizes("6 - 2.5", "S0002050W") == expand_sizes("2.5 - 6")

    def test_wrap_whole_sizes_only(self):
        assert expand_sizes("12 - 2 whole sizes only", "S000V720C") == ["12", "13", "1", "2"]

    def test_wrap_bounds_from_environment(self, monkeypatch):
        monkeypatch.setenv("WRAP_SIZE_UPPER", "12")
        monkeypatch.setenv("WRAP_SIZE_LOWER", "0")
        assert expand_sizes("11 - 0.5", "S000V720C") == ["11", "11.5", "12", "0", "0.5"]


class TestFallback:
    """Anything unparseable comes back as a single literal token"""

    @pytest.mark.parametrize("spec", ["2T-4T", "A - B", "small", "7", "XL - "])
    def test_literal_fallback(self, spec):
        assert expand_sizes(spec) == [spec.strip()]

    def test_malformed_segment_inside_list(self):
        assert expand_sizes("5 - 6, 2T-4T") == ["5", "5.5", "6", "2T-4T"]

    @pytest.mark.parametrize("spec", ["", "   ", None, float("nan")])
    def test_empty_spec(self, spec):
        assert expand_sizes(spec) == []


class TestHelpers:
    def test_format_size(self):
        assert format_size(7.0) == "7"
        assert format_size(7.5) == "7.5"
        assert format_size(13) == "13"
        assert format_size(0.5) == "0.5"
        assert format_size(10) == "10"
        assert format_size(1234567.5) == "1234567.5"
        assert format_size(20000000) == "20000000"

    def test_split_list(self):
        assert split_list(" BLK , CAR ") == ["BLK", "CAR"]
        assert split_list("") == []
        assert split_list(None) == []
