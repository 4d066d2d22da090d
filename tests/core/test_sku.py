import pytest
import sys
import pathlib

# Add project root to path for imports
HERE = pathlib.Path(__file__).parent
PROJECT_ROOT = HERE.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.catalog import Product, build_catalog
from core.categories import CategoryRules, regex_predicate
from core.sku import (
    encode,
    format_size_code,
    format_width_code,
    is_footwear,
    resolve,
)
from core.variants import Variant, generate_variants


class TestCodes:
    """Size and width code formatting"""

    def test_sentinel_size(self):
        assert format_size_code("ONE", footwear=True) == "ONE"
        assert format_size_code("ONE", footwear=False) == "ONE"
        assert format_size_code("OS", footwear=False) == "ONE"

    @pytest.mark.parametrize(
        "size,code",
        [("7.5", "075"), ("7", "070"), ("13.5", "135"), ("1", "010"), ("0.5", "005"), ("10", "100")],
    )
    def test_footwear_sizes_scaled(self, size, code):
        assert format_size_code(size, footwear=True) == code

    def test_footwear_half_up_rounding(self):
        assert format_size_code("7.25", footwear=True) == "073"

    def test_footwear_non_numeric_is_padded(self):
        assert format_size_code("Kids S", footwear=True) == "Kids S"
        assert format_size_code("M", footwear=True) == "00M"

    def test_general_merchandise_sizes_padded_not_scaled(self):
        assert format_size_code("7", footwear=False) == "007"
        assert format_size_code("S", footwear=False) == "00S"
        assert format_size_code("XL", footwear=False) == "0XL"
        assert format_size_code("XXXL", footwear=False) == "XXXL"

    def test_width_codes(self):
        assert format_width_code("M") == "0M"
        assert format_width_code("2E") == "2E"
        assert format_width_code("") == ""
        assert format_width_code(None) == ""


class TestEncode:
    """SKU templates"""

    def test_footwear_template(self, catalog):
        p = catalog.product("S000V720C")
        assert encode(p, Variant(p, "BLK", "M", "7.5")) == "S000V720C0MBLK075"

    def test_general_merchandise_template(self, catalog):
        p = catalog.product("A000B325U")
        assert encode(p, Variant(p, "OAT", "", "ONE")) == "A000B325UOATONE"

    def test_general_merchandise_ignores_width(self):
        p = Product(style="A77", size_spec="S", width_spec="M,W", colour_spec="RED")
        assert encode(p, Variant(p, "RED", "M", "S")) == "A77RED00S"
        assert encode(p, Variant(p, "RED", "W", "S")) == "A77RED00S"

    def test_footwear_without_width_has_no_width_segment(self):
        p = Product(style="S9", size_spec="7", colour_spec="BLK")
        assert encode(p, Variant(p, "BLK", "", "7")) == "S9BLK070"

    def test_distinct_variants_give_distinct_skus(self, catalog):
        p = catalog.product("S000V720C")
        skus = [encode(p, v) for v in generate_variants(p)]
        assert len(skus) == len(set(skus)) == 80

    def test_category_default(self):
        assert is_footwear("S000V720C")
        assert is_footwear(" s0002050w ")
        assert not is_footwear("A000B325U")

    def test_pluggable_rules(self):
        rules = CategoryRules(is_footwear=regex_predicate(r"W$"), is_cyclic_size=lambda s: False)
        p = Product(style="X100W", size_spec="7", width_spec="N", colour_spec="BLK")
        assert encode(p, Variant(p, "BLK", "N", "7"), rules) == "X100W0NBLK070"
        assert encode(p, Variant(p, "BLK", "N", "7")) == "X100WBLK007"


class TestResolve:
    """Reverse lookup through the catalog's SKU index"""

    def test_every_footwear_variant_round_trips(self, catalog):
        for p in catalog.products():
            if not is_footwear(p.style):
                continue
            for v in generate_variants(p):
                assert resolve(encode(p, v), catalog) is p

    def test_every_variant_is_indexed(self, catalog):
        assert len(catalog.sku_index) == 80 + 24 + 2
        assert catalog.sku_index.collisions == []

    def test_unknown_sku_is_none(self, catalog):
        assert resolve("NOPE123", catalog) is None
        assert resolve("", catalog) is None
        assert resolve(None, catalog) is None

    def test_prefix_style_does_not_match(self, catalog):
        # A style code followed by junk is not a prefix match
        assert resolve("S000V720C", catalog) is None
        assert resolve("S000V720C0MBLK07", catalog) is None

    def test_resolve_strips_whitespace(self, catalog):
        assert resolve("  A000B325UCCGONE ", catalog).style == "A000B325U"

    def test_positions_follow_catalog_order(self, catalog):
        index = catalog.sku_index
        assert index.position("S000V720C0MBLK060") == 0
        assert index.position("S000V720C0MBLK065") == 1
        assert index.position("A000B325UOATONE") == len(index) - 1
        assert index.position("NOPE") is None

    def test_collision_between_styles_is_flagged(self):
        cat = build_catalog([
            {"style": "SAB", "colours": "C", "sizes": "7", "wholesale": "1"},
            {"style": "SABC", "sizes": "7", "wholesale": "2"},
        ])
        assert len(cat.sku_index.collisions) == 1
        collision = cat.sku_index.collisions[0]
        assert collision.sku == "SABC070"
        assert (collision.kept_style, collision.rejected_style) == ("SAB", "SABC")
        assert resolve("SABC070", cat).style == "SAB"

    def test_general_merchandise_width_collision_is_flagged(self):
        cat = build_catalog([
            {"style": "A77", "sizes": "S", "widths": "M,W", "colours": "RED", "wholesale": "5"},
        ])
        assert [c.sku for c in cat.sku_index.collisions] == ["A77RED00S"]
        assert cat.variant_for("A77RED00S").width == "M"
