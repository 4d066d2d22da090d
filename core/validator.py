from core.catalog import Catalog
from core.variants import generate_variants


def run_catalog_checks(catalog: Catalog) -> dict:
    """
    Run QA validations on a built catalog.

    Checks include:
        1) Catalog has at least one product.
        2) Products missing a usable wholesale price (kept, but not orderable).
        3) Products whose specs produce no variants (no sizes).
        4) Size specs that were kept as a single literal token despite a dash.
        5) SKU collisions in the index.

    Args:
        catalog: The catalog to check.

    Returns:
        A dictionary with:
            - ok: Boolean indicating whether all checks passed.
            - summary: List of human-readable issue descriptions.
    """
    issues = []

    # 1) Anything at all
    if len(catalog) == 0:
        issues.append("Catalog contains no products")
        return {"ok": False, "summary": issues}

    # 2) Pricing
    unpriced = [p.style for p in catalog.products() if not p.orderable]
    if unpriced:
        issues.append(
            f"{len(unpriced)} products missing wholesale price: {', '.join(unpriced)}"
        )

    # 3) + 4) Sizes
    no_sizes, literal_ranges = [], []
    for p in catalog.products():
        variants = generate_variants(p, catalog.rules)
        if not variants:
            no_sizes.append(p.style)
            continue
        sizes = {v.size for v in variants}
        if len(sizes) == 1 and "-" in p.size_spec and p.size_spec in sizes:
            literal_ranges.append(p.style)
    if no_sizes:
        issues.append(f"{len(no_sizes)} products have no sizes: {', '.join(no_sizes)}")
    if literal_ranges:
        issues.append(
            f"{len(literal_ranges)} products have unparsed size ranges: {', '.join(literal_ranges)}"
        )

    # 5) SKU collisions
    collisions = catalog.sku_index.collisions
    if collisions:
        shown = ", ".join(
            f"{c.sku} ({c.kept_style}/{c.rejected_style})" for c in collisions[:10]
        )
        issues.append(f"{len(collisions)} SKU collisions: {shown}")

    return {"ok": len(issues) == 0, "summary": issues}
