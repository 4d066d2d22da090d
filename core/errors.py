class OrderEngineError(Exception):
    """Base class for order engine errors."""


class MalformedSpec(OrderEngineError, ValueError):
    """Size/width/colour text that cannot be parsed. Recovered by the expander."""


class UnresolvableSKU(OrderEngineError, LookupError):
    """A SKU that matches no product in the loaded catalog."""

    def __init__(self, sku: str):
        super().__init__(f"SKU not found in catalog: {sku}")
        self.sku = sku


class FormatMismatch(OrderEngineError, ValueError):
    """Import text that does not follow the export format."""


class EmptyOrder(OrderEngineError, ValueError):
    """Export or dispatch attempted with no positive quantities."""
