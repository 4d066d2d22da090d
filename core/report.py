"""
report.py

Builds the two artifacts handed to the report/email collaborator:
a rendered order summary and the export text.

Transport (addressing, sending, retries) is not done here.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from jinja2 import Environment, select_autoescape

from core.errors import EmptyOrder
from core.ledger import OrderLedger
from core.order_text import serialize

logger = logging.getLogger(__name__)

_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))

SUMMARY_TEMPLATE = _env.from_string(
    """\
<h2>Wholesale order {{ s.customer_id or "(no customer id)" }}</h2>
<p>Ordered at {{ s.ordered_at }}</p>
{% for g in s.groups %}
<h3>{{ g.collection }}</h3>
<table border="1" cellpadding="4" cellspacing="0">
  <tr><th>SKU</th><th>Style</th><th>Colour</th><th>Width</th><th>Size</th><th>Qty</th><th>Amount</th></tr>
  {% for line in g.lines %}
  <tr>
    <td>{{ line.sku }}</td><td>{{ line.style }}</td><td>{{ line.colour }}</td>
    <td>{{ line.width or "-" }}</td><td>{{ line.size }}</td>
    <td>{{ line.quantity }}</td><td>{{ "%.2f"|format(line.amount) }}</td>
  </tr>
  {% endfor %}
  <tr><td colspan="5"><strong>Subtotal</strong></td><td>{{ g.quantity }}</td><td>{{ "%.2f"|format(g.amount) }}</td></tr>
</table>
{% endfor %}
<p>Items: {{ s.totals.item_count }}<br>
Subtotal: {{ "%.2f"|format(s.totals.subtotal) }}<br>
Tax: {{ "%.2f"|format(s.totals.tax) }}<br>
<strong>Total: {{ "%.2f"|format(s.totals.grand_total) }}</strong></p>
{% if s.unresolved %}
<p>Not found in catalog (priced at 0): {{ s.unresolved|join(", ") }}</p>
{% endif %}
"""
)


def build_summary(
    ledger: OrderLedger,
    customer_id: str = "",
    ordered_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Summarize an order for display or email.

    Args:
        ledger: The order.
        customer_id: Customer identifier as entered (may be blank).
        ordered_at: Order timestamp; defaults to now.

    Returns:
        Dict with customer_id, ordered_at (ISO string), subject, totals,
        groups (collection, quantity, amount, lines) in catalog order,
        unresolved SKUs and the rendered HTML.
    """
    ordered_at = ordered_at or datetime.now()
    customer_id = (customer_id or "").strip()
    subtotals = ledger.subtotals_by_collection()
    groups = [
        {
            "collection": name,
            "quantity": subtotals[name]["quantity"],
            "amount": subtotals[name]["amount"],
            "lines": lines,
        }
        for name, lines in ledger.grouped_line_items().items()
    ]
    summary: Dict[str, Any] = {
        "customer_id": customer_id,
        "ordered_at": ordered_at.isoformat(timespec="seconds"),
        "subject": f"Wholesale order {customer_id or 'order'} {ordered_at:%Y-%m-%d}",
        "totals": ledger.totals(),
        "groups": groups,
        "unresolved": ledger.unresolved_skus(),
    }
    summary["html"] = SUMMARY_TEMPLATE.render(s=summary)
    return summary


def build_dispatch(
    ledger: OrderLedger,
    customer_id: str = "",
    ordered_at: Optional[datetime] = None,
) -> Tuple[Dict[str, Any], str]:
    """
    Produce (summary, export_text) for sending.

    Raises:
        EmptyOrder: Nothing to send.
    """
    if ledger.is_empty():
        raise EmptyOrder("Cannot send an empty order")
    export_text = serialize(ledger)
    summary = build_summary(ledger, customer_id, ordered_at)
    logger.info(
        "Order dispatch prepared for %s: %d items",
        summary["customer_id"] or "(no customer id)",
        summary["totals"]["item_count"],
    )
    return summary, export_text
