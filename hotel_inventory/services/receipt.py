"""Printable internal receiving note (standalone HTML, opens the print dialog on load)."""
from jinja2 import Environment

from hotel_inventory.core.config import CURRENCY_SYMBOL
from hotel_inventory.core.dates import utcnow


def format_currency(amount) -> str:
    amount = amount or 0
    sign = "-" if amount < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{abs(amount):,.2f}"


def format_quantity(value) -> str:
    value = value or 0
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
_env.filters["currency"] = format_currency
_env.filters["qty"] = format_quantity

RECEIPT_TEMPLATE = _env.from_string("""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Internal Receiving Note - {{ order.orderNumber }}</title>
<style>
body { font-family: sans-serif; padding: 40px; color: #333; }
.header { display: flex; justify-content: space-between; border-bottom: 2px solid #333; padding-bottom: 20px; margin-bottom: 30px; }
.title { font-size: 24px; font-weight: bold; }
table { width: 100%; border-collapse: collapse; }
th { background: #f4f4f4; text-align: left; padding: 10px; }
td { padding: 10px; border-bottom: 1px solid #eee; }
.short { color: red; }
.summary { margin-top: 40px; text-align: right; font-size: 18px; font-weight: bold; }
.footer { margin-top: 60px; border-top: 1px solid #ccc; padding-top: 20px; font-size: 12px; color: #666; }
</style>
</head>
<body>
<div class="header">
  <div>
    <div class="title">INTERNAL RECEIVING NOTE</div>
    <p>Order #: {{ order.orderNumber }}</p>
    <p>Supplier: {{ (order.supplier or {}).name }}</p>
  </div>
  <div style="text-align: right;">
    <p>Date: {{ printed_at.strftime('%Y-%m-%d') }}</p>
    <p>Status: Delivered / Verified</p>
  </div>
</div>
<table>
  <thead>
    <tr>
      <th>Item Description</th><th>Batch #</th><th>Ordered</th><th>Received</th>
      <th>Discrepancy</th><th style="text-align: right;">Cost</th>
    </tr>
  </thead>
  <tbody>
{% for line in lines %}
    <tr>
      <td>{{ line.item_name }}</td>
      <td>{{ line.batch_number }}</td>
      <td>{{ line.ordered_quantity|qty }} {{ line.unit }}</td>
      <td><strong>{{ line.received_quantity|qty }} {{ line.unit }}</strong></td>
      <td{% if line.discrepancy < 0 %} class="short"{% endif %}>{{ '%+.2f'|format(line.discrepancy) }}</td>
      <td style="text-align: right;">{{ line.line_cost|currency }}</td>
    </tr>
{% endfor %}
  </tbody>
</table>
<div class="summary">Total Value Received: {{ total|currency }}</div>
<div class="footer">
  <p>Purchasing Officer Signature: _________________________</p>
  <p>Inventory Controller Verified: _________________________</p>
  <p>Printed on {{ printed_at.strftime('%Y-%m-%d %H:%M UTC') }}</p>
</div>
<script>window.onload = () => { window.print(); }</script>
</body>
</html>
""")


def render_receipt(order, session) -> str:
    """Only lines that were actually received are listed."""
    return RECEIPT_TEMPLATE.render(
        order=order,
        lines=session.received_lines,
        total=session.verified_total,
        printed_at=utcnow(),
    )
