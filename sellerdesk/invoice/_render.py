"""
Invoice rendering — the renderer protocol and a plain-text renderer.
"""

from __future__ import annotations

from typing import Protocol

from sellerdesk.invoice._snapshot import InvoiceSnapshot
from sellerdesk.money._calc import format_rupiah


class InvoiceRenderer(Protocol):
    """
    Turns an invoice into something sendable (image bytes, URL, text).

    May raise; the orchestrator reports it as a warning.
    """

    async def render(self, invoice: InvoiceSnapshot) -> bytes | str: ...


_RULE = "-" * 32


class TextInvoiceRenderer:
    """
    UTF-8 plain-text receipt, ready to paste into a chat.

    Example:
        text = (await TextInvoiceRenderer().render(invoice)).decode()
    """

    async def render(self, invoice: InvoiceSnapshot) -> bytes:
        return self.text(invoice).encode("utf-8")

    def text(self, invoice: InvoiceSnapshot) -> str:
        out: list[str] = []
        if invoice.shop_name:
            out.append(invoice.shop_name)
        if invoice.seller_phone:
            out.append(invoice.seller_phone)
        out.append(f"INVOICE {invoice.order_number}")
        out.append(f"{invoice.issued_at:%d/%m/%Y %H:%M}")
        out.append(_RULE)

        out.append(invoice.customer_name)
        out.append(invoice.customer_phone)
        out.append(invoice.customer_address)
        if invoice.customer_city_district:
            out.append(invoice.customer_city_district)
        out.append(_RULE)

        for line in invoice.lines:
            out.append(line.label)
            out.append(f"  {line.quantity} x {format_rupiah(line.unit_price)} = {format_rupiah(line.line_total)}")
        out.append(_RULE)

        out.append(f"Subtotal: {format_rupiah(invoice.subtotal)}")
        if invoice.discount_amount:
            out.append(f"Discount: -{format_rupiah(invoice.discount_amount)}")
        carrier = " ".join(p for p in (invoice.courier_name, invoice.service_name) if p)
        shipping_label = f"Shipping ({carrier})" if carrier else "Shipping"
        out.append(f"{shipping_label}: {format_rupiah(invoice.shipping_cost)}")
        if invoice.partial_payment_amount:
            out.append(f"Total: {format_rupiah(invoice.full_total_amount)}")
            out.append(f"Paid: -{format_rupiah(invoice.partial_payment_amount)}")
            out.append(f"Remaining: {format_rupiah(invoice.total_amount)}")
        else:
            out.append(f"Total: {format_rupiah(invoice.total_amount)}")

        if invoice.payment_method is not None:
            pm = invoice.payment_method
            out.append(_RULE)
            out.append(f"Transfer: {pm.bank_name} {pm.account_number} a.n. {pm.account_owner}")

        if invoice.notes:
            out.append(_RULE)
            out.append(invoice.notes)

        return "\n".join(out)


__all__ = (
    "InvoiceRenderer",
    "TextInvoiceRenderer",
)
