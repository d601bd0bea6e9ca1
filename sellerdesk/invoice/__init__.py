"""
Invoice — snapshot assembly and rendering.

    from sellerdesk import invoice

    snap = invoice.assemble_invoice(order, payment_method=pm, seller=profile)
    data = await invoice.TextInvoiceRenderer().render(snap)
"""

from sellerdesk.invoice._snapshot import (
    InvoiceLine,
    PaymentDetails,
    InvoiceSnapshot,
    assemble_invoice,
)
from sellerdesk.invoice._render import (
    InvoiceRenderer,
    TextInvoiceRenderer,
)


__all__ = (
    "InvoiceLine",
    "PaymentDetails",
    "InvoiceSnapshot",
    "assemble_invoice",
    "InvoiceRenderer",
    "TextInvoiceRenderer",
)
