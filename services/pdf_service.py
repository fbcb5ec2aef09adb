# services/pdf_service.py
"""
Invoice PDF rendering with ReportLab.

Only finalized data is printed; the renderer reads the invoice and never
changes it.
"""
from io import BytesIO
from typing import Optional

from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from models import Customer, Invoice
from .invoice_status import effective_status
from .money import format_money


def render_invoice_pdf(invoice: Invoice, customer: Optional[Customer] = None, business_name: str = "") -> bytes:
     """Create a one-page PDF invoice and return its bytes."""
     buffer = BytesIO()
     c = canvas.Canvas(buffer, pagesize=letter)
     width, height = letter

     # Header
     c.setFont("Helvetica-Bold", 20)
     c.drawString(1 * inch, height - 1 * inch, "INVOICE")
     if business_name:
          c.setFont("Helvetica", 12)
          c.drawRightString(width - 1 * inch, height - 1 * inch, business_name)

     # Invoice details
     c.setFont("Helvetica", 12)
     y = height - 1.5 * inch
     details = [
          f"Invoice Number: {invoice.invoice_number}",
          f"Date: {invoice.invoice_date.isoformat()}",
          f"Due Date: {invoice.due_date.isoformat()}",
     ]
     if customer is not None:
          details.append(f"Bill To: {customer.full_name}")
     for line in details:
          c.drawString(1 * inch, y, line)
          y -= 0.3 * inch

     # Amounts
     y -= 0.3 * inch
     c.setFont("Helvetica-Bold", 12)
     c.drawString(1 * inch, y, "Summary")
     c.setFont("Helvetica", 11)
     y -= 0.3 * inch
     rows = []
     if invoice.labor_hours is not None and invoice.hourly_rate is not None:
          rows.append((f"Labor ({invoice.labor_hours.normalize():f} h @ {format_money(invoice.hourly_rate)})",
                       invoice.labor_amount))
     rows += [
          ("Materials", invoice.material_cost),
          ("Subtotal", invoice.subtotal),
          (f"Tax ({(invoice.tax_rate * 100).normalize():f}%)", invoice.tax_amount),
     ]
     for label, amount in rows:
          c.drawString(1 * inch, y, label)
          c.drawRightString(6.5 * inch, y, format_money(amount))
          y -= 0.25 * inch

     # Total
     y -= 0.2 * inch
     c.setFont("Helvetica-Bold", 14)
     c.drawString(1 * inch, y, "TOTAL")
     c.drawRightString(6.5 * inch, y, format_money(invoice.total_amount))
     y -= 0.3 * inch
     c.setFont("Helvetica", 11)
     c.drawString(1 * inch, y, "Paid")
     c.drawRightString(6.5 * inch, y, format_money(invoice.paid_amount))
     y -= 0.25 * inch
     c.drawString(1 * inch, y, "Balance Due")
     c.drawRightString(6.5 * inch, y, format_money(invoice.balance_due))
     y -= 0.25 * inch
     c.drawString(1 * inch, y, f"Status: {effective_status(invoice).value}")

     if invoice.notes:
          y -= 0.5 * inch
          c.setFont("Helvetica-Oblique", 10)
          c.drawString(1 * inch, y, invoice.notes[:100])

     c.showPage()
     c.save()
     return buffer.getvalue()
