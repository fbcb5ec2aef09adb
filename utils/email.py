import base64
import os
from decimal import Decimal
from typing import Optional

import requests

BREVO_KEY = os.getenv("BREVO_API_KEY")
BREVO_URL = "https://api.brevo.com/v3/smtp/email"
SENDER_EMAIL = os.getenv("INVOICE_SENDER_EMAIL", "billing@fieldbill.app")
SENDER_NAME = os.getenv("INVOICE_SENDER_NAME", "FieldBill")


class EmailDeliveryError(Exception):
     """Brevo is not configured or rejected the message."""


def send_invoice_email(
     to_email: str,
     recipient_name: str,
     invoice_number: str,
     total_amount: Decimal,
     pdf_bytes: Optional[bytes] = None,
     business_name: Optional[str] = None,
):
     if not BREVO_KEY:
          raise EmailDeliveryError("BREVO_API_KEY is not set")

     sender_name = business_name or SENDER_NAME
     payload = {
          "sender": {"name": sender_name, "email": SENDER_EMAIL},
          "to": [{"email": to_email, "name": recipient_name}],
          "subject": f"Invoice {invoice_number} from {sender_name}",
          "htmlContent": f"""
               <p>Hello {recipient_name},</p>
               <p>Thank you for your business. Please find your invoice details below:</p>
               <p>Invoice Number: <strong>{invoice_number}</strong><br>
               Total Amount: <strong>${total_amount:,.2f}</strong></p>
               <p>Please reply to this email if you have any questions.</p>
          """,
     }
     if pdf_bytes:
          payload["attachment"] = [{
               "name": f"invoice_{invoice_number}.pdf",
               "content": base64.b64encode(pdf_bytes).decode(),
          }]

     try:
          response = requests.post(
               BREVO_URL,
               headers={
                    "api-key": BREVO_KEY,
                    "Content-Type": "application/json",
               },
               json=payload,
               timeout=10,
          )
     except requests.RequestException as e:
          raise EmailDeliveryError(f"Brevo request failed: {e}") from e
     if response.status_code not in (200, 201, 202):
          raise EmailDeliveryError(f"Brevo error: {response.text}")
