# seed.py
"""
Demo data for local development.

Creates one demo account with a customer and a job so the invoice
endpoints can be exercised right away. Safe to run more than once.

Usage:
     SEED_DEMO_DATA=true uvicorn main:app
"""
from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from models import Account, Customer, Job

logger = structlog.get_logger(__name__)

DEMO_OWNER_ID = 1
DEMO_CUSTOMER_EMAIL = "jordan.rivera@example.com"


def seed_demo_data(db: Session) -> Account:
     """
     Ensure the demo account, customer and job exist.

     Returns:
          The demo Account (existing or newly created)
     """
     account = db.query(Account).filter(Account.owner_id == DEMO_OWNER_ID).first()
     if account:
          logger.info("demo_data_present", account_id=account.id)
          return account

     account = Account(
          owner_id=DEMO_OWNER_ID,
          business_name="Demo Plumbing & Heating",
          default_tax_rate=Decimal("0.080000"),
          default_invoice_notes="Thank you for your business. Payment is due within 30 days.",
          payment_terms_days=30,
     )
     db.add(account)
     db.flush()

     customer = Customer(
          account_id=account.id,
          first_name="Jordan",
          last_name="Rivera",
          email=DEMO_CUSTOMER_EMAIL,
     )
     db.add(customer)
     db.flush()

     job = Job(
          account_id=account.id,
          customer_id=customer.id,
          title="Kitchen faucet replacement",
          status="completed",
     )
     db.add(job)
     db.commit()

     logger.info("demo_data_seeded", account_id=account.id, customer_id=customer.id, job_id=job.id)
     return account
