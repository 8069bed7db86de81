"""Shared SQLAlchemy models registry for the back-office database.

Currently includes the tenant/supplier roster and the payment tables written
by ``payment_reconciliation``.
"""

from .backoffice import Base, Business, Invoice, Payment, PaymentSplit, Supplier

__all__ = [
    "Base",
    "Business",
    "Supplier",
    "Invoice",
    "Payment",
    "PaymentSplit",
]
