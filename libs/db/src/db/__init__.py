"""db: shared back-office database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.backoffice`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.backoffice import Base, Business, Invoice, Payment, PaymentSplit, Supplier

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "Business",
    "Supplier",
    "Invoice",
    "Payment",
    "PaymentSplit",
]
