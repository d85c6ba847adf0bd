"""Transaction value records and the category/payment taxonomies.

``category`` and ``payment_method`` are open taxonomies: a well-known
enum member when the pipeline can recognise one, otherwise a ``RawLabel``
carrying whatever text the statement itself supplied.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Union


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Category(str, Enum):
    """Standard transaction categories."""

    FOOD = "Food"
    TRANSPORT = "Transport"
    FUEL = "Fuel"
    ENTERTAINMENT = "Entertainment"
    HOUSING = "Housing"
    BILLS = "Bills"
    UTILITIES = "Utilities"
    SALARY = "Salary"
    INVESTMENT = "Investment"
    HEALTH = "Health"
    SHOPPING = "Shopping"
    EMI = "EMI"
    INSURANCE = "Insurance"
    ATM = "ATM"
    TRANSFER = "Transfer"
    CHARGES = "Charges"
    OTHER = "Other"


class PaymentMethod(str, Enum):
    """Payment channels."""

    UPI = "UPI"
    CASH = "Cash"
    NEFT = "NEFT"
    IMPS = "IMPS"
    RTGS = "RTGS"
    CHEQUE = "Cheque"
    CARD = "Card"
    ONLINE = "Online"


@dataclass(frozen=True)
class RawLabel:
    """An unrecognised label preserved verbatim from the source."""

    value: str

    def __str__(self) -> str:
        return self.value


CategoryLike = Union[Category, RawLabel]
PaymentMethodLike = Union[PaymentMethod, RawLabel]


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Transaction:
    """Standardized transaction extracted from a statement.

    ``id`` is excluded from equality so two runs over the same bytes
    compare equal.
    """

    date: datetime
    amount: Decimal
    description: str
    type: TransactionType
    category: CategoryLike = Category.OTHER
    payment_method: PaymentMethodLike = PaymentMethod.ONLINE
    id: str = field(default_factory=_new_id, compare=False)

    def __post_init__(self):
        if self.amount <= 0:
            raise ValueError(f"Transaction amount must be positive, got {self.amount}")
        if not self.description:
            raise ValueError("Transaction description must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "amount": str(self.amount),
            "description": self.description,
            "type": self.type.value,
            "category": self.category.value,
            "payment_method": self.payment_method.value,
        }
