"""Pydantic schemas for the ingestion domain."""

from typing import Literal

from pydantic import BaseModel

from packages.statement_ingestion.models import Transaction


class TransactionOut(BaseModel):
    """One extracted transaction as served to the frontend."""

    id: str
    date: str
    amount: str
    description: str
    type: Literal["income", "expense"]
    category: str
    payment_method: str

    @classmethod
    def from_transaction(cls, txn: Transaction) -> "TransactionOut":
        return cls(**txn.to_dict())


class IngestResponse(BaseModel):
    """Response from statement ingestion."""

    transactions: list[TransactionOut]
    count: int
