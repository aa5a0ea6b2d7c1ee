from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field

Number = Union[int, float]


class InvoiceItem(BaseModel):
    """
    A single line item in an invoice.
    """
    name: str = Field(..., min_length=1)
    quantity: Number = Field(..., gt=0)
    unit: str = Field(..., min_length=1)
    price: Number = Field(..., gt=0)
    tax_type: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "InvoiceItem":
        """Build from the wire-keyed form (``ItemName``, ``ItemCount``, ...)."""
        return cls(
            name=raw.get("ItemName"),
            quantity=raw.get("ItemCount"),
            unit=raw.get("ItemWord"),
            price=raw.get("ItemPrice"),
            tax_type=raw.get("ItemTaxType") or None,
        )

    @property
    def amount(self) -> Number:
        return self.quantity * self.price

    def as_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "ItemName": self.name,
            "ItemCount": self.quantity,
            "ItemWord": self.unit,
            "ItemPrice": self.price,
            "ItemAmount": self.amount,
        }
        if self.tax_type:
            payload["ItemTaxType"] = self.tax_type
        return payload


class AllowanceItem(BaseModel):
    """
    A line item in an allowance (refund). Quantities are whole units.
    """
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit: str = Field(..., min_length=1)
    price: Number = Field(..., gt=0)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AllowanceItem":
        return cls(
            name=raw.get("ItemName"),
            quantity=raw.get("ItemCount"),
            unit=raw.get("ItemWord"),
            price=raw.get("ItemPrice"),
        )

    @property
    def amount(self) -> Number:
        return self.quantity * self.price

    def as_payload(self) -> Dict[str, Any]:
        return {
            "ItemName": self.name,
            "ItemCount": self.quantity,
            "ItemWord": self.unit,
            "ItemPrice": self.price,
            "ItemAmount": self.amount,
        }
