"""
Invoice invalidation (void), ``POST /B2CInvoice/Invalid``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ecpay_invoice.errors import EcPayValidationError
from ecpay_invoice.interfaces.command import EcPayCommand, check_fixed_length

INVOICE_NO_LENGTH = 10


@dataclass
class InvalidInvoice(EcPayCommand):
    """Void a previously issued invoice."""

    request_path = "/B2CInvoice/Invalid"

    relate_number: str = ""
    invoice_no: str = ""
    invoice_date: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        if self.invoice_no:
            self.set_invoice_no(self.invoice_no)

    def set_relate_number(self, relate_number: str) -> InvalidInvoice:
        self.relate_number = relate_number
        return self

    def set_invoice_no(self, invoice_no: str) -> InvalidInvoice:
        check_fixed_length(
            invoice_no, INVOICE_NO_LENGTH, "InvoiceNo", "The invoice no length should be 10."
        )
        self.invoice_no = invoice_no
        return self

    def set_invoice_date(self, invoice_date: str) -> InvalidInvoice:
        self.invoice_date = invoice_date
        return self

    def set_reason(self, reason: str) -> InvalidInvoice:
        self.reason = reason
        return self

    def payload_data(self) -> Dict[str, Any]:
        return {
            "RelateNumber": self.relate_number,
            "InvoiceNo": self.invoice_no,
            "InvoiceDate": self.invoice_date,
            "Reason": self.reason,
        }

    def validate(self) -> None:
        if not self.invoice_no:
            raise EcPayValidationError("The invoice no is empty.", field="InvoiceNo")
        if not self.invoice_date:
            raise EcPayValidationError("The invoice date is empty.", field="InvoiceDate")
        if not self.reason:
            raise EcPayValidationError("The invoice invalid reason is empty.", field="Reason")
