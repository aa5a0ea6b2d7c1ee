"""
Read-only queries: invoice lookup, love-code check and mobile-barcode check.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict

from ecpay_invoice.errors import EcPayValidationError
from ecpay_invoice.interfaces.command import EcPayCommand, check_fixed_length, check_length_range

INVOICE_NO_LENGTH = 10
BARCODE_PATTERN = re.compile(r"^/[0-9A-Z+\-.]{7}$")


@dataclass
class GetInvoice(EcPayCommand):
    """Look up an issued invoice, ``POST /B2CInvoice/GetIssue``."""

    request_path = "/B2CInvoice/GetIssue"

    relate_number: str = ""
    invoice_no: str = ""
    invoice_date: str = ""

    def __post_init__(self) -> None:
        if self.invoice_no:
            self.set_invoice_no(self.invoice_no)

    def set_relate_number(self, relate_number: str) -> GetInvoice:
        self.relate_number = relate_number
        return self

    def set_invoice_no(self, invoice_no: str) -> GetInvoice:
        """ECPay invoice number; requires an invoice date as well."""
        check_fixed_length(
            invoice_no, INVOICE_NO_LENGTH, "InvoiceNo", "The invoice no length should be 10."
        )
        self.invoice_no = invoice_no
        return self

    def set_invoice_date(self, invoice_date: str) -> GetInvoice:
        self.invoice_date = invoice_date
        return self

    def payload_data(self) -> Dict[str, Any]:
        return {
            "RelateNumber": self.relate_number,
            "InvoiceNo": self.invoice_no,
            "InvoiceDate": self.invoice_date,
        }

    def validate(self) -> None:
        if not self.invoice_no:
            raise EcPayValidationError("The invoice no is empty.", field="InvoiceNo")
        if not self.invoice_date:
            raise EcPayValidationError("The invoice date is empty.", field="InvoiceDate")


@dataclass
class CheckLoveCode(EcPayCommand):
    """Check that a donation love code exists, ``POST /B2CInvoice/CheckLoveCode``."""

    request_path = "/B2CInvoice/CheckLoveCode"

    love_code: str = ""

    def __post_init__(self) -> None:
        if self.love_code:
            self.set_love_code(self.love_code)

    def set_love_code(self, code: str) -> CheckLoveCode:
        check_length_range(code, 3, 7, "LoveCode")
        self.love_code = code
        return self

    def payload_data(self) -> Dict[str, Any]:
        return {"LoveCode": self.love_code}

    def validate(self) -> None:
        if not self.love_code:
            raise EcPayValidationError("LoveCode is empty", field="LoveCode")


@dataclass
class CheckBarcode(EcPayCommand):
    """Check a mobile barcode carrier (e.g. ``/AB1+-.3``), ``POST /B2CInvoice/CheckBarcode``."""

    request_path = "/B2CInvoice/CheckBarcode"

    barcode: str = ""

    def __post_init__(self) -> None:
        if self.barcode:
            self.set_barcode(self.barcode)

    def set_barcode(self, code: str) -> CheckBarcode:
        barcode = code.upper()
        _assert_barcode_format(barcode)
        self.barcode = barcode
        return self

    def payload_data(self) -> Dict[str, Any]:
        return {"BarCode": self.barcode}

    def validate(self) -> None:
        if not self.barcode:
            raise EcPayValidationError("Phone barcode is empty.", field="BarCode")
        _assert_barcode_format(self.barcode)


def _assert_barcode_format(code: str) -> None:
    if not BARCODE_PATTERN.fullmatch(code):
        raise EcPayValidationError("Phone barcode format invalid.", field="BarCode")
