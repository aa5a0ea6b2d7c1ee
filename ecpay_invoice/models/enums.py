"""
Fixed code values of the ECPay B2C e-Invoice API.

Members are ``str`` subclasses, so ``PrintMark.YES == "1"`` holds and a raw
wire value can be normalised with ``PrintMark("1")``.
"""
from __future__ import annotations

from enum import Enum


class CarrierType(str, Enum):
    """Carrier used to deliver the e-invoice instead of paper."""

    NONE = ""
    MEMBER = "1"       # ECPay member carrier
    CITIZEN = "2"      # citizen digital certificate, 16 chars
    CELLPHONE = "3"    # mobile barcode, 8 chars


class ClearanceMark(str, Enum):
    """Customs clearance mark, required for zero-rated invoices."""

    YES = "1"
    NO = "2"


class Donation(str, Enum):
    YES = "1"
    NO = "0"


class InvType(str, Enum):
    GENERAL = "07"
    SPECIAL = "08"


class PrintMark(str, Enum):
    YES = "1"
    NO = "0"


class TaxType(str, Enum):
    DUTIABLE = "1"
    ZERO = "2"
    FREE = "3"
    MIX = "9"


class VatType(str, Enum):
    """Whether item prices include VAT."""

    YES = "1"
    NO = "0"


class AllowanceNotifyType(str, Enum):
    """How the customer is told about an allowance."""

    SMS = "S"
    EMAIL = "E"
    ALL = "A"
    NONE = "N"
