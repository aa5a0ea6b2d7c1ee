"""
B2C invoice issuance, ``POST /B2CInvoice/Issue``.

Field names follow Python's snake_case convention; ``payload_data()`` maps
them to the PascalCase keys ECPay expects.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Union

from ecpay_invoice.errors import EcPayValidationError
from ecpay_invoice.interfaces.command import (
    EcPayCommand,
    build_items,
    check_length_range,
    coerce_enum,
    round_half_up,
)
from ecpay_invoice.models.enums import (
    CarrierType,
    ClearanceMark,
    Donation,
    InvType,
    PrintMark,
    TaxType,
    VatType,
)
from ecpay_invoice.models.schemas import InvoiceItem, Number

RELATE_NUMBER_MAX = 30
CITIZEN_CARRIER_LENGTH = 16
CELLPHONE_CARRIER_LENGTH = 8


@dataclass
class Invoice(EcPayCommand):
    """
    Issue a new B2C e-invoice.

    Usage::

        invoice = (
            Invoice()
            .set_relate_number("ORDER-0001")
            .set_customer_email("buyer@example.com")
            .set_items([InvoiceItem(name="Product A", quantity=1, unit="pc", price=100)])
        )
        client.send(invoice)

    ``sales_amount`` may be left at 0; ``validate()`` fills it in from the
    items. An explicit amount must match the rounded item total.
    """

    request_path = "/B2CInvoice/Issue"

    relate_number: str = ""
    customer_id: str = ""
    customer_identifier: str = ""
    customer_name: str = ""
    customer_addr: str = ""
    customer_phone: str = ""
    customer_email: str = ""
    clearance_mark: Union[ClearanceMark, str] = ""
    print_mark: PrintMark = PrintMark.NO
    donation: Donation = Donation.NO
    love_code: str = ""
    carrier_type: CarrierType = CarrierType.NONE
    carrier_num: str = ""
    tax_type: TaxType = TaxType.DUTIABLE
    sales_amount: Number = 0
    invoice_remark: str = ""
    inv_type: InvType = InvType.GENERAL
    vat: VatType = VatType.YES
    items: List[InvoiceItem] = field(default_factory=list)
    _item_payloads: List[Dict[str, Any]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.set_relate_number(self.relate_number)
        self.set_clearance_mark(self.clearance_mark)
        self.set_print_mark(self.print_mark)
        self.set_donation(self.donation)
        self.set_carrier_type(self.carrier_type)
        self.set_tax_type(self.tax_type)
        self.set_inv_type(self.inv_type)
        self.set_vat(self.vat)
        self.set_items(self.items)
        if self.love_code:
            self.set_love_code(self.love_code)
        if self.sales_amount:
            self.set_sales_amount(self.sales_amount)

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    def set_relate_number(self, relate_number: str) -> Invoice:
        """Merchant-side unique reference, at most 30 chars."""
        if len(relate_number) > RELATE_NUMBER_MAX:
            raise EcPayValidationError(
                f"RelateNumber too long (max {RELATE_NUMBER_MAX})", field="RelateNumber"
            )
        self.relate_number = relate_number
        return self

    def set_customer_id(self, customer_id: str) -> Invoice:
        self.customer_id = customer_id
        return self

    def set_customer_identifier(self, identifier: str) -> Invoice:
        """Customer's unified business number (tax ID)."""
        self.customer_identifier = identifier
        return self

    def set_customer_name(self, name: str) -> Invoice:
        self.customer_name = name
        return self

    def set_customer_addr(self, addr: str) -> Invoice:
        self.customer_addr = addr
        return self

    def set_customer_phone(self, phone: str) -> Invoice:
        self.customer_phone = phone
        return self

    def set_customer_email(self, email: str) -> Invoice:
        self.customer_email = email
        return self

    def set_clearance_mark(self, mark: Union[ClearanceMark, str]) -> Invoice:
        self.clearance_mark = coerce_enum(ClearanceMark, mark, "ClearanceMark") if mark else ""
        return self

    def set_print_mark(self, mark: Union[PrintMark, str]) -> Invoice:
        self.print_mark = coerce_enum(PrintMark, mark, "Print")
        return self

    def set_donation(self, donation: Union[Donation, str]) -> Invoice:
        self.donation = coerce_enum(Donation, donation, "Donation")
        return self

    def set_love_code(self, code: str) -> Invoice:
        """Donation recipient code, 3 to 7 chars."""
        check_length_range(code, 3, 7, "LoveCode")
        self.love_code = code
        return self

    def set_carrier_type(self, carrier_type: Union[CarrierType, str]) -> Invoice:
        self.carrier_type = coerce_enum(CarrierType, carrier_type, "CarrierType")
        return self

    def set_carrier_num(self, num: str) -> Invoice:
        """Carrier number, e.g. ``/AB12345`` for a mobile barcode."""
        self.carrier_num = num
        return self

    def set_tax_type(self, tax_type: Union[TaxType, str]) -> Invoice:
        self.tax_type = coerce_enum(TaxType, tax_type, "TaxType")
        return self

    def set_sales_amount(self, amount: Number) -> Invoice:
        if amount <= 0:
            raise EcPayValidationError("SalesAmount must be > 0", field="SalesAmount")
        self.sales_amount = amount
        return self

    def set_invoice_remark(self, remark: str) -> Invoice:
        self.invoice_remark = remark
        return self

    def set_inv_type(self, inv_type: Union[InvType, str]) -> Invoice:
        self.inv_type = coerce_enum(InvType, inv_type, "InvType")
        return self

    def set_vat(self, vat: Union[VatType, str]) -> Invoice:
        self.vat = coerce_enum(VatType, vat, "vat")
        return self

    def set_items(self, items: Iterable[Union[InvoiceItem, Dict[str, Any]]]) -> Invoice:
        self.items = build_items(InvoiceItem, items)
        return self

    # ------------------------------------------------------------------
    # Command
    # ------------------------------------------------------------------

    def payload_data(self) -> Dict[str, Any]:
        return {
            "RelateNumber": self.relate_number,
            "CustomerID": self.customer_id,
            "CustomerIdentifier": self.customer_identifier,
            "CustomerName": self.customer_name,
            "CustomerAddr": self.customer_addr,
            "CustomerPhone": self.customer_phone,
            "CustomerEmail": self.customer_email,
            "ClearanceMark": self.clearance_mark.value if self.clearance_mark else "",
            "Print": self.print_mark.value,
            "Donation": self.donation.value,
            "LoveCode": self.love_code,
            "CarrierType": self.carrier_type.value,
            "CarrierNum": self.carrier_num,
            "TaxType": self.tax_type.value,
            "SalesAmount": self.sales_amount,
            "InvoiceRemark": self.invoice_remark,
            "Items": [dict(p) for p in self._item_payloads],
            "InvType": self.inv_type.value,
            "vat": self.vat.value,
        }

    def validate(self) -> None:
        """
        Materialise ``Items``, settle ``SalesAmount`` and run the cross-field
        rules. All rule violations are reported together.
        """
        if not self.items:
            raise EcPayValidationError("Items cannot be empty", field="Items")

        payloads = []
        for seq, item in enumerate(self.items, start=1):
            payload = item.as_payload()
            payload["ItemSeq"] = seq
            payload.setdefault("ItemTaxType", self.tax_type.value)
            payloads.append(payload)
        self._item_payloads = payloads

        calculated = round_half_up(sum(item.amount for item in self.items))
        if self.sales_amount and self.sales_amount != calculated:
            raise EcPayValidationError(
                f"Calculated SalesAmount ({calculated}) != Set SalesAmount ({self.sales_amount})",
                field="SalesAmount",
                details={"calculated": calculated, "supplied": self.sales_amount},
            )
        self.sales_amount = calculated

        issues = self._cross_field_issues()
        if issues:
            raise EcPayValidationError("; ".join(issues), details=issues)

    def _cross_field_issues(self) -> List[str]:
        issues: List[str] = []
        printing = self.print_mark is PrintMark.YES
        donating = self.donation is Donation.YES

        if not self.relate_number:
            issues.append("RelateNumber is empty")

        if self.tax_type is TaxType.ZERO and not self.clearance_mark:
            issues.append("Zero tax rate requires ClearanceMark")

        # Customer
        if printing and not (self.customer_name and self.customer_addr):
            issues.append("Print=Yes requires CustomerName and CustomerAddr")
        if not self.customer_phone and not self.customer_email:
            issues.append("Must provide either CustomerPhone or CustomerEmail")
        if self.customer_identifier:
            if not printing:
                issues.append("CustomerIdentifier requires Print=Yes")
            if donating:
                issues.append("CustomerIdentifier present, Donation cannot be Yes")

        # Donation
        if donating:
            if not self.love_code:
                issues.append("Donation=Yes requires LoveCode")
            if printing:
                issues.append("Donation=Yes, cannot Print")

        # Carrier
        if self.carrier_type is CarrierType.NONE:
            if self.carrier_num:
                issues.append("CarrierType=None, CarrierNum must be empty")
        else:
            if printing:
                issues.append("CarrierType set, cannot Print")
            if self.carrier_type is CarrierType.MEMBER and self.carrier_num:
                issues.append("CarrierType=Member, CarrierNum must be empty")
            if self.carrier_type is CarrierType.CITIZEN and len(self.carrier_num) != CITIZEN_CARRIER_LENGTH:
                issues.append(f"CarrierType=Citizen, CarrierNum must be {CITIZEN_CARRIER_LENGTH} chars")
            if self.carrier_type is CarrierType.CELLPHONE and len(self.carrier_num) != CELLPHONE_CARRIER_LENGTH:
                issues.append(f"CarrierType=Cellphone, CarrierNum must be {CELLPHONE_CARRIER_LENGTH} chars")

        return issues
