"""
Allowance (refund / credit note) against an issued invoice, ``POST /B2CInvoice/Allowance``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Union

from ecpay_invoice.errors import EcPayValidationError
from ecpay_invoice.interfaces.command import (
    EcPayCommand,
    build_items,
    check_fixed_length,
    coerce_enum,
    round_half_up,
)
from ecpay_invoice.models.enums import AllowanceNotifyType
from ecpay_invoice.models.schemas import AllowanceItem, Number

INVOICE_NO_LENGTH = 10


@dataclass
class AllowanceInvoice(EcPayCommand):
    """
    Issue an allowance for part or all of an invoice.

    ``allowance_amount`` is always recomputed from the items by
    ``validate()``.
    """

    request_path = "/B2CInvoice/Allowance"

    invoice_no: str = ""
    invoice_date: str = ""
    allowance_notify: AllowanceNotifyType = AllowanceNotifyType.NONE
    customer_name: str = ""
    notify_mail: str = ""
    notify_phone: str = ""
    allowance_amount: Number = 0
    items: List[AllowanceItem] = field(default_factory=list)
    _item_payloads: List[Dict[str, Any]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.invoice_no:
            self.set_invoice_no(self.invoice_no)
        self.set_allowance_notify(self.allowance_notify)
        self.set_items(self.items)

    def set_invoice_no(self, invoice_no: str) -> AllowanceInvoice:
        """Original invoice number, exactly 10 chars."""
        check_fixed_length(invoice_no, INVOICE_NO_LENGTH, "InvoiceNo")
        self.invoice_no = invoice_no
        return self

    def set_invoice_date(self, invoice_date: str) -> AllowanceInvoice:
        self.invoice_date = invoice_date
        return self

    def set_allowance_notify(self, notify: Union[AllowanceNotifyType, str]) -> AllowanceInvoice:
        self.allowance_notify = coerce_enum(AllowanceNotifyType, notify, "AllowanceNotify")
        return self

    def set_customer_name(self, name: str) -> AllowanceInvoice:
        self.customer_name = name
        return self

    def set_notify_mail(self, email: str) -> AllowanceInvoice:
        self.notify_mail = email
        return self

    def set_notify_phone(self, phone: str) -> AllowanceInvoice:
        self.notify_phone = phone
        return self

    def set_allowance_amount(self, amount: Number) -> AllowanceInvoice:
        self.allowance_amount = amount
        return self

    def set_items(self, items: Iterable[Union[AllowanceItem, Dict[str, Any]]]) -> AllowanceInvoice:
        self.items = build_items(AllowanceItem, items)
        return self

    def payload_data(self) -> Dict[str, Any]:
        return {
            "InvoiceNo": self.invoice_no,
            "InvoiceDate": self.invoice_date,
            "AllowanceNotify": self.allowance_notify.value,
            "CustomerName": self.customer_name,
            "NotifyMail": self.notify_mail,
            "NotifyPhone": self.notify_phone,
            "AllowanceAmount": self.allowance_amount,
            "Items": [dict(p) for p in self._item_payloads],
        }

    def validate(self) -> None:
        self._item_payloads = [
            {**item.as_payload(), "ItemSeq": seq}
            for seq, item in enumerate(self.items, start=1)
        ]
        self.allowance_amount = round_half_up(sum(item.amount for item in self.items))

        if not self.invoice_no:
            raise EcPayValidationError("InvoiceNo empty", field="InvoiceNo")
        if not self.invoice_date:
            raise EcPayValidationError("InvoiceDate empty", field="InvoiceDate")
        if not self.items:
            raise EcPayValidationError("Items empty", field="Items")
        if self.allowance_amount <= 0:
            raise EcPayValidationError("AllowanceAmount must be > 0", field="AllowanceAmount")

        if self.allowance_notify is AllowanceNotifyType.EMAIL and not self.notify_mail:
            raise EcPayValidationError("Email notify requires NotifyMail", field="NotifyMail")
        if self.allowance_notify is AllowanceNotifyType.SMS and not self.notify_phone:
            raise EcPayValidationError("SMS notify requires NotifyPhone", field="NotifyPhone")
