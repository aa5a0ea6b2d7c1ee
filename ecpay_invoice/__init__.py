"""
ECPay e-Invoice (B2C) Python SDK.

Usage::

    from ecpay_invoice import EcPayClient, Invoice, InvoiceItem

    client = EcPayClient(
        "https://einvoice-stage.ecpay.com.tw",
        hash_key="ejCk326UnaZWKisg",
        hash_iv="q9jcZX8Ib9LM8wYk",
        merchant_id="2000132",
        retry={"max_retries": 2},
    )

    invoice = (
        Invoice()
        .set_relate_number("ORDER-0001")
        .set_customer_email("buyer@example.com")
        .set_items([InvoiceItem(name="Product A", quantity=1, unit="pc", price=100)])
    )
    result = client.send(invoice).raise_for_rtn_code()
    print(result.data)
"""
from __future__ import annotations

from ecpay_invoice.client import EcPayClient
from ecpay_invoice.errors import (
    EcPayApiError,
    EcPayEncryptionError,
    EcPayError,
    EcPayInvalidArgumentsError,
    EcPayNetworkError,
    EcPayPayloadError,
    EcPayTimeoutError,
    EcPayValidationError,
)
from ecpay_invoice.interfaces.allowance import AllowanceInvoice
from ecpay_invoice.interfaces.command import EcPayCommand
from ecpay_invoice.interfaces.invalid import InvalidInvoice
from ecpay_invoice.interfaces.invoice import Invoice
from ecpay_invoice.interfaces.queries import CheckBarcode, CheckLoveCode, GetInvoice
from ecpay_invoice.interfaces.response import EcPayResponse
from ecpay_invoice.models.enums import (
    AllowanceNotifyType,
    CarrierType,
    ClearanceMark,
    Donation,
    InvType,
    PrintMark,
    TaxType,
    VatType,
)
from ecpay_invoice.models.schemas import AllowanceItem, InvoiceItem
from ecpay_invoice.runtime import EcPayConfig, EcPayRuntime, RetryPolicy, __version__
from ecpay_invoice.services.cipher import CipherService
from ecpay_invoice.services.encoder import PayloadEncoder

__all__ = [
    "EcPayClient",
    "EcPayConfig",
    "EcPayRuntime",
    "RetryPolicy",
    "EcPayResponse",
    # Commands
    "EcPayCommand",
    "Invoice",
    "AllowanceInvoice",
    "InvalidInvoice",
    "GetInvoice",
    "CheckLoveCode",
    "CheckBarcode",
    # Models
    "InvoiceItem",
    "AllowanceItem",
    "AllowanceNotifyType",
    "CarrierType",
    "ClearanceMark",
    "Donation",
    "InvType",
    "PrintMark",
    "TaxType",
    "VatType",
    # Security
    "CipherService",
    "PayloadEncoder",
    # Errors
    "EcPayError",
    "EcPayApiError",
    "EcPayValidationError",
    "EcPayNetworkError",
    "EcPayEncryptionError",
    "EcPayPayloadError",
    "EcPayTimeoutError",
    "EcPayInvalidArgumentsError",
    "__version__",
]
