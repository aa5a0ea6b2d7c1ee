"""
EcPayClient: public entry point: command dispatch plus one convenience
method per API operation.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Mapping, Optional, Union

import requests

from ecpay_invoice.errors import EcPayInvalidArgumentsError
from ecpay_invoice.interfaces.allowance import AllowanceInvoice
from ecpay_invoice.interfaces.command import EcPayCommand
from ecpay_invoice.interfaces.invalid import InvalidInvoice
from ecpay_invoice.interfaces.invoice import Invoice
from ecpay_invoice.interfaces.queries import CheckBarcode, CheckLoveCode, GetInvoice
from ecpay_invoice.interfaces.response import EcPayResponse
from ecpay_invoice.runtime import EcPayConfig, EcPayRuntime, RetryPolicy

_logger = logging.getLogger(__name__)

# Wire key -> Invoice setter, applied when the key is present and truthy.
_INVOICE_SETTERS = {
    "RelateNumber": "set_relate_number",
    "CustomerID": "set_customer_id",
    "CustomerIdentifier": "set_customer_identifier",
    "CustomerName": "set_customer_name",
    "CustomerAddr": "set_customer_addr",
    "CustomerPhone": "set_customer_phone",
    "CustomerEmail": "set_customer_email",
    "ClearanceMark": "set_clearance_mark",
    "Print": "set_print_mark",
    "Donation": "set_donation",
    "LoveCode": "set_love_code",
    "CarrierType": "set_carrier_type",
    "CarrierNum": "set_carrier_num",
    "TaxType": "set_tax_type",
    "SalesAmount": "set_sales_amount",
    "InvoiceRemark": "set_invoice_remark",
    "InvType": "set_inv_type",
    "vat": "set_vat",
    "Items": "set_items",
}

_ALLOWANCE_SETTERS = {
    "InvoiceNo": "set_invoice_no",
    "InvoiceDate": "set_invoice_date",
    "AllowanceNotify": "set_allowance_notify",
    "CustomerName": "set_customer_name",
    "NotifyMail": "set_notify_mail",
    "NotifyPhone": "set_notify_phone",
    "AllowanceAmount": "set_allowance_amount",
    "Items": "set_items",
}

_INVALID_SETTERS = {
    "RelateNumber": "set_relate_number",
    "InvoiceNo": "set_invoice_no",
    "InvoiceDate": "set_invoice_date",
    "Reason": "set_reason",
}

_GET_INVOICE_SETTERS = {
    "RelateNumber": "set_relate_number",
    "InvoiceNo": "set_invoice_no",
    "InvoiceDate": "set_invoice_date",
}


def _apply(command: EcPayCommand, setters: Mapping[str, str], data: Mapping[str, Any]) -> EcPayCommand:
    for key, setter in setters.items():
        value = data.get(key)
        if value:
            getattr(command, setter)(value)
    return command


class EcPayClient:
    """
    Client for the ECPay e-Invoice B2C API.

    Args:
        server_url:   API host, e.g. ``https://einvoice-stage.ecpay.com.tw``.
        hash_key:     Merchant HashKey (16 chars).
        hash_iv:      Merchant HashIV (16 chars).
        merchant_id:  Merchant ID.
        timeout_ms:   Per-attempt timeout in milliseconds.
        retry:        A ``RetryPolicy`` or a mapping of its fields.
        session:      A ``requests.Session`` to share; one is created otherwise.
        logger:       Logger for SDK events; defaults to ``ecpay_invoice.runtime``.
        headers:      Extra headers sent with every request.
        debug:        Log encrypted request/response bodies at ``DEBUG``.
    """

    def __init__(
        self,
        server_url: str,
        hash_key: str,
        hash_iv: str,
        merchant_id: str,
        *,
        timeout_ms: float = 30000,
        retry: Union[RetryPolicy, Mapping[str, Any], None] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
        headers: Optional[Mapping[str, str]] = None,
        debug: bool = False,
    ) -> None:
        if retry is None:
            retry = RetryPolicy()
        elif not isinstance(retry, RetryPolicy):
            retry = RetryPolicy(**retry)

        config = EcPayConfig(
            server_url=server_url,
            hash_key=hash_key,
            hash_iv=hash_iv,
            merchant_id=merchant_id,
            timeout_ms=timeout_ms,
            retry=retry,
            headers=dict(headers or {}),
            debug=debug,
        )
        self._runtime = EcPayRuntime(config, session=session, log=logger)
        (logger or _logger).debug("[EcPay] EcPayClient initialized for %s", config.server_url)

    @property
    def options(self) -> EcPayConfig:
        """A copy of the effective configuration."""
        config = self._runtime.config
        return dataclasses.replace(config, headers=dict(config.headers))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def send(
        self,
        path_or_command: Union[str, EcPayCommand],
        data: Optional[Mapping[str, Any]] = None,
    ) -> EcPayResponse:
        """
        Send a command, or raw ``data`` to an arbitrary endpoint path.

        A command is validated first; validation errors are raised before any
        network I/O.
        """
        if isinstance(path_or_command, EcPayCommand):
            path_or_command.validate()
            raw = self._runtime.request(
                path_or_command.get_request_path(), path_or_command.payload_data()
            )
        elif isinstance(path_or_command, str):
            if data is not None and not isinstance(data, Mapping):
                raise EcPayInvalidArgumentsError()
            raw = self._runtime.request(path_or_command, data or {})
        else:
            raise EcPayInvalidArgumentsError()
        return EcPayResponse.from_dict(raw)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def issue_invoice(self, data: Mapping[str, Any]) -> EcPayResponse:
        """Issue a B2C invoice from wire-keyed ``data`` (``RelateNumber``, ``Items`` ...)."""
        return self.send(_apply(Invoice(), _INVOICE_SETTERS, data))

    def issue_allowance(self, data: Mapping[str, Any]) -> EcPayResponse:
        """Issue an allowance (refund) against ``InvoiceNo``."""
        return self.send(_apply(AllowanceInvoice(), _ALLOWANCE_SETTERS, data))

    def invalid_invoice(self, data: Mapping[str, Any]) -> EcPayResponse:
        """Void an invoice given ``InvoiceNo``, ``InvoiceDate`` and ``Reason``."""
        return self.send(_apply(InvalidInvoice(), _INVALID_SETTERS, data))

    def get_invoice(self, data: Mapping[str, Any]) -> EcPayResponse:
        return self.send(_apply(GetInvoice(), _GET_INVOICE_SETTERS, data))

    def check_love_code(self, data: Mapping[str, Any]) -> EcPayResponse:
        return self.send(_apply(CheckLoveCode(), {"LoveCode": "set_love_code"}, data))

    def check_barcode(self, data: Mapping[str, Any]) -> EcPayResponse:
        return self.send(_apply(CheckBarcode(), {"BarCode": "set_barcode"}, data))
