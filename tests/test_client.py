import json
import unittest
from unittest.mock import MagicMock, patch

import requests

from ecpay_invoice import (
    AllowanceItem,
    CheckLoveCode,
    EcPayApiError,
    EcPayClient,
    EcPayEncryptionError,
    EcPayInvalidArgumentsError,
    EcPayResponse,
    EcPayValidationError,
    Invoice,
    InvoiceItem,
    PayloadEncoder,
    RetryPolicy,
)

HASH_KEY = "ejCk326UnaZWKisg"
HASH_IV = "q9jcZX8Ib9LM8wYk"
MERCHANT_ID = "2000132"
SERVER_URL = "https://einvoice-stage.ecpay.com.tw"

ENCODER = PayloadEncoder(hash_key=HASH_KEY, hash_iv=HASH_IV)


def _mock_response(status_code, json_data=None, text=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data
    resp.text = text if text is not None else json.dumps(json_data)
    return resp


def _ok(inner=None):
    body = {"TransCode": 1, "TransMsg": "Success", "RtnCode": 1, "RtnMsg": "Success"}
    if inner is not None:
        body["Data"] = ENCODER.encode_payload({"Data": inner})["Data"]
    return _mock_response(200, body)


class TestEcPayClient(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock(spec=requests.Session)
        self.client = EcPayClient(
            SERVER_URL,
            hash_key=HASH_KEY,
            hash_iv=HASH_IV,
            merchant_id=MERCHANT_ID,
            retry=RetryPolicy(max_retries=0),
            session=self.session,
        )
        self.session.post.return_value = _ok({"RtnCode": 1, "RtnMsg": "OK"})

    def _sent(self):
        """Decrypted Data of the last request."""
        body = json.loads(self.session.post.call_args.kwargs["data"])
        return ENCODER.decode_data(body["Data"])

    def _sent_url(self):
        return self.session.post.call_args.args[0]

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def test_issue_invoice_end_to_end(self):
        inner = {"RtnCode": 1, "RtnMsg": "開立發票成功", "InvoiceNo": "AB12345678", "InvoiceDate": "2024-01-01 10:00:00"}
        self.session.post.return_value = _ok(inner)

        result = self.client.issue_invoice({
            "RelateNumber": "REL-0001",
            "CustomerEmail": "buyer@example.com",
            "Items": [{"ItemName": "Product A", "ItemCount": 1, "ItemWord": "pc", "ItemPrice": 100}],
        })

        self.assertEqual(self._sent_url(), f"{SERVER_URL}/B2CInvoice/Issue")
        sent = self._sent()
        self.assertEqual(sent["MerchantID"], MERCHANT_ID)
        self.assertEqual(sent["RelateNumber"], "REL-0001")
        self.assertEqual(sent["Items"][0]["ItemName"], "Product A")
        self.assertEqual(sent["Items"][0]["ItemSeq"], 1)
        self.assertEqual(sent["SalesAmount"], 100)

        self.assertIsInstance(result, EcPayResponse)
        self.assertTrue(result.is_success)
        self.assertEqual(result.trans_code, 1)
        self.assertEqual(result.data, inner)

    def test_issue_invoice_validation_runs_before_io(self):
        with self.assertRaises(EcPayValidationError):
            self.client.issue_invoice({"RelateNumber": "REL-0001", "CustomerEmail": "a@b.c"})
        self.session.post.assert_not_called()

    def test_issue_allowance(self):
        self.client.issue_allowance({
            "InvoiceNo": "AB12345678",
            "InvoiceDate": "2024-01-01",
            "AllowanceNotify": "E",
            "NotifyMail": "buyer@example.com",
            "Items": [AllowanceItem(name="Product A", quantity=2, unit="pc", price=30)],
        })
        self.assertEqual(self._sent_url(), f"{SERVER_URL}/B2CInvoice/Allowance")
        sent = self._sent()
        self.assertEqual(sent["AllowanceAmount"], 60)
        self.assertEqual(sent["AllowanceNotify"], "E")

    def test_invalid_invoice(self):
        self.client.invalid_invoice({
            "InvoiceNo": "AB12345678", "InvoiceDate": "2024-01-01", "Reason": "Wrong amount",
        })
        self.assertEqual(self._sent_url(), f"{SERVER_URL}/B2CInvoice/Invalid")
        self.assertEqual(self._sent()["Reason"], "Wrong amount")

    def test_get_invoice(self):
        self.client.get_invoice({"InvoiceNo": "AB12345678", "InvoiceDate": "2024-01-01"})
        self.assertEqual(self._sent_url(), f"{SERVER_URL}/B2CInvoice/GetIssue")
        self.assertEqual(self._sent()["InvoiceNo"], "AB12345678")

    def test_check_love_code(self):
        self.client.check_love_code({"LoveCode": "168001"})
        self.assertEqual(self._sent_url(), f"{SERVER_URL}/B2CInvoice/CheckLoveCode")
        self.assertEqual(self._sent()["LoveCode"], "168001")

    def test_check_love_code_missing_never_posts(self):
        with self.assertRaises(EcPayValidationError):
            self.client.check_love_code({})
        self.session.post.assert_not_called()

    def test_check_barcode(self):
        self.client.check_barcode({"BarCode": "/abc+123"})
        self.assertEqual(self._sent_url(), f"{SERVER_URL}/B2CInvoice/CheckBarcode")
        self.assertEqual(self._sent()["BarCode"], "/ABC+123")

    # ------------------------------------------------------------------
    # send()
    # ------------------------------------------------------------------

    def test_send_command_instance(self):
        invoice = (
            Invoice()
            .set_relate_number("REL-0002")
            .set_customer_phone("0912345678")
            .set_items([InvoiceItem(name="Product B", quantity=2, unit="pc", price=25)])
        )
        self.client.send(invoice)
        self.assertEqual(self._sent()["SalesAmount"], 50)

    def test_send_custom_path_with_raw_data(self):
        self.client.send("/B2CInvoice/GetCompanyNameByTaxID", {"UnifiedBusinessNo": "97025978"})
        self.assertEqual(self._sent_url(), f"{SERVER_URL}/B2CInvoice/GetCompanyNameByTaxID")
        self.assertEqual(self._sent(), {"MerchantID": MERCHANT_ID, "UnifiedBusinessNo": "97025978"})

    def test_send_custom_path_without_data(self):
        self.client.send("/B2CInvoice/Ping")
        self.assertEqual(self._sent(), {"MerchantID": MERCHANT_ID})

    def test_send_rejects_other_arguments(self):
        with self.assertRaises(EcPayInvalidArgumentsError) as ctx:
            self.client.send(123)
        self.assertIsInstance(ctx.exception, TypeError)
        self.assertEqual(ctx.exception.code, "INVALID_ARGUMENTS")
        self.session.post.assert_not_called()

    def test_send_rejects_non_mapping_data(self):
        for data in ([1, 2], "RelateNumber=R1", 42):
            with self.subTest(data=data):
                with self.assertRaises(EcPayInvalidArgumentsError) as ctx:
                    self.client.send("/B2CInvoice/GetIssue", data)
                self.assertEqual(ctx.exception.code, "INVALID_ARGUMENTS")
        self.session.post.assert_not_called()

    def test_send_validates_command(self):
        with self.assertRaises(EcPayValidationError):
            self.client.send(CheckLoveCode())
        self.session.post.assert_not_called()

    def test_undecryptable_response(self):
        self.session.post.return_value = _mock_response(200, {"RtnCode": 1, "Data": "INVALID_ENCRYPTED_DATA"})
        with self.assertRaises(EcPayEncryptionError):
            self.client.check_love_code({"LoveCode": "168001"})

    # ------------------------------------------------------------------
    # Response
    # ------------------------------------------------------------------

    def test_failed_rtn_code_raises_on_request(self):
        self.session.post.return_value = _mock_response(200, {"RtnCode": 9000001, "RtnMsg": "Param error"})
        result = self.client.check_love_code({"LoveCode": "168001"})
        self.assertFalse(result.is_success)
        with self.assertRaises(EcPayApiError) as ctx:
            result.raise_for_rtn_code()
        self.assertEqual(ctx.exception.rtn_code, 9000001)
        self.assertEqual(ctx.exception.rtn_msg, "Param error")
        self.assertEqual(ctx.exception.raw_response["RtnMsg"], "Param error")

    def test_raise_for_rtn_code_returns_self_on_success(self):
        result = self.client.check_love_code({"LoveCode": "168001"})
        self.assertIs(result.raise_for_rtn_code(), result)

    def test_response_from_dict_defaults(self):
        response = EcPayResponse.from_dict({})
        self.assertIsNone(response.rtn_code)
        self.assertEqual(response.rtn_msg, "")
        self.assertIsNone(response.data)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def test_options_is_a_copy(self):
        client = EcPayClient(
            SERVER_URL + "/", HASH_KEY, HASH_IV, MERCHANT_ID, headers={"X-A": "1"}, session=self.session,
        )
        options = client.options
        self.assertEqual(options.server_url, SERVER_URL)
        options.headers["X-B"] = "2"
        self.assertNotIn("X-B", client.options.headers)

    def test_defaults(self):
        options = EcPayClient(SERVER_URL, HASH_KEY, HASH_IV, MERCHANT_ID).options
        self.assertEqual(options.timeout_ms, 30000)
        self.assertEqual(options.retry.max_retries, 3)
        self.assertFalse(options.debug)

    def test_retry_from_mapping(self):
        client = EcPayClient(
            SERVER_URL, HASH_KEY, HASH_IV, MERCHANT_ID,
            retry={"max_retries": 1, "retry_delay_ms": 10}, session=self.session,
        )
        self.session.post.side_effect = [_mock_response(503, text=""), _ok()]
        with patch("ecpay_invoice.runtime.time.sleep") as mock_sleep:
            client.check_love_code({"LoveCode": "168001"})
        self.assertEqual(self.session.post.call_count, 2)
        mock_sleep.assert_called_once_with(0.01)

    def test_custom_logger_receives_init_message(self):
        log = MagicMock()
        EcPayClient(SERVER_URL, HASH_KEY, HASH_IV, MERCHANT_ID, logger=log, session=self.session)
        log.debug.assert_called_once()
        self.assertIn("initialized", log.debug.call_args.args[0])

    def test_bad_keys_fail_at_construction(self):
        with self.assertRaises(EcPayEncryptionError):
            EcPayClient(SERVER_URL, "short", HASH_IV, MERCHANT_ID)


if __name__ == "__main__":
    unittest.main()
