"""
Typed view over an ECPay API response.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ecpay_invoice.errors import EcPayApiError

RTN_CODE_SUCCESS = 1


@dataclass
class EcPayResponse:
    """
    Outer response envelope. ``data`` is already decrypted and parsed; it
    usually carries its own ``RtnCode`` / ``RtnMsg`` for the business result.
    """

    rtn_code: Optional[int]
    rtn_msg: str
    data: Optional[Any] = None
    trans_code: Optional[int] = None
    trans_msg: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> EcPayResponse:
        return cls(
            rtn_code=raw.get("RtnCode"),
            rtn_msg=raw.get("RtnMsg", ""),
            data=raw.get("Data"),
            trans_code=raw.get("TransCode"),
            trans_msg=raw.get("TransMsg"),
            raw=raw,
        )

    @property
    def is_success(self) -> bool:
        return self.rtn_code == RTN_CODE_SUCCESS

    def raise_for_rtn_code(self) -> EcPayResponse:
        """Raise ``EcPayApiError`` unless ``RtnCode`` is 1; return ``self`` otherwise."""
        if not self.is_success:
            raise EcPayApiError(
                f"ECPay API error {self.rtn_code}: {self.rtn_msg}",
                self.rtn_code,
                self.rtn_msg,
                trans_code=self.trans_code,
                trans_msg=self.trans_msg,
                raw_response=self.raw,
            )
        return self
