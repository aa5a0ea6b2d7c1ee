"""
Command base class shared by every ECPay operation and query.

A command owns one request path and a typed field set. Setters reject bad
values as soon as they are assigned; ``validate()`` runs once, right before
the client sends the command, performs cross-field checks and brings derived
fields (item lists, totals) into their final form.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, Mapping, Optional, Type, TypeVar

from pydantic import ValidationError

from ecpay_invoice.errors import EcPayValidationError

E = TypeVar("E", bound=Enum)


class EcPayCommand(ABC):
    """Abstract request descriptor consumed by ``EcPayClient.send``."""

    request_path: ClassVar[str]

    def get_request_path(self) -> str:
        return self.request_path

    @abstractmethod
    def payload_data(self) -> Dict[str, Any]:
        """Return the wire-keyed field map for the ``Data`` section."""

    def get_payload_data(self) -> Dict[str, Any]:
        return self.payload_data()

    @abstractmethod
    def validate(self) -> None:
        """
        Finalise and check the field set.

        Raises:
            EcPayValidationError: the command cannot be sent as-is.
        """


# ---------------------------------------------------------------------------
# Helpers shared by the concrete commands
# ---------------------------------------------------------------------------


def coerce_enum(enum_cls: Type[E], value: Any, field: str) -> E:
    """Normalise a raw wire code (or member) to ``enum_cls``."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(repr(m.value) for m in enum_cls)
        raise EcPayValidationError(
            f"{field} must be one of {allowed}, got {value!r}", field=field
        ) from None


def check_fixed_length(value: str, length: int, field: str, message: Optional[str] = None) -> None:
    if len(value) != length:
        raise EcPayValidationError(message or f"{field} must be {length} chars", field=field)


def check_length_range(value: str, low: int, high: int, field: str) -> None:
    if not (low <= len(value) <= high):
        raise EcPayValidationError(f"{field} length must be between {low} and {high}", field=field)


def round_half_up(amount: float) -> int:
    """Round a positive amount the way ECPay's own SDKs do (0.5 goes up)."""
    return int(math.floor(amount + 0.5))


def build_items(item_cls: Any, items: Iterable[Any]) -> list:
    """
    Accept model instances or wire-keyed dicts and return model instances.

    Pydantic errors are re-raised as ``EcPayValidationError`` on ``Items``.
    """
    built = []
    for index, item in enumerate(items):
        if isinstance(item, item_cls):
            built.append(item)
            continue
        if not isinstance(item, Mapping):
            raise EcPayValidationError(
                f"Items[{index}] must be a {item_cls.__name__} or a dict, got {type(item).__name__}",
                field="Items",
            )
        try:
            built.append(item_cls.from_dict(item))
        except ValidationError as exc:
            raise EcPayValidationError(
                f"Items[{index}] is invalid: {exc.errors()[0]['msg']}",
                field="Items",
                details=exc.errors(),
            ) from exc
    return built
