from __future__ import annotations

import re
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, Field, ValidationError

from eventify_checkout.checkout.errors import (
    GenericServerError,
    InitializationError,
    InventoryError,
    ValidationError as OrderValidationError,
)
from eventify_checkout.integrations.contracts.interfaces import ChargeAmount, OrderInitResult
from eventify_checkout.integrations.contracts.orders import CustomerSummary, VerificationSummary

_INVENTORY_PATTERN = re.compile(r"stock|sold out|no longer available|unavailable|availability|only \d+ available", re.IGNORECASE)
_VALIDATION_PATTERN = re.compile(r"not found|invalid", re.IGNORECASE)


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class OrderInitResponseModel(BaseModel):
    reference: str
    amount_minor_units: int = Field(gt=0)
    currency: str = "NGN"
    order_id: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class VerificationResponseModel(BaseModel):
    status: str
    message: str = ""
    summary: Optional[VerificationSummary] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


def normalize_order_init_response(raw: Dict[str, Any], *, fallback_currency: str = "NGN") -> OrderInitResult:
    """
    Turn a backend order-initialization body into an OrderInitResult.

    Anything but ``status == "success"`` is a failure, whatever the HTTP code
    said. The failure is classified from the error wording.
    """
    if not isinstance(raw, dict):
        raise IntegrationResponseError("Order initialization response is not a JSON object.")

    status = str(raw.get("status") or "").strip().lower()
    if status != "success":
        raise classify_initialization_failure(raw)

    data = raw.get("data")
    if not isinstance(data, dict):
        raise IntegrationResponseError("Order initialization response has no data block.", payload=raw)

    reference = str(_first_non_empty(data, "reference", "trxref", "paystack_ref"))
    amount = _coerce_minor_units(_first_non_empty(data, "amount_minor_units", "amount_kobo", "amountKobo"), "order amount")
    currency = str(_first_non_empty(data, "currency", default=fallback_currency)).upper()
    order_id = data.get("order_id") or data.get("orderId")

    model = _build_model(
        OrderInitResponseModel,
        {
            "reference": reference,
            "amount_minor_units": amount,
            "currency": currency,
            "order_id": str(order_id) if order_id is not None else None,
            "raw": raw,
        },
        raw,
    )
    return OrderInitResult(
        reference=model.reference,
        amount=ChargeAmount(minor_units=model.amount_minor_units, currency=model.currency),
        status=status,
        order_id=model.order_id,
        raw=raw,
    )


def classify_initialization_failure(raw: Dict[str, Any], *, status_code: Optional[int] = None) -> InitializationError:
    """Map an error body onto InventoryError / ValidationError / GenericServerError."""
    parts = []
    for key in ("message", "details", "error", "detail"):
        value = raw.get(key) if isinstance(raw, dict) else None
        if value:
            parts.append(str(value))
    text = " ".join(parts)

    error_type: Type[InitializationError] = GenericServerError
    if _INVENTORY_PATTERN.search(text):
        error_type = InventoryError
    elif _VALIDATION_PATTERN.search(text):
        error_type = OrderValidationError

    payload = dict(raw) if isinstance(raw, dict) else {"body": raw}
    if status_code is not None:
        payload["status_code"] = status_code
    return error_type(text or "Order initialization failed", payload=payload)


def normalize_verification_response(raw: Dict[str, Any]) -> VerificationResponseModel:
    if not isinstance(raw, dict):
        raise IntegrationResponseError("Verification response is not a JSON object.")

    status = str(raw.get("status") or "").strip().lower()
    data = raw.get("data")
    summary = _build_summary(data) if isinstance(data, dict) and data else None

    return _build_model(
        VerificationResponseModel,
        {
            "status": status,
            "message": str(raw.get("message") or ""),
            "summary": summary,
            "raw": raw,
        },
        raw,
    )


def _build_summary(data: Dict[str, Any]) -> VerificationSummary:
    amount = data.get("amount_minor_units", data.get("amount_kobo", data.get("amountKobo")))
    try:
        amount_minor_units = int(amount) if amount is not None else None
    except (TypeError, ValueError):
        amount_minor_units = None

    customer_raw = data.get("customer")
    customer = None
    if isinstance(customer_raw, dict):
        customer = CustomerSummary(
            first_name=str(customer_raw.get("first_name") or customer_raw.get("firstName") or ""),
            last_name=str(customer_raw.get("last_name") or customer_raw.get("lastName") or ""),
            email=str(customer_raw.get("email") or ""),
        )

    return VerificationSummary(
        reference=str(data.get("reference") or ""),
        amount_minor_units=amount_minor_units,
        status=str(data.get("status") or ""),
        customer=customer,
        raw=data,
    )


def _first_non_empty(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    if default is not None:
        return default
    raise IntegrationResponseError(f"Missing required field. Checked keys: {', '.join(keys)}", payload=data)


def _coerce_minor_units(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise IntegrationResponseError(f"Invalid {label}: {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise IntegrationResponseError(f"{label.capitalize()} must be a whole number of minor units; got {value}.")
        value = int(value)
    try:
        amount = int(value)
    except (TypeError, ValueError) as exc:
        raise IntegrationResponseError(f"Invalid {label}: {value!r}") from exc
    if amount <= 0:
        raise IntegrationResponseError(f"{label.capitalize()} must be > 0; got {amount}.")
    return amount


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc
