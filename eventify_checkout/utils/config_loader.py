"""
Configuration loader for the checkout flow (backend endpoints, gateway, verification policy).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class GatewaySettings(BaseModel):
    """External payment gateway settings"""

    script_url: str = "https://js.paystack.co/v1/inline.js"
    public_key: str = ""
    currency: str = "NGN"
    channels: List[str] = Field(default_factory=lambda: ["card", "bank", "ussd", "qr", "mobile_money"])


class VerificationSettings(BaseModel):
    """Post-redirect verification polling"""

    max_attempts: int = Field(default=3, ge=1, le=10)
    retry_delay_seconds: float = Field(default=3.0, ge=0.0)


class CheckoutConfig(BaseModel):
    """Complete checkout configuration"""

    integrations_mode: Literal["mock", "real"] = "mock"
    api_base_url: str = "http://localhost:8081"
    order_initialize_path: str = "/api/orders/initialize"
    verify_path: str = "/api/payments/verify"
    request_timeout_seconds: float = Field(default=10.0, gt=0.0)
    confirmation_path: str = "/confirmation"
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)
    verification: VerificationSettings = Field(default_factory=VerificationSettings)


def load_checkout_config(config_path: Optional[Path] = None) -> CheckoutConfig:
    """
    Load and validate checkout configuration from YAML, then apply env overrides

    Args:
        config_path: Path to config file. Defaults to config/checkout_config.yml

    Returns:
        Validated CheckoutConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "checkout_config.yml"

    if not config_path.exists():
        raise FileNotFoundError(f"Checkout config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    _apply_env_overrides(data)

    try:
        config = CheckoutConfig(**data)
        logger.info("Loaded checkout config from %s (mode=%s)", config_path, config.integrations_mode)
        return config
    except ValidationError as e:
        logger.error(f"Checkout config validation failed: {e}")
        raise


def _apply_env_overrides(data: dict) -> None:
    api_url = os.getenv("CHECKOUT_API_URL")
    if api_url:
        data["api_base_url"] = api_url.rstrip("/")

    mode = os.getenv("INTEGRATIONS_MODE", "").strip().lower()
    if mode in {"real", "live"}:
        data["integrations_mode"] = "real"
    elif mode in {"mock", "test"}:
        data["integrations_mode"] = "mock"

    public_key = os.getenv("PAYSTACK_PUBLIC_KEY")
    if public_key:
        gateway = data.get("gateway") or {}
        gateway["public_key"] = public_key
        data["gateway"] = gateway
