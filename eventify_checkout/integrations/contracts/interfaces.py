from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PaymentSessionState(str, Enum):
    IDLE = "idle"
    LOADING_GATEWAY = "loading_gateway"
    READY_TO_PAY = "ready_to_pay"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    CANCELLED = "cancelled"
    FAILED = "failed"


class VerificationState(str, Enum):
    VERIFYING = "verifying"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    ERROR = "error"


TERMINAL_VERIFICATION_STATES = frozenset(
    {
        VerificationState.SUCCESS,
        VerificationState.FAILED,
        VerificationState.NOT_FOUND,
        VerificationState.ERROR,
    }
)


class GatewayLoadState(str, Enum):
    NOT_REQUESTED = "not_requested"
    LOADING = "loading"
    READY = "ready"
    LOAD_FAILED = "load_failed"


# ---------------------------------------------------------------------------
# Read-only inputs owned by collaborators
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CartItem:
    event_id: str
    tier_id: str
    quantity: int
    max_quantity: int
    tier_name: str = ""
    event_title: str = ""
    unit_price_minor_units: int = 0      # display only, never sent anywhere


@dataclass(frozen=True)
class CustomerContact:
    first_name: str
    last_name: str
    email: str
    phone: str = ""
    city: str = ""
    state: str = ""
    country: str = ""

    def to_payload(self) -> Dict[str, str]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "city": self.city,
            "state": self.state,
            "country": self.country,
        }


# ---------------------------------------------------------------------------
# Server-authoritative results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChargeAmount:
    """
    Amount to charge, in minor currency units.

    Only built by the order initialization response normalizer; nothing on the
    client side computes one.
    """
    minor_units: int
    currency: str = "NGN"


@dataclass(frozen=True)
class OrderInitResult:
    reference: str
    amount: ChargeAmount
    status: str
    order_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def amount_minor_units(self) -> int:
        return self.amount.minor_units


@dataclass(frozen=True)
class GatewayConfig:
    public_key: str
    email: str
    amount_minor_units: int
    reference: str
    currency: str
    channels: List[str]
    metadata: Dict[str, Any]

    def to_payload(self) -> Dict[str, Any]:
        return {
            "key": self.public_key,
            "email": self.email,
            "amount": self.amount_minor_units,
            "ref": self.reference,
            "currency": self.currency,
            "channels": list(self.channels),
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class GatewayResponse:
    """What the gateway hands to the success callback. Not proof of payment."""
    reference: str
    status: str = ""
    transaction: str = ""
    message: str = ""
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------

class CartStore(ABC):
    """Only the read and clear halves of the cart matter to checkout."""

    @abstractmethod
    def get_items(self) -> Sequence[CartItem]:
        """Return the cart contents in display order."""

    @abstractmethod
    def clear(self) -> None:
        """Empty the cart."""


class GatewaySession(ABC):
    @abstractmethod
    def open(self) -> None:
        """Show the gateway UI. Exactly one of the callbacks fires later."""


class PaymentGatewaySDK(ABC):
    """The loaded external payment SDK. Opaque apart from setup/open."""

    @abstractmethod
    def setup(
        self,
        config: GatewayConfig,
        on_success: Callable[[GatewayResponse], None],
        on_close: Callable[[], None],
    ) -> GatewaySession:
        """Prepare a payment session for one checkout attempt."""
