"""
Customer-facing notices and remediation copy.

Components report through a Notifier instead of rendering anything
themselves; the hosting view decides how a notice is shown (toast, banner,
JSON field).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from eventify_checkout.integrations.contracts.interfaces import VerificationState

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {NoticeLevel.WARNING: logging.WARNING, NoticeLevel.ERROR: logging.ERROR}


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str
    kind: str = ""


class Notifier(ABC):
    @abstractmethod
    def notify(self, notice: Notice) -> None:
        """Show a notice to the customer."""

    def error(self, message: str, kind: str = "") -> None:
        self.notify(Notice(NoticeLevel.ERROR, message, kind))

    def warn(self, message: str, kind: str = "") -> None:
        self.notify(Notice(NoticeLevel.WARNING, message, kind))

    def success(self, message: str, kind: str = "") -> None:
        self.notify(Notice(NoticeLevel.SUCCESS, message, kind))


class LoggingNotifier(Notifier):
    def notify(self, notice: Notice) -> None:
        level = _LOG_LEVELS.get(notice.level, logging.INFO)
        logger.log(level, "[notice:%s] %s", notice.kind or notice.level.value, notice.message)


class CollectingNotifier(Notifier):
    """Keeps notices in order so a view (or a test) can render them later."""

    def __init__(self) -> None:
        self.notices: List[Notice] = []

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)

    def kinds(self) -> List[str]:
        return [n.kind for n in self.notices]


# ---------------------------------------------------------------------------
# Verification outcome copy
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OutcomeCopy:
    title: str
    message: str
    actions: List[Dict[str, str]] = field(default_factory=list)


_HOME = {"type": "return_home", "label": "Return to homepage", "href": "/"}
_SUPPORT = {"type": "contact_support", "label": "Contact support", "href": "/support"}

VERIFICATION_COPY: Dict[VerificationState, OutcomeCopy] = {
    VerificationState.VERIFYING: OutcomeCopy(
        title="Verifying Payment",
        message="Please wait while we confirm your payment...",
    ),
    VerificationState.PENDING: OutcomeCopy(
        title="Payment Processing",
        message="Your payment is being processed. This usually takes a few moments. Refresh this page to check again.",
        actions=[{"type": "refresh", "label": "Refresh", "href": ""}, _SUPPORT],
    ),
    VerificationState.SUCCESS: OutcomeCopy(
        title="Payment Successful!",
        message="Thank you for your purchase. Your tickets have been confirmed.",
        actions=[{"type": "view_tickets", "label": "View Your Tickets", "href": "/tickets"}, _HOME],
    ),
    VerificationState.NOT_FOUND: OutcomeCopy(
        title="Order Not Found",
        message="We couldn't find this order. If you just completed payment, please wait a moment and refresh this page.",
        actions=[{"type": "refresh", "label": "Refresh Page", "href": ""}, _SUPPORT, _HOME],
    ),
    VerificationState.FAILED: OutcomeCopy(
        title="Payment Failed",
        message="Your payment was not successful. No charges were made to your account.",
        actions=[{"type": "retry", "label": "Try Again", "href": "/checkout"}, _HOME],
    ),
    VerificationState.ERROR: OutcomeCopy(
        title="Verification Error",
        message="We encountered an error verifying your payment. If you were charged, please contact support with your reference number.",
        actions=[_SUPPORT, _HOME],
    ),
}


def verification_copy(state: VerificationState, reference: Optional[str] = None) -> Dict[str, object]:
    copy = VERIFICATION_COPY[state]
    return {
        "title": copy.title,
        "message": copy.message,
        "reference": reference,
        "actions": list(copy.actions),
    }
