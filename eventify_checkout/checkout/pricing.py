"""
Fee schedule.

Integer arithmetic in minor units throughout. The backend (and the mock
backend) uses this to price an order; the cart uses it only to show an
estimate. An estimate from here is never sent to the backend or the gateway.
"""

from dataclasses import dataclass

VAT_PER_MILLE = 75                 # 7.5%

TIER_ONE_CAP = 250_000
TIER_TWO_CAP = 1_000_000
TIER_THREE_CAP = 5_000_000

TIER_ONE_FLAT = 20_000
TIER_TWO_PERCENT = 8
TIER_THREE_PERCENT = 6
TIER_FOUR_PERCENT = 4


@dataclass(frozen=True)
class DisplayTotals:
    subtotal: int
    service_fee: int
    vat: int
    final_total: int


def service_fee(subtotal: int) -> int:
    if subtotal <= 0:
        return 0
    if subtotal <= TIER_ONE_CAP:
        return TIER_ONE_FLAT
    if subtotal <= TIER_TWO_CAP:
        return subtotal * TIER_TWO_PERCENT // 100
    if subtotal <= TIER_THREE_CAP:
        return subtotal * TIER_THREE_PERCENT // 100
    return subtotal * TIER_FOUR_PERCENT // 100


def vat(amount: int) -> int:
    return amount * VAT_PER_MILLE // 1000


def order_totals(subtotal: int) -> DisplayTotals:
    """VAT applies to subtotal plus service fee."""
    fee = service_fee(subtotal)
    tax = vat(subtotal + fee)
    return DisplayTotals(subtotal=subtotal, service_fee=fee, vat=tax, final_total=subtotal + fee + tax)


def fee_tier_label(subtotal: int) -> str:
    if subtotal <= TIER_ONE_CAP:
        return "Flat 200 fee"
    if subtotal <= TIER_TWO_CAP:
        return "8% service fee"
    if subtotal <= TIER_THREE_CAP:
        return "6% service fee"
    return "4% service fee"
