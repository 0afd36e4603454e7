#!/usr/bin/env python3
"""
Run a full checkout against the in-memory mocks and print each stage to the terminal.
Shows the order intent, the server-priced order, the gateway session, the
redirect and the post-redirect verification.

Usage (from repo root):
  python scripts/run_checkout_demo.py
  python scripts/run_checkout_demo.py --outcome close
  python scripts/run_checkout_demo.py --tier Standard --quantity 9
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from eventify_checkout.checkout.cart import InMemoryCart
from eventify_checkout.checkout.flows.checkout import CheckoutFlow
from eventify_checkout.checkout.gateway_bootstrap import GatewayBootstrapper, GatewayEnvironment
from eventify_checkout.checkout.notices import CollectingNotifier
from eventify_checkout.checkout.order_intent import build_order_intent
from eventify_checkout.checkout.payment_handoff import PaymentHandoff
from eventify_checkout.checkout.verification import VerificationPoller
from eventify_checkout.integrations.clients.mocks.backend import MockCheckoutBackend
from eventify_checkout.integrations.clients.mocks.gateway import MockGatewaySDK, mock_sdk_loader
from eventify_checkout.integrations.contracts.interfaces import CartItem, CustomerContact


def setup_logging():
    """Log to terminal at INFO so every stage is visible."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )


def print_stage(title: str, data: dict | list | str):
    """Print a stage header and data to the terminal."""
    print("\n" + "=" * 60)
    print(f"  {title}")
    print("=" * 60)
    if isinstance(data, (dict, list)):
        print(json.dumps(data, indent=2, default=str))
    else:
        print(data)
    print()


def parse_args():
    parser = argparse.ArgumentParser(description="Checkout demo against mock integrations")
    parser.add_argument("--event", default="E1")
    parser.add_argument("--tier", default="VIP")
    parser.add_argument("--quantity", type=int, default=2)
    parser.add_argument("--email", default="ada@example.com")
    parser.add_argument("--outcome", choices=["success", "close"], default="success")
    parser.add_argument("--retry-delay", type=float, default=0.2, help="Seconds between verification checks")
    return parser.parse_args()


async def main():
    args = parse_args()
    setup_logging()

    backend = MockCheckoutBackend(settle_after=1)
    sdk = MockGatewaySDK(outcome=args.outcome, on_charge=backend.mark_paid)
    notifier = CollectingNotifier()
    redirects = []

    cart = InMemoryCart(
        [
            CartItem(
                event_id=args.event,
                tier_id=f"{args.event}-{args.tier}",
                quantity=args.quantity,
                max_quantity=10,
                tier_name=args.tier,
                event_title="Demo event",
                unit_price_minor_units=2_500_000,
            )
        ]
    )
    contact = CustomerContact(first_name="Ada", last_name="Obi", email=args.email, phone="08030000000", city="Lagos", state="Lagos", country="NG")

    print_stage("CART: display-only estimate", asdict(cart.display_totals()))
    print_stage("ORDER INTENT (price-free)", build_order_intent(contact.email, cart.get_items(), contact).to_payload())

    bootstrapper = GatewayBootstrapper(GatewayEnvironment(), mock_sdk_loader(sdk), notifier)
    bootstrapper.mount()
    handoff = PaymentHandoff(bootstrapper, cart, redirects.append, notifier, public_key="pk_test_demo")
    flow = CheckoutFlow(cart, backend, bootstrapper, handoff, notifier)

    state = await flow.pay(contact)
    print_stage("PAYMENT SESSION", {"state": state.value, "notices": [asdict(n) for n in notifier.notices]})
    if flow.order is not None:
        print_stage("SERVER-PRICED ORDER", {"reference": flow.order.reference, "amount_minor_units": flow.order.amount_minor_units})
    bootstrapper.unmount()

    if not redirects:
        print_stage("No redirect", "Checkout did not reach the gateway success callback. Cart kept.")
        return

    print_stage("REDIRECT", redirects[-1])
    poller = VerificationPoller(redirects[-1], backend, retry_delay_seconds=args.retry_delay)
    final = await poller.run()
    print_stage(
        "VERIFICATION",
        {
            "state": final.value,
            "checks": poller.calls,
            "retries": poller.retry_count,
            "summary": poller.summary.model_dump(exclude={"raw"}) if poller.summary else None,
        },
    )

    print("\n" + "=" * 60)
    print("  Demo complete. Check logs above for each stage.")
    print("=" * 60 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
