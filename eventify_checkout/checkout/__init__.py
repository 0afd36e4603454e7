"""
Checkout core: order intent, gateway bootstrap, payment handoff, verification.
"""
