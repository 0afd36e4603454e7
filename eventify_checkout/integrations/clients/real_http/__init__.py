"""
Real HTTP integration clients.

These clients talk to real external systems via httpx:
- the storefront backend (order initialization, payment verification)
- the payment gateway's hosted script

They raise the same checkout errors as the mock clients and return data
shaped according to eventify_checkout/integrations/contracts/*.

Switching:
The selection of mock vs real clients happens in eventify_checkout/api/main.py only.
"""
