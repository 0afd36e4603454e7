"""
Mock integration clients.

In-memory stand-ins for the storefront backend and the payment gateway SDK.
No network calls. Swap for clients/real_http/* via INTEGRATIONS_MODE=real.
"""
