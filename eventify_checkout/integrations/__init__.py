"""
Integrations.

Everything that talks to a system outside this process lives here:
- the storefront backend (order initialization, payment verification)
- the external payment gateway SDK

Layout:
- contracts/   request/response shapes shared by mock and real clients
- clients/     real_http/ (httpx) and mocks/ (in-memory) implementations
- policy/      response normalization and error classification

Switching between mock and real clients happens in eventify_checkout/api/main.py only.
"""
