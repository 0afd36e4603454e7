"""
Contracts (data models).

Request/response shapes for the checkout integrations:
- cart items and customer contact (read-only inputs)
- the price-free order initialization request
- the server-authoritative order initialization result
- the gateway configuration handed to the payment SDK

Both mock and real HTTP clients use these contracts.
"""
