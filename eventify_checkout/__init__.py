"""Checkout payment orchestration and verification for the Eventify storefront."""
