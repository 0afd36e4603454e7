"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import eventify_checkout.api.endpoints.confirmation as confirmation_module
import eventify_checkout.api.endpoints.mock_orders as mock_orders_module
from eventify_checkout.checkout.errors import CheckoutError
from eventify_checkout.error_handler import ErrorHandler
from eventify_checkout.integrations.clients.mocks.backend import MockCheckoutBackend
from eventify_checkout.integrations.clients.real_http.orders import VerificationClient
from eventify_checkout.utils.config_loader import CheckoutConfig, load_checkout_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

error_handler = ErrorHandler()


def create_app(config: Optional[CheckoutConfig] = None, backend: Optional[MockCheckoutBackend] = None) -> FastAPI:
    config = config or load_checkout_config()

    app = FastAPI(
        title="Eventify Checkout API",
        description="Payment confirmation and verification for ticket checkout",
        version="1.0.0",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========================================================================
    # DEPENDENCY INJECTION
    # ========================================================================

    confirmation_module.settings = config
    if config.integrations_mode == "real":
        confirmation_module.verifier = VerificationClient(
            base_url=config.api_base_url,
            verify_path=config.verify_path,
            timeout_seconds=config.request_timeout_seconds,
        )
        logger.info("Using real backend at %s", config.api_base_url)
    else:
        mock_backend = backend or MockCheckoutBackend(currency=config.gateway.currency)
        mock_orders_module.backend = mock_backend
        confirmation_module.verifier = mock_backend
        app.include_router(mock_orders_module.router)
        logger.info("Using in-memory mock backend")

    app.include_router(confirmation_module.router)

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        payload = error_handler.handle_exception(exc, context={"path": request.url.path})
        return JSONResponse(status_code=400, content=payload)

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "healthy", "integrations_mode": config.integrations_mode, "timestamp": datetime.now().isoformat()}

    return app


app = create_app()
