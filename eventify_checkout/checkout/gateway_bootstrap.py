"""
Payment gateway SDK bootstrap.

The SDK is a process-wide singleton held by GatewayEnvironment. Each view
that needs it owns a GatewayBootstrapper:

    NOT_REQUESTED --mount()--> LOADING --> READY | LOAD_FAILED

mount() checks the environment synchronously before injecting a load, so two
views never start two loads of the same resource. A failed load is not
retried; a fresh bootstrapper (remount) is needed for another attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from eventify_checkout.checkout.errors import GatewayLoadError
from eventify_checkout.checkout.notices import Notifier
from eventify_checkout.integrations.contracts.interfaces import GatewayLoadState, PaymentGatewaySDK

logger = logging.getLogger(__name__)

SDKLoader = Callable[[], Awaitable[PaymentGatewaySDK]]

DEFAULT_RESOURCE_ID = "paystack-script"


class GatewayEnvironment:
    """Stand-in for the page-wide global scope the SDK registers itself in."""

    def __init__(self) -> None:
        self.sdk: Optional[PaymentGatewaySDK] = None
        self._resources: Dict[str, asyncio.Task] = {}

    def inject(self, resource_id: str, loader: SDKLoader) -> asyncio.Task:
        """Start loading a resource, or hand back the load already in flight."""
        task = self._resources.get(resource_id)
        if task is not None:
            return task
        task = asyncio.ensure_future(loader())
        self._resources[resource_id] = task
        task.add_done_callback(lambda t: self._on_resource_done(resource_id, t))
        logger.info("Injected gateway resource %s", resource_id)
        return task

    def _on_resource_done(self, resource_id: str, task: asyncio.Task) -> None:
        if task.cancelled() or task.exception() is not None:
            # Drop the failed resource so a later mount can inject it again.
            self._resources.pop(resource_id, None)
            return
        self.sdk = task.result()
        logger.info("Gateway SDK registered from %s", resource_id)


class GatewayBootstrapper:
    def __init__(
        self,
        environment: GatewayEnvironment,
        loader: SDKLoader,
        notifier: Optional[Notifier] = None,
        resource_id: str = DEFAULT_RESOURCE_ID,
    ) -> None:
        self.environment = environment
        self.loader = loader
        self.notifier = notifier
        self.resource_id = resource_id
        self.state = GatewayLoadState.NOT_REQUESTED
        self.load_error: Optional[BaseException] = None
        self._ready: Optional[asyncio.Future] = None
        self._task: Optional[asyncio.Task] = None
        self._mounted = False

    @property
    def is_ready(self) -> bool:
        return self.state == GatewayLoadState.READY

    @property
    def sdk(self) -> Optional[PaymentGatewaySDK]:
        return self.environment.sdk if self.is_ready else None

    def mount(self) -> None:
        """Acquire the SDK load. Must run on the event loop thread."""
        if self.state != GatewayLoadState.NOT_REQUESTED:
            return
        self._mounted = True
        self._ready = asyncio.get_running_loop().create_future()

        if self.environment.sdk is not None:
            logger.info("Gateway SDK already present, skipping load")
            self._finish(GatewayLoadState.READY)
            return

        self.state = GatewayLoadState.LOADING
        self._task = self.environment.inject(self.resource_id, self.loader)
        self._task.add_done_callback(self._on_load_done)

    def unmount(self) -> None:
        """Release the load. The shared SDK itself stays registered."""
        self._mounted = False
        if self._task is not None:
            self._task.remove_done_callback(self._on_load_done)
            self._task = None
        if self._ready is not None and not self._ready.done():
            self._ready.cancel()

    async def wait_ready(self) -> PaymentGatewaySDK:
        """Suspend until the SDK is usable. Raises GatewayLoadError if it never will be."""
        if self._ready is None:
            raise GatewayLoadError("Gateway bootstrap was never mounted")
        try:
            ready = await asyncio.shield(self._ready)
        except asyncio.CancelledError:
            if self._ready.cancelled():
                raise GatewayLoadError("Gateway bootstrap was unmounted before the SDK loaded")
            raise
        if not ready:
            raise GatewayLoadError(str(self.load_error or "Payment gateway failed to load"))
        return self.environment.sdk

    def _on_load_done(self, task: asyncio.Task) -> None:
        if not self._mounted:
            return
        if task.cancelled():
            self.load_error = GatewayLoadError("Gateway script load was cancelled")
        elif task.exception() is not None:
            self.load_error = task.exception()
        if self.load_error is not None:
            logger.error("Failed to load payment gateway SDK: %s", self.load_error)
            if self.notifier is not None:
                self.notifier.error(GatewayLoadError.remediation, kind=GatewayLoadError.kind)
            self._finish(GatewayLoadState.LOAD_FAILED)
            return
        self._finish(GatewayLoadState.READY)

    def _finish(self, state: GatewayLoadState) -> None:
        self.state = state
        if self._ready is not None and not self._ready.done():
            self._ready.set_result(state == GatewayLoadState.READY)
        logger.info("Gateway bootstrap state -> %s", state.value)
