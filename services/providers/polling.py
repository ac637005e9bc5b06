"""Bounded poll-until-ready loop shared by provider adapters."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from core.logging import get_logger
from core.result import Failure, Result, failure, success
from services.providers.base import ShipmentStatus
from services.providers.errors import ShipmentFailedError, WaitTimeoutError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from services.providers.base import Shipment
    from services.providers.errors import ProviderError

logger = get_logger(__name__)


async def poll_until_ready(
    fetch: Callable[[str], Awaitable[Result[Shipment, ProviderError]]],
    shipment_id: str,
    *,
    provider_code: str,
    timeout: float,
    poll_interval: float,
) -> Result[Shipment, ProviderError]:
    """
    Poll a shipment until its rates are computed.

    Args:
        fetch: Coroutine function returning the current shipment state.
        shipment_id: Provider shipment id.
        provider_code: Provider code used in errors.
        timeout: Maximum total wait in seconds.
        poll_interval: Delay between polls in seconds.

    Returns:
        The ready shipment, the fetch error, a ShipmentFailedError when the
        provider reports ERROR, or a timeout error once the budget is spent.
    """
    attempts = 0
    try:
        async with asyncio.timeout(timeout):
            while True:
                attempts += 1
                result = await fetch(shipment_id)
                if isinstance(result, Failure):
                    return result

                shipment = result.value
                if shipment.status == ShipmentStatus.ERROR:
                    return failure(
                        ShipmentFailedError(
                            provider_code=provider_code,
                            details="; ".join(shipment.messages) or None,
                        )
                    )
                if not shipment.status.is_pending:
                    logger.debug(
                        "Shipment ready",
                        provider=provider_code,
                        shipment_id=shipment_id,
                        attempts=attempts,
                    )
                    return success(shipment)

                await asyncio.sleep(poll_interval)
    except TimeoutError:
        logger.warning(
            "Timed out waiting for shipment rates",
            provider=provider_code,
            shipment_id=shipment_id,
            timeout=timeout,
            attempts=attempts,
        )
        return failure(
            WaitTimeoutError(
                provider_code=provider_code,
                details=f"shipment {shipment_id} not ready after {timeout}s",
            )
        )
