"""Diagnostics for troubleshooting gateway connectivity."""

import asyncio
import platform
import sys
import time
from datetime import datetime, timezone

import httpx

from ..gateway import TransportGateway
from ..logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONNECTIVITY_TARGETS = {
    "gateway": "https://api.anthropic.com",
    "google": "https://www.google.com",
    "cloudflare": "https://1.1.1.1",
}


async def get_client_info(gateway: TransportGateway) -> dict:
    """Runtime and gateway SDK information."""
    return {
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "sdk_src": gateway.script_src,
        "sdk_requested": gateway.state.script_requested,
        "sdk_available": gateway.probe(),
        "sdk_methods": gateway.available_methods(),
        "signed_in": await gateway.is_signed_in(),
        "fallback_mode": gateway.state.fallback_mode,
    }


async def _check_url(client: httpx.AsyncClient, url: str) -> dict:
    start = time.perf_counter()
    try:
        response = await client.head(url)
        return {
            "success": True,
            "status": response.status_code,
            "time_ms": round((time.perf_counter() - start) * 1000),
        }
    except httpx.HTTPError as e:
        return {
            "success": False,
            "error": str(e) or type(e).__name__,
            "time_ms": round((time.perf_counter() - start) * 1000),
        }


async def check_connectivity(
    targets: dict[str, str] | None = None,
    timeout: float = 5.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """HEAD each target concurrently and report reachability and timing."""
    targets = targets if targets is not None else DEFAULT_CONNECTIVITY_TARGETS
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        names = list(targets)
        results = await asyncio.gather(*[_check_url(client, targets[name]) for name in names])

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "tests": dict(zip(names, results)),
    }


async def collect_diagnostics(
    gateway: TransportGateway,
    targets: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Client info plus connectivity results."""
    logger.debug("Collecting diagnostics")
    diagnostics = {
        "client_info": await get_client_info(gateway),
        "connectivity": await check_connectivity(targets, transport=transport),
        "collected_at": datetime.now(timezone.utc).isoformat(),
    }
    logger.debug("Diagnostics collected", extra={"context": diagnostics})
    return diagnostics
