"""Liveness probe for Solana JSON-RPC endpoints."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any

import requests

DEFAULT_TIMEOUT_MS = 3000

HEALTH_REQUEST = {"jsonrpc": "2.0", "id": 1, "method": "getHealth"}


def _request_health(url: str, timeout: float) -> bool:
    response = requests.post(
        url,
        json=HEALTH_REQUEST,
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )
    if not response.ok:
        return False
    payload: Any = response.json()
    return isinstance(payload, dict) and payload.get("result") == "ok"


def probe(url: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
    """Return ``True`` when *url* answers ``getHealth`` with ``"ok"`` within *timeout_ms*.

    The request runs on a worker thread raced against the deadline, so a
    host that accepts the connection but never answers cannot stall the
    caller. Every failure mode (timeout, network error, non-2xx status,
    malformed body) yields ``False``.
    """

    timeout = max(timeout_ms, 1) / 1000
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="rpc-probe")
    try:
        future = executor.submit(_request_health, url, timeout)
        return bool(future.result(timeout=timeout))
    except FutureTimeout:
        return False
    except (requests.RequestException, ValueError):
        return False
    except Exception:  # pragma: no cover - any other failure means unhealthy
        return False
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


__all__ = ["DEFAULT_TIMEOUT_MS", "HEALTH_REQUEST", "probe"]
