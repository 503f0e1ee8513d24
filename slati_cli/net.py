from __future__ import annotations

from typing import Any

import httpx

USER_AGENT = "Slati CLI"


def http_get(url: str, params: dict[str, Any], timeout: float) -> httpx.Response:
    with httpx.Client(timeout=timeout, headers={"User-Agent": USER_AGENT}) as client:
        return client.get(url, params=params)
