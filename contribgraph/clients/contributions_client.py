import logging
from typing import Any
from urllib.parse import quote

import httpx


logger = logging.getLogger(__name__)


def fetch_contribution_payload(
    identity: str,
    api_url: str,
    user_agent: str,
    timeout: float = 15.0,
) -> Any:
    """Fetch the raw trailing-year contribution payload for a user.

    Raises:
        httpx.HTTPError: If the request fails or upstream answers non-2xx.
        ValueError: If the response body is not JSON.
    """

    url = f"{api_url.rstrip('/')}/{quote(identity, safe='')}"
    logger.debug("Requesting contributions from %s", url)

    response = httpx.get(
        url,
        params={"y": "last"},
        headers={
            "User-Agent": user_agent,
            "Accept": "application/json",
        },
        timeout=timeout,
    )
    response.raise_for_status()

    return response.json()
