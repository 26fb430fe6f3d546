"""
Remote asset retrieval.

Photos and logos are plain HTTP GETs with an explicit timeout. No retries are
attempted; failures surface as FetchError or NetworkTimeout.
"""

import logging
from typing import Optional

import requests

from digicard.config import HTTP_TIMEOUT
from digicard.errors import FetchError, NetworkTimeout

logger = logging.getLogger(__name__)


def fetch_bytes(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = HTTP_TIMEOUT,
) -> bytes:
    """
    Download a remote asset.

    Args:
        url: Asset URL
        session: Optional session to reuse (defaults to the requests module)
        timeout: Request timeout in seconds

    Returns:
        The response body.

    Raises:
        FetchError: On connection failure or non-2xx status.
        NetworkTimeout: When the request times out.
    """
    if not url:
        raise FetchError("No URL given")

    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
    except requests.Timeout as e:
        raise NetworkTimeout(url, timeout) from e
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e

    if response.status_code >= 400:
        raise FetchError(f"Failed to fetch {url}: HTTP {response.status_code}")

    logger.debug(f"Fetched {len(response.content)} bytes from {url}")
    return response.content
