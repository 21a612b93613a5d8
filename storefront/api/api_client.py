"""
Storefront API Client

Client for the seller backend: product create/update and category listing.
Handles bearer authentication, error classification and retries for reads.
"""

import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests

from ..common.config_loader import ApiSettings
from ..common.errors import (
    AuthenticationError,
    NetworkError,
    RequestTimeoutError,
    ServerError,
)
from ..models import Category
from .token_store import KeyValueStore

logger = logging.getLogger(__name__)


def _server_message(response: requests.Response) -> str:
    """Message from a structured error body, else the raw status."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"

    if isinstance(body, dict):
        for key in ("detail", "error", "message"):
            if body.get(key):
                return str(body[key])
        # Field errors: {"price": ["Must be positive."]}
        for key, value in body.items():
            if isinstance(value, list) and value:
                return f"{key}: {value[0]}"
    return f"HTTP {response.status_code}"


def _retry_delay(response: requests.Response, attempt: int) -> int:
    """Seconds to wait before a retry: Retry-After in seconds, else exponential."""
    try:
        return max(int(response.headers.get("Retry-After", 2 ** attempt)), 0)
    except (TypeError, ValueError):
        # HTTP-date form
        return 2 ** attempt


class StorefrontAPIClient:
    """
    Client for the seller backend REST API.

    Handles:
    - Bearer authentication (token read from the key-value store per call)
    - Transport error classification (timeout vs. network)
    - Retries on 429/5xx for reads only; writes go out exactly once

    Usage:
        client = StorefrontAPIClient(load_api_settings(), JsonFileStore(path))
        record = client.create_or_update(payload)
        categories = client.list_categories()
    """

    MAX_RETRIES = 3
    RETRYABLE_STATUS_CODES = {429, 502, 503, 504}
    PRODUCTS_ENDPOINT = "user/store/products/"
    CATEGORIES_ENDPOINT = "api/categories/"

    def __init__(
        self,
        settings: ApiSettings,
        token_store: KeyValueStore,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the API client.

        Args:
            settings: Base URL, timeout and token key
            token_store: Where the bearer token is persisted
            session: Optional shared session
        """
        self.settings = settings
        self.base_url = settings.base_url.rstrip("/") + "/"
        self.token_store = token_store
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.session.close()

    def close(self):
        self.session.close()

    def _auth_headers(self) -> Dict[str, str]:
        token = self.token_store.get(self.settings.token_key)
        if not token:
            raise AuthenticationError("No authentication token found")
        return {"Authorization": f"Bearer {token}"}

    def request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        retry: bool = False,
    ) -> Any:
        """
        Make an authenticated JSON request.

        Args:
            method: HTTP method (GET, POST, PUT)
            endpoint: Path relative to the base URL
            data: JSON body for POST/PUT
            retry: Retry on RETRYABLE_STATUS_CODES (reads only)

        Returns:
            Decoded JSON body (None for empty responses)

        Raises:
            AuthenticationError, NetworkError, RequestTimeoutError, ServerError
        """
        if method not in ("GET", "POST", "PUT"):
            raise ValueError(f"Unsupported method: {method}")

        url = urljoin(self.base_url, endpoint)
        headers = self._auth_headers()
        attempts = self.MAX_RETRIES if retry else 1

        for attempt in range(attempts):
            try:
                response = self.session.request(
                    method, url, json=data, headers=headers, timeout=self.settings.timeout
                )
            except requests.exceptions.Timeout as e:
                logger.error("Request timeout: %s %s", method, endpoint)
                raise RequestTimeoutError(
                    f"Request timeout after {self.settings.timeout:g}s"
                ) from e
            except requests.exceptions.RequestException as e:
                logger.error("Request failed: %s", e)
                raise NetworkError(f"Cannot connect to server: {e}") from e

            if retry and response.status_code in self.RETRYABLE_STATUS_CODES \
                    and attempt + 1 < attempts:
                retry_after = _retry_delay(response, attempt)
                logger.warning("HTTP %d on %s, retry %d/%d in %ds...",
                               response.status_code, endpoint, attempt + 1,
                               attempts, retry_after)
                time.sleep(retry_after)
                continue

            if response.status_code >= 400:
                message = _server_message(response)
                logger.error("API Error %d on %s %s: %s",
                             response.status_code, method, endpoint, message)
                raise ServerError(response.status_code, message)

            if not response.content:
                return None
            return response.json()

    def create_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Creating product %r", payload.get("name"))
        return self.request("POST", self.PRODUCTS_ENDPOINT, payload)

    def update_product(self, product_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Updating product %s", product_id)
        return self.request("PUT", f"{self.PRODUCTS_ENDPOINT}{product_id}/", payload)

    def create_or_update(
        self, payload: Dict[str, Any], product_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Persist a product.

        Every call is sent; identical payloads are not deduplicated.
        """
        if product_id is None:
            return self.create_product(payload)
        return self.update_product(product_id, payload)

    def list_categories(self) -> List[Category]:
        """
        Fetch categories with their attribute definitions.

        Accepts a bare list or a paginated {"results": [...]} body.
        """
        result = self.request("GET", self.CATEGORIES_ENDPOINT, retry=True) or []
        if isinstance(result, dict):
            result = result.get("results", [])
        categories = [Category.from_dict(item) for item in result if "id" in item]
        logger.info("Loaded %d categories", len(categories))
        return categories
