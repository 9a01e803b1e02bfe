"""
Fivetran REST API Client Module
Handles authenticated communication with the Fivetran REST API and decoding of its response envelope.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generator, Optional, TypeVar
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from fivetran_runner.config_manager import ApiConfig, ConfigManager
from fivetran_runner.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

SUCCESS_CODES = ('Success', 'Created')


class FivetranAPIError(Exception):
    """Base exception for Fivetran API errors."""

    def __init__(self, message: str, status_code: int = None, response: dict = None):
        self.message = message
        self.status_code = status_code
        self.response = response
        super().__init__(self.message)


class TransportError(FivetranAPIError):
    """The request could not be sent or its response envelope could not be decoded."""


class MissingDataError(FivetranAPIError):
    """The envelope was decoded but carries no usable payload."""


@dataclass
class ApiResponse:
    """Decoded response envelope: {code, data?, message?}."""

    status_code: int
    code: str
    data: Optional[Any] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300 and self.code in SUCCESS_CODES

    @property
    def not_found(self) -> bool:
        return self.status_code == 404 or self.code.startswith('NotFound')


class FivetranClient:
    """
    Fivetran REST API client.

    One session is shared by every request. Failed requests are never retried.
    """

    def __init__(self, api_config: ApiConfig):
        """
        Initialize the client.

        Args:
            api_config: Immutable API settings (base URL, credentials, limits)
        """
        self.config = api_config
        self.base_url = api_config.base_url

        self._last_request_time = 0
        self._session = self._create_session()

        logger.info(f"Fivetran client initialized for {self.base_url}")

    def _create_session(self) -> requests.Session:
        """Create requests session carrying the static authorization header."""
        session = requests.Session()

        session.headers.update({
            'Authorization': self.config.authorization,
            'Accept': 'application/json',
            'Content-Type': 'application/json'
        })

        adapter = HTTPAdapter(max_retries=Retry(total=0, raise_on_status=False))
        session.mount('https://', adapter)
        session.mount('http://', adapter)

        return session

    def _rate_limit(self) -> None:
        """Apply rate limiting between requests."""
        if self.config.requests_per_second <= 0:
            return

        min_interval = 1.0 / self.config.requests_per_second
        elapsed = time.time() - self._last_request_time

        if elapsed < min_interval:
            time.sleep(min_interval - elapsed)

        self._last_request_time = time.time()

    def call(
        self,
        method: str,
        path: str,
        json_data: Dict = None,
        params: Dict = None
    ) -> ApiResponse:
        """
        Send a request and decode the response envelope.

        Args:
            method: HTTP method
            path: API path, e.g. /v1/groups
            json_data: JSON body
            params: Query parameters

        Returns:
            Decoded envelope

        Raises:
            TransportError: If the request fails or the envelope cannot be decoded
        """
        self._rate_limit()

        url = urljoin(self.base_url + '/', path.lstrip('/'))
        logger.debug(f"{method} {url}")

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                timeout=self.config.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed: {method} {path}: {e}")
            raise TransportError(f"Request failed: {e}")

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"  {response.status_code} undecodable response: {e}")
            raise TransportError(
                f"Invalid response from {method} {path}: {e}",
                response.status_code
            )

        if not isinstance(body, dict) or not isinstance(body.get('code'), str):
            logger.error(f"  {response.status_code} response is not an API envelope")
            raise TransportError(
                f"Invalid response envelope from {method} {path}",
                response.status_code,
                body if isinstance(body, dict) else None
            )

        envelope = ApiResponse(
            status_code=response.status_code,
            code=body['code'],
            data=body.get('data'),
            message=body.get('message'),
        )
        logger.info(f"  {envelope.status_code} {envelope.code} {envelope.message or ''}".rstrip())
        return envelope

    def receive(self, response: ApiResponse, decode: Callable[[Any], T]) -> T:
        """
        Extract the payload of an envelope and decode it.

        Args:
            response: Decoded envelope
            decode: Decoder for the payload shape expected by the call site

        Raises:
            MissingDataError: If the platform reported a failure or sent no payload
            TransportError: If the payload does not have the expected shape
        """
        if not response.ok:
            logger.error(f"Fivetran API error {response.status_code} {response.code}: {response.message}")
            raise MissingDataError(
                f"request failed: {response.message or response.code}",
                response.status_code,
                {'code': response.code, 'message': response.message}
            )

        if response.data is None:
            raise MissingDataError("request failed: no data", response.status_code)

        try:
            return decode(response.data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected payload shape: {e!r}")
            raise TransportError(f"Unexpected payload shape: {e!r}", response.status_code)

    def receive_empty(self, response: ApiResponse, tolerate_not_found: bool = False) -> None:
        """
        Check an envelope whose payload is not needed.

        Args:
            response: Decoded envelope
            tolerate_not_found: Treat a not-found outcome as success

        Raises:
            MissingDataError: If the platform reported a failure
        """
        if response.ok:
            return

        if tolerate_not_found and response.not_found:
            logger.warning(f"Already gone: {response.message or response.code}")
            return

        logger.error(f"Fivetran API error {response.status_code} {response.code}: {response.message}")
        raise MissingDataError(
            f"request failed: {response.message or response.code}",
            response.status_code,
            {'code': response.code, 'message': response.message}
        )

    def request(
        self,
        method: str,
        path: str,
        decode: Callable[[Any], T],
        json_data: Dict = None,
        params: Dict = None
    ) -> T:
        """Send a request and return its decoded payload."""
        return self.receive(self.call(method, path, json_data=json_data, params=params), decode)

    def paginate(
        self,
        path: str,
        decode: Callable[[Dict], T],
        params: Dict = None
    ) -> Generator[T, None, None]:
        """
        Iterate over a cursor-paginated list endpoint.

        Args:
            path: API path of the list endpoint
            decode: Decoder for a single item
            params: Extra query parameters

        Yields:
            Decoded items
        """
        params = dict(params or {})
        params['limit'] = self.config.page_size

        while True:
            page = self.request('GET', path, dict, params=dict(params))

            for item in page.get('items') or []:
                try:
                    yield decode(item)
                except (KeyError, TypeError, ValueError) as e:
                    logger.error(f"Unexpected item shape in {path}: {e!r}")
                    raise TransportError(f"Unexpected item shape in {path}: {e!r}")

            next_cursor = page.get('next_cursor')
            if not next_cursor:
                break
            params['cursor'] = next_cursor
            logger.debug(f"Fetched page from {path}, getting next page...")

    # ========================================
    # Utility Methods
    # ========================================

    def test_connection(self) -> bool:
        """Test connection and credentials."""
        try:
            self.request('GET', '/v1/connections', dict, params={'limit': 1})
            logger.info("Fivetran connection test successful")
            return True
        except FivetranAPIError as e:
            logger.error(f"Fivetran connection test failed: {e.message}")
            return False

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()


# Convenience function
def get_fivetran_client() -> FivetranClient:
    """Get a Fivetran client configured from the application configuration."""
    return FivetranClient(ConfigManager().get_api_config())
