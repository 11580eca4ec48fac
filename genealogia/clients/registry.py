import httpx
import json
from typing import Dict, Any, Optional
from genealogia.config import settings
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

# Dedicated logger for raw registry responses
registry_history_logger = logging.getLogger('registry.history')


class RegistryError(Exception):
    """Civil registry API error"""
    pass


class UpstreamUnavailable(RegistryError):
    """Registry call failed or returned no usable person record"""
    pass


class RateLimitError(UpstreamUnavailable):
    """Rate limit exceeded"""
    pass


class RegistryClient:
    """Client for the civil registry family lookup API"""

    def __init__(
        self,
        base_url: str = None,
        token: str = None,
        timeout: float = None,
        max_attempts: int = None,
        transport: httpx.AsyncBaseTransport = None,
    ):
        self.base_url = (base_url or settings.family_url).rstrip('/')
        self.token = settings.REGISTRY_API_TOKEN if token is None else token
        self.timeout = timeout or settings.REGISTRY_TIMEOUT
        self.max_attempts = max(1, max_attempts or settings.REGISTRY_MAX_ATTEMPTS)
        self._transport = transport

    async def _request(self, endpoint: str, params: Dict[str, Any] = None) -> Dict:
        """Make authenticated GET request to the registry API"""
        params = params or {}
        if self.token:
            params['token'] = self.token

        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Registry request failed: {e}") from e

        if response.status_code == 429:
            logger.warning("Registry rate limit hit")
            raise RateLimitError("Rate limit exceeded")

        if response.status_code >= 400:
            raise UpstreamUnavailable(f"Registry returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailable("Registry returned invalid JSON") from e

    async def get_family(self, dni: str) -> Dict:
        """
        Get the principal person and their relatives by DNI.

        Returns the raw payload: {"result": {"person": {...}, "coincidences": [...], "quantity": n}}
        Raises UpstreamUnavailable when there is no usable person record.
        """
        data: Optional[Dict] = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=2, min=4, max=30),
            retry=retry_if_exception_type(RateLimitError),
            reraise=True,
        ):
            with attempt:
                data = await self._request(dni)

        result = data.get('result') if isinstance(data, dict) else None
        person = result.get('person') if isinstance(result, dict) else None
        if not isinstance(person, dict) or not person:
            raise UpstreamUnavailable(f"No person record for DNI {dni}")

        coincidences = result.get('coincidences') or []

        registry_history_logger.info(f"=== Registry Family Response ===")
        registry_history_logger.info(f"Timestamp: {datetime.now().isoformat()}")
        registry_history_logger.info(
            f"DNI: {dni} | relatives: {len(coincidences)} | quantity={result.get('quantity')}"
        )
        registry_history_logger.debug(f"Full payload: {json.dumps(data, ensure_ascii=False, default=str)}")

        logger.info(f"Registry lookup {dni}: {len(coincidences)} relatives")
        return data

    async def test_connection(self) -> bool:
        """Test API connection"""
        if not self.token:
            logger.warning("Registry API token not configured")
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.base_url, params={'token': self.token})
            ok = response.status_code < 500
            logger.info(f"Registry connection {'OK' if ok else 'FAILED'} (HTTP {response.status_code})")
            return ok
        except httpx.HTTPError as e:
            logger.error(f"Registry connection failed: {e}")
            return False
