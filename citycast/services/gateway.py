import logging

from citycast.errors import LookupFailed

logger = logging.getLogger(__name__)


class FetchGateway:
    """
    One outbound "weather by city name" request per call.

    fetch() either returns the payload or raises LookupFailed. Every other
    failure of the underlying lookup is collapsed into LookupFailed. There is
    no retry here; callers retry through SearchOrchestrator.refresh().
    """

    def __init__(self, lookup_client):
        self._lookup = lookup_client

    async def fetch(self, city: str) -> dict:
        try:
            payload = await self._lookup.lookup(city)
        except Exception as e:
            logger.warning("Weather lookup for %r failed: %s", city, e)
            raise LookupFailed(city) from e
        if not isinstance(payload, dict):
            logger.warning("Weather lookup for %r returned %s", city, type(payload).__name__)
            raise LookupFailed(city)
        return payload
