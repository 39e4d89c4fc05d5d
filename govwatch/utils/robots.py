"""
robots.txt cache.

Responsibility: Fetch robots.txt once per host and answer can-fetch queries
"""

import logging
from typing import Dict, Optional
from urllib.parse import urlparse
from urllib.robotparser import RobotFileParser

import httpx

logger = logging.getLogger(__name__)


class RobotsCache:
    """
    Per-process cache of parsed robots.txt files.

    A missing or unreadable robots.txt allows everything. The cache is only
    mutated on the fetch path and is not locked.
    """

    def __init__(self):
        self._parsers: Dict[str, Optional[RobotFileParser]] = {}

    @staticmethod
    def _origin(url: str) -> str:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}"

    async def _load(self, origin: str, client: httpx.AsyncClient, user_agent: str) -> Optional[RobotFileParser]:
        robots_url = f"{origin}/robots.txt"
        try:
            response = await client.get(robots_url, headers={"User-Agent": user_agent})
        except httpx.HTTPError as e:
            logger.debug(f"robots.txt unreachable for {origin}: {e}")
            return None

        if response.status_code != 200:
            return None

        parser = RobotFileParser(robots_url)
        parser.parse(response.text.splitlines())
        return parser

    async def allowed(self, url: str, client: httpx.AsyncClient, user_agent: str) -> bool:
        origin = self._origin(url)
        if origin not in self._parsers:
            self._parsers[origin] = await self._load(origin, client, user_agent)

        parser = self._parsers[origin]
        if parser is None:
            return True
        return parser.can_fetch(user_agent, url)

    def clear(self) -> None:
        self._parsers.clear()


_shared_cache: Optional[RobotsCache] = None


def get_robots_cache() -> RobotsCache:
    global _shared_cache
    if _shared_cache is None:
        _shared_cache = RobotsCache()
    return _shared_cache
