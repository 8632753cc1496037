"""Trend Calendar (us.trend-calendar.com) ranking source."""

import logging
import re

import httpx
from bs4 import BeautifulSoup

from trend_monitor.core import RankedTopic, ScrapeError, TrendSource

logger = logging.getLogger(__name__)

RANK_PATTERN = re.compile(r"^(\d+)\.\s*(.+)$")
ENTRY_TAGS = ["p", "li", "div"]


def parse_ranked_topics(html: str, section_heading: str = "X (Twitter)") -> list[RankedTopic]:
    """Extract ranked topics from the trends page.

    The page lists the X ranking under an ``h2`` heading as entries like
    ``"2.Duke of York"``. Raises ScrapeError if the section is missing.
    """
    soup = BeautifulSoup(html, "html.parser")

    heading = soup.find(lambda tag: tag.name == "h2" and section_heading in tag.get_text())
    if heading is None or heading.parent is None:
        raise ScrapeError(f"Section '{section_heading}' not found on page")

    topics: list[RankedTopic] = []
    seen: set[tuple[int, str]] = set()

    for element in heading.parent.find_all(ENTRY_TAGS):
        # Containers repeat their children's text; only leaf entries count
        if element.find(ENTRY_TAGS):
            continue

        text = element.get_text(" ", strip=True)
        match = RANK_PATTERN.match(text)
        if not match:
            continue

        rank = int(match.group(1))
        topic = match.group(2).strip()
        if rank < 1 or len(topic) <= 1:
            continue

        if (rank, topic) in seen:
            continue
        seen.add((rank, topic))
        topics.append(RankedTopic(rank=rank, topic=topic, source=section_heading))

    return topics


class TrendCalendarSource(TrendSource):
    """Scrape the US X (Twitter) trend ranking from Trend Calendar."""

    name = "Trend Calendar US"

    def __init__(
        self,
        url: str = "https://us.trend-calendar.com",
        timeout: float = 10.0,
        user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        section_heading: str = "X (Twitter)",
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.section_heading = section_heading
        self.headers = {
            "User-Agent": user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }

    async def fetch_ranked_topics(self) -> list[RankedTopic]:
        """Fetch and parse the ranking; any failure yields an empty list."""
        try:
            html = await self._fetch_page()
            topics = parse_ranked_topics(html, self.section_heading)
        except ScrapeError as e:
            logger.warning("Scrape of %s failed: %s", self.url, e)
            return []

        logger.info("Scraped %d trends from %s", len(topics), self.name)
        return topics

    async def _fetch_page(self) -> str:
        async with httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, headers=self.headers
        ) as client:
            try:
                response = await client.get(self.url)
            except httpx.HTTPError as e:
                raise ScrapeError(f"Request error: {e}") from e

        if response.status_code != 200:
            raise ScrapeError(f"HTTP {response.status_code}")

        return response.text
