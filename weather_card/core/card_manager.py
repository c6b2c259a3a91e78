"""Registry of live weather cards, one aggregator per client session and location"""

import asyncio
from typing import Dict, Optional, Any, Tuple
from datetime import datetime
from weather_card.config import settings
from weather_card.core.aggregator import WeatherAggregator
from weather_card.core.weather_api import WeatherSource
import logging

logger = logging.getLogger(__name__)

CardKey = Tuple[str, str]


class WeatherCard:
    """A location card owned by one client session"""

    def __init__(self, session_id: str, aggregator: WeatherAggregator):
        self.session_id = session_id
        self.aggregator = aggregator
        self.created_at = datetime.now()
        self.last_accessed = datetime.now()

    @property
    def location(self) -> str:
        return self.aggregator.location

    def touch(self):
        """Update last accessed time"""
        self.last_accessed = datetime.now()

    @property
    def idle_minutes(self) -> float:
        """Get idle time in minutes"""
        return (datetime.now() - self.last_accessed).total_seconds() / 60


class CardManager:
    """Keeps aggregators alive between requests so coordinate changes can be detected"""

    def __init__(
        self,
        idle_timeout_minutes: Optional[float] = None,
        cleanup_interval_seconds: Optional[float] = None,
    ):
        """Initializes the card manager's state."""
        self._cards: Dict[CardKey, WeatherCard] = {}
        self._lock = asyncio.Lock()
        self._cleanup_task: Optional[asyncio.Task] = None
        self.idle_timeout_minutes = (
            idle_timeout_minutes
            if idle_timeout_minutes is not None
            else settings.card_idle_timeout_minutes
        )
        self.cleanup_interval_seconds = (
            cleanup_interval_seconds
            if cleanup_interval_seconds is not None
            else settings.card_cleanup_interval_seconds
        )

    async def start(self):
        """Start the idle card cleanup task"""
        if not self._cleanup_task:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("Card manager started")

    async def stop(self):
        """Stop the cleanup task and close all cards"""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

        async with self._lock:
            for card in self._cards.values():
                await card.aggregator.close()
            self._cards.clear()

        logger.info("Card manager stopped")

    async def get_or_create_card(
        self, session_id: str, location: str, source: WeatherSource
    ) -> WeatherCard:
        """Get the session's card for a location, creating it on first use"""
        async with self._lock:
            key = (session_id, location)
            card = self._cards.get(key)
            if card:
                card.touch()
                return card

            logger.info(f"Creating card '{location}' for session {session_id}")
            card = WeatherCard(session_id, WeatherAggregator(location, source))
            self._cards[key] = card
            return card

    async def get_card(self, session_id: str, location: str) -> Optional[WeatherCard]:
        """Get an existing card"""
        async with self._lock:
            card = self._cards.get((session_id, location))
            if card:
                card.touch()
            return card

    async def destroy_card(self, session_id: str, location: str) -> bool:
        """Close and remove a card. Returns False if it did not exist."""
        async with self._lock:
            card = self._cards.pop((session_id, location), None)
        if not card:
            return False
        await card.aggregator.close()
        logger.info(f"Destroyed card '{location}' for session {session_id}")
        return True

    async def _cleanup_loop(self):
        """Background task to close idle cards"""
        while True:
            try:
                await asyncio.sleep(self.cleanup_interval_seconds)
                await self._cleanup_idle_cards()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in cleanup loop: {e}")

    async def _cleanup_idle_cards(self):
        """Remove cards nobody has looked at recently"""
        async with self._lock:
            idle_keys = [
                key
                for key, card in self._cards.items()
                if card.idle_minutes > self.idle_timeout_minutes
            ]
            idle_cards = [self._cards.pop(key) for key in idle_keys]

        for card in idle_cards:
            logger.info(f"Cleaning up idle card '{card.location}' ({card.session_id})")
            await card.aggregator.close()

    @property
    def active_cards(self) -> int:
        """Get count of active cards"""
        return len(self._cards)

    def get_card_info(self) -> Dict[str, Any]:
        """Get information about all cards"""
        return {
            "active_cards": self.active_cards,
            "cards": [
                {
                    "session_id": card.session_id,
                    "location": card.location,
                    "status": card.aggregator.state.status,
                    "coordinate": (
                        card.aggregator.coordinate.model_dump()
                        if card.aggregator.coordinate
                        else None
                    ),
                    "idle_minutes": round(card.idle_minutes, 2),
                    "created_at": card.created_at.isoformat(),
                }
                for card in self._cards.values()
            ],
        }


# Global instance
card_manager = CardManager()
