"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from otp_server.core.config import Settings, get_settings
from otp_server.infrastructure.database.session import get_engine
from otp_server.infrastructure.provider import FiveSimClient


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings
    provider: FiveSimClient

    def init_infrastructure(self) -> None:
        """Ensure infrastructure singletons (database engine, etc.) are initialised."""
        get_engine()

    async def shutdown(self) -> None:
        await self.provider.aclose()


@lru_cache()
def get_container() -> ApplicationContainer:
    settings = get_settings()
    container = ApplicationContainer(
        settings=settings,
        provider=FiveSimClient.from_settings(settings.provider),
    )
    container.init_infrastructure()
    return container


__all__ = ["ApplicationContainer", "get_container"]
