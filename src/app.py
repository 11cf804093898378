"""
Farkle Duel - Server Entry Point

Wires settings, logging, the match store and the realtime gateway
together, then serves until interrupted.
"""

import logging
import threading

from src.config.settings import Settings, configure_logging, get_settings
from src.realtime.client import create_realtime_client
from src.realtime.gateway import RealtimeGateway
from src.session import BustScheduler, MatchService, MatchStore

logger = logging.getLogger(__name__)


def build_service(settings: Settings) -> MatchService:
    """Create the store, scheduler and service described by settings."""
    store = MatchStore(settings.scoring_rules(), room_names=settings.room_names)
    scheduler = BustScheduler(delay=settings.bust_delay_seconds)
    return MatchService(store, scheduler=scheduler)


def main() -> None:
    settings = get_settings()
    configure_logging(settings)

    service = build_service(settings)
    gateway = RealtimeGateway(service, client_factory=create_realtime_client)
    gateway.open(settings.room_names)
    logger.info("Serving %d tables", len(settings.room_names))

    stop = threading.Event()
    try:
        stop.wait()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        gateway.shutdown()
        service.shutdown()


if __name__ == "__main__":
    main()
