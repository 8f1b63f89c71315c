"""
Home Simulator Main Entry Point

- SRP: the orchestrator only starts and stops components
- DIP: engine, observer server and web GUI are injected
"""
__version__ = "0.1.0"

import asyncio
import logging
import os
import signal

from models import HomeEngine, SceneManager, DEFAULT_SCENES_FILE, get_simulation_parameters
from servers import BroadcastCoordinator, WebSocketServer
from web.app import WebServer

logger = logging.getLogger("Main")


class HomeSimulator:
    """
    Main orchestrator (SRP - only coordinates components).
    Depends on abstractions via dependency injection (DIP).
    """

    def __init__(self,
                 engine: HomeEngine,
                 observer_server: WebSocketServer,
                 web_server: WebServer = None):
        self._engine = engine
        self._observers = observer_server
        self._web = web_server
        self._stop_event = asyncio.Event()

    async def initialize(self) -> None:
        """Initialize all components."""
        logger.info(f"Initializing Home Simulator v{__version__}...")

        await self._observers.start()

        # Start web server if configured
        if self._web:
            self._web.start()

        logger.info("Home Simulator initialized")

    async def run(self) -> None:
        """Serve until stop is requested."""
        logger.info("Waiting for observers")
        await self._stop_event.wait()

    def request_stop(self) -> None:
        self._stop_event.set()

    async def stop(self) -> None:
        """Stop all components."""
        logger.info("Stopping Home Simulator...")
        await self._observers.stop()
        if self._web:
            self._web.stop()
        logger.info("Home Simulator stopped")


async def main():
    """Application entry point."""
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "3000"))
    web_port = int(os.environ.get("WEB_PORT", "8080"))
    scenes_file = os.environ.get("SCENES_FILE", DEFAULT_SCENES_FILE)

    tick_interval = os.environ.get("TICK_INTERVAL")
    if tick_interval:
        get_simulation_parameters().set('tick_interval', float(tick_interval))

    # Create components (DIP - dependencies are injected)
    engine = HomeEngine(scenes=SceneManager(scenes_file))
    coordinator = BroadcastCoordinator(engine)
    observers = WebSocketServer(coordinator, host=host, port=port)

    # WEB_PORT=0 disables the GUI
    web = WebServer(engine, host=host, port=web_port) if web_port else None

    simulator = HomeSimulator(engine, observers, web)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, simulator.request_stop)
        except NotImplementedError:
            # Windows event loops; KeyboardInterrupt still ends asyncio.run
            pass

    try:
        await simulator.initialize()
        await simulator.run()
    finally:
        await simulator.stop()


def run():
    """Console script entry point."""
    # Configure Logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=os.environ.get("LOG_LEVEL", "INFO").upper()
    )
    asyncio.run(main())


if __name__ == "__main__":
    run()
