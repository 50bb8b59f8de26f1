"""mediabridge daemon main entry point."""

from __future__ import annotations

import asyncio
import logging
import logging.handlers
import queue
import signal
import sys

from ..config import Config, ConfigError, get_effective_state_dir, load_config
from .daemon import Daemon
from .discovery import load_discovery
from .sink import LogSink

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class DaemonRunner:
    """Main mediabridge daemon process."""

    def __init__(self, config: Config | None = None):
        self.config = config or load_config()
        self.state_dir = get_effective_state_dir(self.config)
        self.daemon: Daemon | None = None
        self.exit_code = 0
        self._shutdown_event = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._state_listener: logging.handlers.QueueListener | None = None
        self._handlers: list[tuple[logging.Logger, logging.Handler]] = []
        self._logger = logging.getLogger("mediabridge.daemon")

    def _setup_logging(self) -> None:
        """Set up the daemon log (file and stderr) and the state log."""
        self.state_dir.mkdir(parents=True, exist_ok=True)

        level = getattr(logging, self.config.daemon.log_level.upper(), logging.INFO)
        formatter = logging.Formatter(LOG_FORMAT)

        # File handler
        file_handler = logging.FileHandler(self.state_dir / "daemon.log")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)

        root_logger = logging.getLogger("mediabridge")
        root_logger.setLevel(level)
        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)
        self._handlers += [(root_logger, file_handler), (root_logger, console_handler)]

        # Snapshots go through a queue so pushes never wait on the disk
        state_handler = logging.FileHandler(self.state_dir / "state.log")
        state_handler.setFormatter(logging.Formatter("%(asctime)s %(name)s: %(message)s"))
        state_queue: queue.SimpleQueue = queue.SimpleQueue()
        self._state_listener = logging.handlers.QueueListener(state_queue, state_handler)
        self._state_listener.start()

        state_logger = logging.getLogger(self.config.reporter.logger)
        state_logger.setLevel(logging.INFO)
        state_logger.propagate = False
        queue_handler = logging.handlers.QueueHandler(state_queue)
        state_logger.addHandler(queue_handler)
        self._handlers.append((state_logger, queue_handler))

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler)

    def _signal_handler(self) -> None:
        """Handle shutdown signal."""
        self._logger.info("Received shutdown signal")
        self._shutdown_event.set()

    def _on_fatal(self, error: BaseException) -> None:
        """Called from the accept loop thread when the command channel dies."""
        self.exit_code = 1
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._shutdown_event.set)

    def start(self) -> None:
        """Start the daemon."""
        self._setup_logging()
        self._logger.info("Starting mediabridge daemon")
        self._logger.info(f"State directory: {self.state_dir}")

        server = self.config.server
        self.daemon = Daemon(
            port=server.port,
            host=server.host,
            sink=LogSink(self.config.reporter.logger),
            discovery=load_discovery(self.config.discovery.provider),
            interval=self.config.reporter.interval,
            read_timeout=server.read_timeout,
            max_token_bytes=server.max_token_bytes,
            on_fatal=self._on_fatal,
        )
        self.daemon.start()

        self._logger.info("mediabridge daemon started successfully")

    def stop(self) -> None:
        """Stop the daemon."""
        self._logger.info("Stopping mediabridge daemon")

        if self.daemon:
            self.daemon.stop()

        if self._state_listener:
            self._state_listener.stop()
            self._state_listener = None

        self._logger.info("mediabridge daemon stopped")

        for logger, handler in self._handlers:
            logger.removeHandler(handler)
            handler.close()
        self._handlers.clear()

    async def run(self) -> int:
        """Run the daemon until shutdown. Returns the process exit code."""
        self._loop = asyncio.get_running_loop()
        self._setup_signal_handlers()
        try:
            self.start()
        except (OSError, ConfigError) as e:
            self._logger.error(f"Failed to start: {e}")
            self.stop()
            return 1
        except Exception:
            self._logger.exception("Failed to start")
            self.stop()
            return 1

        # Wait for shutdown signal or a fatal server error
        await self._shutdown_event.wait()

        self.stop()
        return self.exit_code


async def async_main(config: Config | None = None) -> int:
    """Async entry point. Loads the config file unless ``config`` is given."""
    if config is None:
        try:
            config = load_config()
        except ConfigError as e:
            # File logging needs the config, so this goes to stderr only
            logging.getLogger("mediabridge.daemon").error(f"Invalid configuration: {e}")
            return 1

    runner = DaemonRunner(config)
    return await runner.run()


def main() -> None:
    """Main entry point for mediabridge-daemon."""
    try:
        sys.exit(asyncio.run(async_main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
