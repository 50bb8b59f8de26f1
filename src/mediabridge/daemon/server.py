"""TCP command channel: one keycode per connection, one connection at a time."""

from __future__ import annotations

import logging
import re
import select
import socket
import threading
from typing import Callable

from ..config import DEFAULT_PORT
from ..protocol.messages import CommandParseError, parse_command
from .dispatch import dispatch
from .registry import SessionRegistry

_logger = logging.getLogger("mediabridge.server")

_WHITESPACE_RE = re.compile(rb"\s")

RECV_SIZE = 64


def read_token(conn: socket.socket, limit: int = 32) -> bytes:
    """Read one whitespace-delimited token from a connected socket.

    Leading whitespace is skipped. The token ends at the next whitespace byte
    or at end of stream. Raises CommandParseError if the stream ends before a
    token starts or if a token grows past ``limit`` bytes without ending.
    """
    buf = b""
    while True:
        chunk = conn.recv(RECV_SIZE)
        if not chunk:
            token = buf.strip()
            if not token:
                raise CommandParseError("Connection closed before a command was sent")
            return token

        # Leading whitespace is discarded as it arrives
        buf = (buf + chunk).lstrip()
        if buf:
            match = _WHITESPACE_RE.search(buf)
            if match:
                return buf[: match.start()]
        if len(buf) > limit:
            raise CommandParseError(f"No command token within {limit} bytes")


class CommandServer:
    """Blocking accept loop that turns keycodes into playback commands.

    The loop runs on its own thread and owns the listening socket. Each
    accepted connection is read, dispatched and closed before the next one is
    accepted. Nothing is ever written back to the client.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        host: str = "0.0.0.0",
        read_timeout: float | None = None,
        max_token_bytes: int = 32,
        on_fatal: Callable[[BaseException], None] | None = None,
        poll_interval: float = 0.5,
    ):
        self.registry = registry
        self.host = host
        self.read_timeout = read_timeout or None
        self.max_token_bytes = max_token_bytes
        self.poll_interval = poll_interval
        self.error: BaseException | None = None
        self._on_fatal = on_fatal
        self._sock: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._running = threading.Event()

    @property
    def address(self) -> tuple[str, int] | None:
        """Bound (host, port), or None before start()."""
        if self._sock is None:
            return None
        return self._sock.getsockname()[:2]

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def start(self, port: int = DEFAULT_PORT) -> None:
        """Bind the listening socket and start the accept loop.

        Bind errors propagate as OSError.
        """
        if self._thread is not None:
            raise RuntimeError("Command server already started")

        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, port))
            sock.listen(1)
        except OSError as e:
            sock.close()
            _logger.error(f"Cannot listen on {self.host}:{port}: {e}")
            raise

        self._sock = sock
        self.error = None
        self._running.set()
        self._thread = threading.Thread(
            target=self._accept_loop,
            name="mediabridge-command-server",
            daemon=True,
        )
        self._thread.start()
        _logger.info(f"Command server listening on {self.host}:{self.address[1]}")

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop accepting connections.

        A connection that is already being read is finished first.
        """
        self._running.clear()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                _logger.warning("Command server still busy with a connection")
            self._thread = None

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the accept loop exits. Returns False on timeout."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def _accept_loop(self) -> None:
        sock = self._sock
        assert sock is not None

        try:
            while self._running.is_set():
                ready, _, _ = select.select([sock], [], [], self.poll_interval)
                if not ready:
                    continue
                conn, addr = sock.accept()
                self._handle_connection(conn, addr)
        except OSError as e:
            if self._running.is_set():
                self.error = e
                _logger.exception("Command server accept loop failed")
                if self._on_fatal:
                    self._on_fatal(e)
        finally:
            self._running.clear()
            sock.close()
            _logger.info("Command server stopped")

    def _handle_connection(self, conn: socket.socket, addr: tuple) -> None:
        """Read one command from ``conn``, dispatch it, close the connection."""
        with conn:
            conn.settimeout(self.read_timeout)
            try:
                token = read_token(conn, self.max_token_bytes)
                command = parse_command(token)
            except CommandParseError as e:
                _logger.debug(f"Dropping connection from {addr[0]}: {e}")
                return
            except OSError as e:
                _logger.warning(f"Read from {addr[0]} failed: {e}")
                return

            _logger.debug(f"Keycode {command.code} from {addr[0]}")
            try:
                dispatch(command, self.registry.get())
            except Exception:
                _logger.exception(f"Dispatch of keycode {command.code} failed")
