"""TCP link between two players: one hosts a game, the other joins it."""

from __future__ import annotations

import socket
import threading
from collections.abc import Callable
from types import TracebackType

DEFAULT_PORT = 12345

_ACCEPT_POLL_SECONDS = 0.2
_RECV_SIZE = 65536


def _release(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass
    sock.close()


class NetworkManager:
    """Holds at most one peer connection, either accepted as a server or dialled.

    Received bytes are handed to ``on_data`` exactly as they arrive.
    ``on_connected`` fires only when this side dials out; an accepted peer
    is announced by its own messages instead. All callbacks run on
    background threads.
    """

    def __init__(
        self,
        on_connected: Callable[[], None] | None = None,
        on_disconnected: Callable[[], None] | None = None,
        on_data: Callable[[bytes], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        self._on_connected = on_connected
        self._on_disconnected = on_disconnected
        self._on_data = on_data
        self._on_error = on_error
        self._lock = threading.Lock()
        self._server: socket.socket | None = None
        self._server_stop: threading.Event | None = None
        self._peer: socket.socket | None = None
        self._connected = False

    def __enter__(self) -> NetworkManager:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop_server()

    def start_server(self, port: int = DEFAULT_PORT) -> None:
        """Listen for one peer on every interface; failures go to ``on_error``."""
        with self._lock:
            already = self._server is not None
        if already:
            self._report("server is already listening")
            return
        try:
            if socket.has_dualstack_ipv6():
                server = socket.create_server(
                    ("", port), family=socket.AF_INET6, dualstack_ipv6=True
                )
            else:
                server = socket.create_server(("", port))
        except OSError as exc:
            self._report(str(exc))
            return
        server.settimeout(_ACCEPT_POLL_SECONDS)
        stop = threading.Event()
        with self._lock:
            self._server = server
            self._server_stop = stop
        threading.Thread(target=self._accept_loop, args=(server, stop), daemon=True).start()

    def stop_server(self) -> None:
        """Drop the peer, if any, and stop listening."""
        with self._lock:
            peer, self._peer = self._peer, None
            self._connected = False
            server, self._server = self._server, None
            stop, self._server_stop = self._server_stop, None
        if peer is not None:
            _release(peer)
        if stop is not None:
            stop.set()
        if server is not None:
            server.close()

    def connect_to_host(self, host: str, port: int = DEFAULT_PORT) -> None:
        """Dial a hosting peer in the background, replacing any current peer."""
        with self._lock:
            old, self._peer = self._peer, None
            self._connected = False
        if old is not None:
            _release(old)
        threading.Thread(target=self._dial, args=(host, port), daemon=True).start()

    def disconnect_from_host(self) -> None:
        """Close the current peer connection; ``on_disconnected`` follows."""
        with self._lock:
            peer = self._peer
        if peer is not None:
            try:
                peer.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass

    def is_connected(self) -> bool:
        with self._lock:
            return self._peer is not None and self._connected

    def send_data(self, data: bytes) -> None:
        """Send bytes to the peer; does nothing when no peer is connected."""
        with self._lock:
            peer = self._peer if self._connected else None
        if peer is None:
            return
        try:
            peer.sendall(data)
        except OSError as exc:
            self._report(str(exc))

    def server_port(self) -> int | None:
        """The port being listened on, or None when no server runs."""
        with self._lock:
            server = self._server
        if server is None:
            return None
        try:
            return server.getsockname()[1]
        except OSError:
            return None

    def _accept_loop(self, server: socket.socket, stop: threading.Event) -> None:
        while not stop.is_set():
            try:
                conn, _ = server.accept()
            except TimeoutError:
                continue
            except OSError:
                break
            conn.settimeout(None)
            if stop.is_set():
                conn.close()
                break
            self._adopt(conn)
            threading.Thread(target=self._read_loop, args=(conn,), daemon=True).start()

    def _dial(self, host: str, port: int) -> None:
        try:
            sock = socket.create_connection((host, port))
        except OSError as exc:
            self._report(str(exc))
            return
        self._adopt(sock)
        self._emit(self._on_connected)
        self._read_loop(sock)

    def _adopt(self, sock: socket.socket) -> None:
        with self._lock:
            old, self._peer = self._peer, sock
            self._connected = True
        if old is not None:
            _release(old)

    def _read_loop(self, sock: socket.socket) -> None:
        while True:
            try:
                chunk = sock.recv(_RECV_SIZE)
            except OSError:
                chunk = b""
            if not chunk:
                break
            self._emit(self._on_data, chunk)
        with self._lock:
            current = self._peer is sock
            if current:
                self._connected = False
        sock.close()
        if current:
            self._emit(self._on_disconnected)

    def _report(self, message: str) -> None:
        self._emit(self._on_error, message)

    @staticmethod
    def _emit(callback: Callable[..., None] | None, *args: object) -> None:
        if callback is not None:
            callback(*args)