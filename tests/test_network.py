import queue
import socket
import threading
import time

from sapper.network import NetworkManager


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class Recorder:
    def __init__(self):
        self.connected = threading.Event()
        self.disconnected = threading.Event()
        self.data = queue.Queue()
        self.errors = queue.Queue()

    def callbacks(self):
        return {
            "on_connected": self.connected.set,
            "on_disconnected": self.disconnected.set,
            "on_data": self.data.put,
            "on_error": self.errors.put,
        }


def link(host, guest, guest_rec):
    host.start_server(0)
    guest.connect_to_host("127.0.0.1", host.server_port())
    assert guest_rec.connected.wait(5)
    assert wait_for(host.is_connected)


def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]


def test_guest_message_reaches_host():
    host_rec, guest_rec = Recorder(), Recorder()
    with NetworkManager(**host_rec.callbacks()) as host, NetworkManager(
        **guest_rec.callbacks()
    ) as guest:
        link(host, guest, guest_rec)
        guest.send_data(b"REQUEST_BOARD")
        assert host_rec.data.get(timeout=5) == b"REQUEST_BOARD"
        assert guest.is_connected()


def test_host_message_reaches_guest():
    host_rec, guest_rec = Recorder(), Recorder()
    with NetworkManager(**host_rec.callbacks()) as host, NetworkManager(
        **guest_rec.callbacks()
    ) as guest:
        link(host, guest, guest_rec)
        host.send_data(b"MOVE 2 3")
        assert guest_rec.data.get(timeout=5) == b"MOVE 2 3"


def test_accepting_side_is_not_announced_as_connected():
    host_rec, guest_rec = Recorder(), Recorder()
    with NetworkManager(**host_rec.callbacks()) as host, NetworkManager(
        **guest_rec.callbacks()
    ) as guest:
        link(host, guest, guest_rec)
        assert host.is_connected()
        assert not host_rec.connected.is_set()


def test_guest_disconnect_is_seen_by_host():
    host_rec, guest_rec = Recorder(), Recorder()
    with NetworkManager(**host_rec.callbacks()) as host, NetworkManager(
        **guest_rec.callbacks()
    ) as guest:
        link(host, guest, guest_rec)
        guest.disconnect_from_host()
        assert host_rec.disconnected.wait(5)
        assert wait_for(lambda: not host.is_connected())
        assert guest_rec.disconnected.wait(5)
        assert not guest.is_connected()


def test_stop_server_drops_peer():
    host_rec, guest_rec = Recorder(), Recorder()
    with NetworkManager(**host_rec.callbacks()) as host, NetworkManager(
        **guest_rec.callbacks()
    ) as guest:
        link(host, guest, guest_rec)
        host.stop_server()
        assert host.server_port() is None
        assert not host.is_connected()
        assert guest_rec.disconnected.wait(5)
        assert not host_rec.disconnected.is_set()


def test_starting_twice_reports_error():
    host_rec = Recorder()
    with NetworkManager(**host_rec.callbacks()) as host:
        host.start_server(0)
        port = host.server_port()
        host.start_server(0)
        assert "already" in host_rec.errors.get(timeout=1)
        assert host.server_port() == port


def test_connection_refused_reports_error():
    guest_rec = Recorder()
    with NetworkManager(**guest_rec.callbacks()) as guest:
        guest.connect_to_host("127.0.0.1", free_port())
        message = guest_rec.errors.get(timeout=5)
        assert len(message) > 0
        assert not guest_rec.connected.is_set()
        assert not guest.is_connected()


def test_send_without_peer_does_nothing():
    rec = Recorder()
    manager = NetworkManager(**rec.callbacks())
    manager.send_data(b"MOVE 0 0")
    assert not manager.is_connected()
    assert manager.server_port() is None
    assert rec.errors.empty()


def test_context_manager_stops_server():
    with NetworkManager() as manager:
        manager.start_server(0)
        assert manager.server_port() > 0
    assert manager.server_port() is None