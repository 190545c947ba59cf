import socket

from webgone.services import probe
from webgone.services.probe import ProbeResult, check


def test_check_connects_to_listening_socket():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    host, port = server.getsockname()
    try:
        assert check(host, port, timeout=1) == ProbeResult.CONNECTED
    finally:
        server.close()


def test_check_refused_port_is_disconnected():
    # Bind then close to get a port nobody listens on
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()

    assert check("127.0.0.1", port, timeout=1) == ProbeResult.DISCONNECTED


def test_check_timeout_is_disconnected(monkeypatch):
    def _timeout(*args, **kwargs):
        raise socket.timeout("timed out")

    monkeypatch.setattr(probe.socket, "create_connection", _timeout)

    assert check("192.0.2.1", 53, timeout=0.1) == ProbeResult.DISCONNECTED


def test_check_resolution_error_is_disconnected(monkeypatch):
    def _gaierror(*args, **kwargs):
        raise socket.gaierror(-2, "Name or service not known")

    monkeypatch.setattr(probe.socket, "create_connection", _gaierror)

    assert check("no-such-host.invalid", 53, timeout=0.1) == ProbeResult.DISCONNECTED


def test_check_passes_timeout_and_closes_connection(monkeypatch):
    calls = {}

    class FakeConnection:
        closed = False

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self.closed = True
            return False

    connection = FakeConnection()

    def _connect(address, timeout=None):
        calls["address"] = address
        calls["timeout"] = timeout
        return connection

    monkeypatch.setattr(probe.socket, "create_connection", _connect)

    assert check("8.8.8.8", 53, timeout=0.5) == ProbeResult.CONNECTED
    assert calls == {"address": ("8.8.8.8", 53), "timeout": 0.5}
    assert connection.closed
