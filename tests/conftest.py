import http.client
import queue

import pytest

from pdfviewer.server import ServerConfig, ViewerServer

VIEWER_FILES = {
    "viewer.html": b"<html>viewer</html>",
    "viewer.js": b"console.log('viewer');",
    "viewer.css": b"body {}",
    "locale.json": b"{}",
    "logo.png": b"\x89PNG\r\n",
    "photo.jpg": b"\xff\xd8\xff",
    "favicon.ico": b"\x00\x00\x01\x00",
    "notes.txt": b"plain",
    "README": b"no extension",
}

LIBRARY_FILES = {
    "build/pdf.js": b"// pdf.js",
    "build/pdf.worker.js": b"// worker",
    "cmaps/Adobe-Japan1-UCS2.bcmap": b"\x00bcmap",
}


class Recorder:
    """Collects log lines and viewer handler calls."""

    def __init__(self):
        self.logs = []
        self.events = queue.Queue()

    def log(self, message):
        self.logs.append(message)

    def viewer_handler(self, connection, message):
        self.events.put((connection, message))

    def next_event(self, timeout=5):
        return self.events.get(timeout=timeout)


def write_tree(root, files):
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)


@pytest.fixture
def roots(tmp_path):
    viewer_root = tmp_path / "viewer"
    library_root = tmp_path / "pdfjs-dist"
    write_tree(viewer_root, VIEWER_FILES)
    write_tree(library_root, LIBRARY_FILES)
    (viewer_root / "images").mkdir()
    return viewer_root, library_root


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_server(roots, recorder):
    viewer_root, library_root = roots
    servers = []

    def make(**overrides):
        options = dict(
            port=0,
            address="127.0.0.1",
            viewer_root=str(viewer_root),
            library_root=str(library_root),
        )
        options.update(overrides)
        server = ViewerServer(ServerConfig(**options), recorder.viewer_handler, log=recorder.log)
        servers.append(server)
        server.start()
        return server

    yield make

    for server in servers:
        server.stop()


@pytest.fixture
def server(make_server):
    return make_server()


def fetch(server, path, method="GET"):
    """Send one raw request, returning (status, headers, body)."""
    host = server.address.strip("[]")
    conn = http.client.HTTPConnection(host, server.port, timeout=5)
    try:
        conn.putrequest(method, path, skip_accept_encoding=True)
        conn.endheaders()
        response = conn.getresponse()
        return response.status, response.headers, response.read()
    finally:
        conn.close()
