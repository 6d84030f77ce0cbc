"""
PDF Viewer Server

This package provides the HTTP and WebSocket server behind the browser PDF
viewer: it serves the viewer page, the pdf.js library files, the PDF bytes,
and keeps a WebSocket open to every viewer so the host can push updates.
"""

import logging
import threading
import urllib.parse

from .base import Route, ViewerRequestHandler, classify_request
from .handlers import PDF_PREFIX, UpgradeManager
from .settings import ServerConfig, load_config
from .transport import bind_server
from .utils import format_host

logger = logging.getLogger(__name__)


def create_handler(context):
    """Create a handler class bound to the given server context."""
    class ConfiguredHandler(ViewerRequestHandler):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, context=context, **kwargs)
    return ConfiguredHandler


class ViewerServer:
    """The viewer's HTTP server, its bound address and its WebSocket channels.

    ``viewer_handler(connection, message)`` receives every WebSocket message,
    and ``'{"type": "close"}'`` when a connection closes. ``log`` receives
    diagnostic strings and defaults to this package's logger.
    """

    def __init__(self, config, viewer_handler, log=None):
        self.config = config
        self.viewer_handler = viewer_handler
        self.log = log or logger.info
        self.upgrades = UpgradeManager(viewer_handler, self.log)
        self.address = None
        self.port = None
        self._thread = None

        self.log("Creating http and websocket server.")
        self.httpd = bind_server(config, create_handler(self), self.log)
        if self.httpd is not None:
            host, port = self.httpd.server_address[:2]
            self.address = format_host(host)
            self.port = port
            self.log(f"Server created on {self.address}:{self.port}")

    def is_running(self):
        return self.httpd is not None

    def start(self):
        """Serve requests on a daemon thread."""
        if self.httpd is None or self._thread is not None:
            return
        self._thread = threading.Thread(target=self.httpd.serve_forever, daemon=True)
        self._thread.start()

    def stop(self):
        """Close all WebSocket channels and the listening socket."""
        if self.httpd is None:
            return
        self.upgrades.close_all()
        if self._thread is not None:
            self.httpd.shutdown()
            self._thread.join()
            self._thread = None
        self.httpd.server_close()
        self.httpd = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *args):
        self.stop()

    @property
    def origin(self):
        scheme = "https" if self.config.use_https else "http"
        return f"{scheme}://{self.address}:{self.port}"

    def document_url(self, pdf_path):
        """URL streaming ``pdf_path`` from this server."""
        return self.origin + PDF_PREFIX + urllib.parse.quote(pdf_path, safe="")

    def viewer_url(self, pdf_path):
        """URL of the viewer page opening ``pdf_path``."""
        document = PDF_PREFIX + urllib.parse.quote(pdf_path, safe="")
        return f"{self.origin}/viewer.html?file={urllib.parse.quote(document, safe='')}"


__all__ = [
    "Route",
    "ServerConfig",
    "ViewerRequestHandler",
    "ViewerServer",
    "classify_request",
    "create_handler",
    "load_config",
]
