"""
Listening socket setup: plain HTTP or HTTPS from a certificate pair.
"""

import http.server
import logging
import socket
import ssl
import sys

logger = logging.getLogger(__name__)

# Seconds a client may take to complete the TLS handshake
HANDSHAKE_TIMEOUT = 10


class ViewerHTTPServer(http.server.ThreadingHTTPServer):
    """Threaded HTTP server reporting connection errors to a log sink."""

    daemon_threads = True
    allow_reuse_port = False

    def __init__(self, server_address, handler_class, log, ssl_context=None):
        self.log = log
        self.ssl_context = ssl_context
        self.address_family = address_family_for(*server_address)
        super().__init__(server_address, handler_class)

    def server_bind(self):
        super().server_bind()
        if self.ssl_context is not None:
            # Handshakes run on the connection thread, see finish_request
            self.socket = self.ssl_context.wrap_socket(
                self.socket, server_side=True, do_handshake_on_connect=False)

    def finish_request(self, request, client_address):
        if self.ssl_context is not None:
            request.settimeout(HANDSHAKE_TIMEOUT)
            try:
                request.do_handshake()
            except OSError as e:
                self.log(f"Error on https connection from {client_address}: {e}.")
                return
            request.settimeout(None)
        super().finish_request(request, client_address)

    def handle_error(self, request, client_address):
        exc = sys.exc_info()[1]
        self.log(f"Error on connection from {client_address}: {exc}.")
        logger.debug("Connection error traceback", exc_info=True)


def address_family_for(host, port):
    """Pick the socket family able to bind ``host``."""
    infos = socket.getaddrinfo(host or None, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    return infos[0][0]


def create_ssl_context(config):
    """Server-side TLS context loaded from the configured key and certificate."""
    if not config.key_path or not config.cert_path:
        raise ValueError("https requires both a key path and a certificate path")
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.load_cert_chain(certfile=config.cert_path, keyfile=config.key_path)
    return context


def bind_server(config, handler_class, log):
    """Bind the listener described by ``config``.

    Startup failures are reported through ``log`` and yield None, leaving
    the caller constructed but not listening.
    """
    ssl_context = None
    if config.use_https:
        try:
            ssl_context = create_ssl_context(config)
        except (OSError, ValueError) as e:
            log(f"Error loading https certificate: {e}.")
            return None

    try:
        return ViewerHTTPServer((config.address, config.port), handler_class, log, ssl_context)
    except OSError as e:
        log(f"Error creating http server: {e}.")
        return None
