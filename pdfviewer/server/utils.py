"""
Utility functions for the server handlers.
"""

import os
import posixpath
import urllib.parse

DEFAULT_CONTENT_TYPE = "text/html"

CONTENT_TYPES = {
    ".js": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpg",
    ".ico": "image/x-icon",
}

# Copy size for streamed responses
CHUNK_SIZE = 64 * 1024


def content_type_for(path):
    """Content type from the file extension, text/html when unknown."""
    return CONTENT_TYPES.get(os.path.splitext(path)[1], DEFAULT_CONTENT_TYPE)


def resolve_under_root(root, url):
    """Map a request URL onto a file path that cannot leave ``root``."""
    path = url.split("?", 1)[0]
    path = path.split("#", 1)[0]
    path = urllib.parse.unquote(path)
    # normpath against "/" clamps any leading ".." at the root
    path = posixpath.normpath("/" + path)
    words = [word for word in path.split("/") if word and word not in (os.curdir, os.pardir)]
    return os.path.join(os.path.abspath(root), *words)


def format_host(host):
    """Bracket IPv6 literals so the host stays valid inside a URL."""
    if ":" in host:
        return f"[{host}]"
    return host


def send_empty(handler, status_code):
    """Send a status line with an empty body."""
    handler.send_response(status_code)
    handler.send_header("Content-Length", "0")
    handler.end_headers()


def send_bytes(handler, content, content_type):
    """Send a 200 response carrying ``content``."""
    handler.send_response(200)
    handler.send_header("Content-Type", content_type)
    handler.send_header("Content-Length", str(len(content)))
    handler.end_headers()
    if handler.command != "HEAD":
        handler.wfile.write(content)
