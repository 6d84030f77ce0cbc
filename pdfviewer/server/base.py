"""
ViewerRequestHandler base class with routing logic.
"""

import enum
import http.server
import logging

from .handlers import handle_pdf, handle_static, is_upgrade_request
from .utils import content_type_for, resolve_under_root

logger = logging.getLogger(__name__)

LIBRARY_PREFIXES = ("/build/", "/cmaps/")


class Route(enum.Enum):
    DOCUMENT = "document"
    LIBRARY = "library"
    VIEWER = "viewer"


def classify_request(url):
    """Route for a request URL, or None when there is no URL."""
    if not url:
        return None
    # viewer.html?file=pdf:... is the viewer page itself, not the document
    if "pdf:" in url and "viewer.html" not in url:
        return Route.DOCUMENT
    if url.startswith(LIBRARY_PREFIXES):
        return Route.LIBRARY
    return Route.VIEWER


class ViewerRequestHandler(http.server.SimpleHTTPRequestHandler):
    """HTTP request handler for the PDF viewer."""

    def __init__(self, *args, context=None, **kwargs):
        self._context = context
        super().__init__(*args, directory=context.config.viewer_root, **kwargs)

    def do_GET(self):
        if is_upgrade_request(self):
            self._context.upgrades.handle_upgrade(self)
            return
        self.route()

    def do_HEAD(self):
        self.route()

    def route(self):
        route = classify_request(self.path)
        if route is None:
            return
        if route is Route.DOCUMENT:
            handle_pdf(self, self._context.log)
        else:
            file_name = self.translate_path(self.path)
            handle_static(self, file_name, self.guess_type(file_name))

    def translate_path(self, path):
        """Map /build/ and /cmaps/ to the pdf.js library, the rest to the viewer."""
        if classify_request(path) is Route.LIBRARY:
            root = self._context.config.library_root
        else:
            root = self.directory
        return resolve_under_root(root, path)

    def guess_type(self, path):
        return content_type_for(path)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)
