"""
PDF document streaming handler.
"""

import os
import shutil
import urllib.parse

from ..utils import CHUNK_SIZE, send_empty

PDF_PREFIX = "/pdf:"


def document_path(url):
    """Absolute file path carried by a ``/pdf:`` URL."""
    # The client percent-encodes the path's own leading separator, the
    # first "/" belongs to the request line.
    return urllib.parse.unquote(url.replace(PDF_PREFIX, "", 1))


def handle_pdf(handler, log):
    """Stream the requested PDF, or answer 404."""
    file_name = document_path(handler.path)
    try:
        pdf = open(file_name, "rb")
    except (OSError, ValueError):
        log(f"Error reading PDF file: {file_name}")
        send_empty(handler, 404)
        return

    with pdf:
        try:
            size = os.fstat(pdf.fileno()).st_size
        except OSError:
            log(f"Error reading PDF file: {file_name}")
            send_empty(handler, 404)
            return

        handler.send_response(200)
        handler.send_header("Content-Type", "application/pdf")
        handler.send_header("Content-Length", str(size))
        handler.end_headers()
        log(f"Preview PDF file: {file_name}")
        if handler.command == "HEAD":
            return
        try:
            shutil.copyfileobj(pdf, handler.wfile, CHUNK_SIZE)
        except (BrokenPipeError, ConnectionResetError) as e:
            handler.close_connection = True
            log(f"Client aborted PDF transfer {file_name}: {e}")
