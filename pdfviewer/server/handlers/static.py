"""
Static asset handler for the viewer UI and the pdf.js library.
"""

from ..utils import send_bytes, send_empty


def handle_static(handler, file_name, content_type):
    """Serve one asset file: 200 with its body, 404 if missing, 500 otherwise."""
    try:
        with open(file_name, "rb") as f:
            content = f.read()
    except (FileNotFoundError, NotADirectoryError, ValueError):
        send_empty(handler, 404)
        return
    except OSError:
        send_empty(handler, 500)
        return

    send_bytes(handler, content, content_type)
