"""
Server settings, read from the project's config.py with environment overrides.
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# config.py name -> (environment variable, default)
SETTINGS = {
    "VIEWER_PORT": ("PDFVIEWER_PORT", 0),
    "VIEWER_ADDRESS": ("PDFVIEWER_ADDRESS", "127.0.0.1"),
    "VIEWER_USE_HTTPS": ("PDFVIEWER_USE_HTTPS", False),
    "VIEWER_KEY_PATH": ("PDFVIEWER_KEY_PATH", None),
    "VIEWER_CERT_PATH": ("PDFVIEWER_CERT_PATH", None),
    "VIEWER_ROOT": ("PDFVIEWER_VIEWER_ROOT", os.path.join(PROJECT_ROOT, "viewer")),
    "LIBRARY_ROOT": ("PDFVIEWER_LIBRARY_ROOT", os.path.join(PROJECT_ROOT, "node_modules", "pdfjs-dist")),
}


@dataclass(frozen=True)
class ServerConfig:
    """Startup configuration, fixed for the lifetime of a server."""
    port: int = 0
    address: str = "127.0.0.1"
    use_https: bool = False
    key_path: Optional[str] = None
    cert_path: Optional[str] = None
    viewer_root: str = SETTINGS["VIEWER_ROOT"][1]
    library_root: str = SETTINGS["LIBRARY_ROOT"][1]


def parse_flag(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(module=None, environ=None):
    """Build a ServerConfig from config.py, falling back to defaults."""
    if environ is None:
        environ = os.environ
    if module is None:
        if PROJECT_ROOT not in sys.path:
            sys.path.insert(0, PROJECT_ROOT)
        try:
            import config as module
        except ImportError:
            print("Warning: Could not import config.py. Using default settings.")

    values = {}
    for name, (env_var, default) in SETTINGS.items():
        if env_var in environ:
            values[name] = environ[env_var]
        else:
            values[name] = getattr(module, name, default)

    return ServerConfig(
        port=int(values["VIEWER_PORT"]),
        address=values["VIEWER_ADDRESS"],
        use_https=parse_flag(values["VIEWER_USE_HTTPS"]),
        key_path=values["VIEWER_KEY_PATH"],
        cert_path=values["VIEWER_CERT_PATH"],
        viewer_root=os.path.abspath(values["VIEWER_ROOT"]),
        library_root=os.path.abspath(values["LIBRARY_ROOT"]),
    )
