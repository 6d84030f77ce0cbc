import os

# Base paths
# PROJECT_ROOT assumes this file is in the repository root
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

# Listener - port 0 lets the OS pick a free port
VIEWER_PORT = int(os.environ.get("PDFVIEWER_PORT", 0))
VIEWER_ADDRESS = os.environ.get("PDFVIEWER_ADDRESS", "127.0.0.1")

# HTTPS - both paths are required when enabled
VIEWER_USE_HTTPS = False
VIEWER_KEY_PATH = os.path.join(PROJECT_ROOT, "ssl", "server.key")
VIEWER_CERT_PATH = os.path.join(PROJECT_ROOT, "ssl", "server.crt")

# Static assets
VIEWER_ROOT = os.path.join(PROJECT_ROOT, "viewer")
LIBRARY_ROOT = os.path.join(PROJECT_ROOT, "node_modules", "pdfjs-dist")
