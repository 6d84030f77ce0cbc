"""
Handlers package - imports all handler functions.
"""

from .pdf import (
    PDF_PREFIX,
    document_path,
    handle_pdf,
)

from .static import (
    handle_static,
)

from .websocket import (
    CLOSE_MESSAGE,
    ChannelEvent,
    ChannelState,
    EventKind,
    MessageChannel,
    UpgradeManager,
    is_upgrade_request,
    receive_events,
)
