"""Exporter lifecycle state.

An exporter is either active or shut down; shutdown is terminal. The
backend client is released on the first shutdown() only, so repeated
calls are safe.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gcptelemetry.clients import BackendClient

logger = logging.getLogger(__name__)


class ExporterLifecycle:
    """Tracks whether an exporter may still use its backend client."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._lock = threading.Lock()
        self._shutdown = False

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def shutdown(self, client: BackendClient) -> None:
        """Release the client and enter the terminal state.

        This function is idempotent: only the first call shuts the client
        down; later calls log a warning and return.
        """
        with self._lock:
            if self._shutdown:
                logger.warning("%s already shut down, ignoring call", self._name)
                return
            self._shutdown = True

        try:
            client.shutdown()
            logger.debug("%s shutdown complete", self._name)
        except Exception as e:
            logger.warning("Error during %s shutdown: %s", self._name, e)
