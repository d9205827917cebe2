import logging
import os
from datetime import datetime

logger = logging.getLogger(__name__)


class EventLog:
    """Append-only record of observed requests, one line per request."""

    def __init__(self, path: str):
        self.path = path

    def notify(self, method: str, path: str) -> None:
        """
        Append "<timestamp> - <METHOD> - <path>" to the log file.
        Failures are reported on the operational logger and never raised.
        """
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        line = f"{stamp} - {method} - {path}".replace("\r", " ").replace("\n", " ")
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            logger.exception("Logging failed for %s %s", method, path)
