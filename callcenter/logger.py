"""Colourful console logging built on rich"""
import datetime

from rich.console import Console
from rich.text import Text


class Logger:
    """Timestamped console logger with per-call and per-campaign helpers"""

    def __init__(self, name: str = "CallCenter"):
        self.console = Console()
        self.name = name

    def _format_message(self, level: str, message: str, *args, **kwargs) -> str:
        timestamp = datetime.datetime.now().strftime("%H:%M:%S")
        formatted_msg = f"[{timestamp}] {self.name} {level}: {message}"

        if args:
            formatted_msg += f" {args}"
        if kwargs:
            formatted_msg += f" {kwargs}"

        return formatted_msg

    def _log(self, level: str, message: str, color: str, *args, **kwargs):
        formatted_msg = self._format_message(level, message, *args, **kwargs)
        self.console.print(Text(formatted_msg, style=color))

    def info(self, message: str, *args, **kwargs):
        self._log("INFO", message, "blue", *args, **kwargs)

    def success(self, message: str, *args, **kwargs):
        self._log("SUCCESS", message, "green", *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._log("WARN", message, "yellow", *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log("ERROR", message, "red", *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        self._log("DEBUG", message, "cyan", *args, **kwargs)

    def call(self, phone: str, message: str, *args, **kwargs):
        """Log a line about a single outbound call"""
        self._log(f"CALL:{phone}", message, "white", *args, **kwargs)

    def campaign(self, campaign_id: str, message: str, *args, **kwargs):
        """Log a line about a campaign run"""
        self._log(f"CAMPAIGN:{campaign_id}", message, "magenta", *args, **kwargs)


logger = Logger("CallCenter")
