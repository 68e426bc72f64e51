"""Collected user notices (the dashboards' toasts)."""
import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

LEVELS = ("success", "info", "warning", "error")


@dataclass
class Notice:
    level: str
    message: str


class Notifier:
    def __init__(self):
        self.notices: List[Notice] = []

    def _add(self, level: str, message: str) -> None:
        self.notices.append(Notice(level, message))
        logger.log(logging.WARNING if level in ("warning", "error") else logging.INFO, f"[{level}] {message}")

    def success(self, message: str) -> None:
        self._add("success", message)

    def info(self, message: str) -> None:
        self._add("info", message)

    def warning(self, message: str) -> None:
        self._add("warning", message)

    def error(self, message: str) -> None:
        self._add("error", message)

    def messages(self, level: Optional[str] = None) -> List[str]:
        return [n.message for n in self.notices if level is None or n.level == level]

    @property
    def last(self) -> Optional[Notice]:
        return self.notices[-1] if self.notices else None

    def clear(self) -> None:
        self.notices.clear()
