"""Transient user notifications ("toasts")."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT = "default"
DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    variant: str = DEFAULT

    @property
    def is_destructive(self) -> bool:
        return self.variant == DESTRUCTIVE


class Notifier:
    """Collects toasts and forwards each one to an optional sink.

    The UI layer supplies ``sink`` to display toasts; without one they are
    only kept in ``history`` and logged.
    """

    def __init__(self, sink: Optional[Callable[[Toast], None]] = None) -> None:
        self._sink = sink
        self.history: List[Toast] = []

    def notify(self, title: str, description: str = "", *, variant: str = DEFAULT) -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        self.history.append(toast)
        if toast.is_destructive:
            logger.warning("Toast: %s - %s", title, description)
        else:
            logger.info("Toast: %s - %s", title, description)
        if self._sink is not None:
            self._sink(toast)
        return toast

    def error(self, description: str, title: str = "Error") -> Toast:
        return self.notify(title, description, variant=DESTRUCTIVE)

    @property
    def last(self) -> Optional[Toast]:
        return self.history[-1] if self.history else None
