"""Injected collaborators of the forest: reporting and user input.

The forest never prints or prompts on its own. Rejected operations are handed
to a :class:`Reporter` and missing captions are requested from an
:class:`InputProvider`, so callers decide how (and whether) the user sees them.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, List, Optional

from schema_forest.errors import ForestError

logger = logging.getLogger("schema_forest.forest")


class Reporter(ABC):
    """Receives human-readable descriptions of rejected operations."""

    @abstractmethod
    def report(self, message: str, error: Optional[ForestError] = None) -> None:
        """Report a rejected operation.

        Args:
            message: Description suitable for showing to a user
            error: The error that caused the rejection, when there is one
        """
        pass


class LoggingReporter(Reporter):
    """Reporter writing each message as a WARNING log record."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger

    def report(self, message: str, error: Optional[ForestError] = None) -> None:
        self.log.warning(message)


class RecordingReporter(Reporter):
    """Reporter keeping messages and errors in memory, in arrival order."""

    def __init__(self) -> None:
        self.messages: List[str] = []
        self.errors: List[ForestError] = []

    def report(self, message: str, error: Optional[ForestError] = None) -> None:
        self.messages.append(message)
        if error is not None:
            self.errors.append(error)

    def clear(self) -> None:
        self.messages.clear()
        self.errors.clear()


class InputProvider(ABC):
    """Supplies values the user has to type in, such as new captions."""

    @abstractmethod
    def request_caption(self, prompt: str) -> Optional[str]:
        """Ask for a caption.

        Args:
            prompt: Question to show the user

        Returns:
            The caption entered, or None if the user cancelled
        """
        pass


class QueuedInputProvider(InputProvider):
    """Input provider answering from a fixed sequence, then None."""

    def __init__(self, answers: Iterable[Optional[str]]):
        self.answers = deque(answers)
        self.prompts: List[str] = []

    def request_caption(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        return self.answers.popleft() if self.answers else None
