from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SmsResult:
    """Outcome of a single send attempt."""

    success: bool
    provider: str
    error: str | None = None


class AbstractSmsSender(ABC):
    """Interface for best-effort text message delivery.

    Implementations report provider failures through SmsResult instead of
    raising, and never retry.
    """

    name: str = "abstract"

    @abstractmethod
    async def send_text(self, phone: str, body: str) -> SmsResult:
        """Send body to phone.

        Args:
            phone: Recipient in E.164 form (``+254712345678``).
            body: Message text.

        Returns:
            SmsResult: success flag and provider error message, if any.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources held by the sender."""
        return None
