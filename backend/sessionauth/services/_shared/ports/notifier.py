from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class ActivationNotifier(Protocol):
    """Outbound channel delivering activation links to users."""

    def send_activation(self, *, email: str, name: str, activation_url: str) -> None: ...


@dataclass
class RecordingActivationNotifier(ActivationNotifier):
    """Keeps sent activation messages in memory (unit tests)."""

    sent: list[dict[str, str]] = field(default_factory=list)

    def send_activation(self, *, email: str, name: str, activation_url: str) -> None:
        self.sent.append({"email": email, "name": name, "activation_url": activation_url})
