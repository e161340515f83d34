# sessionauth/services/admission/dto.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AdmissionDecision(str, Enum):
    ADMITTED = "admitted"
    REJECTED_MISSING = "rejected_missing"
    REJECTED_INVALID = "rejected_invalid"
    REJECTED_FORBIDDEN = "rejected_forbidden"


@dataclass(frozen=True, slots=True)
class Admission:
    """
    Result of admitting a request.

    :param decision: Final state of the admission machine.
    :param subject: Authenticated user id when admitted.
    :param detail: Short, non-sensitive reason for rejections.
    """

    decision: AdmissionDecision
    subject: str | None = None
    detail: str | None = None

    @property
    def admitted(self) -> bool:
        return self.decision is AdmissionDecision.ADMITTED
