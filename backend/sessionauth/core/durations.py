"""Human-readable duration parsing for credential lifetimes."""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Final

log = logging.getLogger(__name__)

DEFAULT_DURATION: Final[timedelta] = timedelta(days=7)

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd])\s*$", re.IGNORECASE)
_UNITS: Final[dict[str, str]] = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


def parse_duration(value: object, default: timedelta = DEFAULT_DURATION) -> timedelta:
    """
    Parse ``"<amount><unit>"`` into a :class:`~datetime.timedelta`.

    Units are ``s``, ``m``, ``h`` and ``d`` (case-insensitive), e.g. ``"30m"``,
    ``"24h"`` or ``"7d"``.

    Anything that does not match returns ``default`` (seven days) instead of
    raising. The fallback is logged at ``WARNING`` level.

    :param value: Raw configuration value (usually a string).
    :param default: Duration returned for unparseable input.
    :returns: Parsed duration.
    """
    match = _DURATION_RE.match(str(value)) if value is not None else None
    if match is None:
        log.warning("config.duration_fallback value=%r default=%s", value, default)
        return default
    amount = int(match.group(1))
    unit = _UNITS[match.group(2).lower()]
    return timedelta(**{unit: amount})
