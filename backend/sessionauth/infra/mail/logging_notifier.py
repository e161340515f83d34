# sessionauth/infra/mail/logging_notifier.py
from __future__ import annotations

import logging

from sessionauth.services._shared.ports import ActivationNotifier

log = logging.getLogger(__name__)


class LoggingActivationNotifier(ActivationNotifier):
    """
    Writes the activation link to the application log instead of sending mail.

    Suitable for development; production deployments plug an SMTP or API
    based notifier implementing the same port.
    """

    def send_activation(self, *, email: str, name: str, activation_url: str) -> None:
        log.info("activation.link email=%s name=%s url=%s", email, name, activation_url)
