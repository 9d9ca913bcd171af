# sundayreg/services/notifier.py
"""
Confirmation emails.

`notify()` returns True when the message went out and False when it did
not; it never raises for transport problems. The intake counts the False
results per address and moves on.
"""
from __future__ import annotations

import logging
import smtplib
import time
from email.message import EmailMessage
from typing import Callable, Optional, Protocol, Sequence

from sundayreg.config import Settings
from sundayreg.schemas.registration import RegistrantIn

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(
        self,
        address: str,
        registrants: Sequence[RegistrantIn],
        sunday_label: str,
        community: str,
        session_label: Optional[str] = None,
    ) -> bool: ...


# ---------- message ----------

def build_subject(sunday_label: str) -> str:
    return f"Registration confirmed for {sunday_label}"


def build_body(
    registrants: Sequence[RegistrantIn],
    sunday_label: str,
    community: str,
    session_label: Optional[str] = None,
) -> str:
    first = registrants[0].first_name if registrants else "friend"
    lines = [
        f"Hi {first},",
        "",
        f"Thank you for registering for {session_label or 'the Sunday service'} on {sunday_label}.",
        "",
        "Registered:",
    ]
    for r in registrants:
        lines.append(f"  • {r.first_name} {r.last_name} ({r.registrant_type.value})")
    lines += [
        "",
        f"Community: {community}",
        "",
        "We look forward to seeing you!",
    ]
    return "\n".join(lines)


# ---------- backends ----------

class LogNotifier:
    """Development stand-in: writes the message to the log and reports success."""

    def notify(self, address, registrants, sunday_label, community, session_label=None) -> bool:
        logger.info(
            "email (not sent, no SMTP_HOST) to=%s subject=%r\n%s",
            address,
            build_subject(sunday_label),
            build_body(registrants, sunday_label, community, session_label),
        )
        return True


class SmtpNotifier:
    def __init__(
        self,
        host: str,
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        sender: str = "noreply@example.org",
        max_attempts: int = 1,
        retry_delay: float = 1.0,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.sender = sender
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self._smtp_factory = smtp_factory

    def _message(self, address, registrants, sunday_label, community, session_label) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = build_subject(sunday_label)
        msg["From"] = self.sender
        msg["To"] = address
        msg.set_content(build_body(registrants, sunday_label, community, session_label))
        return msg

    def _send(self, msg: EmailMessage) -> None:
        with self._smtp_factory(self.host, self.port, timeout=10) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password or "")
            smtp.send_message(msg)

    def notify(self, address, registrants, sunday_label, community, session_label=None) -> bool:
        msg = self._message(address, registrants, sunday_label, community, session_label)
        for attempt in range(1, self.max_attempts + 1):
            try:
                self._send(msg)
                return True
            except (smtplib.SMTPException, OSError) as e:
                logger.warning(
                    "email to %s failed (attempt %s/%s): %s",
                    address, attempt, self.max_attempts, e,
                )
                if attempt < self.max_attempts and self.retry_delay:
                    time.sleep(self.retry_delay)
        return False


def build_notifier(settings: Settings) -> Notifier:
    if not settings.smtp_host:
        return LogNotifier()
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        sender=settings.mail_from,
        max_attempts=settings.email_max_attempts,
    )
