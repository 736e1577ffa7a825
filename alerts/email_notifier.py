# ============================================================
# FILE: alerts/email_notifier.py
# ============================================================

import logging
import os
import smtplib
from email.message import EmailMessage
from typing import Callable, List, Optional

from alerts.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Motion has been detected in the room"

class EmailNotifier:
    def __init__(self, sender: str, password: str, recipients: Optional[List[str]] = None,
                 smtp_host: str = "smtp.gmail.com", smtp_port: int = 587, timeout: float = 10.0):
        self.sender = sender
        self.password = password
        self.recipients = recipients or [sender]
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.timeout = timeout
    
    @classmethod
    def from_env(cls, **kwargs) -> "EmailNotifier":
        sender = os.getenv('GMAIL_USER')
        password = os.getenv('GMAIL_PASS')
        if not sender or not password:
            raise ValueError("GMAIL_USER and GMAIL_PASS must be set to send email notifications")
        return cls(sender, password, **kwargs)
    
    def send(self, body: str = DEFAULT_MESSAGE, subject: str = "Motion detected"):
        message = EmailMessage()
        message['From'] = self.sender
        message['To'] = ", ".join(self.recipients)
        message['Subject'] = subject
        message.set_content(body)
        
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as smtp:
            smtp.starttls()
            smtp.login(self.sender, self.password)
            smtp.send_message(message)
        logger.info(f"Notification email sent to {', '.join(self.recipients)}")


def make_email_callback(notifier: EmailNotifier, limiter: RateLimiter,
                        body: str = DEFAULT_MESSAGE) -> Callable[[], None]:
    """Build an on-detect callback sending at most one email per cooldown window."""
    def on_detect():
        if not limiter.try_acquire():
            return
        try:
            notifier.send(body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send notification email: {e}")
    
    return on_detect
