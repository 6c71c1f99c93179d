"""E-mail delivery of exported report artifacts over SMTP."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional, Sequence

from bizadmin.config import DeliveryConfig

logger = logging.getLogger(__name__)


class SMTPDelivery:
    """Sends one artifact as an attachment to a list of recipients.

    There is no retry and no delivery confirmation; SMTP errors propagate
    to the caller.
    """

    def __init__(self, config: Optional[DeliveryConfig] = None, timeout: int = 30) -> None:
        self.config = config or DeliveryConfig()
        self.timeout = timeout

    def build_message(
        self,
        recipients: Sequence[str],
        artifact,
        subject: Optional[str] = None,
        body: Optional[str] = None,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.config.sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject or f"Scheduled report: {artifact.filename}"
        msg.set_content(body or f"Please find the attached report {artifact.filename}.")

        maintype, _, subtype = artifact.media_type.partition("/")
        msg.add_attachment(
            artifact.content,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=artifact.filename,
        )
        return msg

    def send(
        self,
        recipients: Sequence[str],
        artifact,
        subject: Optional[str] = None,
        body: Optional[str] = None,
    ) -> None:
        msg = self.build_message(recipients, artifact, subject=subject, body=body)
        cfg = self.config
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=self.timeout) as server:
            if cfg.use_tls:
                server.starttls()
            if cfg.smtp_username:
                server.login(cfg.smtp_username, cfg.smtp_password or "")
            server.send_message(msg)
        logger.info(
            "Delivered %s (%d bytes) to %d recipient(s)",
            artifact.filename, artifact.size, len(recipients),
        )
