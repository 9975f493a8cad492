"""
Transactional email through the Brevo API.

Brevo is used instead of SMTP so the service works on hosts that block
outbound mail ports.
"""
import logging
from typing import Optional

import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException

from service_center.config import Settings, get_settings
from service_center.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Send plain-text email on behalf of the service center."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _client(self) -> sib_api_v3_sdk.TransactionalEmailsApi:
        configuration = sib_api_v3_sdk.Configuration()
        configuration.api_key["api-key"] = self.settings.brevo_api_key
        return sib_api_v3_sdk.TransactionalEmailsApi(sib_api_v3_sdk.ApiClient(configuration))

    def send(self, to: str, subject: str, body: str, recipient_name: Optional[str] = None) -> str:
        """
        Send ``body`` to ``to`` and return the provider message id.

        Raises ``EmailDeliveryError`` if no API key is configured or the
        provider rejects the message.
        """
        if not self.settings.brevo_api_key:
            raise EmailDeliveryError("Email delivery is not configured (BREVO_API_KEY missing)")

        recipient = {"email": to}
        if recipient_name:
            recipient["name"] = recipient_name

        message = sib_api_v3_sdk.SendSmtpEmail(
            to=[recipient],
            sender={"name": self.settings.mail_from_name, "email": self.settings.mail_from_email},
            subject=subject,
            text_content=body,
        )

        logger.info("Sending email to %s: %s", to, subject)
        try:
            response = self._client().send_transac_email(message)
        except ApiException as e:
            logger.error("Brevo API error: %s", e)
            raise EmailDeliveryError(f"Mail provider rejected the message: {e.reason}") from e

        logger.info("Email sent, message id %s", response.message_id)
        return response.message_id


def get_email_service() -> EmailService:
    return EmailService()
