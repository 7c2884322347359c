"""
Service for sending email through the Gmail REST API.

Authentication uses an OAuth refresh token exchanged for a short-lived
access token on every send.
"""
import base64
import logging
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

import httpx

from core.config import (
    CLINIC_NAME,
    GMAIL_CLIENT_ID,
    GMAIL_CLIENT_SECRET,
    GMAIL_REFRESH_TOKEN,
    GMAIL_SENDER,
    GMAIL_TIMEOUT,
)
from core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
SEND_URL = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"


def build_raw_message(sender: str, sender_name: str, to: str, subject: str, html: str) -> str:
    """RFC 822 message encoded as unpadded base64url, as the Gmail API expects."""
    message = EmailMessage()
    message["From"] = formataddr((sender_name, sender))
    message["To"] = to
    message["Subject"] = subject
    message.set_content(html, subtype="html")
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii").rstrip("=")


class EmailService:
    """Sends HTML email via Gmail."""

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        refresh_token: Optional[str] = None,
        sender: Optional[str] = None,
        sender_name: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the Gmail sender.

        Args:
            client_id: Google OAuth client id. Defaults to GMAIL_CLIENT_ID.
            client_secret: Google OAuth client secret. Defaults to GMAIL_CLIENT_SECRET.
            refresh_token: OAuth refresh token with gmail.send scope.
            sender: From address. Defaults to GMAIL_SENDER.
            sender_name: From display name. Defaults to the clinic name.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
        """
        self.client_id = client_id if client_id is not None else GMAIL_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else GMAIL_CLIENT_SECRET
        self.refresh_token = refresh_token if refresh_token is not None else GMAIL_REFRESH_TOKEN
        self.sender = sender if sender is not None else GMAIL_SENDER
        self.sender_name = sender_name or CLINIC_NAME
        self.timeout = timeout or GMAIL_TIMEOUT
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token and self.sender)

    def _get_access_token(self, client: httpx.Client) -> str:
        response = client.post(
            TOKEN_URL,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": self.refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if response.is_error:
            logger.error(f"Gmail token refresh failed: {response.status_code} - {response.text[:300]}")
            raise EmailDeliveryError("Failed to get Gmail access token")
        return response.json()["access_token"]

    def send(self, to: str, subject: str, html: str) -> str:
        """
        Send one HTML email.

        Returns:
            str: Gmail message id.

        Raises:
            EmailDeliveryError: If Gmail is not configured or rejects the message.
        """
        if not self.is_configured:
            raise EmailDeliveryError("Gmail API is not configured", recipient=to)

        raw = build_raw_message(self.sender, self.sender_name, to, subject, html)
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                access_token = self._get_access_token(client)
                response = client.post(
                    SEND_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                    json={"raw": raw},
                )
        except httpx.RequestError as e:
            logger.error(f"Request error sending email: {e}")
            raise EmailDeliveryError(f"Failed to send email: {e}", recipient=to)

        if response.is_error:
            logger.error(
                f"Gmail API error: {response.status_code} - {response.text[:300]}",
                extra={"recipient": to}
            )
            raise EmailDeliveryError(f"Gmail API error: {response.status_code}", recipient=to)

        message_id = response.json().get("id", "")
        logger.info("Email sent", extra={"recipient": to, "message_id": message_id})
        return message_id
