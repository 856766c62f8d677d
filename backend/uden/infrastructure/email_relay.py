"""Email Relay — plaintext mail to one recipient via Resend.

Invariants:
    - Implements core/repository_protocols.EmailRelay
    - Any send failure raises UpstreamError; nothing is swallowed
    - The blocking SDK call runs in a worker thread, bounded by timeout_seconds
"""

import asyncio
import logging

import resend

from uden.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class ResendEmailRelay:
    def __init__(
        self,
        api_key: str,
        from_address: str,
        from_name: str = "Uden AI",
        timeout_seconds: float = 15.0,
    ):
        self._api_key = api_key
        self.sender = f"{from_name} <{from_address}>"
        self.timeout_seconds = timeout_seconds

    def _send_blocking(self, params: dict) -> None:
        resend.api_key = self._api_key
        resend.Emails.send(params)

    async def send(self, *, to: str, subject: str, text: str) -> None:
        params = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "text": text,
        }
        try:
            await asyncio.wait_for(
                asyncio.to_thread(self._send_blocking, params),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error("Email relay timed out", extra={"service": "resend"})
            raise UpstreamError(
                "resend", "Failed to send email", "EMAIL_DELIVERY_FAILED",
            )
        except Exception as e:
            logger.error(
                f"Email relay failed: {e}", extra={"service": "resend"}, exc_info=e,
            )
            raise UpstreamError(
                "resend", "Failed to send email", "EMAIL_DELIVERY_FAILED",
            )
