"""Thin Postmark client for transactional email delivery.

Uses Postmark's REST API directly via httpx, no SDK needed.
Sign-in emails (magic links, password reset) remain with Supabase.
"""

import logging

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

POSTMARK_API_URL = "https://api.postmarkapp.com/email"
POSTMARK_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class PostmarkService:
    """Send transactional emails via Postmark's REST API."""

    async def send(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        """
        Send a single transactional email.

        Returns True on success, False on failure (logs the error, never raises).
        """
        if not settings.postmark_enabled:
            logger.warning("[postmark] Skipped (POSTMARK_API_KEY not configured)")
            return False

        payload = {
            "From": settings.postmark_from_email,
            "To": to,
            "Subject": subject,
            "HtmlBody": html_body,
            "TextBody": text_body,
            "MessageStream": "outbound",
        }

        headers = {
            **POSTMARK_HEADERS,
            "X-Postmark-Server-Token": settings.postmark_api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(
                    POSTMARK_API_URL, json=payload, headers=headers,
                )
            response.raise_for_status()
            logger.info(f"[postmark] Sent to {to}: {subject}")
            return True

        except httpx.HTTPStatusError as e:
            logger.error(
                f"[postmark] HTTP {e.response.status_code} sending to {to}: {e.response.text}"
            )
            return False
        except httpx.RequestError as e:
            logger.error(f"[postmark] Request failed sending to {to}: {e}")
            return False

    async def send_email_verification(self, to: str, token: str) -> bool:
        """Send the confirmation link for a pending email change."""
        link = f"{settings.frontend_url.rstrip('/')}/verify-email/{token}"
        subject = "Confirm your new StreamHub email address"
        text_body = (
            "Confirm this address for your StreamHub account by opening the link below.\n\n"
            f"{link}\n\n"
            "The link is valid for 24 hours. If you did not request this change, ignore this email."
        )
        html_body = (
            "<p>Confirm this address for your StreamHub account.</p>"
            f'<p><a href="{link}">Confirm email address</a></p>'
            "<p>The link is valid for 24 hours. "
            "If you did not request this change, ignore this email.</p>"
        )
        return await self.send(to=to, subject=subject, html_body=html_body, text_body=text_body)


postmark_service = PostmarkService()
