"""Email service using Resend for transactional emails."""

import logging
from typing import Any

import resend

from src.core.config import get_settings

logger = logging.getLogger(__name__)

_BODY_STYLE = (
    "font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f9fafb;"
)
_CARD_STYLE = (
    "background-color: white; border-radius: 12px; padding: 40px; "
    "box-shadow: 0 1px 3px rgba(0,0,0,0.1);"
)
_BUTTON_STYLE = (
    "display: inline-block; background-color: #2563eb; color: white; text-decoration: none; "
    "padding: 12px 24px; border-radius: 8px; font-weight: 600;"
)
_PARAGRAPH_STYLE = "color: #4b5563; font-size: 16px; line-height: 1.6;"


def _layout(title: str, body: str, order_id: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
</head>
<body style="{_BODY_STYLE}">
    <div style="{_CARD_STYLE}">
        <h1 style="color: #111827; margin-bottom: 24px;">{title}</h1>
        {body}
        <p style="color: #9ca3af; font-size: 14px; margin-top: 32px;">
            Order ID: {order_id}
        </p>
    </div>
</body>
</html>
"""


class EmailService:
    """Service for sending transactional emails via Resend."""

    def __init__(self) -> None:
        """Initialize email service with Resend API key."""
        settings = get_settings()
        resend.api_key = settings.resend_api_key
        self.from_email = settings.email_from_address
        self.frontend_url = settings.frontend_url

    async def _send(self, to_email: str, subject: str, html: str, text: str) -> dict[str, Any]:
        try:
            response = resend.Emails.send({
                "from": self.from_email,
                "to": [to_email],
                "subject": subject,
                "html": html,
                "text": text,
            })

            logger.info("Email '%s' sent to %s, id: %s", subject, to_email, response.get("id"))
            return {"success": True, "email_id": response.get("id")}

        except Exception as e:
            logger.error("Failed to send email '%s' to %s: %s", subject, to_email, str(e))
            return {"success": False, "error": str(e)}

    async def send_order_confirmation(
        self,
        to_email: str,
        order_id: str,
        tier: str,
        headshot_count: int,
    ) -> dict[str, Any]:
        """Send the order confirmation with the upload link.

        Args:
            to_email: Recipient email address.
            order_id: Order UUID.
            tier: Purchased tier id.
            headshot_count: Number of headshots purchased.

        Returns:
            dict: ``success`` flag plus the Resend email id or error.
        """
        upload_url = f"{self.frontend_url}/upload/{order_id}"
        body = f"""
        <p style="{_PARAGRAPH_STYLE}">
            Thank you for your order! You've selected the <strong>{tier}</strong> package
            with <strong>{headshot_count} professional headshots</strong>.
        </p>
        <div style="background-color: #f3f4f6; border-radius: 8px; padding: 20px; margin: 24px 0;">
            <h3 style="color: #111827; margin-top: 0;">Next Step: Upload Your Photos</h3>
            <p style="color: #4b5563; margin-bottom: 16px;">
                Upload 10-15 photos of yourself and we'll generate your professional headshots in about 30 minutes.
            </p>
            <a href="{upload_url}" style="{_BUTTON_STYLE}">Upload Photos Now &rarr;</a>
        </div>
        <ul style="color: #4b5563; padding-left: 20px; line-height: 1.8;">
            <li>Use clear, well-lit photos</li>
            <li>Include different angles and expressions</li>
            <li>Avoid group photos or photos with sunglasses</li>
            <li>Recent photos work best</li>
        </ul>
"""
        text = f"""
Order confirmed!

You've selected the {tier} package with {headshot_count} professional headshots.

Next step: upload 10-15 photos of yourself here:
{upload_url}

Order ID: {order_id}
"""
        return await self._send(
            to_email,
            "Your Headshot Order is Confirmed!",
            _layout("Order Confirmed!", body, order_id),
            text,
        )

    async def send_training_started(self, to_email: str, order_id: str) -> dict[str, Any]:
        """Tell the customer their model is training."""
        status_url = f"{self.frontend_url}/processing/{order_id}"
        body = f"""
        <p style="{_PARAGRAPH_STYLE}">
            Our AI is now learning your unique features. This usually takes about
            <strong>15-30 minutes</strong>, and then we'll generate your professional headshots.
        </p>
        <div style="background-color: #fef3c7; border-radius: 8px; padding: 20px; margin: 24px 0;">
            <p style="color: #92400e; margin: 0;"><strong>Estimated completion:</strong> ~30 minutes from now</p>
        </div>
        <a href="{status_url}" style="{_BUTTON_STYLE}">Check Progress &rarr;</a>
"""
        text = f"""
We're creating your headshots!

Our AI is learning your unique features. This usually takes 15-30 minutes.

Check progress: {status_url}

Order ID: {order_id}
"""
        return await self._send(
            to_email,
            "Your AI is Learning Your Face!",
            _layout("We're Creating Your Headshots!", body, order_id),
            text,
        )

    async def send_headshots_ready(
        self,
        to_email: str,
        order_id: str,
        image_count: int,
    ) -> dict[str, Any]:
        """Send the gallery link once every headshot is in."""
        gallery_url = f"{self.frontend_url}/gallery/{order_id}"
        body = f"""
        <p style="{_PARAGRAPH_STYLE}">
            Great news! We've generated <strong>{image_count} professional headshots</strong>
            just for you. They're ready for download now.
        </p>
        <div style="text-align: center; margin: 32px 0;">
            <a href="{gallery_url}" style="{_BUTTON_STYLE}">View Your Headshots &rarr;</a>
        </div>
        <p style="color: #6b7280; font-size: 14px; line-height: 1.6;">
            Your photos will be available for 30 days. Make sure to download your favorites!
        </p>
"""
        text = f"""
Your headshots are ready!

We've generated {image_count} professional headshots for you:
{gallery_url}

Your photos will be available for 30 days.

Order ID: {order_id}
"""
        return await self._send(
            to_email,
            "Your Professional Headshots Are Ready!",
            _layout("Your Headshots Are Ready!", body, order_id),
            text,
        )

    async def send_generation_failed(self, to_email: str, order_id: str) -> dict[str, Any]:
        """Tell the customer their order needs manual attention."""
        body = f"""
        <p style="{_PARAGRAPH_STYLE}">
            We encountered an issue while generating your headshots. Our team has been
            notified and will reach out with next steps.
        </p>
        <p style="{_PARAGRAPH_STYLE}">
            If you don't hear from us within 24 hours, please reply to this email and
            we'll make it right.
        </p>
"""
        text = f"""
We hit a snag.

We encountered an issue while generating your headshots. Our team has been
notified and will reach out with next steps. If you don't hear from us within
24 hours, reply to this email.

Order ID: {order_id}
"""
        return await self._send(
            to_email,
            "Issue With Your Headshot Order",
            _layout("We Hit a Snag", body, order_id),
            text,
        )
