"""
Core email sending utility.

Delivery is log-only: messages are rendered and written to the log so the
notification flow can run end to end without a mail provider.
"""

from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def send_email(
    to_email: str,
    subject: str,
    body: str,
    html_body: Optional[str] = None,
    from_email: Optional[str] = None,
    from_name: Optional[str] = None,
) -> bool:
    """
    Send an email.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        body: Plain text body
        html_body: Optional HTML body
        from_email: Sender email (defaults to DEFAULT_FROM_EMAIL)
        from_name: Sender name (defaults to DEFAULT_FROM_NAME)

    Returns:
        True once the message has been handed off
    """
    settings = get_settings()
    sender_email = from_email or settings.DEFAULT_FROM_EMAIL
    sender_name = from_name or settings.DEFAULT_FROM_NAME

    logger.info(
        f"Would have sent email to {to_email}: {subject}",
        extra={
            "extra_fields": {
                "from": f"{sender_name} <{sender_email}>",
                "has_html": html_body is not None,
            }
        },
    )
    logger.debug(f"Email body: {body[:200]}...")
    return True
