"""
Membership renewal and overdue email templates.
"""
from datetime import date

from libs.common.emails.core import send_email


def _format_date(value: date) -> str:
    return value.strftime("%B %d, %Y")


async def send_renewal_reminder_email(
    to_email: str,
    member_name: str,
    end_date: date,
    days_until: int,
) -> bool:
    """
    Remind a member that their membership is about to expire.
    """
    day_word = "Day" if days_until == 1 else "Days"
    subject = f"Your Gym Membership Expires in {days_until} {day_word}"

    body = f"""Hi {member_name},

This is a friendly reminder that your gym membership expires on {_format_date(end_date)}.

Please renew your membership to keep enjoying uninterrupted access to the gym.

See you at the gym!

The StackFit Team
"""

    html_body = f"""
<html>
<body>
    <h2>Your membership is expiring soon</h2>
    <p>Hi {member_name},</p>
    <p>Your gym membership expires on <strong>{_format_date(end_date)}</strong>
    ({days_until} {day_word.lower()} from now).</p>
    <p>Please renew to keep enjoying uninterrupted access to the gym.</p>
    <p>The StackFit Team</p>
</body>
</html>
"""
    return await send_email(to_email, subject, body, html_body)


async def send_overdue_email(
    to_email: str,
    member_name: str,
    end_date: date,
    days_overdue: int,
) -> bool:
    """
    Tell a member that their membership has expired.
    """
    subject = "Your Gym Membership Has Expired"

    body = f"""Hi {member_name},

Your gym membership expired on {_format_date(end_date)} ({days_overdue} days ago).

Please renew your membership at the front desk or online to regain access.

The StackFit Team
"""

    html_body = f"""
<html>
<body>
    <h2>Your membership has expired</h2>
    <p>Hi {member_name},</p>
    <p>Your gym membership expired on <strong>{_format_date(end_date)}</strong>
    ({days_overdue} days ago).</p>
    <p>Please renew at the front desk or online to regain access.</p>
    <p>The StackFit Team</p>
</body>
</html>
"""
    return await send_email(to_email, subject, body, html_body)
