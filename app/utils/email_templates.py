"""HTML bodies for outgoing emails."""
from html import escape

_LAYOUT = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h1 style="color: #333; text-align: center;">{title}</h1>
  <div style="background-color: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">
    <p style="font-size: 16px; color: #333;">{body}</p>
  </div>
  {action}
  <hr style="border: none; border-top: 1px solid #dee2e6; margin: 30px 0;">
  <p style="color: #999; font-size: 12px; text-align: center;">{footer}</p>
</div>
"""

_BUTTON = """
  <div style="text-align: center; margin: 30px 0;">
    <a href="{url}" style="background: #667eea; color: white; padding: 15px 30px; text-decoration: none; border-radius: 8px; font-weight: bold; display: inline-block;">{label}</a>
  </div>
"""

REMINDER_FOOTER = "You are receiving this because you enabled reminders in Team Time Tracker."


def render_email(
    title: str,
    body: str,
    footer: str,
    action_url: str | None = None,
    action_label: str | None = None,
) -> str:
    """
    Render the shared email layout.

    All text, the action URL included, is HTML-escaped.
    """
    action = ""
    if action_url:
        action = _BUTTON.format(url=escape(action_url, quote=True), label=escape(action_label or action_url))

    return _LAYOUT.format(
        title=escape(title),
        body=escape(body),
        action=action,
        footer=escape(footer),
    )


def render_reminder(title: str, body: str) -> str:
    return render_email(title, body, REMINDER_FOOTER)


def render_invitation(
    inviter_name: str,
    invitee_name: str | None,
    invitation_url: str,
    expiry_days: int,
) -> str:
    greeting = f"Hi {invitee_name}, " if invitee_name else ""
    return render_email(
        title="You've been invited to a team!",
        body=(
            f"{greeting}{inviter_name} has invited you to join their team "
            "on Team Time Tracker to collaborate on tasks and track time together."
        ),
        footer=(
            "If you weren't expecting this invitation you can safely ignore this email. "
            f"This invitation expires in {expiry_days} days."
        ),
        action_url=invitation_url,
        action_label="Accept invitation",
    )
