from dataclasses import dataclass

STATUS_LABELS = {
    "ATTENDING": "Attending",
    "NOT_ATTENDING": "Not Attending",
    "MAYBE": "Maybe",
    "PENDING": "Pending",
}

CONFIRMATION_MESSAGES = {
    "ATTENDING": "We're excited to see you there!",
    "NOT_ATTENDING": "We're sorry you can't make it. Maybe next time!",
    "MAYBE": "Thanks for letting us know. We hope you can make it!",
    "PENDING": "Thanks for your response!",
}

CHANGE_TYPE_LABELS = {
    "NEW": "New RSVP",
    "UPDATED": "RSVP Updated",
    "STATUS_CHANGED": "RSVP Status Changed",
}

CHANGE_TYPE_INTROS = {
    "NEW": "A guest has submitted an RSVP for your event.",
    "UPDATED": "A guest has updated their RSVP details for your event.",
    "STATUS_CHANGED": "A guest has updated their RSVP status for your event.",
}


@dataclass
class EmailTemplates:
    LAYOUT_HTML = """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>{title}</title>
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h1 style="color: #9d4edd;">{title}</h1>
        {content}
        <hr style="border: none; border-top: 1px solid #ddd; margin: 30px 0;">
        <p style="font-size: 12px; color: #888; text-align: center;">Sent via OwnRSVP</p>
    </body>
    </html>
    """

    EVENT_DETAILS_HTML = """
        <div style="background-color: #f5f6fb; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <h2 style="margin-top: 0;">{event_title}</h2>
            <p><strong>When:</strong> {event_date}</p>
            {location_html}
        </div>
    """

    BUTTON_HTML = """
        <div style="text-align: center; margin: 30px 0;">
            <a href="{url}" style="background-color: #9d4edd; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px;">{label}</a>
        </div>
        <p style="word-break: break-all; font-size: 12px;"><a href="{url}">{url}</a></p>
    """

    INVITATION_SUBJECT = "You're invited to {event_title}!"
    INVITATION_CONTENT_HTML = """
        <p>{greeting}</p>
        <p>{inviter} invited you to an event.</p>
        {event_details}
        {description_html}
        {button}
    """
    INVITATION_TEXT = """{greeting}

{inviter} invited you to {event_title}.

When: {event_date}
{location_text}
RSVP here: {rsvp_url}
"""

    REMINDER_SUBJECT = "Reminder: Please RSVP for {event_title}"
    REMINDER_CONTENT_HTML = """
        <p>{greeting}</p>
        <p>We haven't received your RSVP yet. Please let the host know if you can make it.</p>
        {event_details}
        {button}
    """
    REMINDER_TEXT = """{greeting}

We haven't received your RSVP for {event_title} yet.

When: {event_date}
{location_text}
Please RSVP: {rsvp_url}
"""

    CONFIRMATION_SUBJECT = "RSVP Confirmed for {event_title}"
    CONFIRMATION_CONTENT_HTML = """
        <p>{greeting}</p>
        <p>Your response has been recorded: <strong>{status_label}</strong>.</p>
        <p>{status_message}</p>
        {event_details}
        {button}
    """
    CONFIRMATION_TEXT = """{greeting}

Your response to {event_title} has been recorded: {status_label}.
{status_message}

When: {event_date}
{location_text}
Change your response: {rsvp_url}
"""

    RSVP_CHANGE_SUBJECT = "{change_label} for {event_title}"
    RSVP_CHANGE_CONTENT_HTML = """
        <p>{greeting}</p>
        <p>{intro}</p>
        {event_details}
        <h3>Guest Information</h3>
        <p><strong>Name:</strong> {guest_name}</p>
        <p><strong>Email:</strong> {guest_email}</p>
        <p><strong>Status:</strong> {status_label}</p>
        {status_change_html}
        {additional_guests_html}
        {dietary_notes_html}
        {button}
    """
    RSVP_CHANGE_TEXT = """{greeting}

{intro}

{event_title} - {event_date}

Name: {guest_name}
Email: {guest_email}
Status: {status_label}
{status_change_text}{additional_guests_text}{dietary_notes_text}
View event & guest list: {event_url}
"""

    BROADCAST_SUBJECT = "[{event_title}] {subject}"
    BROADCAST_CONTENT_HTML = """
        <p>{greeting}</p>
        <h2>{subject}</h2>
        <p style="white-space: pre-wrap;">{message}</p>
        {button}
    """
    BROADCAST_TEXT = """{greeting}

{subject}

{message}

View your invitation: {rsvp_url}
"""
