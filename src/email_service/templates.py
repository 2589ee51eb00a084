from dataclasses import dataclass


@dataclass
class EmailTemplates:
    INVITATION_SUBJECT = "You're Invited, {guest_first_name} - {event_label}"
    INVITATION_HTML = """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="text-align: center; margin-bottom: 30px;">
            <h1 style="color: #d4a373;">{couple_name}</h1>
        </div>

        <p>Dear {guest_name},</p>

        <p>We are delighted to invite you to celebrate with us!</p>

        {events_html}

        <p>Please let us know if you can attend by clicking the button below:</p>

        <div style="text-align: center; margin: 30px 0;">
            <a href="{rsvp_url}" style="background-color: #d4a373; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-size: 18px;">
                RSVP Now
            </a>
        </div>

        {invite_code_html}

        <p>If the button doesn't work, you can copy and paste the following link into your browser:</p>
        <p style="word-break: break-all; color: #606c38;"><a href="{rsvp_url}">{rsvp_url}</a></p>

        <p>We look forward to celebrating with you!</p>

        <p>With love,<br>{couple_name}</p>
    </body>
    </html>
    """

    INVITATION_TEXT = """
Dear {guest_name},

We are delighted to invite you to celebrate with us!

{events_text}

Please let us know if you can attend by visiting:
{rsvp_url}
{invite_code_text}
We look forward to celebrating with you!

With love,
{couple_name}
"""

    EVENT_HTML = """
        <div style="background-color: #fefae0; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <h2 style="color: #bc6c25; margin-top: 0;">{event_name}</h2>
            <p><strong>Date:</strong> {event_date} at {event_time}</p>
            <p><strong>Location:</strong> {venue}</p>
            <p style="color: #888;">{address}</p>
        </div>
    """

    EVENT_TEXT = "- {event_name}: {event_date} at {event_time}, {venue}"

    INVITE_CODE_HTML = """
        <p style="text-align: center;">Your invite code: <strong style="font-family: monospace; letter-spacing: 2px;">{invite_code}</strong></p>
    """

    CONFIRMATION_SUBJECT_ACCEPTED = "RSVP Confirmed - {couple_name}"
    CONFIRMATION_SUBJECT_DECLINED = "Thank you for your response - {couple_name}"

    CONFIRMATION_HTML = """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="text-align: center; margin-bottom: 30px;">
            <h1 style="color: #d4a373;">{heading}</h1>
        </div>

        <p>Dear {guest_name},</p>

        <p>{body}</p>

        {events_html}

        {pass_html}

        <p>With love,<br>{couple_name}</p>
    </body>
    </html>
    """

    CONFIRMATION_TEXT = """
Dear {guest_name},

{body}

{events_text}

With love,
{couple_name}
"""

    ACCEPTED_HEADING = "See you there!"
    ACCEPTED_BODY = (
        "Thank you for confirming your attendance. Your digital pass is attached; "
        "please bring it with you on the day."
    )
    DECLINED_HEADING = "Thank you for letting us know"
    DECLINED_BODY = "We're sorry you can't make it. You will be missed!"

    PASS_HTML = """
        <div style="text-align: center; margin: 30px 0;">
            <img src="{qr_image_url}" alt="Your check-in QR code" width="200" height="200">
            <p style="font-family: monospace; letter-spacing: 2px;">{invite_code}</p>
        </div>
    """
