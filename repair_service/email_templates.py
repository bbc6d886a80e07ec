"""
HTML bodies and subjects for the customer emails.

Styles are inlined because most mail clients ignore <style> blocks.
"""
import datetime
from html import escape

from .config import settings
from .models import BookingStatus
from .schemas import BookingNotice

STYLES = {
    "container": "font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; max-width: 600px; margin: auto; border: 1px solid #e0e0e0; border-radius: 10px; overflow: hidden; background-color: #ffffff;",
    "header": "background-color: #1a1a1a; padding: 20px; text-align: center;",
    "logo": "max-width: 150px; height: auto; display: block; margin: 0 auto;",
    "content": "padding: 30px; color: #333333; line-height: 1.6;",
    "heading": "color: #0d6efd; border-bottom: 2px solid #0d6efd; padding-bottom: 15px; margin-bottom: 25px; font-size: 24px; font-weight: 600;",
    "paragraph": "margin-bottom: 15px; font-size: 16px;",
    "table": "width: 100%; border-collapse: collapse; margin: 25px 0; background-color: #f8f9fa;",
    "th": "padding: 12px 15px; border-bottom: 1px solid #e0e0e0; text-align: left; font-weight: 600; color: #555555; background-color: #e9ecef;",
    "td": "padding: 12px 15px; border-bottom: 1px solid #e0e0e0; text-align: left; color: #333333; font-size: 15px;",
    "highlight": "color: #0d6efd; font-weight: bold;",
    "button": "display: inline-block; padding: 12px 25px; margin-top: 25px; background-color: #0d6efd; color: white; text-decoration: none; border-radius: 6px; font-weight: bold; font-size: 16px;",
    "footer": "background-color: #f1f1f1; padding: 20px 30px; text-align: center; font-size: 12px; color: #888888; border-top: 1px solid #e0e0e0;",
    "footer_link": "color: #0d6efd; text-decoration: none;",
}

# icon, accent colour, background colour, action message, closing message
STATUS_STYLES = {
    BookingStatus.BOOKED: (
        "🗓️", "#0d6efd", "#e0edfd",
        "Your booking is confirmed, and your device is now in our system.",
        "We'll notify you of further updates.",
    ),
    BookingStatus.DIAGNOSING: (
        "🔍", "#ffc107", "#fff3cd",
        "Our expert technicians are currently diagnosing your device to identify the issue.",
        "We will inform you once the diagnosis is complete.",
    ),
    BookingStatus.REPAIRING: (
        "🔧", "#fd7e14", "#ffe7d4",
        "Great news! Your device is now actively being repaired.",
        "We are working diligently to get it back to you soon.",
    ),
    BookingStatus.READY: (
        "📦", "#28a745", "#d4edda",
        "Excellent! Your device repair is complete and it is now ready for pickup.",
        "Please visit our service center at your earliest convenience.",
    ),
    BookingStatus.COMPLETED: (
        "✅", "#1a1a1a", "#e9ecef",
        "Your repair job for Tracking ID: <strong style=\"color: #0d6efd;\">{tracking_id}</strong> has been successfully completed and closed.",
        "Thank you for choosing {app_name}. We hope to serve you again if needed.",
    ),
}

FALLBACK_STYLE = (
    "ℹ️", "#6c757d", "#e2e3e5",
    "The status of your repair for {device_type} has been updated to: <strong>{status}</strong>.",
    "Please track your repair for more details.",
)


def _status_text(status) -> str:
    # BookingStatus members format as "BookingStatus.READY" on newer Pythons
    return str(getattr(status, "value", status))


def confirmation_subject(booking: BookingNotice) -> str:
    return f"✅ Your Repair Booking with {settings.APP_NAME} is Confirmed! (ID: {booking.tracking_id})"


def status_update_subject(booking: BookingNotice, new_status) -> str:
    return f"🛠️ {settings.APP_NAME} Update: Your Repair is Now {_status_text(new_status)} (ID: {booking.tracking_id})"


def _detail_rows(rows: list[tuple[str, str]]) -> str:
    cells = []
    for label, value in rows:
        cells.append(
            f'<tr><td style="{STYLES["td"]}">{label}</td>'
            f'<td style="{STYLES["td"]}">{value}</td></tr>'
        )
    return (
        f'<table style="{STYLES["table"]}"><thead><tr>'
        f'<th style="{STYLES["th"]}">Detail</th><th style="{STYLES["th"]}">Value</th>'
        f'</tr></thead><tbody>{"".join(cells)}</tbody></table>'
    )


def _highlight(text: str) -> str:
    return f'<span style="{STYLES["highlight"]}">{text}</span>'


def _layout(heading: str, body: str, link_text: str) -> str:
    app_name = escape(settings.APP_NAME)
    site = settings.PUBLIC_SITE_URL
    return f"""
    <div style="{STYLES['container']}">
      <div style="{STYLES['header']}">
        <img src="{settings.LOGO_URL}" alt="{app_name} Logo" style="{STYLES['logo']}">
      </div>
      <div style="{STYLES['content']}">
        <h3 style="{STYLES['heading']}">{heading}</h3>
        {body}
        <p style="text-align: center;">
          <a href="{site}/track-repair" target="_blank" style="{STYLES['button']}">{link_text}</a>
        </p>
      </div>
      <div style="{STYLES['footer']}">
        &copy; {datetime.date.today().year} {app_name}. All rights reserved. |
        <a href="{site}" target="_blank" style="{STYLES['footer_link']}">Our Website</a>
      </div>
    </div>
    """


def render_booking_confirmation(booking: BookingNotice) -> str:
    app_name = escape(settings.APP_NAME)
    tracking_id = escape(booking.tracking_id)
    slot = f"{escape(booking.booking_date or 'TBD')} at {escape(booking.booking_time or 'TBD')}"
    details = _detail_rows([
        ("Tracking ID:", _highlight(tracking_id)),
        ("Device Type:", escape(booking.device_type)),
        ("Scheduled Slot:", slot),
        ("Your Email:", escape(booking.email)),
    ])
    paragraph = STYLES["paragraph"]
    body = f"""
        <p style="{paragraph}">Dear {escape(booking.customer_name)},</p>
        <p style="{paragraph}">Thank you for choosing {app_name} for your device repair. Your booking has been successfully confirmed!</p>
        {details}
        <p style="{paragraph}">You can track the live status of your repair anytime on our website using your Tracking ID.</p>
        <p style="{paragraph}">Best regards,<br>The {app_name} Team</p>
    """
    return _layout(f"✅ Repair Booking Confirmed: {tracking_id}", body, "Track Your Repair")


def render_status_update(booking: BookingNotice, new_status) -> str:
    try:
        style = STATUS_STYLES[BookingStatus(new_status)]
    except ValueError:
        style = FALLBACK_STYLE
    icon, color, background, action, closing = style

    fields = {
        "tracking_id": escape(booking.tracking_id),
        "device_type": escape(booking.device_type),
        "status": escape(_status_text(new_status)),
        "app_name": escape(settings.APP_NAME),
    }
    details = _detail_rows([
        ("Tracking ID:", _highlight(fields["tracking_id"])),
        ("Device Type:", fields["device_type"]),
    ])
    paragraph = STYLES["paragraph"]
    body = f"""
        <p style="{paragraph}">Dear {escape(booking.customer_name)},</p>
        <div style="background-color: {background}; border-left: 5px solid {color}; padding: 15px 20px; border-radius: 8px; margin: 25px 0;">
          <p style="font-size: 1.1em; font-weight: bold; color: {color}; margin: 0;">Current Status: {fields['status']}</p>
          <p style="{paragraph} margin-top: 10px; margin-bottom: 0;">{action.format(**fields)}</p>
        </div>
        {details}
        <p style="{paragraph}">{closing.format(**fields)}</p>
        <p style="{paragraph}">Sincerely,<br>The {fields['app_name']} Team</p>
    """
    return _layout(f"{icon} Repair Status Update", body, "View Details &amp; Track Progress")
