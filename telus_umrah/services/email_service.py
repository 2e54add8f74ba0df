import base64
import html
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

import requests
import structlog
from sqlalchemy.orm import Session

from telus_umrah.core.config import settings
from telus_umrah.services.invoice_service import build_invoice_data, document_filename, render_document

log = structlog.get_logger(__name__)


def send_email(to_email: str, subject: str, body: str, attachments: list[tuple[str, bytes, str]], html_body: str | None = None):
    """Send email via SendGrid if configured, otherwise SMTP (MailHog recommended for local)."""

    if settings.SENDGRID_API_KEY:
        _send_via_sendgrid(to_email, subject, body, attachments, html_body)
        return

    msg = EmailMessage()
    msg["From"] = formataddr((settings.SMTP_FROM_NAME, settings.SMTP_FROM))
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)
    if html_body:
        msg.add_alternative(html_body, subtype="html")

    for filename, content, mime in attachments:
        maintype, subtype = (mime.split("/", 1) + ["octet-stream"])[:2]
        msg.add_attachment(content, maintype=maintype, subtype=subtype, filename=filename)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SECONDS) as smtp:
        if settings.SMTP_STARTTLS:
            smtp.starttls()
        if settings.SMTP_USERNAME:
            smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        smtp.send_message(msg)


def _send_via_sendgrid(to_email: str, subject: str, body: str, attachments: list[tuple[str, bytes, str]], html_body: str | None):
    from_email = settings.SENDGRID_FROM_EMAIL or settings.SMTP_FROM
    parts = [{"type": "text/plain", "value": body}]
    if html_body:
        parts.append({"type": "text/html", "value": html_body})
    payload = {
        "personalizations": [{"to": [{"email": to_email}]}],
        "from": {"email": from_email, "name": settings.SMTP_FROM_NAME},
        "subject": subject,
        "content": parts,
    }

    if attachments:
        payload["attachments"] = [
            {
                "content": base64.b64encode(content).decode("utf-8"),
                "type": mime,
                "filename": filename,
                "disposition": "attachment",
            }
            for filename, content, mime in attachments
        ]

    r = requests.post(
        "https://api.sendgrid.com/v3/mail/send",
        json=payload,
        headers={"Authorization": f"Bearer {settings.SENDGRID_API_KEY}"},
        timeout=20,
    )
    if r.status_code >= 400:
        raise RuntimeError(f"SendGrid error {r.status_code}: {r.text}")


def invoice_subject(booking_type: str, invoice_number: str) -> str:
    label = {"hotel": "Hotel", "package": "Package"}.get(booking_type, "Custom Umrah")
    noun = "Request" if booking_type == "custom" else "Booking"
    return f"Invoice for Your {label} {noun} - {invoice_number}"


def invoice_email_text(customer_name: str, invoice_number: str, invoice_url: str) -> str:
    return (
        f"Dear {customer_name},\n\n"
        f"Thank you for your booking with {settings.COMPANY_NAME}!\n"
        f"Your invoice {invoice_number} has been generated and is ready for download:\n{invoice_url}\n\n"
        "Please visit our office to complete your payment:\n"
        f"{settings.COMPANY_NAME}\n{settings.COMPANY_ADDRESS_LINE1}\n{settings.COMPANY_ADDRESS_LINE2}\n"
        f"Phone: {settings.COMPANY_PHONE}\nEmail: {settings.COMPANY_EMAIL}\n\n"
        f"Best regards,\n{settings.COMPANY_NAME} Team\n"
    )


def invoice_email_html(customer_name: str, invoice_number: str, invoice_url: str) -> str:
    e = html.escape
    company = e(settings.COMPANY_NAME)
    return f"""<!DOCTYPE html>
<html>
  <head>
    <style>
      body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
      .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
      .header {{ background-color: #1e40af; color: white; padding: 20px; text-align: center; }}
      .content {{ padding: 20px; background-color: #f9fafb; }}
      .button {{ display: inline-block; padding: 12px 24px; background-color: #2563eb; color: white; text-decoration: none; border-radius: 5px; margin: 20px 0; }}
      .footer {{ text-align: center; padding: 20px; font-size: 12px; color: #666; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header"><h1>{company}</h1></div>
      <div class="content">
        <h2>Dear {e(customer_name)},</h2>
        <p>Thank you for your booking with {company}!</p>
        <p>Your invoice <strong>{e(invoice_number)}</strong> has been generated and is ready for download.</p>
        <div style="text-align: center;">
          <a href="{e(invoice_url, quote=True)}" class="button">Download Invoice (PDF)</a>
        </div>
        <p><strong>Payment Instructions:</strong></p>
        <p>Please visit our office to complete your payment:</p>
        <p>
          <strong>{company}</strong><br>
          {e(settings.COMPANY_ADDRESS_LINE1)}<br>
          {e(settings.COMPANY_ADDRESS_LINE2)}<br>
          Phone: {e(settings.COMPANY_PHONE)}<br>
          Email: {e(settings.COMPANY_EMAIL)}
        </p>
        <p>If you have any questions, please don't hesitate to contact us.</p>
        <p>Best regards,<br>{company} Team</p>
      </div>
      <div class="footer"><p>This is an automated email. Please do not reply to this message.</p></div>
    </div>
  </body>
</html>
"""


def send_invoice_email(
    db: Session,
    *,
    to: str,
    customer_name: str,
    invoice_number: str,
    booking_type: str,
    invoice_url: str,
    booking_id: str,
) -> dict:
    """Email the invoice link, with the PDF attached when it can be rendered.

    Returns {"success": True} or {"success": False, "error": ...}; never raises, never retries.
    """
    attachments = []
    try:
        data = build_invoice_data(db, booking_type, booking_id, invoice_number=invoice_number)
        if data is not None:
            filename = document_filename(booking_type, booking_id, invoice_number)
            attachments.append((filename, render_document(data), "application/pdf"))
    except Exception:
        log.warning("invoice.attachment_skipped", booking_id=booking_id, invoice_number=invoice_number, exc_info=True)

    try:
        send_email(
            to,
            invoice_subject(booking_type, invoice_number),
            invoice_email_text(customer_name, invoice_number, invoice_url),
            attachments,
            html_body=invoice_email_html(customer_name, invoice_number, invoice_url),
        )
    except Exception as e:
        log.warning("invoice.dispatch_failed", booking_id=booking_id, invoice_number=invoice_number, error=str(e))
        return {"success": False, "error": str(e)}

    log.info("invoice.dispatched", booking_id=booking_id, invoice_number=invoice_number, attachment=bool(attachments))
    return {"success": True}
