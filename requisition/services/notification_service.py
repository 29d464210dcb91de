# requisition/services/notification_service.py
"""
Best-effort email notifications.

The Notifier is built once at startup and shut down with the app. Each message
is handed to a small background thread pool and attempted exactly once; any
failure is logged and swallowed so it can never affect the request that
triggered it. With EMAIL_HOST unset, messages are logged and skipped.
"""

import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

from requisition.config import Settings
from requisition.utils.logger import get_logger

logger = get_logger(__name__)

FOOTER = "This is an automated email from Vehicle Requisition Management System."

JOURNEY_FIELDS = (
    ("Officer Name", "officer_name"),
    ("Designation", "designation"),
    ("Required Date", "required_date"),
    ("Required Time", "required_time"),
    ("Report Place", "report_place"),
    ("Places to Visit", "places_to_visit"),
    ("Journey Purpose", "journey_purpose"),
    ("Release Time", "release_time"),
)


def _details_html(data: dict) -> str:
    return "".join(
        f"<p><strong>{label}:</strong> {escape(str(data.get(key, '')))}</p>"
        for label, key in JOURNEY_FIELDS
    )


def render_new_request(data: dict) -> str:
    return (
        "<h2>New Vehicle Requisition Request</h2>"
        f"{_details_html(data)}"
        "<p>Please log in to the admin dashboard to review and approve/reject this request.</p>"
        f"<p><small>{FOOTER}</small></p>"
    )


def render_status_change(data: dict, status: str, vehicle: Optional[dict] = None) -> str:
    parts = [f"<h2>Vehicle Request {status.capitalize()}</h2>", _details_html(data)]
    if status == "approved" and vehicle:
        parts.append(
            "<h4>Assigned Vehicle Details:</h4>"
            f"<p><strong>Vehicle Number:</strong> {escape(str(vehicle.get('vehicle_number', '')))}</p>"
            f"<p><strong>Make/Model:</strong> {escape(str(vehicle.get('make_model', '')))}</p>"
            f"<p><strong>Driver Name:</strong> {escape(str(vehicle.get('driver_name', '')))}</p>"
            "<p>Please be ready at the specified time and place. Contact the driver if needed.</p>"
        )
    if status == "rejected":
        parts.append(
            "<h4>Rejection Reason:</h4>"
            f"<p>{escape(str(data.get('rejection_reason') or ''))}</p>"
            "<p>You may submit a new request with the necessary modifications.</p>"
        )
    parts.append(f"<p><small>{FOOTER}</small></p>")
    return "".join(parts)


class Notifier:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, settings.NOTIFY_WORKERS),
            thread_name_prefix="notify",
        )

    # ── Public API ────────────────────────────────────────────────────────
    def notify_new_request(self, data: dict) -> Optional[Future]:
        """Tell the admin channel a new request is waiting."""
        return self._submit("New Vehicle Request Submitted", self.settings.ADMIN_EMAIL,
                            render_new_request(data))

    def notify_status_change(self, data: dict, status: str, vehicle: Optional[dict] = None) -> Optional[Future]:
        """Tell the employee their request was approved or rejected."""
        subject = "Vehicle Request Approved" if status == "approved" else "Vehicle Request Rejected"
        return self._submit(subject, data.get("employee_email"),
                            render_status_change(data, status, vehicle))

    def shutdown(self, wait: bool = True):
        self._executor.shutdown(wait=wait)

    # ── Delivery ──────────────────────────────────────────────────────────
    def _submit(self, subject: str, to_email: Optional[str], html_body: str) -> Optional[Future]:
        if not to_email:
            logger.warning(f"[EMAIL] No recipient for '{subject}', skipped")
            return None
        try:
            return self._executor.submit(self._deliver, subject, to_email, html_body)
        except RuntimeError as e:
            # Executor already shut down
            logger.error(f"[EMAIL] Could not schedule '{subject}' to {to_email}: {e}")
            return None

    def _deliver(self, subject: str, to_email: str, html_body: str) -> bool:
        try:
            return self.send_email(subject, html_body, to_email)
        except Exception as e:
            logger.error(f"[EMAIL] Failed to send '{subject}' to {to_email}: {e}")
            return False

    def send_email(self, subject: str, html_body: str, to_email: str) -> bool:
        s = self.settings
        if not s.email_enabled:
            logger.info(f"[EMAIL] Mail disabled (EMAIL_HOST unset); not sending '{subject}' to {to_email}")
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = s.EMAIL_USER or s.ADMIN_EMAIL or "no-reply@localhost"
        msg["To"] = to_email
        msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(s.EMAIL_HOST, s.EMAIL_PORT, timeout=s.EMAIL_TIMEOUT_SECONDS) as server:
            if s.EMAIL_USE_TLS:
                server.starttls()
            if s.EMAIL_USER and s.EMAIL_PASS:
                server.login(s.EMAIL_USER, s.EMAIL_PASS)
            server.sendmail(msg["From"], [to_email], msg.as_string())
        logger.info(f"[EMAIL] Sent '{subject}' to {to_email}")
        return True
