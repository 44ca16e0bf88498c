import smtplib
import logging
import os
from typing import List, Optional, Sequence, Tuple, Union
from email.mime.base import MIMEBase
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from email.header import Header
from email import encoders
from contextlib import contextmanager
from html import escape

from config import EmailSettings, CompanyInfo
from models.purchase_orders import PurchaseOrder
from utils.formatting import format_amount

logger = logging.getLogger("email")

# A plain path, or (path, filename shown to the recipient)
Attachment = Union[str, Tuple[str, str]]


class EmailClient:
    """SMTP client for outgoing mail. One attempt per message, no retries."""

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        username: str,
        password: str,
        use_ssl: bool = True,
        sender_name: Optional[str] = None,
        timeout: int = 30,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.sender_name = sender_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: EmailSettings) -> "EmailClient":
        return cls(
            smtp_host=settings.host,
            smtp_port=settings.port,
            username=settings.user,
            password=settings.password,
            use_ssl=settings.use_ssl,
            sender_name=settings.sender_name,
        )

    @property
    def sender(self) -> str:
        return formataddr((self.sender_name, self.username)) if self.sender_name else self.username

    @contextmanager
    def _connection(self):
        """Context-managed SMTP connection."""
        server = None
        try:
            if self.use_ssl:
                server = smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, timeout=self.timeout)
            else:
                server = smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout)
                server.starttls()
            server.login(self.username, self.password)
            yield server
        finally:
            if server:
                try:
                    server.quit()
                except smtplib.SMTPException as e:
                    logger.warning(f"Error closing SMTP connection: {e}")

    def _build_message(
        self,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
        attachments: Optional[Sequence[Attachment]] = None,
    ) -> MIMEMultipart:
        """Construct MIME message with attachments."""
        msg = MIMEMultipart("mixed")
        msg["From"] = self.sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = Header(subject, "utf-8")

        body = MIMEMultipart("alternative")
        body.attach(MIMEText(text_body or "", "plain", "utf-8"))
        if html_body:
            body.attach(MIMEText(html_body, "html", "utf-8"))
        msg.attach(body)

        for attachment in attachments or []:
            file_path, filename = attachment if isinstance(attachment, tuple) else (attachment, os.path.basename(attachment))
            if not os.path.exists(file_path):
                raise FileNotFoundError(f"Attachment not found: {file_path}")
            with open(file_path, "rb") as f:
                part = MIMEBase("application", "pdf" if file_path.lower().endswith(".pdf") else "octet-stream")
                part.set_payload(f.read())
            encoders.encode_base64(part)
            part.add_header("Content-Disposition", "attachment", filename=("utf-8", "", filename))
            msg.attach(part)
        return msg

    def send_email(
        self,
        recipients: List[str],
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
        attachments: Optional[Sequence[Attachment]] = None,
    ) -> bool:
        """Send one message. Returns False (after logging) when delivery fails."""
        msg = self._build_message(recipients, subject, text_body, html_body, attachments)
        try:
            with self._connection() as server:
                server.sendmail(self.username, recipients, msg.as_string())
        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed, check username/password.")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {', '.join(recipients)}: {e}")
            return False
        logger.info(f"Email sent successfully to {', '.join(recipients)}")
        return True


def purchase_order_subject(db_po: PurchaseOrder, company: CompanyInfo) -> str:
    return f"[{company.name}] Material purchase order ({db_po.project_name})"


def purchase_order_bodies(db_po: PurchaseOrder, company: CompanyInfo) -> Tuple[str, str]:
    """Plain text and HTML bodies for the purchase order mail."""
    lines = [
        f"Dear {db_po.vendor_name},",
        "",
        f"Please find attached purchase order {db_po.order_number} for the project '{db_po.project_name}'.",
        "",
        f"Order date: {db_po.order_date:%Y-%m-%d}",
    ]
    if db_po.expected_delivery_date:
        lines.append(f"Requested delivery: {db_po.expected_delivery_date:%Y-%m-%d}")
    lines += [
        f"Total amount: {format_amount(db_po.total_amount)} KRW",
        f"Manager: {db_po.manager}" + (f" ({db_po.contact_number})" if db_po.contact_number else ""),
        "",
        company.name,
    ]
    text_body = "\n".join(lines)

    rows = "".join(
        f"<tr><td>{escape(line.item_name)}</td><td>{escape(line.specification or '')}</td>"
        f"<td align='right'>{line.quantity:,}</td><td align='right'>{format_amount(line.amount)}</td></tr>"
        for line in db_po.items
    )
    html_body = (
        f"<p>Dear {escape(db_po.vendor_name)},</p>"
        f"<p>Please find attached purchase order <b>{escape(db_po.order_number)}</b> "
        f"for the project <b>{escape(db_po.project_name)}</b>.</p>"
        "<table border='1' cellpadding='4' cellspacing='0'>"
        "<tr><th>Item</th><th>Specification</th><th>Qty</th><th>Amount</th></tr>"
        f"{rows}"
        f"<tr><td colspan='3' align='right'><b>Total</b></td><td align='right'><b>{format_amount(db_po.total_amount)}</b></td></tr>"
        "</table>"
        f"<p>Manager: {escape(db_po.manager)}</p>"
        f"<p>{escape(company.name)}</p>"
    )
    return text_body, html_body
