"""
Email Service using Resend
Compiles MJML reminder templates to HTML and delivers them
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


def get_sender_email(workspace=None) -> str:
    """
    Get the appropriate sender email address.
    Priority order:
    1. Workspace's registered (verified) address, labelled with the workspace name
    2. PaperChai default address
    """
    if workspace is not None and workspace.registered_email:
        return f"{workspace.name} <{workspace.registered_email}>"
    return EMAIL_FROM_ADDRESS


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        if html is not None:
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
    bcc: Optional[Union[str, list[str]]] = None,
) -> dict:
    """
    Send an MJML email through Resend

    Args:
        to: Recipient email address(es)
        subject: Email subject line
        mjml_content: MJML template content
        from_address: Sender, defaults to EMAIL_FROM_ADDRESS
        bcc: Optional blind copy recipient(s)

    Returns:
        Send response dict
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    email_data = {
        "from": sender,
        "to": recipients,
        "subject": subject,
        "html": html_content,
    }
    if bcc:
        email_data["bcc"] = [bcc] if isinstance(bcc, str) else bcc

    if not RESEND_API_KEY:
        logger.warning("⚠️ RESEND_API_KEY not configured - email will likely be rejected")

    try:
        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e
