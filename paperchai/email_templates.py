"""
MJML Reminder Email Themes
Each theme wraps an already-rendered subject and body in a responsive layout
"""

from datetime import datetime
from typing import Optional

DEFAULT_THEME = "modern"
DEFAULT_BRAND_COLOR = "#0f172a"
THEMES = ("minimal", "classic", "modern", "noir")

FONT_STACK = "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif"


def format_body(body: str) -> str:
    """Template bodies are plain text; keep their line breaks in HTML"""
    return body.replace("\n", "<br/>")


def _head(subject: str, text_color: str, font_family: str = FONT_STACK) -> str:
    return f"""
      <mj-head>
        <mj-title>{subject}</mj-title>
        <mj-preview>{subject}</mj-preview>
        <mj-attributes>
          <mj-all font-family="{font_family}" />
          <mj-text font-size="16px" line-height="1.6" color="{text_color}" />
        </mj-attributes>
      </mj-head>
    """


def _logo(logo_url: Optional[str], height: str, align: str = "center") -> str:
    if not logo_url:
        return ""
    return f"""
          <mj-image src="{logo_url}" alt="Logo" height="{height}" width="auto" align="{align}" />
    """


def _footer(text: str, color: str = "#9ca3af", background: Optional[str] = None) -> str:
    background_attr = f' background-color="{background}"' if background else ""
    return f"""
        <mj-section{background_attr} padding="20px">
          <mj-column>
            <mj-divider border-color="#e5e7eb" border-width="1px" />
            <mj-text align="center" font-size="12px" color="{color}">
              {text}
            </mj-text>
          </mj-column>
        </mj-section>
    """


def minimal_theme(subject: str, body: str, brand_color: str, logo_url: Optional[str], payment_link: str) -> str:
    year = datetime.now().year
    return f"""
    <mjml>
      {_head(subject, "#4b5563")}
      <mj-body background-color="#f9fafb">
        <mj-section background-color="#ffffff" padding="40px" border-radius="8px">
          <mj-column>
            {_logo(logo_url, "40px", align="left")}
            <mj-text font-size="20px" font-weight="600" color="#111827" padding-bottom="24px">
              {subject}
            </mj-text>
            <mj-text>
              {format_body(body)}
            </mj-text>
            <mj-button href="{payment_link}" background-color="{brand_color}" color="#ffffff"
              border-radius="6px" font-weight="500" align="left" padding-top="32px">
              View Invoice
            </mj-button>
          </mj-column>
        </mj-section>
        {_footer(f"Sent via PaperChai<br/>© {year} All rights reserved.")}
      </mj-body>
    </mjml>
    """


def modern_theme(subject: str, body: str, brand_color: str, logo_url: Optional[str], payment_link: str) -> str:
    year = datetime.now().year
    return f"""
    <mjml>
      {_head(subject, "#334155", font_family="'Inter', sans-serif")}
      <mj-body background-color="#f1f5f9">
        <mj-section background-color="{brand_color}" padding="0">
          <mj-column>
            <mj-spacer height="8px" />
          </mj-column>
        </mj-section>
        <mj-section background-color="#ffffff" padding="40px" border-radius="16px">
          <mj-column>
            {_logo(logo_url, "48px")}
            <mj-text align="center" font-size="24px" font-weight="800" color="#0f172a">
              {subject}
            </mj-text>
            <mj-text container-background-color="#f8fafc" padding="24px">
              {format_body(body)}
            </mj-text>
            <mj-button href="{payment_link}" background-color="{brand_color}" color="#ffffff"
              border-radius="50px" font-weight="600" padding-top="32px">
              Pay Invoice
            </mj-button>
          </mj-column>
        </mj-section>
        {_footer(f"Sent via PaperChai<br/>© {year} All rights reserved.")}
      </mj-body>
    </mjml>
    """


def classic_theme(subject: str, body: str, brand_color: str, logo_url: Optional[str], payment_link: str) -> str:
    return f"""
    <mjml>
      {_head(subject, "#333333", font_family="Georgia, serif")}
      <mj-body background-color="#ffffff">
        <mj-section background-color="#f5f5f5" border="1px solid #e0e0e0" padding="20px">
          <mj-column>
            {_logo(logo_url, "32px", align="left")}
          </mj-column>
        </mj-section>
        <mj-section border="1px solid #e0e0e0" padding="40px">
          <mj-column>
            <mj-text font-family="Helvetica, Arial, sans-serif" font-size="18px" color="{brand_color}">
              {subject}
            </mj-text>
            <mj-text padding-bottom="30px">
              {format_body(body)}
            </mj-text>
            <mj-text>
              <a href="{payment_link}" style="color: {brand_color}; text-decoration: underline;">Click here to view invoice details</a>
            </mj-text>
          </mj-column>
        </mj-section>
        {_footer("This email was intended for the billing contact.", color="#888888", background="#fafafa")}
      </mj-body>
    </mjml>
    """


def noir_theme(subject: str, body: str, brand_color: str, logo_url: Optional[str], payment_link: str) -> str:
    year = datetime.now().year
    return f"""
    <mjml>
      {_head(subject, "#cbd5e1", font_family="'Inter', sans-serif")}
      <mj-body background-color="#0f172a">
        <mj-section background-color="#1e293b" padding="40px" border-radius="20px">
          <mj-column>
            {_logo(logo_url, "48px")}
            <mj-text font-size="24px" font-weight="700" color="#ffffff" padding-bottom="24px">
              {subject}
            </mj-text>
            <mj-text>
              {format_body(body)}
            </mj-text>
            <mj-button href="{payment_link}" background-color="{brand_color or '#ffffff'}" color="#000000"
              border-radius="12px" font-weight="700" width="100%" padding-top="40px">
              Pay Invoice
            </mj-button>
          </mj-column>
        </mj-section>
        {_footer(f"© {year} PaperChai. Secure Payments.", color="#64748b", background="#0f172a")}
      </mj-body>
    </mjml>
    """


THEME_BUILDERS = {
    "minimal": minimal_theme,
    "classic": classic_theme,
    "modern": modern_theme,
    "noir": noir_theme,
}


def reminder_email_template(
    subject: str,
    body: str,
    theme: Optional[str] = None,
    brand_color: Optional[str] = None,
    logo_url: Optional[str] = None,
    payment_link: Optional[str] = None,
) -> str:
    """
    Build the MJML document for a reminder email.

    Unknown or missing themes fall back to the modern layout.
    """
    builder = THEME_BUILDERS.get(theme or DEFAULT_THEME, THEME_BUILDERS[DEFAULT_THEME])
    return builder(
        subject=subject,
        body=body,
        brand_color=brand_color or DEFAULT_BRAND_COLOR,
        logo_url=logo_url,
        payment_link=payment_link or "#",
    )
