from __future__ import annotations

from html import escape
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from verified_auth.domain.ports.email_port import OutgoingEmail


def verification_link(callback_url: str, *, code: str, email: str) -> str:
    """Add code and email to the callback URL, keeping its existing query."""
    parts = urlsplit(callback_url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query += [("code", code), ("email", email)]
    return urlunsplit(parts._replace(query=urlencode(query)))


def verification_email(*, to: str, link: str, subject: str) -> OutgoingEmail:
    text = (
        "Someone signed in with this address for the first time.\n"
        f"To confirm it is you, open this link:\n\n{link}\n\n"
        "If this was not you, ignore this message."
    )
    html = (
        "<p>Someone signed in with this address for the first time.</p>"
        f'<p><a href="{escape(link)}">Confirm your email address</a></p>'
        "<p>If this was not you, ignore this message.</p>"
    )
    return OutgoingEmail(to=to, subject=subject, text=text, html=html)
