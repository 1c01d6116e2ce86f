"""Templated email delivery through an HTTP mail API (JSON POST, bearer key)."""

import logging
from string import Template

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential

from blogdesk.core.config import settings
from blogdesk.core.errors import UpstreamError

logger = logging.getLogger(__name__)

_TEMPLATES = {
    "author-request": (
        "New Author Request on ${site_name}",
        "Hello,\n\n${name} (${email}) has asked to become an author on ${site_name}.\n\n"
        "Reason:\n${reason}\n\nReview the request from the admin dashboard.",
    ),
    "author-approved": (
        "You are now an author on ${site_name}",
        "Hi ${name},\n\nYour author request on ${site_name} has been approved. "
        "You can start writing posts from your dashboard.",
    ),
}


def render(template: str, **data: str) -> tuple[str, str]:
    """Return ``(subject, body)`` for a named template."""
    subject, body = _TEMPLATES[template]
    return Template(subject).safe_substitute(data), Template(body).safe_substitute(data)


@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=1, max=10), reraise=True)
async def _post(payload: dict) -> None:
    async with httpx.AsyncClient(timeout=10) as client:
        resp = await client.post(
            settings.mail_api_url,
            json=payload,
            headers={"Authorization": f"Bearer {settings.mail_api_key}"},
        )
        resp.raise_for_status()


async def send_email(to: str, template: str, **data: str) -> bool:
    """Send a templated email. Returns False when no mail API is configured.

    Raises ``UpstreamError`` once retries are exhausted.
    """
    if not settings.mail_api_url or not to:
        logger.warning("Mail API not configured, skipping email template=%s", template)
        return False

    subject, body = render(template, **data)
    try:
        await _post({"from": settings.mail_from, "to": to, "subject": subject, "text": body})
    except httpx.HTTPError as exc:
        logger.error("Mail delivery failed: template=%s to=%s: %s", template, to, exc)
        raise UpstreamError("Failed to send email, please try again later") from exc
    logger.info("Email sent", extra={"template": template})
    return True
