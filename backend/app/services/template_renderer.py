"""{{variable}} substitution for review-request templates.

Unknown placeholders are left in the output untouched; callers that care
can ask ``find_unresolved`` which ones survived.
"""
import re
from typing import Dict, List

PLACEHOLDER_RE = re.compile(r"\{\{\s*(\w+)\s*\}\}")
TAG_RE = re.compile(r"<[^>]*>")

DEFAULT_EMAIL_SUBJECT = "We value your feedback - {{businessName}}"

DEFAULT_EMAIL_TEMPLATE = """<p>Hi {{customerName}},</p>
<p>Thank you for choosing {{businessName}}! We'd love to hear your feedback.</p>
<p>Please take a moment to <a href="{{reviewLink}}">leave us a review</a>.</p>
<p>We appreciate your time.</p>
<p>Best regards,<br/>{{businessName}}</p>"""

DEFAULT_SMS_TEMPLATE = (
    "Hi {{customerName}}, thank you for choosing {{businessName}}! "
    "We'd love to hear your feedback. Please leave a review at: {{reviewLink}}"
)


def render_template(template: str, variables: Dict[str, str]) -> str:
    def _sub(match: re.Match) -> str:
        name = match.group(1)
        if name in variables and variables[name] is not None:
            return str(variables[name])
        return match.group(0)

    return PLACEHOLDER_RE.sub(_sub, template or "")


def find_placeholders(template: str) -> List[str]:
    """Placeholder names in order of first appearance."""
    seen = []
    for name in PLACEHOLDER_RE.findall(template or ""):
        if name not in seen:
            seen.append(name)
    return seen


def find_unresolved(template: str, variables: Dict[str, str]) -> List[str]:
    return [name for name in find_placeholders(template) if variables.get(name) is None]


def strip_tags(html: str) -> str:
    """Plain-text fallback for an HTML email body."""
    return TAG_RE.sub("", html or "")
