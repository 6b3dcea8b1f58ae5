from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Literal
from jinja2 import Environment, FileSystemLoader, select_autoescape
from gateway.config import settings

_env = Environment(
    loader=FileSystemLoader(Path(__file__).resolve().parent.parent / "templates" / "email"),
    autoescape=select_autoescape(["html"]),
)

DecisionStatus = Literal["accepted", "acceptedWithConditions", "rejected"]


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _render(name: str, subject: str, **ctx) -> RenderedEmail:
    ctx.setdefault("team", settings.app_display_name)
    html = _env.get_template(f"{name}.html").render(**ctx)
    text = _env.get_template(f"{name}.txt").render(**ctx)
    # header values cannot carry line breaks
    subject = " ".join(subject.split())
    return RenderedEmail(subject=subject, html=html.strip(), text=text.strip())


def submission_confirmation(title: str, client_name: str, submission_id: str) -> RenderedEmail:
    return _render(
        "submission_confirmation",
        f'Your Project "{title}" Has Been Submitted',
        title=title, client_name=client_name, submission_id=submission_id,
    )


def admin_alert(title: str, client_name: str, client_email: str, submission_id: str, admin_url: str | None = None) -> RenderedEmail:
    if admin_url is None:
        admin_url = f"{settings.admin_base_url.rstrip('/')}/admin"
    return _render(
        "admin_alert",
        f'New Project Submission: "{title}"',
        title=title, client_name=client_name, client_email=client_email,
        submission_id=submission_id, admin_url=admin_url,
    )


_STATUS_SUBJECTS = {
    "accepted": 'Congratulations! Your project "{title}" has been accepted!',
    "acceptedWithConditions": 'Your project "{title}" has been accepted with conditions',
    "rejected": 'Update on your project submission: "{title}"',
}


def status_update(title: str, client_name: str, status: DecisionStatus, detail: str | None = None) -> RenderedEmail:
    """detail is the acceptance conditions or the rejection reason, depending on status."""
    if status not in _STATUS_SUBJECTS:
        raise ValueError(f"no status email for {status!r}")
    return _render(
        "status_update",
        _STATUS_SUBJECTS[status].format(title=title),
        title=title, client_name=client_name, status=status, detail=detail,
    )
