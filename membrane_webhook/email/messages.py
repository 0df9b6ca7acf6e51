from __future__ import annotations

from dataclasses import dataclass

from membrane_webhook.schemas.events import OrgAccessRequested, OrgAdmin, OrgCreated, UserInvitedToOrg

SIGNATURE = "Best regards,\nThe Team"

@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str

def _join(*blocks: str | None) -> str:
    # absent optional lines are dropped, not left blank
    return "\n".join(b for b in blocks if b is not None)

def invitation_email(event: UserInvitedToOrg) -> EmailMessage:
    trial = (
        f"\nNote: This organization's trial ends on {event.org.trial_end_date}"
        if event.org.trial_end_date
        else None
    )
    body = _join(
        "Hello,",
        "",
        f"You've been invited by {event.issuer.name} ({event.issuer.email}) "
        f'to join the organization "{event.org.name}".',
        "",
        "Click the link below to accept your invitation:",
        event.invitation_url,
        trial,
        "",
        SIGNATURE,
    )
    return EmailMessage(
        to=str(event.user.email),
        subject=f"You've been invited to join {event.org.name}",
        body=body,
    )

def access_request_email(event: OrgAccessRequested, admin: OrgAdmin) -> EmailMessage:
    requester = event.user
    org_lines = "\n".join(f"- {org.name} (ID: {org.id})" for org in admin.orgs)
    body = _join(
        "Hello,",
        "",
        "A user has requested access to your organization(s).",
        "",
        "Requester Details:",
        f"- Email: {requester.email}",
        f"- Name: {requester.name or 'Not provided'}",
        f"- User ID: {requester.id}",
        "",
        "Organizations they're requesting access to:",
        org_lines,
        "",
        "Please review this request and take appropriate action in your admin dashboard.",
        "",
        SIGNATURE,
    )
    return EmailMessage(
        to=str(admin.email),
        subject="New Organization Access Request",
        body=body,
    )

def access_request_emails(event: OrgAccessRequested) -> list[EmailMessage]:
    return [access_request_email(event, admin) for admin in event.org_admins]

def welcome_email(event: OrgCreated) -> EmailMessage:
    org = event.org
    body = _join(
        f"Hello {event.user.name or 'there'},",
        "",
        f'Congratulations! Your organization "{org.name}" has been successfully created.',
        "",
        "Organization Details:",
        f"- Organization Name: {org.name}",
        f"- Workspace Name: {event.workspace_name}",
        f"- Organization ID: {org.id}",
        f"- Domains: {', '.join(org.domains)}" if org.domains is not None else None,
        f"- Trial ends: {org.trial_end_date}" if org.trial_end_date else None,
        "",
        "You can now start inviting team members and setting up your workspace.",
        "",
        SIGNATURE,
    )
    return EmailMessage(
        to=str(event.user.email),
        subject=f"Welcome to {org.name}!",
        body=body,
    )
