from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

USER_INVITED_TO_ORG = "user-invited-to-org"
ORG_ACCESS_REQUESTED = "org-access-requested"
ORG_CREATED = "org-created"

class InvalidEventError(ValueError):
    pass

class _WireModel(BaseModel):
    # camelCase on the wire, snake_case in python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

class Issuer(_WireModel):
    name: str
    email: str

class InvitedUser(_WireModel):
    email: EmailStr

class InvitingOrg(_WireModel):
    id: str
    name: str
    trial_end_date: str | None = None

class UserInvitedToOrg(_WireModel):
    type: Literal["user-invited-to-org"]
    invitation_url: str = Field(min_length=1)
    issuer: Issuer
    user: InvitedUser
    org: InvitingOrg

class Requester(_WireModel):
    id: str
    email: str
    name: str | None = None

class AdminOrg(_WireModel):
    id: str
    name: str

class OrgAdmin(_WireModel):
    email: str
    orgs: list[AdminOrg]

class OrgAccessRequested(_WireModel):
    type: Literal["org-access-requested"]
    user: Requester
    org_admins: list[OrgAdmin]

class CreatedOrg(_WireModel):
    id: str
    name: str
    domains: list[str] | None = None
    trial_end_date: str | None = None

class OrgCreator(_WireModel):
    email: EmailStr
    name: str | None = None

class OrgCreated(_WireModel):
    type: Literal["org-created"]
    name: str
    workspace_name: str
    org_id: str
    org: CreatedOrg
    user: OrgCreator

class UnknownEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    payload: dict[str, Any]

KnownEvent = Annotated[
    Union[UserInvitedToOrg, OrgAccessRequested, OrgCreated],
    Field(discriminator="type"),
]
MembraneEvent = Union[UserInvitedToOrg, OrgAccessRequested, OrgCreated, UnknownEvent]

KNOWN_EVENT_TYPES = frozenset({USER_INVITED_TO_ORG, ORG_ACCESS_REQUESTED, ORG_CREATED})

_known_event_adapter: TypeAdapter = TypeAdapter(KnownEvent)

def parse_event(raw_body: bytes) -> MembraneEvent:
    """Decode a verified webhook body into one of the event variants.

    Unrecognized ``type`` values come back as ``UnknownEvent`` so new
    platform event types don't fail the webhook. Anything that is not a JSON
    object with a string ``type``, or a known type missing required fields,
    raises ``InvalidEventError``.
    """
    try:
        payload = json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
        raise InvalidEventError(f"malformed json: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidEventError("event must be a json object")

    event_type = payload.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise InvalidEventError("missing event type")

    if event_type not in KNOWN_EVENT_TYPES:
        return UnknownEvent(type=event_type, payload=payload)

    try:
        return _known_event_adapter.validate_python(payload)
    except ValidationError as e:
        raise InvalidEventError(f"invalid {event_type} event: {e.error_count()} error(s)") from e
