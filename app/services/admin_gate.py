"""Guard pipeline shared by the admin endpoints.

Every stage takes the success value of the previous one and returns either the
next success value or a :class:`Rejected`. Nothing reaches the store unless
every earlier stage passed::

    authenticate -> validate -> authorize -> execute
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from app.cqrs.queries.roles import ADMIN_ROLE
from app.services.auth import AuthUser, bearer_token

logger = logging.getLogger("chainraffle.admin")

P = TypeVar("P", bound=BaseModel)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


@dataclass(frozen=True)
class Rejected:
    status_code: int
    error: str
    details: Any = None

    def body(self) -> dict:
        body: dict = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


@dataclass(frozen=True)
class Authenticated:
    user: AuthUser


@dataclass(frozen=True)
class Validated(Generic[P]):
    user: AuthUser
    payload: P


@dataclass(frozen=True)
class Authorized(Generic[P]):
    user: AuthUser
    payload: P


@dataclass(frozen=True)
class Completed:
    body: dict
    status_code: int = 200


def validation_details(exc: ValidationError) -> list[dict]:
    details = []
    for error in exc.errors():
        details.append(
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
        )
    return details


def authenticate(
    authorization: Optional[str], resolve_user: Callable[[str], Optional[AuthUser]]
) -> Union[Authenticated, Rejected]:
    token = bearer_token(authorization)
    if token is None:
        logger.warning("Admin request without bearer credentials")
        return Rejected(401, "Unauthorized - No authorization header")
    try:
        user = resolve_user(token)
    except Exception as exc:
        logger.error("Authentication failed: %s", exc)
        return Rejected(401, "Unauthorized")
    if user is None:
        logger.warning("Authentication failed: token did not resolve to a user")
        return Rejected(401, "Unauthorized")
    return Authenticated(user=user)


def validate(
    stage: Authenticated, raw_body: bytes, schema: Type[P]
) -> Union[Validated[P], Rejected]:
    try:
        payload = schema.model_validate_json(raw_body or b"{}")
    except ValidationError as exc:
        logger.info("Rejected admin payload from %s: %s", stage.user.id, exc.error_count())
        return Rejected(400, "Invalid input", validation_details(exc))
    return Validated(user=stage.user, payload=payload)


def authorize(
    stage: Validated[P], has_role: Callable[[str, str], bool]
) -> Union[Authorized[P], Rejected]:
    try:
        is_admin = has_role(stage.user.id, ADMIN_ROLE)
    except Exception as exc:
        logger.error("Admin check failed for %s: %s", stage.user.id, exc)
        return Rejected(403, "Forbidden: Admin access required")
    if not is_admin:
        logger.warning("User %s is not an admin", stage.user.id)
        return Rejected(403, "Forbidden: Admin access required")
    return Authorized(user=stage.user, payload=stage.payload)


def execute(
    stage: Authorized[P], action: Callable[[P], dict], failure_message: str
) -> Union[Completed, Rejected]:
    try:
        result = action(stage.payload)
    except Exception as exc:
        logger.exception("%s", failure_message)
        return Rejected(500, failure_message, str(exc) or exc.__class__.__name__)
    return Completed(body={"success": True, **result})


def run_admin_pipeline(
    authorization: Optional[str],
    raw_body: bytes,
    *,
    schema: Type[P],
    action: Callable[[P], dict],
    failure_message: str,
    resolve_user: Callable[[str], Optional[AuthUser]],
    has_role: Callable[[str, str], bool],
    db_ready: Callable[[], bool] = lambda: True,
) -> Union[Completed, Rejected]:
    authenticated = authenticate(authorization, resolve_user)
    if isinstance(authenticated, Rejected):
        return authenticated
    if not db_ready():
        return Rejected(500, "Database is not configured")
    validated = validate(authenticated, raw_body, schema)
    if isinstance(validated, Rejected):
        return validated
    authorized = authorize(validated, has_role)
    if isinstance(authorized, Rejected):
        return authorized
    return execute(authorized, action, failure_message)
