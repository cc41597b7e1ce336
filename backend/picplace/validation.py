"""
PicPlace Backend — Declarative Input Rules
============================================

What:  One pydantic model per operation describing the field rules a request
       body must satisfy before any business logic runs.
Why:   Multipart forms and JSON bodies share the same rules; checking them in
       the service (not in FastAPI's signature) keeps the 422 message and body
       identical for every route, and guarantees no geocode or database call
       happens for bad input.

Rule sets:
    signup:        name non-blank, email valid (normalized), password >= 6
    login:         email valid (normalized), password >= 6
    create_place:  title non-blank, description >= 5, address non-blank
    update_place:  title non-blank, description >= 5
"""

from typing import Annotated, Any, Dict, List, Type

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, Field
from pydantic import ValidationError as PydanticValidationError

from picplace.exceptions import ValidationError

MIN_PASSWORD_LENGTH = 6
MIN_DESCRIPTION_LENGTH = 5


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


def _normalize_email(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]
Password = Annotated[str, Field(min_length=MIN_PASSWORD_LENGTH)]
Description = Annotated[str, Field(min_length=MIN_DESCRIPTION_LENGTH)]


class _Rules(BaseModel):
    model_config = ConfigDict(extra="ignore")


class SignupRules(_Rules):
    name: NonBlankStr
    email: NormalizedEmail
    password: Password


class LoginRules(_Rules):
    email: NormalizedEmail
    password: Password


class CreatePlaceRules(_Rules):
    title: NonBlankStr
    description: Description
    address: NonBlankStr


class UpdatePlaceRules(_Rules):
    title: NonBlankStr
    description: Description


RULES: Dict[str, Type[_Rules]] = {
    "signup": SignupRules,
    "login": LoginRules,
    "create_place": CreatePlaceRules,
    "update_place": UpdatePlaceRules,
}


def validate_input(operation: str, **fields: Any) -> Any:
    """
    Apply the rule set registered for `operation`.

    Returns the validated (normalized) model. Raises ValidationError whose
    context lists failing fields and rule messages; submitted values are
    never echoed back since they may include a password.
    """
    rules = RULES[operation]
    try:
        return rules.model_validate(fields)
    except PydanticValidationError as exc:
        errors: List[Dict[str, str]] = [
            {
                "field": ".".join(str(part) for part in err["loc"]),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        raise ValidationError(context={"operation": operation, "errors": errors}) from exc
