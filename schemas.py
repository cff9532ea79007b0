import re
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator, model_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from errors import ValidationError
from models_contact import FORM_TYPES

NAME_RE = re.compile(r"^[a-zA-Z\s]+$")
PHONE_RE = re.compile(r"^[0-9]{10}$")

FIELDS = ("name", "email", "phone", "message", "formType", "recaptchaToken")


class ContactForm(BaseModel):
    """Inbound contact form. Every field is trimmed; all violations are reported together."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, validate_default=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    message: str = ""
    form_type: str = Field("", alias="formType")
    recaptcha_token: str = Field("", alias="recaptchaToken")

    @model_validator(mode="before")
    @classmethod
    def _coerce_scalars(cls, data: Any) -> Dict[str, Any]:
        # null -> "" y números -> str, como hace un form HTML
        if not isinstance(data, dict):
            data = {}
        out = {}
        for key in FIELDS:
            value = data.get(key)
            if value is None:
                value = ""
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                value = str(value)
            out[key] = value
        return out

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        if not 3 <= len(v) <= 100:
            raise PydanticCustomError("name_length", "Name must be between 3 and 100 characters")
        if not NAME_RE.fullmatch(v):
            raise PydanticCustomError("name_charset", "Name can only contain letters and spaces")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if not v or "<" in v or ">" in v:
            raise PydanticCustomError("email_invalid", "Please provide a valid email address")
        try:
            _, normalized = validate_email(v)
        except PydanticCustomError:
            raise PydanticCustomError("email_invalid", "Please provide a valid email address")
        normalized = normalized.lower()
        if len(normalized) > 255:
            raise PydanticCustomError("email_length", "Email is too long")
        return normalized

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        if not PHONE_RE.fullmatch(v):
            raise PydanticCustomError("phone_format", "Phone number must be exactly 10 digits")
        return v

    @field_validator("message")
    @classmethod
    def _message(cls, v: str) -> str:
        if not 10 <= len(v) <= 1000:
            raise PydanticCustomError("message_length", "Message must be between 10 and 1000 characters")
        return v

    @field_validator("form_type")
    @classmethod
    def _form_type(cls, v: str) -> str:
        if v not in FORM_TYPES:
            raise PydanticCustomError("form_type", "Invalid form type")
        return v

    @field_validator("recaptcha_token")
    @classmethod
    def _token(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("token_missing", "Please complete the captcha verification")
        return v


def _field_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        loc = err.get("loc") or ("body",)
        errors.append({
            "field": str(loc[0]),
            "message": err.get("msg", "Invalid value"),
            "value": err.get("input") if isinstance(err.get("input"), (str, int, float)) else None,
        })
    return errors


def parse_contact_form(raw: Any) -> ContactForm:
    """Validate the raw body; raises errors.ValidationError listing every bad field."""
    try:
        return ContactForm.model_validate(raw if isinstance(raw, dict) else {})
    except PydanticValidationError as e:
        raise ValidationError(_field_errors(e)) from None
