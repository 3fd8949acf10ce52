# -*- coding: utf-8 -*-
"""
Request schemas for the dashboard, lead and assessment endpoints.

Field names are snake_case in Python; clients may send either snake_case or
the camelCase names the dashboard JavaScript uses (``heroTitle``).
"""
import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
# RFC 1123 host name, at least one dot
DOMAIN_RE = re.compile(
    r"^(?=.{1,253}$)(?!-)[a-z0-9-]{1,63}(?<!-)(\.(?!-)[a-z0-9-]{1,63}(?<!-))+$")


def _check_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    if not EMAIL_RE.match(v):
        raise ValueError("Invalid email format")
    return v


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class BrandingPatch(CamelModel):
    """Partial update of a white-label config; only fields sent are written."""
    primary_color: Optional[str] = Field(None, max_length=32)
    secondary_color: Optional[str] = Field(None, max_length=32)
    accent_color: Optional[str] = Field(None, max_length=32)
    logo_url: Optional[str] = Field(None, max_length=512)
    firm_address: Optional[str] = None
    firm_website: Optional[str] = Field(None, max_length=255)
    firm_phone: Optional[str] = Field(None, max_length=50)
    firm_description: Optional[str] = None
    hero_title: Optional[str] = Field(None, max_length=255)
    hero_subtitle: Optional[str] = None
    about_content: Optional[str] = None
    services_content: Optional[str] = None
    features_enabled: Optional[List[str]] = None
    from_email: Optional[str] = Field(None, max_length=255)
    reply_to_email: Optional[str] = Field(None, max_length=255)

    def changes(self) -> Dict[str, Any]:
        """Column -> value for every field the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class AddDomainRequest(CamelModel):
    domain: str = Field(..., min_length=3, max_length=253)
    is_primary: bool = False


class SettingsUpdate(CamelModel):
    firm_name: Optional[str] = Field(None, min_length=1, max_length=255)
    owner_name: Optional[str] = Field(None, min_length=1, max_length=255)
    owner_phone: Optional[str] = Field(None, max_length=50)


class LoginRequest(CamelModel):
    email: str
    password: str = Field(..., min_length=1)

    normalize_email = field_validator("email")(_check_email)


class LeadCreateRequest(CamelModel):
    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: str = Field(..., max_length=255)
    client_phone: Optional[str] = Field(None, max_length=50)
    assessment_data: Optional[Dict[str, Any]] = None
    risk_score: Optional[int] = Field(None, ge=0)
    risk_level: Literal["low", "medium", "high"] = "low"
    source_domain: Optional[str] = Field(None, max_length=255)
    referrer: Optional[str] = None
    utm_source: Optional[str] = Field(None, max_length=255)
    utm_medium: Optional[str] = Field(None, max_length=255)
    utm_campaign: Optional[str] = Field(None, max_length=255)

    normalize_email = field_validator("client_email")(_check_email)

    @field_validator("risk_level", mode="before")
    @classmethod
    def lower_risk_level(cls, v):
        return v.lower() if isinstance(v, str) else v


class LeadStatusUpdate(CamelModel):
    status: Literal["new", "contacted", "consultation", "converted"]
    notes: Optional[str] = None


class AssessmentSubmission(CamelModel):
    """Answers from the public risk assessment wizard."""
    name: str = Field(..., min_length=1, max_length=255)
    email: str
    phone: Optional[str] = Field(None, max_length=50)
    profession: str = "other"
    net_worth: str = "under_500k"
    legal_threats: Literal["none", "potential", "active"] = "none"
    has_real_estate: bool = False
    legal_history: List[str] = Field(default_factory=list)
    current_protection: List[str] = Field(default_factory=list)
    utm_source: Optional[str] = Field(None, max_length=255)
    utm_medium: Optional[str] = Field(None, max_length=255)
    utm_campaign: Optional[str] = Field(None, max_length=255)

    normalize_email = field_validator("email")(_check_email)

    def answers(self) -> Dict[str, Any]:
        return self.model_dump(
            include={"profession", "net_worth", "legal_threats", "has_real_estate",
                     "legal_history", "current_protection"})
