"""
Bug Report Model
================
Pydantic model for a user-filed bug report.
Owned and persisted by the platform; the analysis pipeline only reads it.

Fields:
    id              — report id assigned by the platform
    title           — short user-provided title
    description     — free text description
    severity        — critical | high | medium | low
    category        — ui | functionality | performance | data | other
    page_url        — page the user was on when filing the report
    screenshot_ref  — internal media key, bucket URL or external URL
    video_ref       — same, for a screen recording
    user_agent      — browser user agent, if captured
    status          — platform workflow status, if known

JSON uses camelCase (pageUrl, screenshotRef, ...). The platform's older
screenshotUrl / videoUrl spellings are accepted too.
"""
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Severity = Literal["critical", "high", "medium", "low"]
Category = Literal["ui", "functionality", "performance", "data", "other"]


class BugReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    description: str = ""
    severity: Severity = "medium"
    category: Category = "other"
    page_url: str = ""
    screenshot_ref: Optional[str] = Field(
        default=None,
        alias="screenshotRef",
        validation_alias=AliasChoices("screenshotRef", "screenshotUrl", "screenshot_ref"),
    )
    video_ref: Optional[str] = Field(
        default=None,
        alias="videoRef",
        validation_alias=AliasChoices("videoRef", "videoUrl", "video_ref"),
    )
    user_agent: str = ""
    status: str = ""
