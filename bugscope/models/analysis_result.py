"""
Analysis Result Models
======================
Pydantic models for everything the model returns and the pipeline emits.

    Solution            — one suggested fix with steps, effort and confidence
    ScreenshotAnalysis  — vision sub-analysis of an attached screenshot
    VideoAnalysis       — sub-analysis of an attached screen recording
    CitedDoc            — documentation citation as the model returns it
    MasterAnalysis      — the main diagnosis as the model returns it
    DocReference        — a citation enriched with canonical titles
    AnalysisResult      — the pipeline's only output, always produced
    AnalysisOptions     — per-call switches for the orchestrator

Model output is parsed leniently: missing lists become empty, unknown enum
values fall back to a safe default and scalar list items become strings.
Only a response that is not a JSON object at all fails validation.
"""
import logging
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from bugscope.core.constants import CONFIDENCE_LEVELS, EFFORT_LEVELS

logger = logging.getLogger(__name__)

Confidence = Literal["low", "medium", "high"]
Effort = Literal["quick", "moderate", "significant"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        return [str(value)]
    return [item if isinstance(item, str) else str(item) for item in value if item is not None]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _coerce_confidence(value: Any) -> str:
    text = str(value).strip().lower() if value is not None else ""
    return text if text in CONFIDENCE_LEVELS else "low"


# ---------------------------------------------------------------------------
# Solutions
# ---------------------------------------------------------------------------
class Solution(CamelModel):
    title: str = ""
    description: str = ""
    steps: List[str] = Field(default_factory=list)
    estimated_effort: Effort = "moderate"
    confidence: Confidence = "low"

    @field_validator("title", "description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("steps", mode="before")
    @classmethod
    def _steps(cls, v: Any) -> List[str]:
        return _as_str_list(v)

    @field_validator("estimated_effort", mode="before")
    @classmethod
    def _effort(cls, v: Any) -> str:
        text = str(v).strip().lower() if v is not None else ""
        return text if text in EFFORT_LEVELS else "moderate"

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v: Any) -> str:
        return _coerce_confidence(v)


# ---------------------------------------------------------------------------
# Sub-analyses
# ---------------------------------------------------------------------------
class ScreenshotAnalysis(CamelModel):
    description: str = ""
    visible_errors: List[str] = Field(default_factory=list)
    ui_elements: List[str] = Field(default_factory=list)
    potential_issues: List[str] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("visible_errors", "ui_elements", "potential_issues", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        return _as_str_list(v)


class MomentNote(CamelModel):
    seconds: float = 0
    description: str = ""

    @field_validator("seconds", mode="before")
    @classmethod
    def _seconds(cls, v: Any) -> float:
        try:
            return max(0.0, float(v))
        except (TypeError, ValueError):
            return 0.0

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)


class VideoAnalysis(CamelModel):
    description: str = ""
    reproduction_steps: List[str] = Field(default_factory=list)
    user_actions: List[str] = Field(default_factory=list)
    timestamps: List[MomentNote] = Field(default_factory=list)
    error_moments: List[MomentNote] = Field(default_factory=list)

    @field_validator("description", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("reproduction_steps", "user_actions", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> List[str]:
        return _as_str_list(v)

    @field_validator("timestamps", "error_moments", mode="before")
    @classmethod
    def _moments(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]


# ---------------------------------------------------------------------------
# Master analysis (model output)
# ---------------------------------------------------------------------------
class CitedDoc(CamelModel):
    section_id: str
    article_id: str
    relevance: str = ""

    @field_validator("section_id", "article_id", "relevance", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)


class MasterAnalysis(CamelModel):
    summary: str = ""
    suggested_cause: str = ""
    suggested_solutions: List[Solution] = Field(default_factory=list)
    related_docs: List[CitedDoc] = Field(default_factory=list)
    confidence: Confidence = "low"

    @field_validator("summary", "suggested_cause", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("suggested_solutions", mode="before")
    @classmethod
    def _solutions(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        return [item for item in v if isinstance(item, dict)]

    @field_validator("related_docs", mode="before")
    @classmethod
    def _citations(cls, v: Any) -> list:
        if not isinstance(v, list):
            return []
        kept = []
        for item in v:
            if (
                isinstance(item, dict)
                and (item.get("sectionId") or item.get("section_id"))
                and (item.get("articleId") or item.get("article_id"))
            ):
                kept.append(item)
            else:
                logger.warning("Dropping malformed documentation citation: %r", item)
        return kept

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence(cls, v: Any) -> str:
        return _coerce_confidence(v)


# ---------------------------------------------------------------------------
# Pipeline output
# ---------------------------------------------------------------------------
class DocReference(CamelModel):
    section_id: str
    section_title: str
    article_id: str
    article_title: str
    relevance: str = ""
    excerpt: Optional[str] = None


class AnalysisResult(CamelModel):
    summary: str = ""
    suggested_cause: str = ""
    suggested_solutions: List[Solution] = Field(default_factory=list)
    screenshot_analysis: Optional[ScreenshotAnalysis] = None
    video_analysis: Optional[VideoAnalysis] = None
    related_docs: Optional[List[DocReference]] = None
    model_used: str = ""
    confidence: Confidence = "low"
    processing_time_ms: int = Field(default=0, ge=0)
    error: Optional[str] = None
    correlation_id: str = ""


class AnalysisOptions(CamelModel):
    include_screenshot: bool = False
    include_video: bool = False
    timeout_seconds: Optional[float] = Field(default=None, gt=0)
