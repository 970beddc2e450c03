"""
Analysis Prompts
================
Centralised store for the three fixed prompts of the analysis pipeline.

    - Screenshot sub-analysis: what is visible, errors, likely issues
    - Video sub-analysis: reproduction steps, user actions, timestamps
    - Master analysis: documentation-grounded diagnosis with solutions

Every prompt demands a JSON-only answer in a fixed schema; ResponseParser
copes with fences and truncation when the model does not comply.
"""
import json
import logging
from typing import Iterable, Optional

from bugscope.models.analysis_result import ScreenshotAnalysis, VideoAnalysis

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sub-analysis prompts
# ---------------------------------------------------------------------------
SCREENSHOT_SYSTEM_PROMPT = (
    "You are an expert UI/UX analyst. Analyze screenshots and identify issues."
)

SCREENSHOT_ANALYSIS_PROMPT = (
    "Analyze this screenshot from a bug report. Describe:\n"
    "1. What UI elements are visible\n"
    "2. Any error messages or unexpected states\n"
    "3. What might be causing the reported issue\n"
    "\n"
    "Format as JSON:\n"
    "{\n"
    '  "description": "What you see in the screenshot",\n'
    '  "visibleErrors": ["error1", "error2"],\n'
    '  "uiElements": ["element1", "element2"],\n'
    '  "potentialIssues": ["issue1", "issue2"]\n'
    "}"
)

VIDEO_SYSTEM_PROMPT = (
    "You are an expert at analyzing screen recordings. Describe what you would "
    "expect to see based on the video reference and any context provided."
)

VIDEO_ANALYSIS_PROMPT = (
    "Analyze this screen recording from a bug report. Identify:\n"
    "1. User actions and the sequence of events\n"
    "2. Reproduction steps to recreate the bug\n"
    "3. Key timestamps where issues occur\n"
    "\n"
    "Format as JSON:\n"
    "{\n"
    '  "description": "Overall description of what happens",\n'
    '  "reproductionSteps": ["Step 1", "Step 2"],\n'
    '  "userActions": ["action1", "action2"],\n'
    '  "timestamps": [{"seconds": 0, "description": "what happens"}],\n'
    '  "errorMoments": [{"seconds": 0, "description": "error description"}]\n'
    "}"
)


# ---------------------------------------------------------------------------
# Master analysis prompt
# ---------------------------------------------------------------------------
_ANALYSIS_SYSTEM_PROMPT_HEAD = (
    "You are an expert software debugging assistant for the Metabolic Reset "
    "Challenge platform.\n"
    "\n"
    "You are given platform documentation (architecture, API endpoints with "
    "source locations, error codes, troubleshooting guides) followed by a bug "
    "report.\n"
    "\n"
    "GUIDELINES:\n"
    "1. Reference specific files and line numbers when suggesting fixes.\n"
    "2. Use the API endpoint reference to find the backend code involved.\n"
    "3. Check the error code catalog when the bug mentions an error message.\n"
    "4. Give practical, step-by-step solutions a developer can follow.\n"
    "5. Cite the documentation articles that help (sectionId/articleId pairs).\n"
    "\n"
    "Estimate effort per solution:\n"
    '- "quick": under 30 minutes (typo, config change, one-line fix)\n'
    '- "moderate": 30 minutes to 2 hours\n'
    '- "significant": over 2 hours, architectural or multi-file change\n'
    "\n"
    "Respond with ONLY valid JSON in this structure:\n"
    "{\n"
    '  "summary": "Brief 1-2 sentence summary of the bug",\n'
    '  "suggestedCause": "Technical explanation referencing specific files",\n'
    '  "suggestedSolutions": [\n'
    "    {\n"
    '      "title": "Descriptive solution title",\n'
    '      "description": "Detailed explanation with file references",\n'
    '      "steps": ["Step 1", "Step 2", "Step 3 to verify the fix"],\n'
    '      "estimatedEffort": "quick|moderate|significant",\n'
    '      "confidence": "low|medium|high"\n'
    "    }\n"
    "  ],\n"
    '  "relatedDocs": [\n'
    '    {"sectionId": "bug-tracking", "articleId": "ai-analysis", '
    '"relevance": "Why this documentation helps"}\n'
    "  ],\n"
    '  "confidence": "low|medium|high"\n'
    "}"
)

CITATION_INSTRUCTION = (
    "INSTRUCTIONS: Analyze this bug report using the documentation context above. "
    "Be specific about file locations and provide actionable solutions. If the bug "
    "relates to a known error code, reference it. Always include at least one "
    "related documentation article."
)


def build_analysis_system_prompt(valid_ids: Iterable[str]) -> str:
    """Master system prompt, listing the section/article ids the model may cite."""
    ids = list(valid_ids)
    if not ids:
        return _ANALYSIS_SYSTEM_PROMPT_HEAD
    return (
        _ANALYSIS_SYSTEM_PROMPT_HEAD
        + "\n\nVALID SECTION/ARTICLE IDs (use these exact values):\n"
        + "\n".join(f"- {i}" for i in ids)
    )


def build_analysis_prompt(
    bug_context: str,
    screenshot: Optional[ScreenshotAnalysis] = None,
    video: Optional[VideoAnalysis] = None,
) -> str:
    """
    Assemble the master prompt.

    Order: documentation + bug context, screenshot analysis, video analysis,
    citation instruction.
    """
    sections = [bug_context.strip()]
    if screenshot is not None:
        sections.append(
            "## Screenshot Analysis (AI Vision):\n"
            + json.dumps(screenshot.model_dump(by_alias=True), indent=2)
        )
    if video is not None:
        sections.append(
            "## Video Analysis:\n"
            + json.dumps(video.model_dump(by_alias=True), indent=2)
        )
    sections.append("---")
    sections.append(CITATION_INSTRUCTION)
    prompt = "\n\n".join(sections)
    logger.debug("Master prompt assembled: %d chars", len(prompt))
    return prompt
