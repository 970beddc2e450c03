"""
Analysis Orchestrator
=====================
Top-level use case: bug report in, AnalysisResult out. Never raises.

Flow:
    Configuring → Analyzing → Finalizing (always reached)

    1. Configuring
        - GatewaySettings.validate(); missing values → "not configured" result,
          no network call is made
    2. Analyzing (optionally bounded by a deadline)
        - Screenshot and video sub-analyses run concurrently; each one is
          best-effort and degrades to None on any error
        - Documentation context from ContextBuilder
        - Master prompt → ModelGateway → ResponseParser → MasterAnalysis
        - Cited docs enriched with canonical titles and excerpts
    3. Finalizing
        - processing_time_ms from a monotonic clock
        - Any exception from step 2 becomes a low-confidence "Analysis failed"
          result carrying the exception message

Fault Tolerance:
    - Sub-analysis failures never abort the run
    - Master call failures are caught at one boundary in analyze()
    - Task cancellation by the caller propagates (asyncio.CancelledError is
      not an Exception)
"""
import asyncio
import logging
import re
import time
from typing import List, Optional

from bugscope.context.builder import ContextBuilder
from bugscope.core.config import GatewaySettings
from bugscope.core.constants import (
    FAILED_CAUSE,
    FAILED_SUMMARY,
    NOT_CONFIGURED_ERROR,
    NOT_CONFIGURED_SUMMARY,
)
from bugscope.core.errors import ConfigurationMissingError
from bugscope.docs.index import DocumentationIndex, build_excerpt
from bugscope.llm.client import ModelGateway
from bugscope.llm.prompts import (
    SCREENSHOT_ANALYSIS_PROMPT,
    SCREENSHOT_SYSTEM_PROMPT,
    VIDEO_ANALYSIS_PROMPT,
    VIDEO_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_analysis_system_prompt,
)
from bugscope.llm.response_parser import parse_json_response
from bugscope.media.resolver import MediaResolver
from bugscope.models.analysis_result import (
    AnalysisOptions,
    AnalysisResult,
    CitedDoc,
    DocReference,
    MasterAnalysis,
    ScreenshotAnalysis,
    Solution,
    VideoAnalysis,
)
from bugscope.models.bug_report import BugReport
from bugscope.utils.logging_config import bind_correlation_id, log_stage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Fixed fallback solutions
# ---------------------------------------------------------------------------
def _configure_solution() -> Solution:
    return Solution(
        title="Configure AI Gateway",
        description="Add the required environment variables for AI analysis",
        steps=[
            "Set AI_GATEWAY_ACCOUNT_ID in the service environment or .env file",
            "Set GEMINI_API_KEY in the service environment or .env file",
            "Optionally set AI_GATEWAY_ID (defaults to 'bug-analysis')",
        ],
        estimated_effort="quick",
        confidence="high",
    )


def _manual_solution() -> Solution:
    return Solution(
        title="Manual Investigation Required",
        description="The AI analysis failed. Please review the bug report manually.",
        steps=[
            "Review the bug description and any attached media",
            "Check the browser console for related errors",
            "Try to reproduce the issue locally",
        ],
        estimated_effort="moderate",
        confidence="low",
    )


def humanize_id(identifier: str) -> str:
    """'bug-overview' → 'Bug Overview'."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), identifier.replace("-", " "))


def _elapsed_ms(start: float) -> int:
    return max(0, int((time.monotonic() - start) * 1000))


# ---------------------------------------------------------------------------
# Analysis Orchestrator
# ---------------------------------------------------------------------------
class AnalysisOrchestrator:
    """
    Runs the full bug analysis pipeline.

    Parameters
    ----------
    settings : GatewaySettings or None
        Model gateway settings (read from the environment when omitted).
    index : DocumentationIndex or None
        Shared documentation index.
    gateway : ModelGateway or None
        Model client (built from settings when omitted).
    media_resolver : MediaResolver or None
        Attachment loader (no storage backend when omitted).
    context_builder : ContextBuilder or None
        Documentation context builder (built on ``index`` when omitted).
    """

    def __init__(
        self,
        settings: Optional[GatewaySettings] = None,
        index: Optional[DocumentationIndex] = None,
        gateway: Optional[ModelGateway] = None,
        media_resolver: Optional[MediaResolver] = None,
        context_builder: Optional[ContextBuilder] = None,
    ) -> None:
        self.settings = settings or GatewaySettings.from_env()
        self.index = index or DocumentationIndex()
        self.gateway = gateway or ModelGateway(self.settings)
        self.media_resolver = media_resolver or MediaResolver()
        self.context_builder = context_builder or ContextBuilder(self.index)

    async def close(self) -> None:
        await self.gateway.close()
        await self.media_resolver.close()

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    async def analyze(
        self,
        bug: BugReport,
        options: Optional[AnalysisOptions] = None,
    ) -> AnalysisResult:
        """
        Analyze one bug report.

        Parameters
        ----------
        bug : BugReport
            The report to analyze.
        options : AnalysisOptions or None
            Sub-analysis switches and an optional deadline in seconds.

        Returns
        -------
        AnalysisResult
            Always a populated result; failures set ``error`` and low confidence.
        """
        options = options or AnalysisOptions()
        start = time.monotonic()

        with bind_correlation_id() as cid:
            logger.info(
                "Starting analysis of bug %s (%s/%s) screenshot=%s video=%s",
                bug.id, bug.category, bug.severity,
                bool(bug.screenshot_ref), bool(bug.video_ref),
            )

            # --- Configuring ---
            try:
                self.settings.validate()
            except ConfigurationMissingError as e:
                logger.error("Analysis not configured: %s", e)
                return AnalysisResult(
                    summary=NOT_CONFIGURED_SUMMARY,
                    suggested_cause=(
                        f"Missing AI Gateway configuration ({' or '.join(e.missing)})"
                    ),
                    suggested_solutions=[_configure_solution()],
                    model_used="none",
                    confidence="low",
                    processing_time_ms=_elapsed_ms(start),
                    error=NOT_CONFIGURED_ERROR,
                    correlation_id=cid,
                )

            # --- Analyzing ---
            timeout = options.timeout_seconds or self.settings.analysis_timeout_seconds
            try:
                if timeout:
                    result = await asyncio.wait_for(self._run(bug, options), timeout)
                else:
                    result = await self._run(bug, options)
            except asyncio.TimeoutError:
                logger.error("Analysis of bug %s timed out after %ss", bug.id, timeout)
                return self._failed(f"Analysis timed out after {timeout:g}s", start, cid)
            except Exception as e:
                logger.exception("Analysis of bug %s failed", bug.id)
                return self._failed(str(e) or type(e).__name__, start, cid)

            # --- Finalizing ---
            result = result.model_copy(
                update={"processing_time_ms": _elapsed_ms(start), "correlation_id": cid}
            )
            logger.info(
                "Analysis of bug %s complete in %dms (confidence=%s)",
                bug.id, result.processing_time_ms, result.confidence,
            )
            return result

    # -------------------------------------------------------------------
    # Analyzing
    # -------------------------------------------------------------------
    async def _run(self, bug: BugReport, options: AnalysisOptions) -> AnalysisResult:
        screenshot_task = (
            self.analyze_screenshot(bug.screenshot_ref)
            if options.include_screenshot and bug.screenshot_ref
            else _nothing()
        )
        video_task = (
            self.analyze_video(bug.video_ref)
            if options.include_video and bug.video_ref
            else _nothing()
        )
        screenshot, video = await asyncio.gather(screenshot_task, video_task)

        bug_context = self.context_builder.build_bug_context(bug)
        prompt = build_analysis_prompt(bug_context, screenshot, video)
        system_prompt = build_analysis_system_prompt(self.index.valid_citation_ids())

        text = await self.gateway.call(prompt, system_prompt)
        with log_stage(logger, "parse", target="master"):
            analysis = MasterAnalysis.model_validate(parse_json_response(text))

        related = self.enrich_citations(analysis.related_docs)
        solutions = analysis.suggested_solutions or [_manual_solution()]

        return AnalysisResult(
            summary=analysis.summary,
            suggested_cause=analysis.suggested_cause,
            suggested_solutions=solutions,
            screenshot_analysis=screenshot,
            video_analysis=video,
            related_docs=related or None,
            model_used=self.gateway.model_name,
            confidence=analysis.confidence,
        )

    async def analyze_screenshot(self, ref: str) -> Optional[ScreenshotAnalysis]:
        """Best-effort vision analysis of a screenshot; None on any failure."""
        try:
            image = await self.media_resolver.resolve(ref)
            if not image:
                logger.info("Screenshot unavailable, skipping screenshot analysis")
                return None
            text = await self.gateway.call(
                SCREENSHOT_ANALYSIS_PROMPT, SCREENSHOT_SYSTEM_PROMPT, image=image
            )
            with log_stage(logger, "parse", target="screenshot"):
                return ScreenshotAnalysis.model_validate(parse_json_response(text))
        except Exception as e:
            logger.error("Screenshot analysis error: %s", e)
            return None

    async def analyze_video(self, ref: str) -> Optional[VideoAnalysis]:
        """Best-effort analysis of a recording from its reference; None on failure."""
        try:
            text = await self.gateway.call(
                VIDEO_ANALYSIS_PROMPT, VIDEO_SYSTEM_PROMPT, video_ref=ref
            )
            with log_stage(logger, "parse", target="video"):
                return VideoAnalysis.model_validate(parse_json_response(text))
        except Exception as e:
            logger.error("Video analysis error: %s", e)
            return None

    # -------------------------------------------------------------------
    # Citation enrichment
    # -------------------------------------------------------------------
    def enrich_citations(self, citations: List[CitedDoc]) -> List[DocReference]:
        """
        Attach canonical titles and excerpts to the model's citations.

        Lookup order: search hits for the ids, then a direct corpus lookup,
        then titles synthesized from the ids. A citation is never dropped.
        """
        enriched: List[DocReference] = []
        for doc in citations:
            hits = self.index.search(f"{doc.section_id} {doc.article_id}")
            match = next(
                (h for h in hits if h.section_id == doc.section_id and h.article_id == doc.article_id),
                None,
            )
            if match is not None:
                enriched.append(DocReference(
                    section_id=doc.section_id,
                    section_title=match.section_title,
                    article_id=doc.article_id,
                    article_title=match.article_title,
                    relevance=doc.relevance,
                    excerpt=match.excerpt,
                ))
                continue

            section = self.index.get_section(doc.section_id)
            article = self.index.get_article(doc.section_id, doc.article_id)
            if section is not None and article is not None:
                enriched.append(DocReference(
                    section_id=doc.section_id,
                    section_title=section.title,
                    article_id=doc.article_id,
                    article_title=article.title,
                    relevance=doc.relevance,
                    excerpt=build_excerpt(article.content, []),
                ))
                continue

            logger.warning("Cited doc %s/%s not in corpus", doc.section_id, doc.article_id)
            enriched.append(DocReference(
                section_id=doc.section_id,
                section_title=humanize_id(doc.section_id),
                article_id=doc.article_id,
                article_title=humanize_id(doc.article_id),
                relevance=doc.relevance,
            ))
        return enriched

    # -------------------------------------------------------------------
    # Finalizing
    # -------------------------------------------------------------------
    def _failed(self, message: str, start: float, cid: str) -> AnalysisResult:
        return AnalysisResult(
            summary=FAILED_SUMMARY,
            suggested_cause=FAILED_CAUSE,
            suggested_solutions=[_manual_solution()],
            model_used=self.gateway.model_name,
            confidence="low",
            processing_time_ms=_elapsed_ms(start),
            error=message,
            correlation_id=cid,
        )


async def _nothing() -> None:
    return None
