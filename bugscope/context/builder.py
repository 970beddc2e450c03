"""
Context Builder
===============
Turns bug metadata into a bounded documentation context for the model.

Keyword Derivation (fixed rule tables):
    - Page path fragments  → topic tags  (/admin → admin, /course → content, ...)
    - Bug category         → topic tag   (ui → components, data → entities, ...)
    - Description phrases  → topic tags  (impersonat → impersonation, otp → auth, ...)

Context Strategy:
    - Derived tags (deduplicated, first-seen order) form the search query
    - Hits → full article content under "section > article" headers, ranked,
      followed by page-relevant API endpoints and error codes
    - No hits → the whole corpus, so the model always has some grounding

The builder never calls the network; it only reads the shared index.
"""
import logging
from typing import List, Optional, Tuple

from bugscope.docs.index import DocumentationIndex
from bugscope.models.bug_report import BugReport
from bugscope.utils.logging_config import log_stage

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------
PAGE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("/admin",), "admin"),
    (("/dashboard",), "dashboard"),
    (("/course",), "content"),
    (("/profile",), "users"),
    (("/roster",), "referrals"),
    (("/quiz",), "quiz"),
    (("/login", "/register"), "auth"),
    (("/bugs",), "bugs"),
)

CATEGORY_RULES: dict[str, str] = {
    "ui": "components",
    "functionality": "features",
    "data": "entities",
    "performance": "optimization",
}

DESCRIPTION_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("impersonat",), "impersonation"),
    (("habit",), "habits"),
    (("biometric", "weight"), "biometrics"),
    (("video", "lesson"), "content"),
    (("payment", "stripe"), "payments"),
    (("referral", "coach"), "referrals"),
    (("login", "otp"), "auth"),
    (("bug", "report"), "bugs"),
    (("error", "fail"), "troubleshooting"),
    (("screenshot", "video"), "media"),
)


def derive_keywords(page_url: str, category: str, description: str) -> List[str]:
    """
    Map bug metadata onto canonical topic tags.

    Returns
    -------
    list[str]
        Unique tags in first-seen order (page, then category, then description).
    """
    keywords: List[str] = []

    def _add(tag: str) -> None:
        if tag not in keywords:
            keywords.append(tag)

    page = page_url or ""
    for fragments, tag in PAGE_RULES:
        if any(f in page for f in fragments):
            _add(tag)

    category_tag = CATEGORY_RULES.get((category or "").lower())
    if category_tag:
        _add(category_tag)

    desc = (description or "").lower()
    for phrases, tag in DESCRIPTION_RULES:
        if any(p in desc for p in phrases):
            _add(tag)

    return keywords


# ---------------------------------------------------------------------------
# Context Builder
# ---------------------------------------------------------------------------
class ContextBuilder:
    """
    Builds the documentation part of the master prompt.

    Usage:
        builder = ContextBuilder(DocumentationIndex())
        context = builder.build_context("/app/admin", "ui", "timer missing")
    """

    def __init__(self, index: Optional[DocumentationIndex] = None) -> None:
        self.index = index or DocumentationIndex()

    def build_context(self, page_url: str, category: str, description: str) -> str:
        """
        Build the documentation context for one bug.

        Parameters
        ----------
        page_url : str
            Page the bug was filed from.
        category : str
            Bug category enum value.
        description : str
            Free text (title and description) of the bug.

        Returns
        -------
        str
            Ranked article content, or the full corpus when nothing matched.
        """
        keywords = derive_keywords(page_url, category, description)
        query = " ".join(keywords)

        with log_stage(logger, "docs_search", keywords=len(keywords)):
            hits = self.index.search(query)

        if not hits:
            logger.info("No documentation matched %r, using full corpus", query)
            return self.index.render_full_context()

        corpus = self.index.corpus
        parts: List[str] = []
        if corpus.platform_context:
            parts.append(corpus.platform_context + "\n\n")
        parts.append("# Relevant Documentation\n\n")

        for hit in hits:
            article = self.index.get_article(hit.section_id, hit.article_id)
            if article is None:
                continue
            parts.append(f"## {hit.section_title} > {hit.article_title}\n")
            parts.append(f"Relevance: {hit.relevance} | Tags: {', '.join(article.tags)}\n")
            if article.code_references:
                parts.append(f"Files: {', '.join(article.code_references)}\n")
            if article.api_endpoints:
                parts.append(f"APIs: {', '.join(article.api_endpoints)}\n")
            if article.error_codes:
                parts.append(f"Error Codes: {', '.join(article.error_codes)}\n")
            parts.append("\n" + article.content + "\n\n")

        apis = self.index.relevant_api_endpoints(keywords)
        if apis:
            parts.append("\n## Relevant API Endpoints\n\n")
            for api in apis:
                parts.append(f"- {api.method} {api.path}: {api.description}\n")
                parts.append(f"  File: {api.source_file}:{api.source_line}\n")

        errors = self.index.relevant_error_codes(keywords)
        if errors:
            parts.append("\n## Relevant Error Codes\n\n")
            for err in errors:
                parts.append(f"### {err.code} (HTTP {err.http_status})\n")
                parts.append(f"{err.message}: {err.description}\n")
                parts.append(f"Causes: {', '.join(err.possible_causes)}\n")
                parts.append(f"Solutions: {', '.join(err.solutions)}\n\n")

        logger.info("Documentation context: %d articles, %d APIs, %d error codes",
                    len(hits), len(apis), len(errors))
        return "".join(parts)

    def build_bug_context(self, bug: BugReport) -> str:
        """Documentation context followed by the bug's structured fields."""
        docs = self.build_context(bug.page_url, bug.category, f"{bug.title} {bug.description}")
        lines = [
            docs.rstrip(),
            "",
            "---",
            "",
            "# Bug Report to Analyze",
            "",
            f"**ID:** {bug.id}",
            f"**Title:** {bug.title}",
            f"**Description:** {bug.description}",
            f"**Severity:** {bug.severity}",
            f"**Category:** {bug.category}",
            f"**Page URL:** {bug.page_url}",
        ]
        if bug.user_agent:
            lines.append(f"**User Agent:** {bug.user_agent}")
        lines.append(f"**Has Screenshot:** {'Yes' if bug.screenshot_ref else 'No'}")
        lines.append(f"**Has Video:** {'Yes' if bug.video_ref else 'No'}")
        if bug.status:
            lines.append(f"**Status:** {bug.status}")
        return "\n".join(lines)
