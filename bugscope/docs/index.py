"""
Documentation Index
===================
Keyword-weighted search over the static documentation corpus.

Relevance Scoring (per article, case-insensitive substring matching):
    - +10 for every query term found in the article title
    - +5  for every query term found in any of the article tags
    - +1  for every query term found in the article content
    Terms of length ≤ 2 are discarded. Articles scoring 0 are excluded.

Ranking:
    - Descending relevance, ties keep corpus order (stable sort)
    - At most SEARCH_RESULT_LIMIT hits

Excerpts:
    - Anchored on the first query term (in query order) present in the content
    - 50 characters before, 100 after, trimmed and wrapped in "..."
    - Falls back to the first 150 characters when no term is in the content

The index wraps an injected, immutable DocumentationCorpus, so it is safe
to share between concurrent analyses.
"""
import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from bugscope.core.constants import (
    EXCERPT_AFTER,
    EXCERPT_BEFORE,
    EXCERPT_FALLBACK_LENGTH,
    SEARCH_RESULT_LIMIT,
)
from bugscope.docs.corpus import DEFAULT_CORPUS
from bugscope.models.docs import (
    ApiEndpointDoc,
    DocArticle,
    DocSection,
    DocumentationCorpus,
    ErrorCodeDoc,
    SearchHit,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scoring helpers
# ---------------------------------------------------------------------------
def split_terms(query: str) -> List[str]:
    """Lower-case the query and keep whitespace-separated terms longer than 2."""
    return [t for t in query.lower().split() if len(t) > 2]


def score_article(article: DocArticle, terms: List[str]) -> int:
    """Compute the weighted relevance of one article for the given terms."""
    title = article.title.lower()
    content = article.content.lower()
    tags = [t.lower() for t in article.tags]

    relevance = 0
    for term in terms:
        if term in title:
            relevance += 10
        if any(term in tag for tag in tags):
            relevance += 5
        if term in content:
            relevance += 1
    return relevance


def build_excerpt(content: str, terms: List[str]) -> str:
    """Return the excerpt around the first matching term, or the content head."""
    content_lower = content.lower()
    for term in terms:
        idx = content_lower.find(term)
        if idx != -1:
            start = max(0, idx - EXCERPT_BEFORE)
            end = min(len(content), idx + EXCERPT_AFTER)
            return "..." + content[start:end].strip() + "..."
    return content[:EXCERPT_FALLBACK_LENGTH] + "..."


# ---------------------------------------------------------------------------
# Documentation Index
# ---------------------------------------------------------------------------
class DocumentationIndex:
    """
    Read-only search and lookup over a documentation corpus.

    Usage:
        index = DocumentationIndex()
        hits = index.search("impersonation timer")
        article = index.get_article("bug-tracking", "ai-analysis")
    """

    def __init__(
        self,
        corpus: Optional[DocumentationCorpus] = None,
        limit: int = SEARCH_RESULT_LIMIT,
    ) -> None:
        self.corpus = corpus or DEFAULT_CORPUS
        self.limit = limit

    # -------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------
    def search(self, query: str) -> List[SearchHit]:
        """
        Rank corpus articles against a free-text query.

        Parameters
        ----------
        query : str
            Whitespace-separated keywords.

        Returns
        -------
        list[SearchHit]
            At most ``limit`` hits, highest relevance first.
        """
        terms = split_terms(query)
        if not terms:
            return []

        scored: List[Tuple[DocSection, DocArticle, int]] = []
        for section, article in self.iter_articles():
            relevance = score_article(article, terms)
            if relevance > 0:
                scored.append((section, article, relevance))

        # sorted() is stable, so equal scores keep corpus order
        ranked = sorted(scored, key=lambda item: item[2], reverse=True)[: self.limit]

        hits = [
            SearchHit(
                section_id=section.id,
                section_title=section.title,
                article_id=article.id,
                article_title=article.title,
                relevance=relevance,
                excerpt=build_excerpt(article.content, terms),
            )
            for section, article, relevance in ranked
        ]
        logger.debug("Docs search %r: %d terms, %d hits", query, len(terms), len(hits))
        return hits

    # -------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------
    @property
    def sections(self) -> Tuple[DocSection, ...]:
        return self.corpus.sections

    def iter_articles(self) -> Iterator[Tuple[DocSection, DocArticle]]:
        """Yield (section, article) pairs in corpus order."""
        for section in self.corpus.sections:
            for article in section.articles:
                yield section, article

    def get_section(self, section_id: str) -> Optional[DocSection]:
        for section in self.corpus.sections:
            if section.id == section_id:
                return section
        return None

    def get_article(self, section_id: str, article_id: str) -> Optional[DocArticle]:
        section = self.get_section(section_id)
        if section is None:
            return None
        for article in section.articles:
            if article.id == article_id:
                return article
        return None

    def article_count(self) -> int:
        return sum(len(s.articles) for s in self.corpus.sections)

    def valid_citation_ids(self) -> List[str]:
        """Return ``section/article`` ids the model is allowed to cite."""
        return [f"{s.id}/{a.id}" for s, a in self.iter_articles()]

    # -------------------------------------------------------------------
    # Reference tables
    # -------------------------------------------------------------------
    def relevant_api_endpoints(self, keywords: Iterable[str]) -> List[ApiEndpointDoc]:
        """Endpoints whose path contains any of the keywords."""
        keys = [k.lower() for k in keywords if k]
        return [
            api for api in self.corpus.api_endpoints
            if any(k in api.path.lower() for k in keys)
        ]

    def relevant_error_codes(self, keywords: Iterable[str]) -> List[ErrorCodeDoc]:
        """Error codes whose code, message or description mentions a keyword."""
        keys = [k.lower() for k in keywords if k]
        matches: List[ErrorCodeDoc] = []
        for err in self.corpus.error_codes:
            haystacks = (err.code.lower(), err.message.lower(), err.description.lower())
            if any(k in h for k in keys for h in haystacks):
                matches.append(err)
        return matches

    # -------------------------------------------------------------------
    # Full dump
    # -------------------------------------------------------------------
    def render_full_context(self) -> str:
        """Render the entire corpus as one documentation context string."""
        parts: List[str] = []
        if self.corpus.platform_context:
            parts.append(self.corpus.platform_context + "\n\n")

        for section in self.corpus.sections:
            parts.append(f"## {section.title}\n\n")
            for article in section.articles:
                parts.append(f"### {article.title}\n")
                parts.append(f"Tags: {', '.join(article.tags)}\n")
                if article.code_references:
                    parts.append(f"Files: {', '.join(article.code_references)}\n")
                parts.append("\n" + article.content + "\n\n")

        if self.corpus.api_endpoints:
            parts.append("\n## API Reference\n\n")
            for api in self.corpus.api_endpoints:
                parts.append(
                    f"- {api.method} {api.path}: {api.description} "
                    f"({api.source_file}:{api.source_line})\n"
                )

        if self.corpus.error_codes:
            parts.append("\n## Error Codes\n\n")
            for err in self.corpus.error_codes:
                parts.append(f"- {err.code} ({err.http_status}): {err.message} - {err.description}\n")
                parts.append(f"  Causes: {', '.join(err.possible_causes)}\n")
                parts.append(f"  Solutions: {', '.join(err.solutions)}\n")

        return "".join(parts)
