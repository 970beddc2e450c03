"""
Context Builder Tests
=====================
Tests for keyword derivation and documentation context assembly.
"""
from bugscope.context.builder import ContextBuilder, derive_keywords
from bugscope.docs.index import DocumentationIndex
from bugscope.models.bug_report import BugReport
from bugscope.models.docs import DocArticle, DocSection, DocumentationCorpus


class TestDeriveKeywords:
    def test_page_category_and_description(self):
        keywords = derive_keywords("/admin/bugs", "ui", "Impersonation timer error")
        assert keywords == ["admin", "bugs", "components", "impersonation", "troubleshooting"]

    def test_deduplicated_in_first_seen_order(self):
        assert derive_keywords("/course/12", "other", "Video will not play") == ["content", "media"]

    def test_login_and_register_map_to_auth(self):
        assert derive_keywords("/register", "other", "") == ["auth"]
        assert derive_keywords("/login", "other", "otp never arrives") == ["auth"]

    def test_other_category_adds_nothing(self):
        assert derive_keywords("", "other", "") == []

    def test_description_is_case_insensitive(self):
        assert "payments" in derive_keywords("", "other", "STRIPE checkout broken")


class TestBuildContext:
    def test_no_hits_returns_full_corpus(self):
        index = DocumentationIndex()
        builder = ContextBuilder(index)
        assert builder.build_context("/nowhere", "other", "xyz") == index.render_full_context()

    def test_no_hits_on_custom_corpus(self):
        corpus = DocumentationCorpus(sections=(
            DocSection("s", "Section", (DocArticle("a", "Unrelated", "Nothing to see."),)),
        ))
        index = DocumentationIndex(corpus)
        context = ContextBuilder(index).build_context("/admin", "ui", "broken")
        assert context == index.render_full_context()
        assert "Unrelated" in context

    def test_hits_rendered_with_headers(self):
        builder = ContextBuilder(DocumentationIndex())
        context = builder.build_context("/admin", "other", "impersonation banner gone")
        assert "# Relevant Documentation" in context
        assert "## User Impersonation > Impersonation Overview" in context
        assert "Relevance: " in context
        assert "## Relevant Error Codes" in context
        assert "IMPERSONATION_BLOCKED" in context


class TestBuildBugContext:
    def test_bug_block_appended(self):
        bug = BugReport(
            id="bug-1",
            title="Timer missing",
            description="Impersonation timer not shown",
            severity="high",
            category="ui",
            pageUrl="/admin/users",
            screenshotRef="/api/media/shot.png",
            userAgent="Mozilla/5.0",
        )
        context = ContextBuilder(DocumentationIndex()).build_bug_context(bug)
        assert "# Bug Report to Analyze" in context
        assert "**ID:** bug-1" in context
        assert "**Severity:** high" in context
        assert "**User Agent:** Mozilla/5.0" in context
        assert "**Has Screenshot:** Yes" in context
        assert "**Has Video:** No" in context
        assert context.index("# Relevant Documentation") < context.index("# Bug Report to Analyze")
