"""
Documentation API
=================
Read-only views over the documentation corpus.

    GET /api/docs                         — section list with article summaries
    GET /api/docs/sections/{section_id}   — one full section (404 if unknown)
    GET /api/docs/search?q=...            — ranked search hits (400 if q is blank)
"""
import logging
from functools import lru_cache
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from bugscope.docs.index import DocumentationIndex
from bugscope.models.docs import DocSection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/docs", tags=["Documentation"])


@lru_cache(maxsize=1)
def get_index() -> DocumentationIndex:
    return DocumentationIndex()


def _section_summary(section: DocSection) -> dict:
    return {
        "id": section.id,
        "title": section.title,
        "articles": [
            {"id": a.id, "title": a.title, "tags": list(a.tags)}
            for a in section.articles
        ],
    }


def _section_detail(section: DocSection) -> dict:
    return {
        "id": section.id,
        "title": section.title,
        "articles": [
            {
                "id": a.id,
                "title": a.title,
                "content": a.content,
                "tags": list(a.tags),
                "codeReferences": list(a.code_references),
                "apiEndpoints": list(a.api_endpoints),
                "errorCodes": list(a.error_codes),
            }
            for a in section.articles
        ],
    }


@router.get("")
async def list_docs(index: DocumentationIndex = Depends(get_index)):
    sections: List[dict] = [_section_summary(s) for s in index.sections]
    return {
        "version": index.corpus.version,
        "sections": sections,
        "totalArticles": index.article_count(),
    }


@router.get("/sections/{section_id}")
async def get_section(section_id: str, index: DocumentationIndex = Depends(get_index)):
    section = index.get_section(section_id)
    if section is None:
        raise HTTPException(status_code=404, detail=f"Section '{section_id}' not found")
    return _section_detail(section)


@router.get("/search")
async def search_docs(
    q: str = Query(default=""),
    index: DocumentationIndex = Depends(get_index),
):
    if not q.strip():
        raise HTTPException(status_code=400, detail="Query parameter 'q' is required")

    hits = index.search(q)
    logger.info(f"[API] Docs search '{q}' returned {len(hits)} hit(s)")
    return {
        "query": q,
        "results": [
            {
                "sectionId": h.section_id,
                "sectionTitle": h.section_title,
                "articleId": h.article_id,
                "articleTitle": h.article_title,
                "relevance": h.relevance,
                "excerpt": h.excerpt,
            }
            for h in hits
        ],
    }
