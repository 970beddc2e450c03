"""
Documentation Models
====================
Immutable records for the documentation corpus and its search results.

The corpus is built once at import time and shared by reference between
every concurrent analysis, so every record here is a frozen dataclass with
tuple-valued collections.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class DocArticle:
    id: str
    title: str
    content: str
    tags: Tuple[str, ...] = ()
    code_references: Tuple[str, ...] = ()
    api_endpoints: Tuple[str, ...] = ()
    error_codes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DocSection:
    id: str
    title: str
    articles: Tuple[DocArticle, ...] = ()


@dataclass(frozen=True)
class ApiEndpointDoc:
    method: str
    path: str
    description: str
    authentication: str
    source_file: str
    source_line: int


@dataclass(frozen=True)
class ErrorCodeDoc:
    code: str
    http_status: Optional[int]
    message: str
    description: str
    possible_causes: Tuple[str, ...] = ()
    solutions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentationCorpus:
    """Versioned bundle of everything the analysis can cite."""
    sections: Tuple[DocSection, ...]
    api_endpoints: Tuple[ApiEndpointDoc, ...] = ()
    error_codes: Tuple[ErrorCodeDoc, ...] = ()
    platform_context: str = ""
    version: str = "1"


@dataclass(frozen=True)
class SearchHit:
    """One ranked article for a search query."""
    section_id: str
    section_title: str
    article_id: str
    article_title: str
    relevance: int
    excerpt: str = field(default="")
