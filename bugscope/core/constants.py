"""
Constants
Centralised storage for enums, media prefixes and fixed result texts.
"""
CONFIDENCE_LEVELS = ("low", "medium", "high")
EFFORT_LEVELS = ("quick", "moderate", "significant")

# Relative references served by the platform's media endpoint
INTERNAL_MEDIA_PREFIX = "/api/media/"
# URL fragments that identify the platform's own bucket
INTERNAL_BUCKET_MARKERS = ("/uploads/", "r2.dev")

SEARCH_RESULT_LIMIT = 5
EXCERPT_BEFORE = 50
EXCERPT_AFTER = 100
EXCERPT_FALLBACK_LENGTH = 150

TRUNCATION_MARKER = "..."

NOT_CONFIGURED_SUMMARY = "AI analysis not configured"
NOT_CONFIGURED_ERROR = "AI Gateway not configured"
FAILED_SUMMARY = "Analysis failed"
FAILED_CAUSE = "Unable to complete AI analysis"
