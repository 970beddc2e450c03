"""
Platform Documentation Corpus
=============================
Static knowledge base the analysis grounds its diagnosis in.

Structure:
    DocumentationCorpus
      ├── platform_context  — short preamble sent with every context
      ├── sections          — ordered DocSection → ordered DocArticle
      ├── api_endpoints     — endpoint reference with source locations
      └── error_codes       — error catalog with causes and solutions

Adding troubleshooting knowledge means adding an article here and bumping
CORPUS_VERSION. Nothing mutates the corpus at runtime.
"""
from bugscope.models.docs import (
    ApiEndpointDoc,
    DocArticle,
    DocSection,
    DocumentationCorpus,
    ErrorCodeDoc,
)

CORPUS_VERSION = "2025.12"

PLATFORM_CONTEXT = """
# Metabolic Reset Challenge Platform

## Technology Stack
- Frontend: React 18 + Vite + TypeScript + Tailwind CSS + shadcn/ui
- Backend: Cloudflare Workers + Durable Objects + Hono
- Database: Cloudflare D1 (SQLite)
- Storage: Cloudflare R2 (images/videos)
- Payments: Stripe ($28 per project enrollment)
- Auth: Phone-based OTP via Twilio
- AI: Gemini via Cloudflare AI Gateway

## User Roles
1. Participants: pay for a project, track habits, submit biometrics
2. Coaches (group leaders): free registration, referral links, team roster
3. Administrators: full access, impersonation, content management
""".strip()


_OVERVIEW = DocSection(
    id="overview",
    title="Getting Started",
    articles=(
        DocArticle(
            id="introduction",
            title="Platform Introduction",
            tags=("overview", "architecture", "introduction"),
            content="""
The Metabolic Reset Challenge is a 28-day health transformation platform.

Key Features:
- Daily habit tracking (water, steps, sleep, lessons)
- Weekly biometric submissions with photo evidence
- Course content with videos and quizzes
- Coach/team leader referral system
- Admin panel with AI-powered bug analysis

Tech Stack:
- Frontend: React + Vite + TypeScript + Tailwind + shadcn/ui
- Backend: Cloudflare Workers + Durable Objects
- Database: D1 (SQLite), Storage: R2
""".strip(),
        ),
        DocArticle(
            id="navigation",
            title="Admin Panel Navigation",
            tags=("admin", "navigation", "tabs"),
            code_references=("src/pages/app/AdminPage.tsx",),
            content="""
Admin Panel Tabs:
- Users: manage participants and coaches, impersonate users
- Projects: create and configure challenge cohorts
- Content: manage videos, lessons and quizzes (ContentManager)
- Bugs: review bug reports and trigger AI analysis
- Genealogy: referral trees and team structures
- Settings: system-wide configuration
- Deleted: restore soft-deleted users
- Payments: Stripe transaction history
- Docs: this documentation system

Key Files:
- src/pages/app/AdminPage.tsx
- src/components/admin/ContentManager.tsx
- worker/user-routes.ts
""".strip(),
        ),
    ),
)

_BUG_TRACKING = DocSection(
    id="bug-tracking",
    title="Bug Tracking",
    articles=(
        DocArticle(
            id="bug-overview",
            title="Bug Tracking System",
            tags=("bugs", "reporting", "screenshots", "video"),
            code_references=(
                "src/components/FloatingBugCapture.tsx",
                "src/components/BugReportDialog.tsx",
                "worker/entities.ts",
            ),
            api_endpoints=("/api/bugs", "/api/admin/bugs"),
            content="""
Bug Reporting Flow:
1. User clicks the floating bug icon (bottom-right)
2. Fills out the form: title, description, severity, category
3. Optionally captures a screenshot or screen recording
4. Submits to /api/bugs

Bug Fields:
- severity: critical | high | medium | low
- status: open | in_progress | resolved | closed
- category: ui | functionality | performance | data | other
- screenshotUrl, videoUrl: R2 storage URLs served from /api/media/

Key Files:
- src/components/FloatingBugCapture.tsx
- src/components/BugReportDialog.tsx
- src/lib/bug-report-store.ts
- worker/entities.ts:374 (BugReportEntity)
- worker/user-routes.ts:3561 (POST /api/bugs)
""".strip(),
        ),
        DocArticle(
            id="ai-analysis",
            title="AI Bug Analysis",
            tags=("ai", "gemini", "analysis", "solutions"),
            code_references=("worker/ai-utils.ts", "src/components/admin/BugAIAnalysisPanel.tsx"),
            api_endpoints=("/api/admin/bugs/:bugId/analyze", "/api/admin/bugs/:bugId/analysis"),
            error_codes=("AI_ANALYSIS_FAILED",),
            content="""
AI Bug Analysis sends the report to Gemini through the Cloudflare AI Gateway,
falling back to the direct Gemini API when the gateway fails.

Analysis includes:
- Screenshot vision analysis (visible errors, UI elements)
- Video analysis (reproduction steps, error timestamps)
- Documentation context (relevant articles)
- Suggested solutions with effort estimates
- Related documentation links

Configuration:
- AI_GATEWAY_ACCOUNT_ID: Cloudflare account ID
- AI_GATEWAY_ID: gateway name (default: bug-analysis)
- GEMINI_API_KEY: Google Gemini API key

Troubleshooting:
- "Analysis failed": check gateway config and verify the API key
- Low confidence: add more detail or attach a screenshot
- No related docs: the bug may be in an undocumented area
""".strip(),
        ),
        DocArticle(
            id="bug-triage",
            title="Bug Triage Process",
            tags=("triage", "severity", "workflow"),
            content="""
Daily Triage Routine:
1. Check new submissions (status: open)
2. Run AI analysis on bugs with screenshots or videos
3. Verify the severity is categorized correctly
4. Assess user impact
5. Update status and add admin notes

Severity Guide:
- Critical: crashes, data loss, security, payment failures
- High: major feature broken for most users
- Medium: partial functionality, workaround exists
- Low: cosmetic issues, edge cases
""".strip(),
        ),
    ),
)

_IMPERSONATION = DocSection(
    id="impersonation",
    title="User Impersonation",
    articles=(
        DocArticle(
            id="overview",
            title="Impersonation Overview",
            tags=("security", "admin", "debugging", "impersonation"),
            code_references=("src/components/impersonation-banner.tsx", "src/lib/auth-store.ts"),
            api_endpoints=("/api/admin/impersonate/:userId",),
            error_codes=("IMPERSONATION_BLOCKED",),
            content="""
Impersonation lets admins view the app as any user.

Security Features:
- Admin-only access (isAdmin: true required)
- 60-minute session timeout
- View-only mode (mutations blocked via assertNotImpersonating)
- Visual banner with countdown timer
- Full audit logging

Blocked Actions:
- Submitting habits or biometrics
- Updating the profile
- Payment submissions
""".strip(),
        ),
        DocArticle(
            id="troubleshooting",
            title="Impersonation Troubleshooting",
            tags=("troubleshooting", "errors", "impersonation"),
            error_codes=("IMPERSONATION_BLOCKED", "AUTH_ADMIN_REQUIRED"),
            content="""
Common Issues:

"Cannot impersonate user":
- Verify admin privileges (isAdmin: true)
- Check that the target user exists
- End any existing session first

Timer not showing:
- Hard refresh the page or start a new session

Actions still working while impersonating:
- The mutation is missing its assertNotImpersonating guard (use-queries.ts)

Session ended unexpectedly:
- 60-minute timeout reached, or another tab ended the session
""".strip(),
        ),
    ),
)

_USER_MANAGEMENT = DocSection(
    id="user-management",
    title="User Management",
    articles=(
        DocArticle(
            id="user-roles",
            title="User Roles & Permissions",
            tags=("users", "roles", "permissions", "security"),
            code_references=("shared/types.ts", "worker/entities.ts"),
            error_codes=("AUTH_ADMIN_REQUIRED", "AUTH_NOT_AUTHENTICATED"),
            content="""
User Roles:
1. Participants: pay for a project, track habits, submit biometrics
2. Coaches (isGroupLeader: true): free, referral links, team roster
3. Administrators (isAdmin: true): full access, impersonation

Key Fields:
- isAdmin: administrator access
- isGroupLeader: coach status
- referralCode: unique referral code
- currentProjectId: active project
""".strip(),
        ),
        DocArticle(
            id="authentication",
            title="Authentication System",
            tags=("auth", "login", "otp", "phone"),
            code_references=("src/pages/auth/OtpLoginPage.tsx", "worker/entities.ts"),
            api_endpoints=("/api/otp/send", "/api/otp/verify"),
            error_codes=("OTP_EXPIRED", "OTP_MAX_ATTEMPTS"),
            content="""
OTP Authentication Flow:
1. User enters a phone number (+1XXXXXXXXXX format)
2. A 6-digit OTP is sent via Twilio SMS
3. User enters the code within 10 minutes
4. On verify: existing users log in, new users register

OTP Rules:
- Expires after 10 minutes
- Max 5 failed attempts; requesting a new code resets the counter

Common Issues:
- OTP not received: check Twilio config and phone format
- Code expired or too many attempts: request a new code
""".strip(),
        ),
    ),
)

_DAILY_TRACKING = DocSection(
    id="daily-tracking",
    title="Daily Habit Tracking",
    articles=(
        DocArticle(
            id="habits",
            title="Daily Habits System",
            tags=("habits", "tracking", "dashboard", "points"),
            code_references=("src/pages/app/DashboardPage.tsx", "worker/entities.ts"),
            api_endpoints=("/api/score",),
            content="""
Daily Habits:
- Water, steps, sleep and lesson toggles on the dashboard

Each habit awards points (configurable in SystemSettings).
Habits reset at midnight in the user's timezone.

Key Files:
- src/pages/app/DashboardPage.tsx
- worker/entities.ts (DailyScoreEntity)
- worker/user-routes.ts (/api/score)

DailyScore ID format: projectId:userId:YYYY-MM-DD
""".strip(),
        ),
    ),
)

_BIOMETRICS = DocSection(
    id="biometrics",
    title="Weekly Biometrics",
    articles=(
        DocArticle(
            id="submissions",
            title="Biometric Submissions",
            tags=("biometrics", "weight", "measurements", "photos"),
            code_references=("src/pages/app/DashboardPage.tsx", "worker/entities.ts"),
            api_endpoints=("/api/biometrics",),
            content="""
Weekly Biometric Submissions:
- Week 0: initial measurements
- Weeks 1-4: weekly check-ins

Required Fields:
- weight, bodyFat, visceralFat, leanMass, metabolicAge
- screenshotUrl: photo proof from the smart scale

Points are awarded on submission.

WeeklyBiometric ID format: projectId:userId:weekN
""".strip(),
        ),
    ),
)

_CONTENT = DocSection(
    id="content",
    title="Course Content (LMS)",
    articles=(
        DocArticle(
            id="lms-overview",
            title="LMS System Overview",
            tags=("content", "videos", "quizzes", "courses"),
            code_references=("src/pages/app/CoursePage.tsx", "src/components/admin/ContentManager.tsx"),
            content="""
Course Content System:
- Videos: Cloudflare Stream URLs with progress tracking
- Quizzes: multiple choice, pass/fail, attempts, cooldown
- Resources: PDFs and links

Content unlocks by dayNumber (1-28) relative to the project start.
Progress is tracked per user in UserProgressEntity.

Content types: 'video' | 'quiz' | 'resource'
""".strip(),
        ),
    ),
)

_PAYMENTS = DocSection(
    id="payments",
    title="Payments & Enrollment",
    articles=(
        DocArticle(
            id="stripe",
            title="Stripe Integration",
            tags=("payments", "stripe", "enrollment", "registration"),
            code_references=("src/pages/auth/RegistrationPage.tsx",),
            content="""
Payment Flow:
1. User completes the quiz funnel and a QuizLead is captured
2. Proceeds to registration
3. A Stripe Checkout session is created ($28)
4. On success the user is created and enrolled
5. Coaches skip payment (free registration)

STRIPE_SECRET_KEY must be configured.
Enrollment is tracked in ProjectEnrollmentEntity (ID: projectId:userId).
""".strip(),
        ),
    ),
)

_REFERRALS = DocSection(
    id="referrals",
    title="Referral System",
    articles=(
        DocArticle(
            id="genealogy",
            title="Referral & Genealogy",
            tags=("referrals", "coaches", "genealogy", "teams"),
            code_references=("src/components/ui/genealogy-tree.tsx", "worker/entities.ts"),
            content="""
Referral System:
- Each user has a unique referralCode
- Coaches share referral links; new users join under the referring coach
- Points are awarded for successful referrals

The genealogy tree shows the hierarchical team structure.
Quiz links: /quiz?ref=CODE&project=ID
""".strip(),
        ),
    ),
)


API_ENDPOINTS = (
    ApiEndpointDoc("POST", "/api/bugs", "Submit bug report", "user", "worker/user-routes.ts", 3561),
    ApiEndpointDoc("GET", "/api/bugs/mine", "Get the user's bugs", "user", "worker/user-routes.ts", 3611),
    ApiEndpointDoc("GET", "/api/admin/bugs", "Get all bugs", "admin", "worker/user-routes.ts", 3624),
    ApiEndpointDoc("PATCH", "/api/admin/bugs/:bugId", "Update bug status/notes", "admin", "worker/user-routes.ts", 3672),
    ApiEndpointDoc("POST", "/api/admin/bugs/:bugId/analyze", "Trigger AI analysis", "admin", "worker/user-routes.ts", 3734),
    ApiEndpointDoc("GET", "/api/admin/bugs/:bugId/analysis", "Get AI analysis", "admin", "worker/user-routes.ts", 3821),
    ApiEndpointDoc("GET", "/api/me", "Get current user", "user", "worker/user-routes.ts", 245),
    ApiEndpointDoc("GET", "/api/admin/users", "List all users", "admin", "worker/user-routes.ts", 500),
    ApiEndpointDoc("POST", "/api/admin/impersonate/:userId", "Start impersonation", "admin", "worker/user-routes.ts", 890),
    ApiEndpointDoc("POST", "/api/otp/send", "Send OTP code", "none", "worker/user-routes.ts", 120),
    ApiEndpointDoc("POST", "/api/otp/verify", "Verify OTP", "none", "worker/user-routes.ts", 160),
    ApiEndpointDoc("GET", "/api/score", "Get today's habits", "user", "worker/user-routes.ts", 1200),
    ApiEndpointDoc("POST", "/api/score", "Update habits", "user", "worker/user-routes.ts", 1250),
    ApiEndpointDoc("GET", "/api/biometrics", "Get all biometrics", "user", "worker/user-routes.ts", 1400),
    ApiEndpointDoc("POST", "/api/biometrics", "Submit biometrics", "user", "worker/user-routes.ts", 1450),
)

ERROR_CODES = (
    ErrorCodeDoc(
        code="AUTH_NOT_AUTHENTICATED",
        http_status=401,
        message="Not authenticated",
        description="User is not logged in or the session expired",
        possible_causes=("Session expired", "Logged out in another tab", "Browser cleared storage"),
        solutions=("Redirect to login", "Clear storage and re-authenticate"),
    ),
    ErrorCodeDoc(
        code="AUTH_ADMIN_REQUIRED",
        http_status=403,
        message="Admin access required",
        description="Endpoint requires admin privileges",
        possible_causes=("isAdmin is false", "Impersonating a non-admin user"),
        solutions=("Verify isAdmin: true in the database", "End the impersonation session"),
    ),
    ErrorCodeDoc(
        code="IMPERSONATION_BLOCKED",
        http_status=403,
        message="Cannot perform while impersonating",
        description="Mutation blocked during impersonation (view-only mode)",
        possible_causes=("assertNotImpersonating guard triggered",),
        solutions=("End impersonation before making changes",),
    ),
    ErrorCodeDoc(
        code="AI_ANALYSIS_FAILED",
        http_status=500,
        message="AI analysis failed",
        description="Gemini API call failed",
        possible_causes=("GEMINI_API_KEY not configured", "Rate limit exceeded", "Invalid image format"),
        solutions=("Check AI Gateway config", "Verify API key", "Retry after a few minutes"),
    ),
    ErrorCodeDoc(
        code="OTP_EXPIRED",
        http_status=401,
        message="OTP code expired",
        description="Code is older than 10 minutes",
        possible_causes=("User waited too long",),
        solutions=("Request a new OTP code",),
    ),
    ErrorCodeDoc(
        code="OTP_MAX_ATTEMPTS",
        http_status=429,
        message="Too many verification attempts",
        description="User exceeded 5 failed attempts",
        possible_causes=("Wrong code entered 5+ times",),
        solutions=("Request a new OTP code to reset",),
    ),
)


DEFAULT_CORPUS = DocumentationCorpus(
    sections=(
        _OVERVIEW,
        _BUG_TRACKING,
        _IMPERSONATION,
        _USER_MANAGEMENT,
        _DAILY_TRACKING,
        _BIOMETRICS,
        _CONTENT,
        _PAYMENTS,
        _REFERRALS,
    ),
    api_endpoints=API_ENDPOINTS,
    error_codes=ERROR_CODES,
    platform_context=PLATFORM_CONTEXT,
    version=CORPUS_VERSION,
)
