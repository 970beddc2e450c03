import uvicorn
import time
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from bugscope.api.analyze_bug import router as analyze_bug_router, shutdown_orchestrator
from bugscope.api.docs import router as docs_router
from bugscope.core.config import LOG_DIR, LOG_LEVEL
from bugscope.utils.logging_config import resolve_level, setup_logging

# Initialize logging
setup_logging(level=resolve_level(LOG_LEVEL), log_dir=LOG_DIR)
logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await shutdown_orchestrator()
    logger.info("Analysis clients closed")


app = FastAPI(title="Bug Report Analysis API", lifespan=lifespan)

# ---------------------------------------------------------------------------
# Logging Middleware
# ---------------------------------------------------------------------------
class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Incoming: {request.method} {request.url.path} from {client_host}")

        try:
            response = await call_next(request)
            process_time = (time.time() - start_time) * 1000
            logger.info(
                f"Outgoing: {request.method} {request.url.path} - "
                f"Status: {response.status_code} - "
                f"Time: {process_time:.2f}ms"
            )
            return response
        except Exception as e:
            logger.error(f"Request failed: {request.method} {request.url.path} - Error: {str(e)}")
            raise

app.add_middleware(LoggingMiddleware)

# ---------------------------------------------------------------------------
# CORS: allow the platform frontend to call the analysis service
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health endpoint
@app.get("/health")
async def health_check():
    return {"status": "ok"}

# Register routers
app.include_router(analyze_bug_router)
app.include_router(docs_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
