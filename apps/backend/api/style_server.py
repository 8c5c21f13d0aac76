import logging
import os
from datetime import datetime

import sentry_sdk
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from setup_logging_optimized import setup_logging, get_logger

# Load env vars before anything reads them
load_dotenv(override=True)

# Configure logging for the entire application
setup_logging()
logger = get_logger(__name__)

# Configure Sentry (no-op when SENTRY_DSN is unset)
sentry_logging = LoggingIntegration(
    level=logging.INFO,        # Capture info and above as breadcrumbs
    event_level=logging.ERROR  # Send errors as events
)

sentry_sdk.init(
    dsn=os.getenv("SENTRY_DSN"),
    integrations=[
        FastApiIntegration(transaction_style='endpoint'),
        sentry_logging,
    ],
    traces_sample_rate=0.1,
    environment=os.getenv("ENV", "development"),
    release=os.getenv("RENDER_GIT_COMMIT", "unknown"),
    send_default_pii=False,
)

from api.requests.api_styles import router as styles_router

app = FastAPI(title="Style Match API")

ENVIRONMENT = (
    os.getenv("ENVIRONMENT")
    or os.getenv("ENV")
    or "development"
).lower()

allowed_origins = {
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "").split(",")
    if origin.strip()
}

if ENVIRONMENT != "production":
    allowed_origins.update(
        {
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        }
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=3600,  # Cache preflight requests for 1 hour
)

app.include_router(styles_router)


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


if __name__ == "__main__":
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "9090"))

    logger.info(f"Starting Style Match API on {host}:{port} ({ENVIRONMENT})")
    uvicorn.run("api.style_server:app", host=host, port=port, reload=ENVIRONMENT != "production", workers=1)
