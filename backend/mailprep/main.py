"""
mailprep API
FastAPI application for composing outbound email and sanitizing inbound
email bodies for LLM consumption.
"""

import logging
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mailprep.config import get_extra_cors_origins
from mailprep.routers import messages

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

app = FastAPI(
    title="mailprep API",
    description="Outbound MIME composition and LLM-safe inbound body sanitization",
    version=VERSION,
)


def get_cors_origins() -> List[str]:
    """
    Build the list of allowed CORS origins.

    Always includes http://localhost:3000 (local agent UI); extra origins
    come from CORS_ORIGINS. Duplicates are removed while preserving order.
    """
    seen: set = set()
    origins: List[str] = []
    for origin in ["http://localhost:3000"] + get_extra_cors_origins():
        if origin not in seen:
            seen.add(origin)
            origins.append(origin)
    return origins


app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(messages.router, prefix="/api/messages", tags=["messages"])


@app.get("/")
async def root():
    return {"message": "mailprep API", "version": VERSION}


@app.get("/health")
async def health():
    return {"status": "ok"}
