import os
import time
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from dotenv import load_dotenv

# Import our modules
from pipeline.errors import LeadSearchError
from pipeline.registry import load_registry
from pipeline.nodes.classify import build_filter
from pipeline.orchestrator import SearchOrchestrator
from connectors.places import PlacesClient

VERSION = "1.0.0"

# Load environment variables
load_dotenv()

# Configure logging
logger.add(os.getenv("LOG_FILE", "logs/app.log"), rotation="1 day", retention="7 days", level="INFO")

# Initialize FastAPI app
app = FastAPI(
    title="Independent Business Lead Finder",
    description="Finds non-chain local businesses without their own website",
    version=VERSION
)

# Browser front-ends call the API cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)

def build_orchestrator() -> SearchOrchestrator:
    """Wire the registry, active lead filter and places client together."""
    registry = load_registry()
    lead_filter = build_filter(os.getenv("LEAD_FILTER", "chain_exclusion"), registry)
    return SearchOrchestrator(PlacesClient(), lead_filter)

# Initialize orchestrator (registry is read-only and shared by all requests)
orchestrator = build_orchestrator()

@app.get("/api/search")
async def search(area: Optional[str] = None, category: Optional[str] = None):
    """
    Search a places provider and return independent business leads.

    Example: GET /api/search?area=鎌倉&category=カフェ
    """
    start_time = time.time()

    try:
        leads = await orchestrator.search(area, category)
    except LeadSearchError as e:
        log = logger.warning if e.status_code < 500 else logger.error
        log(f"Search failed for area={area!r} category={category!r}: {e.detail}")
        return JSONResponse(status_code=e.status_code, content={"error": e.message})

    processing_time = time.time() - start_time
    logger.info(f"Search completed in {processing_time:.2f}s: {len(leads)} leads for area={area!r} category={category!r}")

    return {"leads": leads}

@app.get("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": VERSION,
        "services": {
            "lead_filter": orchestrator.lead_filter.name,
            "registry": orchestrator.lead_filter.registry.version,
            "places_api_key": "configured" if orchestrator.client.api_key else "missing"
        }
    }

# Error handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )

if __name__ == "__main__":
    import uvicorn

    # Create logs directory if it doesn't exist
    os.makedirs("logs", exist_ok=True)

    logger.info("Starting Independent Business Lead Finder")

    uvicorn.run(
        "app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        reload=True,
        log_level="info"
    )
