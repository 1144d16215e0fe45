from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import os
import logging

import uvicorn

from rdcredit import __version__
from rdcredit import calculator_routes, system_routes
from rdcredit.settings_loader import get_engine_settings

settings = get_engine_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="RD Credit Pro API",
    description="Federal R&D Tax Credit Estimate API",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_event():
    """Log startup information."""
    port = os.environ.get("PORT", "8000")
    logger.info(f"🚀 RD Credit Pro API starting on port {port}")
    logger.info(f"📊 Environment: {settings.environment}, corporate tax rate: {settings.corporate_tax_rate:.0%}")

@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "RD Credit Pro API",
        "version": __version__,
        "description": "Federal R&D Tax Credit Estimate",
        "docs": "/docs",
        "health": "/api/system/health"
    }


# Register Routers
app.include_router(calculator_routes.router)
app.include_router(system_routes.router)


def run():
    """Serve the API with uvicorn (HOST/PORT from the environment)."""
    uvicorn.run(
        "rdcredit.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
