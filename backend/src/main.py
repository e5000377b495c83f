# main.py
# Entry point for the history service.
# - Initializes FastAPI app
# - Registers the history routes
# - Provides root health-check endpoints
# - Run with: uvicorn backend.src.main:app --reload
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api.history_routes import history_validation_handler, router as history_router
from .config.settings import load_settings

settings = load_settings()
logging.basicConfig(level=settings.log_level)

app = FastAPI(
    title=settings.api_title,
    description="Aggregation, filtering and export of profile analysis history",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root():
    return {"status": "healthy", "message": "History API is running"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.add_exception_handler(RequestValidationError, history_validation_handler)
app.include_router(history_router)
