"""
DocChat Backend API
Document chat with pluggable LLM providers
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from docchat.api.routes import chat, sessions, llm_settings, health
from docchat.core.config import settings
from docchat.core.database import engine
# Import all models to ensure they're registered with Base
from docchat.models import Base, ChatSession, ChatTurn, ProviderConfig, ApiUsage  # noqa: F401
from docchat.middleware.logging import StructuredLoggingMiddleware
from docchat.middleware.error_handling import ErrorHandlingMiddleware, register_exception_handlers
import logging

app = FastAPI(
    title="DocChat API",
    description="Document chat with pluggable LLM providers",
    version="1.0.0"
)

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

@app.on_event("startup")
def startup_event():
    """Create database tables and report LLM provider defaults on startup"""
    try:
        logging.info("Starting database initialization...")
        Base.metadata.create_all(bind=engine)
        logging.info("Database tables created successfully")
    except Exception as e:
        logging.error(f"Database initialization failed: {str(e)}")
        raise RuntimeError(f"Failed to initialize database: {str(e)}")

    logging.info(
        f"Default LLM provider: {settings.default_llm_provider} "
        f"(model {settings.default_llm_model})"
    )
    if not any([settings.openai_api_key, settings.google_api_key, settings.claude_api_key]):
        logging.warning(
            "No hosted LLM API key is configured (OPENAI_API_KEY, GOOGLE_API_KEY, CLAUDE_API_KEY). "
            "Hosted providers will only work for users who store their own key."
        )

# Add middleware (order matters - last added is first executed)
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(StructuredLoggingMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(chat.router, prefix="/api", tags=["chat"])
app.include_router(sessions.router, prefix="/api", tags=["sessions"])
app.include_router(llm_settings.router, prefix="/api", tags=["settings"])
app.include_router(health.router, tags=["health"])
