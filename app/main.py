# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.api_router import api_router
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.memory_store import MemoryStore
from app.services.ai_service import AIService
from app.services.inflight import InFlightRegistry

configure_logging()

app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # bad input is a 400 for this API, not FastAPI's 422
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.on_event("startup")
def on_startup():
    logging.info("Starting up: creating in-memory store and AI providers...")
    app.state.store = MemoryStore()
    app.state.ai_service = AIService()
    app.state.inflight = InFlightRegistry()
    logging.info(
        "Startup complete (gemini key: %s, huggingface key: %s)",
        bool(settings.GEMINI_API_KEY),
        bool(settings.HUGGINGFACE_API_KEY),
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
