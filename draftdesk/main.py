from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from draftdesk.api.routes import agents, pipeline
from draftdesk.config import settings
from draftdesk.models.schemas import ErrorResponse
from draftdesk.services import logger as log_service

VALUE_ERROR_PREFIX = "Value error, "


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_service.log_event("startup", "DraftDesk API starting")
    yield
    log_service.log_event("shutdown", "DraftDesk API stopping")


app = FastAPI(
    title="DraftDesk",
    description="Topic research, drafting and editing pipeline",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def format_validation_error(exc: RequestValidationError) -> str:
    """Collapse pydantic's error list into one readable message."""
    messages = []
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            messages.append("Request body must be valid JSON")
            continue
        message = str(error.get("msg", "Invalid request"))
        if message.startswith(VALUE_ERROR_PREFIX):
            message = message[len(VALUE_ERROR_PREFIX):]
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        messages.append(f"{'.'.join(loc)}: {message}" if loc else message)
    return "; ".join(messages) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = format_validation_error(exc)
    log_service.log_event(
        "request_rejected",
        message,
        path=request.url.path,
    )
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


# Routes
app.include_router(pipeline.router)
app.include_router(agents.router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "draftdesk"}
