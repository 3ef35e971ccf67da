from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.exceptions import RequestValidationError
from app.core.config import settings
from app.core.database import Base, engine
from app.core.exceptions import AppException
from app.core.logging import configure_logging
from app.endpoints import admin, content, notification, parent_child, progress, upload
from app.middleware.exceptions import (
    app_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.models import content as content_model, notification as notification_model  # noqa: F401
from app.models import parent_child_link as link_model, progress as progress_model, user as user_model  # noqa: F401
from app.schemas.response import APIResponse

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.include_router(content.router, tags=["Content"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])
app.include_router(progress.router, prefix="/progress", tags=["Progress"])
app.include_router(parent_child.router, prefix="/parent", tags=["Parent"])
app.include_router(notification.router, prefix="/notifications", tags=["Notifications"])
app.include_router(upload.router, prefix="/uploads", tags=["Uploads"])


@app.get("/health", response_model=APIResponse[dict], tags=["Health"])
async def health():
    return APIResponse(message="OK", data={"status": "ok", "version": settings.VERSION})


@app.on_event("startup")
async def startup_event():
    configure_logging()
    Base.metadata.create_all(bind=engine)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
