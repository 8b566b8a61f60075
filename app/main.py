from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
import os
import logging

from app.config import settings

# Init app
app = FastAPI(title=f"{settings.ORGANIZATION_SHORT_NAME} Scholarship Portal")

# Enable logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

origins = settings.cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600
)

# Uploaded documents
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")
logger.info(f"Uploads mounted at /uploads from {settings.UPLOAD_DIR}")

# Route Registrations
from app.routes import (  # noqa: E402
    auth_router,
    users_router,
    scholarships_router,
    admin_scholarships_router,
    applications_router,
    admin_applications_router,
    events_router,
    admin_events_router,
    health_router,
)

routers = [
    auth_router,
    users_router,
    scholarships_router,
    admin_scholarships_router,
    applications_router,
    admin_applications_router,
    events_router,
    admin_events_router,
    health_router,
]

for router in routers:
    app.include_router(router)
    logger.info(f"Included router: {router.prefix}")


@app.get("/", include_in_schema=False)
async def root():
    return {
        "status": "ok",
        "message": f"Welcome to the {settings.ORGANIZATION_NAME} Scholarship Portal API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "endpoints": [
            "/auth/* - Signup, login and profile",
            "/scholarships/* - Public scholarship listings",
            "/applications/* - Application wizard and documents",
            "/events/* - Events and registrations",
            "/admin/* - Administration",
            "/health - System health check"
        ]
    }


# Global exception handlers
@app.exception_handler(404)
async def not_found_exception_handler(request: Request, exc: HTTPException):
    detail = getattr(exc, "detail", None)
    if not detail or detail == "Not Found":
        detail = f"Endpoint {request.url.path} not found"
    return JSONResponse(status_code=404, content={"detail": detail})


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error(f"Internal server error on {request.url.path}: {exc}")
    detail = getattr(exc, "detail", None) or "Internal server error"
    return JSONResponse(status_code=500, content={"detail": detail})


# Startup event
@app.on_event("startup")
async def startup_event():
    logger.info("🚀 Scholarship Portal starting up...")
    logger.info(f"📁 Upload directory: {settings.UPLOAD_DIR}")
    logger.info(f"🌐 CORS enabled for origins: {origins}")
    if not settings.email_enabled:
        logger.warning("📧 EMAIL_HOST not set, outgoing email will be simulated")
    logger.info("✅ Server is ready to handle requests")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("🛑 Scholarship Portal shutting down...")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info"
    )
