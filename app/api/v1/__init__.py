"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import admin, applications, auth, companies, files, jobs, stats

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(companies.router, prefix="/companies", tags=["Companies"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
api_router.include_router(applications.router, prefix="/applications", tags=["Applications"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(stats.router, prefix="/stats", tags=["Stats"])
api_router.include_router(files.router, prefix="/files", tags=["Files"])
