"""API v1 router."""
from fastapi import APIRouter

from taskhub.api.v1.auth import router as auth_router
from taskhub.api.v1.tenants import router as tenants_router
from taskhub.api.v1.users import router as users_router
from taskhub.api.v1.projects import router as projects_router
from taskhub.api.v1.tasks import router as tasks_router


router = APIRouter()

router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
router.include_router(tenants_router, prefix="/tenants", tags=["Tenants"])
router.include_router(users_router, tags=["Users"])
router.include_router(projects_router, prefix="/projects", tags=["Projects"])
router.include_router(tasks_router, tags=["Tasks"])
