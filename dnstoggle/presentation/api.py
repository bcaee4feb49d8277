from fastapi import APIRouter

from dnstoggle.presentation.routers.v1.audit import router as audit_router
from dnstoggle.presentation.routers.v1.credential import router as credential_router
from dnstoggle.presentation.routers.v1.profiles import router as profiles_router
from dnstoggle.presentation.routes.health import router as health_router

api = APIRouter()
api.include_router(health_router)

# Add all v1 routers here
routers = (profiles_router, credential_router, audit_router)
for router in routers:
    api.include_router(router, prefix="/v1")
