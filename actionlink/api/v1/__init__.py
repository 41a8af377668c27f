"""
API v1 Router
Aggregates all v1 endpoints
"""

from fastapi import APIRouter

from actionlink.api.v1.endpoints import actions, execute, links

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(actions.router)
api_router.include_router(execute.router)
api_router.include_router(links.router)
