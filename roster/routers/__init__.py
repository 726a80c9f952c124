"""
FastAPI routers.

Each module exposes an APIRouter included by create_app(); handlers reach the
shared MemberEditor through request.app.state.
"""
