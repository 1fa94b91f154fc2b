import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from feedback360.api.admin import router as admin_router
from feedback360.api.auth import router as auth_router
from feedback360.api.employees import router as employees_router
from feedback360.api.feedback import router as feedback_router
from feedback360.api.health import router as health_router
from feedback360.api.know_about_me import router as know_about_me_router
from feedback360.api.lead import router as lead_router
from feedback360.api.manager import router as manager_router
from feedback360.api.me import router as me_router
from feedback360.api.root import router as root_router
from feedback360.core.config import settings
from feedback360.core.errors import register_exception_handlers
from feedback360.core.logging import request_id_var, setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="360 Feedback")

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# One signed cookie carries the employee, manager-console and admin-console sessions
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_TTL_SECONDS,
    same_site="lax",
    https_only=settings.SESSION_HTTPS_ONLY,
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    token = request_id_var.set(req_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = req_id
    return response


register_exception_handlers(app)

app.include_router(root_router)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(me_router)
app.include_router(employees_router)
app.include_router(feedback_router)
app.include_router(manager_router)
app.include_router(lead_router)
app.include_router(admin_router)
app.include_router(know_about_me_router)

logger.info("Application configured", extra={"env": settings.APP_ENV})
