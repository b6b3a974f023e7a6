import logging

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.auth.router import router as auth_router
from app.employees.router import router as employees_router
from app.error_handlers import register_error_handlers
from app.invites.router import router as invites_router
from app.invites.settings import invite_settings
from app.settings import app_settings

logging.getLogger("app").setLevel(app_settings.log_level.upper())


app = FastAPI(title="staffgate")

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[invite_settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(invites_router)
app.include_router(employees_router)
