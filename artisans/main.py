from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.database import create_db_and_tables
from .core.errors import register_exception_handlers
from .core.logging_config import configure_logging
from .api.auth import router as auth_router
from .api.users import router as user_router
from .api.projects import router as project_router
from .api.invitations import router as invitation_router
from .api.notifications import router as notification_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    yield


def create_app(init_db: bool = True) -> FastAPI:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Artisans Platform API",
        description="Notifications and project invitations for the Artisans Platform",
        version="0.1.0",
        lifespan=lifespan if init_db else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/api/health", tags=['Health Check'])
    async def health_check():
        return {"status": "ok", "message": "Artisans Platform API is running"}

    app.include_router(auth_router, prefix='/api/auth', tags=['Authentication'])
    app.include_router(user_router, prefix='/api/users', tags=['Users'])
    app.include_router(project_router, prefix='/api/projects', tags=['Projects'])
    app.include_router(invitation_router, prefix='/api', tags=['Invitations'])
    app.include_router(notification_router, prefix='/api/notifications', tags=['Notifications'])
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("artisans.main:app", host="0.0.0.0", port=8000, reload=True)
