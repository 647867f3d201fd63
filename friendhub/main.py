import logging

import socketio
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from friendhub.api.friends.router import router as friends_router
from friendhub.api.health.router import router as health_router
from friendhub.api.users.router import router as users_router
from friendhub.core.config import settings
from friendhub.core.exceptions import FriendhubError, InvalidArgument, Unavailable
from friendhub.websocket.websocket_manager import dispatcher, sio

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="API друзей и онлайн-статуса",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(friends_router)
app.include_router(health_router)
app.include_router(users_router)

socket_app = socketio.ASGIApp(sio, app)


@app.on_event("shutdown")
async def drain_notifications():
    await dispatcher.drain()


@app.exception_handler(FriendhubError)
async def friendhub_error_handler(request: Request, exc: FriendhubError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [
        ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path"))
        for error in exc.errors()
    ]
    error = InvalidArgument(f"Параметры запроса некорректны: {', '.join(f for f in fields if f)}")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.url.path}: {exc}")
    error = Unavailable()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(404)
async def not_found_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=404,
        content={
            "error": "not_found",
            "message": "Не найдено",
            "path": str(request.url),
            "status_code": 404
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "internal",
            "message": "Внутренняя ошибка сервера",
            "status_code": 500
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        socket_app,
        host="127.0.0.1",
        port=8000,
        log_level="info",
    )
