import logging

from fastapi import FastAPI, Depends, Query, Request, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamboard.config import settings
from teamboard.database import get_session_factory
from teamboard.errors import ErrorKind, TeamboardError
from teamboard.routers import auth, user, project, task, tag, team, dashboard
from teamboard.services.scheduler import email_retry_scheduler
from teamboard.services.websocket_manager import websocket_manager
from teamboard.utils.auth import resolve_user

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Teamboard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error envelopes: {"error": {"code": ..., "message": ...}}
@app.exception_handler(TeamboardError)
async def teamboard_error_handler(request: Request, exc: TeamboardError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": ErrorKind.VALIDATION_ERROR.value,
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors()),
            }
        },
    )


# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(user.router, prefix="/users", tags=["Users"])
app.include_router(project.router, prefix="/projects", tags=["Projects"])
app.include_router(task.router)
app.include_router(tag.router)
app.include_router(team.router, prefix="/team", tags=["Team"])
app.include_router(dashboard.router)


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Start the email retry scheduler when the application starts"""
    logger.info("Starting Teamboard API...")
    if settings.SCHEDULER_ENABLED:
        email_retry_scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the email retry scheduler when the application shuts down"""
    logger.info("Shutting down Teamboard API...")
    email_retry_scheduler.stop()


# Root route
@app.get("/")
def read_root():
    return {"message": "Teamboard API"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/scheduler/status")
def get_scheduler_status():
    """Get scheduler status and job information"""
    return email_retry_scheduler.get_status()


# WebSocket endpoint pushing refresh events to project members
@app.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(None),
    session_factory=Depends(get_session_factory),
):
    user_id = None
    if token:
        db = session_factory()
        try:
            current_user = resolve_user(db, token)
            user_id = current_user.id if current_user else None
        finally:
            db.close()

    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    await websocket_manager.connect(websocket, user_id)
    try:
        while True:
            # Clients only listen; anything they send is treated as a keepalive
            await websocket.receive_text()
    except WebSocketDisconnect:
        websocket_manager.disconnect(websocket, user_id)
