import logging
from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from database import SessionLocal, create_tables
from auth import ensure_superuser
from admin import setup_admin
from repository import FlashcardRepository, RepositoryError, get_repository
from schemas import HomeOut, SetOut
from study import StudySessionStore, StudySessionError, EmptySetError
from routers import auth, sets, cards, study, visitors, admin as admin_api

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Decksy",
    description="Community flashcards: build sets, search them and study in flip or quiz mode",
    version="0.1.0",
    openapi_tags=[
        {"name": "Authentication", "description": "Registration and JWT login."},
        {"name": "Sets", "description": "Browse, search, create, import, edit and delete flashcard sets."},
        {"name": "Cards", "description": "Add, edit and delete cards inside a set."},
        {"name": "Study", "description": "Flip and quiz study sessions over one set."},
        {"name": "Visitors", "description": "Anonymous visitor counting."},
        {"name": "Admin", "description": "Dashboard totals and moderation. Superusers only."},
    ],
    swagger_ui_parameters={"persistAuthorization": True}
)

app.state.study_sessions = StudySessionStore(limit=config.STUDY_SESSION_LIMIT)
app.state.answer_delay = config.ANSWER_DELAY_SECONDS

app.include_router(auth.router)
app.include_router(sets.router)
app.include_router(cards.router)
app.include_router(study.router)
app.include_router(visitors.router)
app.include_router(admin_api.router)

admin = setup_admin(app)


@app.get("/", response_model=HomeOut, summary="Home page summary", tags=["Sets"])
async def home(repo: FlashcardRepository = Depends(get_repository)):
    recent = await repo.list_sets(limit=config.HOME_RECENT_SETS)
    return HomeOut(
        recent_sets=[SetOut.model_validate(s) for s in recent],
        total_cards=await repo.count_cards(),
        unique_visitors=await repo.count_visitors(),
    )


@app.on_event("startup")
async def startup():
    await create_tables()
    async with SessionLocal() as db:
        await ensure_superuser(db, config.ADMIN_USERNAME, config.ADMIN_PASSWORD)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error, 404 included, in one JSON shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "HTTP Error",
            "detail": exc.detail,
            "status_code": exc.status_code
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Validation errors (422 Unprocessable Entity)"""
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation Error",
            "detail": [
                {
                    "field": ".".join(str(loc) for loc in error["loc"][1:]),
                    "message": error["msg"],
                    "type": error["type"]
                }
                for error in exc.errors()
            ],
            "status_code": 422
        }
    )


@app.exception_handler(RepositoryError)
async def repository_exception_handler(request: Request, exc: RepositoryError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=503,
        content={
            "error": "Service Error",
            "detail": str(exc),
            "status_code": 503
        }
    )


@app.exception_handler(StudySessionError)
async def study_exception_handler(request: Request, exc: StudySessionError):
    return JSONResponse(
        status_code=409,
        content={
            "error": "No Cards" if isinstance(exc, EmptySetError) else "Study Session Error",
            "detail": str(exc),
            "status_code": 409
        }
    )
