import logging
from typing import List, Optional

from fastapi import APIRouter, Cookie, Depends, Form, Response
from fastapi.responses import JSONResponse

from .config import settings
from .database import recent_logs
from .engine import PracticeSession
from .globals import dataset_loader, session_store
from .ingest import DatasetLoader
from .models import ModeInfo, Outcome, QuestionView, SessionView
from .modes import ModeFactory
from .sessions import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def get_session_store() -> SessionStore:
    return session_store


def get_dataset_loader() -> DatasetLoader:
    return dataset_loader


def session_invalid() -> JSONResponse:
    return JSONResponse({"error": "Session invalid"}, status_code=401)


def build_view(session: PracticeSession) -> SessionView:
    question = None
    if session.current is not None:
        question = QuestionView(
            prompt=session.current.prompt,
            options=session.current.options,
            hint=session.current.hint,
            person=session.current.person,
            free_text=session.mode.free_text,
        )
    return SessionView(
        mode=session.mode.id,
        status=session.status,
        score=session.score,
        total_answered=session.total_answered,
        accuracy=session.accuracy,
        remaining=session.remaining,
        pool_size=len(session.pool),
        question=question,
        outcome=session.last_outcome,
    )


# --- Routes ---
@router.get("/modes", response_model=List[ModeInfo])
async def list_modes():
    return [mode.info() for mode in ModeFactory.available()]


@router.post("/sessions", response_model=SessionView)
async def start_session(
    response: Response,
    mode: str = Form(...),
    store: SessionStore = Depends(get_session_store),
    loader: DatasetLoader = Depends(get_dataset_loader),
):
    if mode not in {available.id for available in ModeFactory.available()}:
        return JSONResponse({"error": f"Unknown practice mode: {mode}"}, status_code=400)

    practice_mode = ModeFactory.create(mode)
    records = await loader.load(practice_mode.dataset)

    session_id, session = store.create(practice_mode)
    session.load_pool(records)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        samesite="lax",
    )
    return build_view(session)


@router.get("/session", response_model=SessionView)
async def get_session(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    session = store.get(session_id)
    if not session:
        return session_invalid()
    return build_view(session)


@router.post("/session/answer", response_model=Outcome)
async def submit_answer(
    answer: Optional[str] = Form(None),
    option_index: Optional[int] = Form(None),
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    session = store.get(session_id)
    if not session:
        return session_invalid()
    if session.current is None:
        return JSONResponse({"error": "No active question"}, status_code=400)

    if option_index is not None:
        options = session.current.options
        if not (0 <= option_index < len(options)):
            return JSONResponse({"error": "Invalid option"}, status_code=400)
        answer = options[option_index]
    if answer is None:
        return JSONResponse({"error": "Missing answer"}, status_code=400)
    if session.mode.free_text and not answer.strip():
        return JSONResponse({"error": "Empty answer"}, status_code=400)

    outcome = session.submit_answer(answer)
    if outcome is None:
        return JSONResponse({"error": "Already answered"}, status_code=400)
    return outcome


@router.post("/session/advance", response_model=SessionView)
async def advance_session(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    session = store.get(session_id)
    if not session:
        return session_invalid()
    session.advance()
    return build_view(session)


@router.post("/session/restart", response_model=SessionView)
async def restart_session(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    session = store.get(session_id)
    if not session:
        return session_invalid()
    session.restart()
    return build_view(session)


@router.post("/session/reload", response_model=SessionView)
async def reload_session(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    loader: DatasetLoader = Depends(get_dataset_loader),
):
    session = store.get(session_id)
    if not session:
        return session_invalid()

    generation = session.begin_load()
    records = await loader.load(session.mode.dataset)
    session.load_pool(records, generation=generation)
    return build_view(session)


@router.post("/reset")
async def reset_session(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    store.discard(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


@router.get("/logs")
async def get_recent_logs(limit: int = 50):
    if not settings.LOG_TO_DB:
        return JSONResponse({"error": "Database logging is disabled"}, status_code=404)
    return recent_logs(limit=max(1, min(limit, 500)))
