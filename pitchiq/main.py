import logging
import uuid
from typing import AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from pydantic import BaseModel

from .config import settings
from .controller import CoachController, FeatureBusyError, ScenarioError
from .utils.analysis import CoachModelClient
from .utils.content import DRILL_LEVELS, PLAN_AVAILABILITY, PLAN_GOALS, translations_for
from .utils.session import Language

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,  # must stay False with a wildcard origin
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# In-memory sessions, one controller per user. Nothing is persisted.
coach_sessions: Dict[str, CoachController] = {}

_model_client: Optional[CoachModelClient] = None


def get_model_client() -> CoachModelClient:
    global _model_client
    if _model_client is None:
        _model_client = CoachModelClient()
    return _model_client


def get_controller(sessionId: str) -> CoachController:
    controller = coach_sessions.get(sessionId)
    if controller is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return controller


class SessionRequest(BaseModel):
    language: Optional[Language] = None


class LanguageRequest(BaseModel):
    language: Optional[Language] = None  # omitted means toggle


class DrillRequest(BaseModel):
    focusArea: str
    level: Optional[str] = None


class PlanRequest(BaseModel):
    level: Optional[str] = None
    goal: Optional[str] = None
    days: Optional[str] = None


class DecisionRequest(BaseModel):
    optionId: str


class ChatRequest(BaseModel):
    message: str


@app.exception_handler(FeatureBusyError)
async def feature_busy_handler(request: Request, exc: FeatureBusyError):
    return JSONResponse(status_code=409, content={"detail": str(exc), "flag": exc.flag})


@app.exception_handler(ScenarioError)
async def scenario_error_handler(request: Request, exc: ScenarioError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/")
def read_root():
    return {"Hello": settings.APP_NAME}


@app.get("/options")
def get_options():
    """Choices offered by the drill and plan forms."""
    return {"levels": DRILL_LEVELS, "goals": PLAN_GOALS, "availability": PLAN_AVAILABILITY}


@app.post("/session")
def create_session(request: SessionRequest, client: CoachModelClient = Depends(get_model_client)):
    session_id = uuid.uuid4().hex
    controller = CoachController(client=client, language=request.language)
    coach_sessions[session_id] = controller
    logger.info(f"Created session {session_id} ({controller.state.language})")
    return {"sessionId": session_id, "state": controller.snapshot()}


@app.get("/session/{sessionId}")
def get_session(controller: CoachController = Depends(get_controller)):
    return controller.snapshot()


@app.delete("/session/{sessionId}")
def delete_session(sessionId: str):
    controller = coach_sessions.pop(sessionId, None)
    if controller is not None:
        controller.close()
    return {"message": f"Session {sessionId} reset"}


@app.post("/session/{sessionId}/language")
def set_language(request: LanguageRequest, controller: CoachController = Depends(get_controller)):
    if request.language is None:
        controller.toggle_language()
    else:
        controller.set_language(request.language)
    return controller.snapshot()


@app.get("/session/{sessionId}/translations")
def get_translations(controller: CoachController = Depends(get_controller)):
    return translations_for(controller.state.language)


@app.post("/session/{sessionId}/drills")
async def generate_drills(request: DrillRequest, controller: CoachController = Depends(get_controller)):
    await controller.generate_drills(request.focusArea, request.level)
    return controller.snapshot()


@app.post("/session/{sessionId}/plan")
async def generate_plan(request: PlanRequest, controller: CoachController = Depends(get_controller)):
    await controller.generate_plan(request.level, request.goal, request.days)
    return controller.snapshot()


@app.delete("/session/{sessionId}/plan")
def clear_plan(controller: CoachController = Depends(get_controller)):
    controller.clear_plan()
    return controller.snapshot()


@app.post("/session/{sessionId}/video")
async def select_video(video: UploadFile = File(...), controller: CoachController = Depends(get_controller)):
    content = await video.read()
    logger.info(f"Received video: {len(content)} bytes")
    if not content:
        raise HTTPException(status_code=400, detail="No video data received")
    controller.select_video(content, video.content_type or "video/mp4", video.filename)
    return controller.snapshot()


@app.delete("/session/{sessionId}/video")
def clear_video(controller: CoachController = Depends(get_controller)):
    controller.clear_video()
    return controller.snapshot()


@app.post("/session/{sessionId}/video/analyze")
async def analyze_video(controller: CoachController = Depends(get_controller)):
    if controller.state.selectedVideo is None:
        raise HTTPException(status_code=400, detail="No video selected")
    await controller.analyze_video()
    return controller.snapshot()


@app.post("/session/{sessionId}/scenario")
async def new_scenario(controller: CoachController = Depends(get_controller)):
    await controller.load_new_scenario()
    return controller.snapshot()


@app.post("/session/{sessionId}/scenario/decision")
async def scenario_decision(request: DecisionRequest, controller: CoachController = Depends(get_controller)):
    await controller.choose_option(request.optionId)
    return controller.snapshot()


async def _reply_body(first: str, rest: AsyncIterator[str]):
    yield first
    async for fragment in rest:
        yield fragment


@app.post("/session/{sessionId}/chat")
async def chat(request: ChatRequest, controller: CoachController = Depends(get_controller)):
    """Stream the coach's reply as plain text fragments."""
    if not request.message.strip():
        raise HTTPException(status_code=400, detail="Message is empty")

    # Run the turn up to its first fragment here, so a busy chat is a 409
    # before any response headers go out
    replies = controller.send_message(request.message)
    try:
        first = await replies.__anext__()
    except StopAsyncIteration:
        # ended without text; the transcript holds the connection error
        return PlainTextResponse(controller.state.chatMessages[-1].text)
    return StreamingResponse(_reply_body(first, replies), media_type="text/plain; charset=utf-8")
