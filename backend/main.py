from contextlib import asynccontextmanager
from enum import Enum

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from highlight.controller import GestureKind, GesturePhase, GestureSample
from render.types import ScreenPoint
from session.singleton import get_session, reset_session
from settings.config import autostart_feed, log_level
from settings.log import setup_logging


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging(log_level())
    session = get_session()
    if autostart_feed():
        session.start()
    yield
    reset_session()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ApiGesturePhase(str, Enum):
    began = "began"
    changed = "changed"
    ended = "ended"
    cancelled = "cancelled"


class ApiGestureKind(str, Enum):
    pan = "pan"
    long_press = "long_press"


class ApiGesture(BaseModel):
    phase: ApiGesturePhase
    x: float = Field(ge=0.0)
    y: float = Field(ge=0.0)
    kind: ApiGestureKind = ApiGestureKind.pan


@app.get("/regions")
def regions():
    return {"regions": get_session().regions()}


@app.post("/gesture")
def gesture(body: ApiGesture):
    session = get_session()
    state = session.handle_gesture(
        GestureSample(
            phase=GesturePhase(body.phase.value),
            point=ScreenPoint(x=body.x, y=body.y),
            kind=GestureKind(body.kind.value),
        )
    )
    return {
        "state": "idle" if state.is_idle else "highlighting",
        "region": state.region,
        "label": session.label.as_dict(),
    }


@app.get("/plot")
def plot():
    return get_session().figure()


@app.get("/feed")
def feed():
    return get_session().feed_status()
