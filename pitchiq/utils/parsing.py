"""
Response schemas sent to Gemini, and the strict decode step that turns
untrusted model text into domain objects.
"""
import itertools
import time
from typing import Any, List, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .session import (
    Category,
    Difficulty,
    Drill,
    ScenarioOption,
    TacticalScenario,
    TrainingDay,
    TrainingPlan,
    VideoAnalysisResult,
)

DRILL_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "category": {"type": "STRING", "enum": ["Technical", "Physical", "Tactical", "Mental"]},
        "difficulty": {"type": "STRING", "enum": ["Beginner", "Intermediate", "Advanced", "Pro"]},
        "duration": {"type": "STRING"},
        "description": {"type": "STRING"},
        "equipment": {"type": "ARRAY", "items": {"type": "STRING"}},
        "reps": {"type": "STRING", "description": "Suggested sets and reps, e.g., '3 sets of 12'"},
    },
    "required": ["title", "category", "difficulty", "duration", "description", "equipment", "reps"],
}

DRILL_LIST_SCHEMA = {"type": "ARRAY", "items": DRILL_SCHEMA}

TRAINING_PLAN_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "level": {"type": "STRING"},
        "weeklySchedule": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "dayName": {"type": "STRING", "description": "e.g., Day 1, Tuesday"},
                    "focus": {"type": "STRING"},
                    "drills": {"type": "ARRAY", "items": DRILL_SCHEMA},
                },
                "required": ["dayName", "focus", "drills"],
            },
        },
    },
    "required": ["title", "level", "weeklySchedule"],
}

TACTICAL_SCENARIO_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "situation": {"type": "STRING", "description": "Description of the tactical situation on the pitch"},
        "formation": {"type": "STRING", "description": "Relevant formations involved"},
        "options": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "STRING"},
                    "text": {"type": "STRING", "description": "A decision the player can make"},
                },
                "required": ["id", "text"],
            },
        },
    },
    "required": ["title", "situation", "formation", "options"],
}

VIDEO_ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "actionType": {"type": "STRING", "description": "e.g., Shooting, Dribbling"},
        "techniqueScore": {"type": "INTEGER", "description": "0-100 score"},
        "breakdown": {"type": "STRING", "description": "Analysis of body mechanics"},
        "corrections": {"type": "STRING", "description": "Key mistakes and how to fix them"},
        "drillRecommendation": {"type": "STRING", "description": "Name of a drill to improve this"},
    },
    "required": ["actionType", "techniqueScore", "breakdown", "corrections", "drillRecommendation"],
}


class PayloadError(ValueError):
    """Model output that cannot be trusted as a domain object."""


# Untrusted shapes, as the model sends them (no local ids yet)

class DrillPayload(BaseModel):
    title: str
    category: Category
    difficulty: Difficulty
    duration: str
    description: str
    equipment: List[str]
    reps: str

    def to_drill(self, drill_id: str) -> Drill:
        return Drill(id=drill_id, **self.model_dump())


class TrainingDayPayload(BaseModel):
    dayName: str
    focus: str
    drills: List[DrillPayload]


class TrainingPlanPayload(BaseModel):
    title: str
    level: str
    weeklySchedule: List[TrainingDayPayload]


class OptionPayload(BaseModel):
    id: Optional[str] = None
    text: str


class ScenarioPayload(BaseModel):
    id: Optional[str] = None
    title: str
    situation: str
    formation: str
    options: List[OptionPayload] = Field(min_length=1)


_sequence = itertools.count()


def fresh_id(prefix: str) -> str:
    """Unique within the process, e.g. gen-1718000000000-4."""
    return f"{prefix}-{int(time.time() * 1000)}-{next(_sequence)}"


def json_text(text: Optional[str]) -> str:
    """Model text with any markdown code fence removed."""
    if not text or not text.strip():
        raise PayloadError("empty response")
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.startswith("json"):
            cleaned = cleaned[len("json"):]
    return cleaned.strip()


_drill_list = TypeAdapter(List[DrillPayload])
_training_plan = TypeAdapter(TrainingPlanPayload)
_scenario = TypeAdapter(ScenarioPayload)
_video_analysis = TypeAdapter(VideoAnalysisResult)


def _validate(validator: Any, name: str, text: Optional[str]):
    # strict: "82" or true is not an integer, 1 is not a string
    try:
        return validator.validate_json(json_text(text), strict=True)
    except ValidationError as e:
        raise PayloadError(f"response does not match {name}: {e.error_count()} error(s)") from e


def decode_drills(text: Optional[str]) -> List[Drill]:
    payloads = _validate(_drill_list, "a list of drills", text)
    return [p.to_drill(fresh_id("gen")) for p in payloads]


def decode_training_plan(text: Optional[str]) -> TrainingPlan:
    payload = _validate(_training_plan, "TrainingPlan", text)
    days = [
        TrainingDay(
            dayName=day.dayName,
            focus=day.focus,
            drills=[d.to_drill(fresh_id("plan")) for d in day.drills],
        )
        for day in payload.weeklySchedule
    ]
    return TrainingPlan(title=payload.title, level=payload.level, weeklySchedule=days)


def decode_tactical_scenario(text: Optional[str]) -> TacticalScenario:
    payload = _validate(_scenario, "TacticalScenario", text)
    options = [
        ScenarioOption(id=option.id or str(index + 1), text=option.text)
        for index, option in enumerate(payload.options)
    ]
    if len({o.id for o in options}) != len(options):
        raise PayloadError("scenario options have duplicate ids")
    return TacticalScenario(
        id=payload.id or fresh_id("scn"),
        title=payload.title,
        situation=payload.situation,
        formation=payload.formation,
        options=options,
    )


def decode_video_analysis(text: Optional[str]) -> VideoAnalysisResult:
    return _validate(_video_analysis, "VideoAnalysisResult", text)
