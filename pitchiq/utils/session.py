from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

Language = Literal["en", "zh"]
Category = Literal["Technical", "Physical", "Tactical", "Mental"]
Difficulty = Literal["Beginner", "Intermediate", "Advanced", "Pro"]
Role = Literal["user", "model"]

LANGUAGES = ("en", "zh")

# Scores strictly above this are shown as "high"
HIGH_SCORE_THRESHOLD = 75


class Drill(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    category: Category
    difficulty: Difficulty
    duration: str
    description: str
    equipment: List[str]
    reps: Optional[str] = None


class TrainingDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    dayName: str
    focus: str
    drills: List[Drill]


class TrainingPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    level: str
    weeklySchedule: List[TrainingDay]


class ChatMessage(BaseModel):
    # text grows while a reply is streamed, so this one stays mutable
    id: str
    role: Role
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)


class ScenarioOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str


class TacticalScenario(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    situation: str
    formation: str
    options: List[ScenarioOption]


class VideoAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    actionType: str
    techniqueScore: int = Field(ge=0, le=100)
    breakdown: str
    corrections: str
    drillRecommendation: str

    @computed_field
    @property
    def scoreBand(self) -> str:
        return "high" if self.techniqueScore > HIGH_SCORE_THRESHOLD else "low"


class UserStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    technical: int = Field(ge=0, le=100)
    physical: int = Field(ge=0, le=100)
    tactical: int = Field(ge=0, le=100)
    mental: int = Field(ge=0, le=100)
    trainingHours: float
    drillsCompleted: int


class MediaPayload(BaseModel):
    """A user-selected clip, base64 encoded with its declared media type."""
    model_config = ConfigDict(frozen=True)

    mimeType: str
    data: str
    filename: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        # decoded size without decoding
        padding = self.data.count("=", -2)
        return len(self.data) * 3 // 4 - padding


class AppState(BaseModel):
    """Everything one user session shows on screen."""
    language: Language = "zh"
    stats: UserStats
    drills: List[Drill] = []

    # Drill generation
    drillPrompt: str = ""
    drillLevel: str = "Intermediate"
    isGeneratingDrills: bool = False

    # Training plan
    activePlan: Optional[TrainingPlan] = None
    planGoal: str = "Technique & Ball Control"
    planDays: str = "3 days/week"
    isGeneratingPlan: bool = False

    # Coach chat
    chatMessages: List[ChatMessage] = []
    isTyping: bool = False

    # Video analyst
    selectedVideo: Optional[MediaPayload] = None
    isAnalyzingVideo: bool = False
    analysisResult: Optional[VideoAnalysisResult] = None

    # Tactics
    currentScenario: Optional[TacticalScenario] = None
    scenarioResult: Optional[str] = None
    isLoadingScenario: bool = False

    # Last failure message shown to the user, cleared by the next success
    notice: Optional[str] = None

    @computed_field
    @property
    def optionsEnabled(self) -> bool:
        return self.currentScenario is not None and self.scenarioResult is None
