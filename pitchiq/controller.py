"""
Session controller: turns user intents into model calls and merges the
results into one user's AppState.
"""
import base64
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

from .config import settings
from .utils.analysis import CoachChat, CoachModelClient
from .utils.content import INITIAL_STATS, seed_drills, translate
from .utils.session import (
    LANGUAGES,
    AppState,
    ChatMessage,
    Drill,
    Language,
    MediaPayload,
    TacticalScenario,
    TrainingPlan,
    VideoAnalysisResult,
)
from .utils.stream import FragmentStream

logger = logging.getLogger(__name__)

CONNECTION_ERROR = "Connection error."


class FeatureBusyError(RuntimeError):
    """An action was requested while the same feature is still working."""

    def __init__(self, flag: str):
        super().__init__(f"{flag} is already in progress")
        self.flag = flag


class ScenarioError(ValueError):
    """A tactical decision that cannot be evaluated."""


def _message_id() -> str:
    return uuid.uuid4().hex


@dataclass
class AppContext:
    """Session-wide handles: active language, model client and coach chat."""
    client: CoachModelClient
    language: Language
    chat: Optional[CoachChat] = None

    def switch_language(self, language: Language):
        self.close()
        self.language = language
        self.chat = self.client.create_coach_chat(language)

    def close(self):
        if self.chat is not None:
            self.chat.close()
            self.chat = None


class CoachController:
    def __init__(self, client: Optional[CoachModelClient] = None, language: Optional[Language] = None):
        language = language or settings.DEFAULT_LANGUAGE
        self.context = AppContext(client=client or CoachModelClient(), language=language)
        self.state = AppState(language=language, stats=INITIAL_STATS)
        self._reply_stream: Optional[FragmentStream] = None
        self.set_language(language)

    @property
    def client(self) -> CoachModelClient:
        return self.context.client

    def t(self, key: str) -> str:
        return translate(self.state.language, key)

    @contextmanager
    def _busy(self, flag: str):
        if getattr(self.state, flag):
            raise FeatureBusyError(flag)
        setattr(self.state, flag, True)
        try:
            yield
        finally:
            setattr(self.state, flag, False)

    # --- Settings ---

    def set_language(self, language: Language):
        """Rebuild the coach chat and reset the transcript and drill list."""
        if language not in LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        self.cancel_reply()
        self.context.switch_language(language)
        self.state.language = language
        self.state.chatMessages = [ChatMessage(id="0", role="model", text=self.t("coach.welcome"))]
        self.state.drills = seed_drills(language)

    def toggle_language(self):
        self.set_language("en" if self.state.language == "zh" else "zh")

    def close(self):
        self.cancel_reply()
        self.context.close()

    # --- Coach chat ---

    async def send_message(self, text: str) -> AsyncIterator[str]:
        """
        Send one user turn and yield the reply fragments as they arrive.

        After each fragment the newest model message holds the text
        received so far.
        """
        if not text or not text.strip() or self.context.chat is None:
            return

        with self._busy("isTyping"):
            # a language switch replaces the transcript; this turn only writes to its own
            transcript = self.state.chatMessages
            transcript.append(ChatMessage(id=_message_id(), role="user", text=text))
            reply: Optional[ChatMessage] = None
            stream = self.context.chat.send_message_stream(text)
            self._reply_stream = stream
            try:
                async for fragment in stream:
                    if reply is None:
                        reply = ChatMessage(id=_message_id(), role="model", text="")
                        transcript.append(reply)
                    reply.text += fragment
                    yield fragment
            except Exception as e:
                logger.warning(f"Chat error: {e}")
                if self.state.chatMessages is transcript:
                    transcript.append(ChatMessage(id=_message_id(), role="model", text=CONNECTION_ERROR))
            finally:
                self._reply_stream = None

    def cancel_reply(self):
        if self._reply_stream is not None:
            self._reply_stream.cancel()

    # --- Drills ---

    async def generate_drills(self, focus_area: Optional[str] = None, level: Optional[str] = None) -> List[Drill]:
        if focus_area is not None:
            self.state.drillPrompt = focus_area
        if level:
            self.state.drillLevel = level
        if not self.state.drillPrompt.strip():
            return []

        with self._busy("isGeneratingDrills"):
            new_drills = await self.client.generate_custom_drills(
                self.state.drillPrompt, self.state.drillLevel, self.state.language
            )
            if new_drills:
                self.state.drills = new_drills + self.state.drills
                self.state.drillPrompt = ""
                self.state.notice = None
            else:
                self.state.notice = self.t("errors.drills")
        return new_drills

    # --- Training plan ---

    async def generate_plan(
        self, level: Optional[str] = None, goal: Optional[str] = None, days: Optional[str] = None
    ) -> Optional[TrainingPlan]:
        if level:
            self.state.drillLevel = level
        if goal:
            self.state.planGoal = goal
        if days:
            self.state.planDays = days

        with self._busy("isGeneratingPlan"):
            plan = await self.client.generate_training_plan(
                self.state.drillLevel, self.state.planGoal, self.state.planDays, self.state.language
            )
            if plan is not None:
                self.state.activePlan = plan
                self.state.notice = None
            else:
                self.state.notice = self.t("errors.plan")
        return plan

    def clear_plan(self):
        self.state.activePlan = None

    # --- Video analyst ---

    def select_video(self, data: bytes, mime_type: str, filename: Optional[str] = None) -> Optional[MediaPayload]:
        if not data:
            return None
        self.state.selectedVideo = MediaPayload(
            mimeType=mime_type,
            data=base64.b64encode(data).decode("utf-8"),
            filename=filename,
        )
        self.state.analysisResult = None
        return self.state.selectedVideo

    def clear_video(self):
        self.state.selectedVideo = None
        self.state.analysisResult = None

    async def analyze_video(self) -> Optional[VideoAnalysisResult]:
        media = self.state.selectedVideo
        if media is None:
            return None

        with self._busy("isAnalyzingVideo"):
            result = await self.client.analyze_video_technique(media, self.state.language)
            if result is not None:
                self.state.analysisResult = result
                self.state.notice = None
            else:
                self.state.notice = self.t("errors.video")
        return result

    # --- Tactics ---

    async def load_new_scenario(self) -> Optional[TacticalScenario]:
        with self._busy("isLoadingScenario"):
            scenario = await self.client.generate_tactical_scenario(self.state.language)
            if scenario is not None:
                self.state.currentScenario = scenario
                self.state.scenarioResult = None
                self.state.notice = None
            else:
                self.state.notice = self.t("errors.scenario")
        return scenario

    async def choose_option(self, option_id: str) -> str:
        scenario = self.state.currentScenario
        if scenario is None:
            raise ScenarioError("No active scenario")
        if self.state.scenarioResult is not None:
            raise ScenarioError("A decision has already been made for this scenario")
        option = next((o for o in scenario.options if o.id == option_id), None)
        if option is None:
            raise ScenarioError(f"Unknown option: {option_id}")

        self.state.scenarioResult = self.t("common.loading")
        feedback = await self.client.evaluate_tactical_decision(scenario.situation, option.text, self.state.language)
        # a new scenario may have replaced this one meanwhile
        if self.state.currentScenario is scenario:
            self.state.scenarioResult = feedback
        return feedback

    # --- Rendering ---

    def snapshot(self) -> Dict[str, Any]:
        data = self.state.model_dump(mode="json")
        media = self.state.selectedVideo
        if media is not None:
            data["selectedVideo"] = {
                "mimeType": media.mimeType,
                "filename": media.filename,
                "sizeBytes": media.size_bytes,
            }
        return data
