import asyncio
import base64
import logging
import os
import tempfile
from typing import Any, Callable, List, Optional

import google.generativeai as genai

from ..config import settings
from .content import coach_system_instruction, response_language
from .parsing import (
    DRILL_LIST_SCHEMA,
    TACTICAL_SCENARIO_SCHEMA,
    TRAINING_PLAN_SCHEMA,
    VIDEO_ANALYSIS_SCHEMA,
    decode_drills,
    decode_tactical_scenario,
    decode_training_plan,
    decode_video_analysis,
)
from .session import Drill, Language, MediaPayload, TacticalScenario, TrainingPlan, VideoAnalysisResult
from .stream import FragmentStream

logger = logging.getLogger(__name__)

DRILLS_PROMPT = (
    'Generate {count} specific football training drills focusing on: "{focus_area}". '
    "The user level is: {level}. Respond in {language}."
)

TRAINING_PLAN_PROMPT = """Create a 1-week football training plan for a {level} player.
Primary Goal: {goal}.
Availability: {days_per_week}.
Includes specific drills with sets/reps.
Respond in {language}."""

VIDEO_ANALYSIS_PROMPT = (
    "Analyze the football technique shown in this video. Identify the action (Shot, Pass, Dribble). "
    "Provide a technical breakdown, key corrections, and a score out of 100. Respond in {language}."
)

TACTICAL_SCENARIO_PROMPT = (
    "Generate a challenging football tactical scenario for a player "
    "(e.g., 3v2 counter attack, playing out from back under pressure). "
    "Provide the situation description and 3 distinct decision options. Respond in {language}."
)

TACTICAL_DECISION_PROMPT = """Scenario: {situation}.
Player Decision: {decision}.
Analyze this decision. Is it the best option? What are the pros/cons? What would a pro player do? Keep it concise (under 100 words). Respond in {language}."""

ANALYSIS_UNAVAILABLE = "Analysis unavailable."
DECISION_ERROR = "Error evaluating decision."


def response_text(response: Any) -> str:
    """Text of a Gemini response or stream chunk; empty when it carries none."""
    try:
        return response.text or ""
    except ValueError:
        # blocked or part-less candidates raise instead of returning ""
        return ""


class CoachChat:
    """A persistent coach conversation bound to one language persona."""

    def __init__(self, session: Any, language: Language):
        self._session = session
        self.language = language

    @property
    def closed(self) -> bool:
        return self._session is None

    def send_message_stream(self, text: str) -> FragmentStream:
        if self._session is None:
            raise RuntimeError("coach chat is closed")
        return FragmentStream(self._fragments(self._session, text))

    async def _fragments(self, session, text: str):
        history = list(session.history)
        completed = False
        try:
            response = await session.send_message_async(text, stream=True)
            async for chunk in response:
                fragment = response_text(chunk)
                if fragment:
                    yield fragment
            completed = True
        finally:
            if not completed:
                # the next turn starts from the last complete exchange
                session.history = history

    def close(self):
        self._session = None


class CoachModelClient:
    """
    Gemini access for every coaching feature.

    Structured calls return a decoded domain object, or an empty list /
    None when the model fails or answers with something unusable. Nothing
    here raises to the caller and nothing is retried.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        model_factory: Optional[Callable[..., Any]] = None,
        files: Any = None,
    ):
        self.api_key = api_key or settings.api_key
        self.model_name = model_name or settings.GEMINI_MODEL
        self._model_factory = model_factory or genai.GenerativeModel
        self._files = files or genai

        if self.api_key:
            genai.configure(api_key=self.api_key)
        elif model_factory is None:
            logger.warning("No Gemini API key configured; set GEMINI_API_KEY in your .env file")

    def _model(self, **kwargs):
        return self._model_factory(self.model_name, **kwargs)

    async def _generate_json(self, contents: Any, schema: dict, temperature: Optional[float] = None) -> str:
        generation_config = {
            "response_mime_type": "application/json",
            "response_schema": schema,
        }
        if temperature is not None:
            generation_config["temperature"] = temperature
        response = await self._model().generate_content_async(contents, generation_config=generation_config)
        return response_text(response)

    # --- Coach chat ---

    def create_coach_chat(self, language: Language = "en") -> CoachChat:
        model = self._model(
            system_instruction=coach_system_instruction(language),
            generation_config={"temperature": settings.CHAT_TEMPERATURE},
        )
        return CoachChat(model.start_chat(history=[]), language)

    # --- Drill generators ---

    async def generate_custom_drills(self, focus_area: str, level: str, language: Language) -> List[Drill]:
        prompt = DRILLS_PROMPT.format(
            count=settings.GENERATED_DRILL_COUNT,
            focus_area=focus_area,
            level=level,
            language=response_language(language),
        )
        try:
            text = await self._generate_json(prompt, DRILL_LIST_SCHEMA, temperature=settings.DRILL_TEMPERATURE)
            return decode_drills(text)
        except Exception as e:
            logger.warning(f"Error generating drills: {e}")
            return []

    async def generate_training_plan(
        self, level: str, goal: str, days_per_week: str, language: Language
    ) -> Optional[TrainingPlan]:
        prompt = TRAINING_PLAN_PROMPT.format(
            level=level, goal=goal, days_per_week=days_per_week, language=response_language(language)
        )
        try:
            text = await self._generate_json(prompt, TRAINING_PLAN_SCHEMA)
            return decode_training_plan(text)
        except Exception as e:
            logger.warning(f"Error generating plan: {e}")
            return None

    # --- Video analysis ---

    async def analyze_video_technique(self, media: MediaPayload, language: Language) -> Optional[VideoAnalysisResult]:
        prompt = VIDEO_ANALYSIS_PROMPT.format(language=response_language(language))
        try:
            content = base64.b64decode(media.data)
            video_size_mb = len(content) / (1024 * 1024)
            logger.info(f"Analyzing {media.mimeType} clip ({video_size_mb:.2f} MB)")

            if video_size_mb < settings.INLINE_VIDEO_LIMIT_MB:
                contents = [{"inline_data": {"mime_type": media.mimeType, "data": content}}, prompt]
                text = await self._generate_json(contents, VIDEO_ANALYSIS_SCHEMA)
            else:
                text = await self._analyze_uploaded_video(content, media.mimeType, prompt)
            return decode_video_analysis(text)
        except Exception as e:
            logger.warning(f"Error analyzing video: {e}")
            return None

    async def _analyze_uploaded_video(self, content: bytes, mime_type: str, prompt: str) -> str:
        """Large clips go through the File API instead of inline data."""
        suffix = "." + mime_type.split("/")[-1] if "/" in mime_type else ""
        with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as temp_file:
            temp_file.write(content)
            temp_file_path = temp_file.name

        video_file = None
        try:
            video_file = await asyncio.to_thread(self._files.upload_file, path=temp_file_path, mime_type=mime_type)
            logger.info(f"Video uploaded as {video_file.name}, state {video_file.state.name}")

            wait_time = 0.0
            while video_file.state.name == "PROCESSING" and wait_time < settings.FILE_PROCESSING_TIMEOUT_S:
                await asyncio.sleep(settings.FILE_POLL_INTERVAL_S)
                wait_time += settings.FILE_POLL_INTERVAL_S
                video_file = await asyncio.to_thread(self._files.get_file, video_file.name)

            if video_file.state.name != "ACTIVE":
                raise RuntimeError(f"Video file failed to process. Final state: {video_file.state.name}")

            return await self._generate_json([video_file, prompt], VIDEO_ANALYSIS_SCHEMA)
        finally:
            if video_file is not None:
                try:
                    await asyncio.to_thread(self._files.delete_file, video_file.name)
                except Exception as cleanup_error:
                    logger.warning(f"Could not clean up Gemini file {video_file.name}: {cleanup_error}")
            if os.path.exists(temp_file_path):
                os.unlink(temp_file_path)

    # --- Tactics ---

    async def generate_tactical_scenario(self, language: Language) -> Optional[TacticalScenario]:
        prompt = TACTICAL_SCENARIO_PROMPT.format(language=response_language(language))
        try:
            text = await self._generate_json(prompt, TACTICAL_SCENARIO_SCHEMA)
            return decode_tactical_scenario(text)
        except Exception as e:
            logger.warning(f"Error generating scenario: {e}")
            return None

    async def evaluate_tactical_decision(self, situation: str, decision: str, language: Language) -> str:
        prompt = TACTICAL_DECISION_PROMPT.format(
            situation=situation, decision=decision, language=response_language(language)
        )
        try:
            response = await self._model().generate_content_async(prompt)
            return response_text(response) or ANALYSIS_UNAVAILABLE
        except Exception as e:
            logger.warning(f"Error evaluating decision: {e}")
            return DECISION_ERROR
