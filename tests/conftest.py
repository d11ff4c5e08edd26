import asyncio
import json
from types import SimpleNamespace

import google.generativeai as genai
import pytest
from google.generativeai import protos
from google.generativeai.types.generation_types import AsyncGenerateContentResponse

from pitchiq.controller import CoachController
from pitchiq.utils.analysis import CoachChat, CoachModelClient


class FakeResponse:
    def __init__(self, text=None):
        self._text = text

    @property
    def text(self):
        if self._text is None:
            # what the SDK does for a response without parts
            raise ValueError("response has no text")
        return self._text


class FakeStream:
    def __init__(self, fragments, error=None):
        self.fragments = fragments
        self.error = error

    def __aiter__(self):
        return self._chunks()

    async def _chunks(self):
        for fragment in self.fragments:
            yield FakeResponse(fragment)
        if self.error is not None:
            raise self.error


class FakeChatSession:
    def __init__(self, gemini, kwargs):
        self.gemini = gemini
        self.kwargs = kwargs
        self.sent = []
        self.history = []

    async def send_message_async(self, text, stream=False):
        self.sent.append((text, stream))
        if self.gemini.chat_gate is not None:
            await self.gemini.chat_gate.wait()
        if self.gemini.chat_error is not None:
            raise self.gemini.chat_error
        return FakeStream(list(self.gemini.fragments), self.gemini.stream_error)


class FakeModel:
    def __init__(self, gemini, model_name, kwargs):
        self.gemini = gemini
        self.model_name = model_name
        self.kwargs = kwargs

    async def generate_content_async(self, contents, generation_config=None):
        self.gemini.requests.append({"contents": contents, "generation_config": generation_config})
        reply = self.gemini.replies.pop(0) if self.gemini.replies else None
        if isinstance(reply, Exception):
            raise reply
        if reply is not None and not isinstance(reply, str):
            reply = json.dumps(reply)
        return FakeResponse(reply)

    def start_chat(self, history=None):
        session = FakeChatSession(self.gemini, self.kwargs)
        self.gemini.chats.append(session)
        return session


class FakeGemini:
    """Stands in for genai.GenerativeModel and records every request."""

    def __init__(self):
        self.replies = []  # str, JSON-able object or Exception, consumed in order
        self.requests = []
        self.models = []
        self.chats = []
        self.fragments = []
        self.chat_error = None
        self.chat_gate = None  # asyncio.Event holding chat requests until set
        self.stream_error = None

    def __call__(self, model_name, **kwargs):
        model = FakeModel(self, model_name, kwargs)
        self.models.append(model)
        return model


class FakeFiles:
    """Stands in for the Gemini File API."""

    def __init__(self, states=("ACTIVE",)):
        self.states = list(states)
        self.uploaded = []
        self.deleted = []

    def _file(self):
        state = self.states.pop(0) if len(self.states) > 1 else self.states[0]
        return SimpleNamespace(name="files/clip-1", state=SimpleNamespace(name=state))

    def upload_file(self, path, mime_type=None):
        self.uploaded.append((path, mime_type))
        return self._file()

    def get_file(self, name):
        return self._file()

    def delete_file(self, name):
        self.deleted.append(name)


class ScriptedChatModel:
    """
    Just enough of genai.GenerativeModel to drive a real genai.ChatSession.

    Each request pops one (fragments, error) turn and streams it back as an
    AsyncGenerateContentResponse; error, when set, is raised after the
    fragments.
    """

    _tools = None

    def __init__(self, turns):
        self.turns = list(turns)
        self.requests = []

    def _get_tools_lib(self, tools):
        return None

    async def generate_content_async(self, contents, stream=False, **kwargs):
        self.requests.append([(c.role, c.parts[0].text) for c in contents])
        fragments, error = self.turns.pop(0)

        async def chunks():
            for fragment in fragments:
                yield protos.GenerateContentResponse(candidates=[
                    protos.Candidate(index=0, content=protos.Content(role="model", parts=[protos.Part(text=fragment)]))
                ])
            if error is not None:
                raise error

        return await AsyncGenerateContentResponse.from_aiterator(chunks())


def sdk_chat(turns, language="en"):
    model = ScriptedChatModel(turns)
    return model, CoachChat(genai.ChatSession(model=model), language)


SAMPLE_DRILL = {
    "title": "Rondo 4v1",
    "category": "Tactical",
    "difficulty": "Intermediate",
    "duration": "15 mins",
    "description": "Keep the ball away from the defender in a 10m square.",
    "equipment": ["4 Cones", "1 Ball"],
    "reps": "4 sets of 3 mins",
}

SAMPLE_PLAN = {
    "title": "Ball Mastery Week",
    "level": "Intermediate",
    "weeklySchedule": [
        {"dayName": "Day 1", "focus": "First touch", "drills": [SAMPLE_DRILL]},
        {"dayName": "Day 2", "focus": "Passing", "drills": [SAMPLE_DRILL, SAMPLE_DRILL]},
    ],
}

SAMPLE_SCENARIO = {
    "title": "3v2 Counter",
    "situation": "You carry the ball into the final third with two teammates against two defenders.",
    "formation": "4-3-3 vs 4-4-2",
    "options": [
        {"id": "a", "text": "Drive at the centre back"},
        {"id": "b", "text": "Slip the runner on the left"},
        {"id": "c", "text": "Shoot from distance"},
    ],
}

SAMPLE_ANALYSIS = {
    "actionType": "Shooting",
    "techniqueScore": 82,
    "breakdown": "Plant foot beside the ball, good hip rotation.",
    "corrections": "Lock the ankle through contact.",
    "drillRecommendation": "Cone Weave & Shoot",
}


def run(coro):
    return asyncio.run(coro)


async def collect(stream):
    return [item async for item in stream]


@pytest.fixture
def gemini():
    return FakeGemini()


@pytest.fixture
def files():
    return FakeFiles()


@pytest.fixture
def model_client(gemini, files):
    return CoachModelClient(api_key="test-key", model_name="test-model", model_factory=gemini, files=files)


@pytest.fixture
def controller(model_client):
    return CoachController(client=model_client, language="en")
