import json

import pytest

from pitchiq.utils.parsing import (
    PayloadError,
    decode_drills,
    decode_tactical_scenario,
    decode_training_plan,
    decode_video_analysis,
    json_text,
)
from conftest import SAMPLE_ANALYSIS, SAMPLE_DRILL, SAMPLE_PLAN, SAMPLE_SCENARIO


def test_decode_drills_keeps_fields_and_assigns_ids():
    drills = decode_drills(json.dumps([SAMPLE_DRILL, dict(SAMPLE_DRILL, title="Rondo 5v2")]))

    assert len(drills) == 2
    first = drills[0].model_dump()
    assert first.pop("id").startswith("gen-")
    assert first == SAMPLE_DRILL
    assert drills[1].title == "Rondo 5v2"
    assert drills[0].id != drills[1].id


def test_decode_drills_ids_unique_across_calls():
    text = json.dumps([SAMPLE_DRILL])
    ids = {decode_drills(text)[0].id for _ in range(20)}
    assert len(ids) == 20


@pytest.mark.parametrize("bad", [
    "",
    "   ",
    None,
    "not json",
    json.dumps(SAMPLE_DRILL),  # object instead of array
    json.dumps([dict(SAMPLE_DRILL, category="Goalkeeping")]),
    json.dumps([dict(SAMPLE_DRILL, difficulty="Expert")]),
    json.dumps([{k: v for k, v in SAMPLE_DRILL.items() if k != "equipment"}]),
])
def test_decode_drills_rejects_malformed(bad):
    with pytest.raises(PayloadError):
        decode_drills(bad)


def test_one_bad_drill_rejects_the_whole_list():
    text = json.dumps([SAMPLE_DRILL, dict(SAMPLE_DRILL, category="Nope")])
    with pytest.raises(PayloadError):
        decode_drills(text)


def test_json_text_strips_code_fence():
    assert json_text("```json\n{\"a\": 1}\n```") == "{\"a\": 1}"


def test_fenced_payload_still_decodes():
    drills = decode_drills("```json\n" + json.dumps([SAMPLE_DRILL]) + "\n```")
    assert drills[0].title == "Rondo 4v1"


def test_decode_training_plan():
    plan = decode_training_plan(json.dumps(SAMPLE_PLAN))

    assert plan.title == "Ball Mastery Week"
    assert [d.dayName for d in plan.weeklySchedule] == ["Day 1", "Day 2"]
    ids = [drill.id for day in plan.weeklySchedule for drill in day.drills]
    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert plan.weeklySchedule[1].drills[0].reps == "4 sets of 3 mins"


def test_decode_training_plan_rejects_missing_schedule():
    with pytest.raises(PayloadError):
        decode_training_plan(json.dumps({"title": "x", "level": "Pro"}))


def test_decode_tactical_scenario():
    scenario = decode_tactical_scenario(json.dumps(SAMPLE_SCENARIO))

    assert scenario.id.startswith("scn-")
    assert scenario.formation == "4-3-3 vs 4-4-2"
    assert [o.model_dump() for o in scenario.options] == SAMPLE_SCENARIO["options"]


def test_decode_tactical_scenario_numbers_missing_option_ids():
    payload = dict(SAMPLE_SCENARIO, id="s1", options=[{"text": "Pass"}, {"text": "Shoot"}])
    scenario = decode_tactical_scenario(json.dumps(payload))

    assert scenario.id == "s1"
    assert [o.id for o in scenario.options] == ["1", "2"]


@pytest.mark.parametrize("options", [
    [],
    [{"id": "a", "text": "Pass"}, {"id": "a", "text": "Shoot"}],
])
def test_decode_tactical_scenario_rejects_bad_options(options):
    with pytest.raises(PayloadError):
        decode_tactical_scenario(json.dumps(dict(SAMPLE_SCENARIO, options=options)))


def test_decode_video_analysis():
    result = decode_video_analysis(json.dumps(SAMPLE_ANALYSIS))

    assert result.techniqueScore == 82
    assert result.scoreBand == "high"
    assert result.drillRecommendation == "Cone Weave & Shoot"


@pytest.mark.parametrize("score", [-1, 101, "great", 82.5, "82", True, None])
def test_decode_video_analysis_rejects_bad_score(score):
    with pytest.raises(PayloadError):
        decode_video_analysis(json.dumps(dict(SAMPLE_ANALYSIS, techniqueScore=score)))


@pytest.mark.parametrize("score,band", [(76, "high"), (75, "low"), (0, "low"), (100, "high")])
def test_score_band_threshold(score, band):
    result = decode_video_analysis(json.dumps(dict(SAMPLE_ANALYSIS, techniqueScore=score)))
    assert result.scoreBand == band


@pytest.mark.parametrize("field,value", [
    ("title", 7),
    ("equipment", "4 Cones"),
    ("reps", 3),
])
def test_decode_drills_does_not_coerce_types(field, value):
    with pytest.raises(PayloadError):
        decode_drills(json.dumps([dict(SAMPLE_DRILL, **{field: value})]))


def test_decode_training_plan_rejects_numeric_day_name():
    day = dict(SAMPLE_PLAN["weeklySchedule"][0], dayName=1)
    with pytest.raises(PayloadError):
        decode_training_plan(json.dumps(dict(SAMPLE_PLAN, weeklySchedule=[day])))
