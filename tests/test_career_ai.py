"""CareerAIService against a fake LLM client."""
import asyncio
import json

import pytest

from careermate.services.career_ai import PERSONALITY_FALLBACK, CareerAIService
from careermate.services.gateway import CircuitOpenError
from careermate.services.llm_client import LLMServiceError
from careermate.services.response_extractor import ParseFailure

from conftest import FakeLLMClient


def run(coro):
    return asyncio.run(coro)


GUIDANCE = {
    "careerPaths": ["Data Analyst", {"title": "ML Engineer"}],
    "skillGaps": ["Statistics"],
    "learningRoadmap": {"courses": ["Intro to SQL"], "projects": ["Dashboard"]},
}


def test_requires_client_outside_test_mode():
    with pytest.raises(ValueError):
        CareerAIService()


def test_guidance_is_extracted_from_fenced_reply():
    llm = FakeLLMClient([f"Here you go:\n```json\n{json.dumps(GUIDANCE)}\n```"])
    result = run(CareerAIService(llm=llm).generate_career_guidance({"skills": ["SQL"]}))
    assert result == GUIDANCE
    call = llm.calls[0]
    assert call["temperature"] == 0.4
    assert call["max_tokens"] == 2500
    assert call["top_p"] == 0.9
    assert '"SQL"' in call["user"]


def test_generation_parameters_per_feature():
    llm = FakeLLMClient(['{"questions": []}', '{"score": 5}', '{"careerPaths": []}', '{"opportunities": []}'])
    service = CareerAIService(llm=llm)
    run(service.generate_mock_interview("Backend Engineer"))
    run(service.evaluate_interview_answer("Why us?", "Because.", "Backend Engineer"))
    run(service.generate_career_discovery({"name": "Sam"}))
    run(service.generate_job_suggestions({"skills": ["Go"]}))

    params = [(c["temperature"], c["max_tokens"], c["top_p"]) for c in llm.calls]
    assert params == [(0.5, 2000, 0.9), (0.3, 1000, None), (0.7, 3000, 0.9), (0.3, 3000, 0.9)]
    assert "Backend Engineer" in llm.calls[0]["user"]


def test_parse_failure_propagates_unwrapped():
    llm = FakeLLMClient(["Sorry, I can't do that."])
    with pytest.raises(ParseFailure):
        run(CareerAIService(llm=llm).generate_mock_interview("Designer"))


def test_non_object_json_is_a_parse_failure():
    llm = FakeLLMClient(["[1, 2, 3]"])
    with pytest.raises(ParseFailure) as exc_info:
        run(CareerAIService(llm=llm).generate_career_guidance({}))
    assert exc_info.value.reason == "AI response is not a JSON object"


def test_provider_errors_are_wrapped():
    llm = FakeLLMClient([RuntimeError("quota exceeded")])
    with pytest.raises(LLMServiceError) as exc_info:
        run(CareerAIService(llm=llm).generate_job_suggestions({}))
    assert str(exc_info.value) == "Failed to generate job suggestions: quota exceeded"


def test_open_circuit_is_not_wrapped():
    llm = FakeLLMClient([CircuitOpenError("openai")])
    with pytest.raises(CircuitOpenError):
        run(CareerAIService(llm=llm).generate_career_discovery({}))


def test_unknown_story_type():
    llm = FakeLLMClient()
    with pytest.raises(ValueError):
        run(CareerAIService(llm=llm).generate_career_story({"name": "Sam"}, "poem"))
    assert llm.calls == []


def test_career_story():
    llm = FakeLLMClient(['{"story": "I started as a barista..."}'])
    result = run(CareerAIService(llm=llm).generate_career_story({"name": "Sam"}, "linkedin"))
    assert result == {"story": "I started as a barista..."}
    assert llm.calls[0]["temperature"] == 0.7


def test_personality_uses_first_three_career_paths():
    reply = {"careerPaths": ["A1", "A2", "A3", "A4"]}
    llm = FakeLLMClient([json.dumps(reply)])
    result = run(CareerAIService(llm=llm).analyze_personality(["A", "C"]))
    assert result["careers"] == ["A1", "A2", "A3"]
    assert "structured" in result["workStyle"]
    assert result["learningStyle"] == "You learn best through systematic study."


def test_personality_work_style_without_a_answers():
    llm = FakeLLMClient(['{"careerPaths": []}', '{"careerPaths": []}'])
    service = CareerAIService(llm=llm)
    assert "dynamic" in run(service.analyze_personality(["B", "C"]))["workStyle"]
    assert "collaborative" in run(service.analyze_personality(["C"]))["workStyle"]


@pytest.mark.parametrize("reply", ["not json", RuntimeError("down"), '{"careerPaths": "oops"}'])
def test_personality_falls_back_on_any_failure(reply):
    llm = FakeLLMClient([reply])
    assert run(CareerAIService(llm=llm).analyze_personality(["A"])) == PERSONALITY_FALLBACK


def test_test_mode_needs_no_client():
    service = CareerAIService(test_mode=True)
    guidance = run(service.generate_career_guidance({"goals": ["Lead a team"]}))
    assert guidance["careerPaths"]
    discovery = run(service.generate_career_discovery({"currentRole": "Teacher", "primaryInterest": "Data"}))
    assert discovery["learningRoadmap"] is None
    story = run(service.generate_career_story({"name": "Sam"}, "resume"))
    assert story["story"].startswith("[TEST MODE]")


def test_service_factory_honours_test_mode():
    from careermate.config import Settings
    from careermate.services.career_ai import create_career_ai_service

    assert create_career_ai_service(Settings(test_mode=True)).test_mode is True
    service = create_career_ai_service(Settings(test_mode=False, provider="openai", openai_api_key="sk-abc"))
    assert service.llm.provider == "openai"


def test_personality_fallback_is_a_fresh_copy():
    service = CareerAIService(llm=FakeLLMClient(["no json", "no json"]))
    first = run(service.analyze_personality(["A"]))
    first["careers"].append("Astronaut")
    second = run(service.analyze_personality(["A"]))
    assert second["careers"] == PERSONALITY_FALLBACK["careers"]
    assert "Astronaut" not in PERSONALITY_FALLBACK["careers"]
