import json
from unittest.mock import patch

from api.pydantic_models import AnalysisResult, AnalyzeRequest, ChatRequest, QuizRequest, QuizResponse
from eco_assistant import ContentSource
from fallback_generator import DEFAULT_CHAT_TIP, build_fallback_analysis
from gemini_service import ModelCallError, ModelImage

MODEL_ANALYSIS = build_fallback_analysis("glass jar").model_dump()
MODEL_ANALYSIS["greenTip"] = "Reuse the jar for pantry storage"

MODEL_QUIZ = {"quiz": {"title": "Model Quiz", "difficulty": "easy", "category": "general",
                       "questions": [{"id": 1, "question": "Q?", "options": ["a", "b", "c", "d"],
                                      "correctAnswer": 0, "explanation": "because", "points": 10}]}}


def test_analyze_returns_model_payload(make_assistant):
    assistant, client = make_assistant("```json\n" + json.dumps(MODEL_ANALYSIS) + "\n```")
    response = assistant.analyze(AnalyzeRequest(description="glass jar", location="Rome"))
    assert response.source is ContentSource.MODEL
    assert response.payload == MODEL_ANALYSIS
    assert client.calls[0]["use_case"] == "analyze"
    assert "Product: glass jar Location: Rome" in client.calls[0]["prompt"]


def test_analyze_passes_image_through(make_assistant):
    image = ModelImage(data=b"jpeg", mime_type="image/jpeg")
    assistant, client = make_assistant(json.dumps(MODEL_ANALYSIS))
    assistant.analyze(AnalyzeRequest(), image)
    assert client.calls[0]["image"] is image
    assert "Analyze the packaging shown in this image" in client.calls[0]["prompt"]


def test_incomplete_model_output_falls_back(make_assistant):
    assistant, _ = make_assistant('Sure! {"ecoScore": 7}')
    response = assistant.analyze(AnalyzeRequest(description="Coca-Cola plastic bottle"))
    assert response.source is ContentSource.FALLBACK
    result = AnalysisResult.model_validate(response.payload)
    assert result.components[0].material == "PET #1 Plastic"


def test_transient_failures_are_retried_then_succeed(make_assistant):
    assistant, client = make_assistant(ModelCallError("overloaded", transient=True), json.dumps(MODEL_ANALYSIS))
    response = assistant.analyze(AnalyzeRequest(description="jar"))
    assert response.source is ContentSource.MODEL
    assert len(client.calls) == 2


def test_exhausted_retries_fall_back(make_assistant):
    failures = [ModelCallError("503", transient=True)] * 3
    assistant, client = make_assistant(*failures)
    response = assistant.analyze(AnalyzeRequest(description="cardboard box"))
    assert response.source is ContentSource.FALLBACK
    assert response.payload["ecoScore"] == 8
    assert len(client.calls) == 3


def test_fatal_failure_is_not_retried(make_assistant):
    assistant, client = make_assistant(ModelCallError("API key invalid", transient=False))
    response = assistant.chat(ChatRequest(message="how do I recycle?"))
    assert response.source is ContentSource.FALLBACK
    assert response.payload["response"].startswith("♻️")
    assert len(client.calls) == 1


def test_empty_model_text_counts_as_failure(make_assistant):
    assistant, _ = make_assistant("   ")
    response = assistant.chat(ChatRequest(message="hi"))
    assert response.source is ContentSource.FALLBACK
    assert response.payload == {"response": DEFAULT_CHAT_TIP}


def test_chat_returns_trimmed_model_text(make_assistant):
    assistant, client = make_assistant("  Rinse it and recycle it! ♻️ \n")
    response = assistant.chat(ChatRequest(message="What about jars?"))
    assert response.payload == {"response": "Rinse it and recycle it! ♻️"}
    assert client.calls[0]["use_case"] == "chat"
    assert client.calls[0]["image"] is None


def test_quiz_from_model(make_assistant):
    assistant, _ = make_assistant(json.dumps(MODEL_QUIZ))
    response = assistant.quiz(QuizRequest(difficulty="easy"))
    assert response.source is ContentSource.MODEL
    assert response.payload == MODEL_QUIZ


def test_quiz_without_question_list_falls_back_to_bank(make_assistant):
    assistant, _ = make_assistant('{"quiz": {"title": "oops"}}')
    response = assistant.quiz(QuizRequest(difficulty="hard", questionCount=2))
    assert response.source is ContentSource.FALLBACK
    quiz = QuizResponse.model_validate(response.payload).quiz
    assert quiz.title == "Eco Expert Challenge"
    assert [q.id for q in quiz.questions] == [1, 2]


def test_unexpected_error_yields_placeholder(make_assistant):
    assistant, _ = make_assistant("unused")
    with patch("eco_assistant.build_prompt", side_effect=RuntimeError("boom")):
        response = assistant.analyze(AnalyzeRequest(description="glass"))
    assert response.source is ContentSource.PLACEHOLDER
    assert response.payload["summary"]["material"] == "Unknown"


def test_unexpected_chat_error_uses_keyword_reply(make_assistant):
    assistant, _ = make_assistant("unused")
    with patch("eco_assistant.build_prompt", side_effect=RuntimeError("boom")):
        response = assistant.chat(ChatRequest(message="compost tips"))
    assert response.source is ContentSource.PLACEHOLDER
    assert response.payload["response"].startswith("🌿")


def test_request_budget_stops_retries(make_assistant):
    ticks = iter([0.0, 29.5, 29.5])
    assistant, client = make_assistant(ModelCallError("429", transient=True), json.dumps(MODEL_ANALYSIS),
                                       base_delay_ms=1000, request_budget_seconds=30.0,
                                       clock=lambda: next(ticks))
    response = assistant.analyze(AnalyzeRequest(description="glass"))
    assert response.source is ContentSource.FALLBACK
    assert len(client.calls) == 1


def test_quiz_with_empty_question_list_falls_back(make_assistant):
    empty = {"quiz": {"title": "Empty", "difficulty": "easy", "category": "general", "questions": []}}
    assistant, _ = make_assistant(json.dumps(empty))
    response = assistant.quiz(QuizRequest(difficulty="easy", questionCount=3))
    assert response.source is ContentSource.FALLBACK
    quiz = QuizResponse.model_validate(response.payload).quiz
    assert quiz.title == "Eco Basics Quiz"
    assert len(quiz.questions) == 3


def test_quiz_with_out_of_range_answer_falls_back(make_assistant):
    broken = json.loads(json.dumps(MODEL_QUIZ))
    broken["quiz"]["questions"][0]["correctAnswer"] = 4
    assistant, _ = make_assistant(json.dumps(broken))
    assert assistant.quiz(QuizRequest()).source is ContentSource.FALLBACK


def test_quiz_with_duplicate_ids_falls_back(make_assistant):
    duplicated = json.loads(json.dumps(MODEL_QUIZ))
    duplicated["quiz"]["questions"] *= 2
    assistant, _ = make_assistant(json.dumps(duplicated))
    assert assistant.quiz(QuizRequest()).source is ContentSource.FALLBACK


def test_analysis_with_mismatched_rating_falls_back(make_assistant):
    mismatched = json.loads(json.dumps(MODEL_ANALYSIS))
    mismatched["summary"]["ecoRating"] = 3
    assistant, _ = make_assistant(json.dumps(mismatched))
    response = assistant.analyze(AnalyzeRequest(description="cardboard box"))
    assert response.source is ContentSource.FALLBACK
    assert response.payload["ecoScore"] == response.payload["summary"]["ecoRating"] == 8


def test_analysis_missing_storyboard_falls_back(make_assistant):
    partial = {k: v for k, v in MODEL_ANALYSIS.items() if k != "storyboard"}
    assistant, _ = make_assistant(json.dumps(partial))
    response = assistant.analyze(AnalyzeRequest(description="glass jar"))
    assert response.source is ContentSource.FALLBACK
    assert len(response.payload["storyboard"]) == 4
