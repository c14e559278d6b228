"""
Request orchestration for the analyze, chat and quiz endpoints.

Each call runs BUILDING_PROMPT -> CALLING_MODEL -> (EXTRACTING | NO_OUTPUT)
-> (EXTRACTED | SYNTHESIZING) -> RESPONDED. Model failures and malformed
output degrade to keyword fallback content; anything unexpected degrades to a
hardcoded placeholder. A well-formed request always gets an answer.
"""

import enum
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError

import fallback_generator
from api.prompts import build_prompt
from api.pydantic_models import AnalysisResult, AnalyzeRequest, ChatRequest, QuizRequest, QuizResponse
from gemini_service import ModelImage
from response_parser import extract_json
from retry_policy import DEFAULT_BASE_DELAY_MS, DEFAULT_MAX_ATTEMPTS, retry_with_backoff

logger = logging.getLogger(__name__)

ANALYSIS_REQUIRED_FIELDS = ("components", "ecoScore", "summary")
QUIZ_SEQUENCE_FIELDS = ("quiz.questions",)


class Stage(enum.Enum):
    BUILDING_PROMPT = "BUILDING_PROMPT"
    CALLING_MODEL = "CALLING_MODEL"
    EXTRACTING = "EXTRACTING"
    NO_OUTPUT = "NO_OUTPUT"
    EXTRACTED = "EXTRACTED"
    SYNTHESIZING = "SYNTHESIZING"
    RESPONDED = "RESPONDED"


class ContentSource(enum.Enum):
    MODEL = "model"
    FALLBACK = "fallback"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class ModelOutcome:
    ok: bool
    text: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class AssistantResponse:
    payload: Dict[str, Any]
    source: ContentSource


class EcoAssistant:
    """Sequences prompt building, the retried model call, extraction and fallback synthesis."""

    def __init__(self, model_client, max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                 base_delay_ms: int = DEFAULT_BASE_DELAY_MS, request_budget_seconds: Optional[float] = 30.0,
                 sleep: Callable[[float], None] = time.sleep, clock: Callable[[], float] = time.monotonic):
        self.model_client = model_client
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self.request_budget_seconds = request_budget_seconds
        self._sleep = sleep
        self._clock = clock

    # --- public entry points ---

    def analyze(self, request: AnalyzeRequest, image: Optional[ModelImage] = None) -> AssistantResponse:
        user_input = {
            "description": request.description,
            "location": request.location,
            "has_image": image is not None,
        }
        return self._guarded(
            "analyze",
            lambda: self._structured("analyze", user_input, image, ANALYSIS_REQUIRED_FIELDS, (), AnalysisResult),
            fallback_generator.placeholder_analysis,
        )

    def chat(self, request: ChatRequest) -> AssistantResponse:
        user_input = {"message": request.message}
        return self._guarded(
            "chat",
            lambda: self._prose("chat", user_input),
            lambda: fallback_generator.synthesize_chat_reply(request.message),
        )

    def quiz(self, request: QuizRequest) -> AssistantResponse:
        user_input = {
            "difficulty": request.difficulty,
            "category": request.category,
            "questionCount": request.questionCount,
        }
        return self._guarded(
            "quiz",
            lambda: self._structured("quiz", user_input, None, (), QUIZ_SEQUENCE_FIELDS, QuizResponse),
            fallback_generator.placeholder_quiz,
        )

    # --- pipeline steps ---

    def call_model(self, prompt: str, image: Optional[ModelImage], use_case: str) -> ModelOutcome:
        """Run the model call under the retry policy; any raised error becomes a failed outcome."""
        deadline = None
        if self.request_budget_seconds is not None:
            deadline = self._clock() + self.request_budget_seconds
        try:
            text = retry_with_backoff(
                lambda: self.model_client.generate(prompt, image=image, use_case=use_case),
                max_attempts=self.max_attempts,
                base_delay_ms=self.base_delay_ms,
                sleep=self._sleep,
                deadline=deadline,
                clock=self._clock,
                label=f"{use_case} model call",
            )
        except Exception as e:
            logger.error(f"Model call for {use_case} failed: {e}")
            return ModelOutcome(ok=False, error=str(e))
        if not text or not text.strip():
            return ModelOutcome(ok=False, error="empty response")
        return ModelOutcome(ok=True, text=text)

    def _structured(self, use_case: str, user_input: Dict[str, Any], image: Optional[ModelImage],
                    required: Sequence[str], sequences: Sequence[str],
                    schema: Type[BaseModel]) -> AssistantResponse:
        self._log_stage(use_case, Stage.BUILDING_PROMPT)
        prompt = build_prompt(use_case, user_input)

        self._log_stage(use_case, Stage.CALLING_MODEL)
        outcome = self.call_model(prompt, image, use_case)

        if outcome.ok:
            self._log_stage(use_case, Stage.EXTRACTING)
            extracted = extract_json(outcome.text, required_fields=required, sequence_fields=sequences)
            if extracted.ok:
                try:
                    validated = schema.model_validate(extracted.value)
                except ValidationError as e:
                    logger.warning(f"{use_case}: model output failed schema validation: {e.error_count()} error(s)")
                else:
                    self._log_stage(use_case, Stage.EXTRACTED)
                    return self._respond(use_case, validated.model_dump(), ContentSource.MODEL)
            else:
                logger.warning(f"{use_case}: model output rejected ({extracted.reason})")
        else:
            self._log_stage(use_case, Stage.NO_OUTPUT)

        self._log_stage(use_case, Stage.SYNTHESIZING)
        return self._respond(use_case, fallback_generator.synthesize(use_case, user_input), ContentSource.FALLBACK)

    def _prose(self, use_case: str, user_input: Dict[str, Any]) -> AssistantResponse:
        self._log_stage(use_case, Stage.BUILDING_PROMPT)
        prompt = build_prompt(use_case, user_input)

        self._log_stage(use_case, Stage.CALLING_MODEL)
        outcome = self.call_model(prompt, None, use_case)
        if outcome.ok:
            return self._respond(use_case, {"response": outcome.text.strip()}, ContentSource.MODEL)

        self._log_stage(use_case, Stage.NO_OUTPUT)
        self._log_stage(use_case, Stage.SYNTHESIZING)
        return self._respond(use_case, fallback_generator.synthesize(use_case, user_input), ContentSource.FALLBACK)

    def _guarded(self, use_case: str, pipeline: Callable[[], AssistantResponse],
                 placeholder: Callable[[], Dict[str, Any]]) -> AssistantResponse:
        try:
            return pipeline()
        except Exception as e:
            logging.critical(f"Unexpected error in {use_case} pipeline: {e}", exc_info=True)
            return self._respond(use_case, placeholder(), ContentSource.PLACEHOLDER)

    def _respond(self, use_case: str, payload: Dict[str, Any], source: ContentSource) -> AssistantResponse:
        self._log_stage(use_case, Stage.RESPONDED, f"source={source.value}")
        return AssistantResponse(payload=payload, source=source)

    @staticmethod
    def _log_stage(use_case: str, stage: Stage, detail: str = ""):
        logger.info(f"[{use_case}] -> {stage.value}{' ' + detail if detail else ''}")
