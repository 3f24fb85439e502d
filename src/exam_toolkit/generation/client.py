"""
Module: generation.client

Purpose:
    Question generators. QuestionGenerator is the interface the session
    controller depends on; OpenAIQuestionGenerator implements it with the
    OpenAI chat completions API in JSON mode. Responses are decoded,
    validated against the payload schemas and turned into questions with
    fresh ids, preserving the service's ordering.

Key Classes:
    - QuestionGenerator: Abstract generator interface
    - OpenAIQuestionGenerator: AsyncOpenAI-backed implementation

Dependencies:
    - openai: AsyncOpenAI client
    - core.schemas: Payload validation
    - generation.prompts: Prompt text

Used By:
    - session.controller.ExamSession
    - cli
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError

from exam_toolkit.config import GeneratorConfig
from exam_toolkit.core.models import (
    EssayQuestion,
    ExamSet,
    MultipleChoiceQuestion,
    Question,
    QuestionKind,
)
from exam_toolkit.core.models.questions import new_question_id
from exam_toolkit.core.schemas import (
    PayloadValidationError,
    validate_exam_payload,
    validate_question_payload,
)
from exam_toolkit.errors import ServiceError

from .prompts import SYSTEM_PROMPT, build_exam_prompt, build_regeneration_prompt
from .requests import GenerationRequest, RegenerationRequest, SourceContext

logger = logging.getLogger(__name__)

MSG_EMPTY = "Received an empty response from the AI service."
MSG_PARSE = "Could not parse the JSON response from the AI. Try reducing the complexity of the material."
MSG_INVALID = "The AI service returned questions in an unexpected format. Please try again."
MSG_COMMUNICATION = "Could not communicate with the AI service. Please try again later."
MSG_REGENERATE = "Could not regenerate the question."


class QuestionGenerator(ABC):
    """Produces questions for the session controller."""

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> ExamSet:
        """
        Generate a full exam.

        Returns:
            ExamSet with mcq_count multiple-choice questions followed by
            essay_count essays, each with a fresh id

        Raises:
            ServiceError: On any failure; nothing partial is returned
        """

    @abstractmethod
    async def regenerate(self, request: RegenerationRequest) -> Question:
        """
        Generate one replacement question of request.kind.

        Raises:
            ServiceError: On any failure
        """


class OpenAIQuestionGenerator(QuestionGenerator):
    """
    Generator backed by the OpenAI chat completions API.

    The client is created lazily so a generator can be built before an API
    key is available; pass client= to inject one (tests).

    Example:
        >>> generator = OpenAIQuestionGenerator(GeneratorConfig.from_env())
        >>> exam = await generator.generate(request)
    """

    def __init__(self, config: Optional[GeneratorConfig] = None, client: Optional[AsyncOpenAI] = None):
        self.config = config or GeneratorConfig()
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.require_api_key(),
                base_url=self.config.base_url,
                timeout=self.config.timeout_s,
            )
        return self._client

    # ─────────────────────────────────────────────────────────────────────────
    # QuestionGenerator
    # ─────────────────────────────────────────────────────────────────────────

    async def generate(self, request: GenerationRequest) -> ExamSet:
        logger.info(
            f"Requesting {request.mcq_count} multiple-choice and "
            f"{request.essay_count} essay questions from {self.config.model}"
        )
        prompt = build_exam_prompt(request)
        data = await self._complete_json(prompt, request.context, self.config.temperature, MSG_COMMUNICATION)

        try:
            validate_exam_payload(data, mcq_count=request.mcq_count, essay_count=request.essay_count)
        except PayloadValidationError as e:
            logger.error(f"Invalid exam payload at '{e.path}': {e}")
            raise ServiceError(f"Invalid exam payload: {e}", MSG_INVALID) from e

        exam = ExamSet(
            mcqs=tuple(_build_mcq(item) for item in data["mcqs"]),
            essays=tuple(_build_essay(item) for item in data["essays"]),
        )
        logger.info(f"Generated {exam.total} questions")
        return exam

    async def regenerate(self, request: RegenerationRequest) -> Question:
        logger.info(f"Regenerating question {request.ordinal} ({request.kind}, {request.difficulty})")
        prompt = build_regeneration_prompt(request)
        data = await self._complete_json(
            prompt, request.context, self.config.regeneration_temperature, MSG_REGENERATE
        )

        try:
            validate_question_payload(request.kind, data)
        except PayloadValidationError as e:
            logger.error(f"Invalid question payload at '{e.path}': {e}")
            raise ServiceError(f"Invalid question payload: {e}", MSG_REGENERATE) from e

        if request.kind is QuestionKind.MULTIPLE_CHOICE:
            return _build_mcq(data)
        return _build_essay(data)

    # ─────────────────────────────────────────────────────────────────────────
    # Transport
    # ─────────────────────────────────────────────────────────────────────────

    def _messages(self, prompt: str, context: SourceContext) -> list[dict[str, Any]]:
        if context.source_image is None:
            user_content: Any = prompt
        else:
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": context.source_image.data_url()}},
            ]
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]

    async def _complete_json(
        self,
        prompt: str,
        context: SourceContext,
        temperature: float,
        failure_message: str,
    ) -> Any:
        """Send one chat completion in JSON mode and decode the reply."""
        try:
            response = await self.client.chat.completions.create(
                model=self.config.model,
                messages=self._messages(prompt, context),
                temperature=temperature,
                max_tokens=self.config.max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            logger.error(f"Generation request failed: {e}")
            raise ServiceError(f"Generation request failed: {e}", failure_message) from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            logger.error("Generation service returned an empty response")
            raise ServiceError("Empty response from generation service", MSG_EMPTY)

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"Could not decode generation response: {e}")
            raise ServiceError(f"Could not decode response JSON: {e}", MSG_PARSE) from e


def _build_mcq(data: dict) -> MultipleChoiceQuestion:
    return MultipleChoiceQuestion(
        id=new_question_id(),
        prompt_text=data["question"].strip(),
        options=tuple(o.strip() for o in data["options"]),
        correct_option=data["answer"],
    )


def _build_essay(data: dict) -> EssayQuestion:
    return EssayQuestion(
        id=new_question_id(),
        prompt_text=data["question"].strip(),
        answer_guideline=data["answer"].strip(),
    )
