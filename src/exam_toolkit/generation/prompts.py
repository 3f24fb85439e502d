"""
Module: generation.prompts

Purpose:
    Build the prompt text sent to the generation service. Three context
    modes are supported, chosen from what the user provided:

    - Subject, topic and source material: the source supplies the theme
      or scenario, questions test the topic within the subject
    - Source material without both subject and topic: questions are
      built from the material
    - No source material: general knowledge of the topic

    The bulk prompt also lists the difficulty distribution band by band
    and fixes the output order (all multiple-choice first).

Key Functions:
    - build_exam_prompt(): Bulk generation prompt
    - build_regeneration_prompt(): Single-question prompt
    - difficulty_distribution(): "Questions a to b: Level (guidance)" lines

Dependencies:
    - generation.requests
    - core.models: Difficulty, DifficultyBand, QuestionKind

Used By:
    - generation.client
"""

from __future__ import annotations

import json
from typing import Sequence

from exam_toolkit.core.models import DifficultyBand, QuestionKind, OPTION_LETTERS

from .requests import GenerationRequest, RegenerationRequest, SourceContext


SYSTEM_PROMPT = (
    "You are an expert, meticulous exam writer. "
    "Reply with a single valid JSON object and nothing else."
)

NO_SOURCE_TEXT = "No specific source material; use general knowledge of the topic."
IMAGE_SOURCE_TEXT = "The source material is the attached image."

MCQ_SHAPE = {
    "question": "multiple-choice question text",
    "options": ["option A", "option B", "option C", "option D", "option E"],
    "answer": "letter of the correct option (A, B, C, D or E)",
}
ESSAY_SHAPE = {
    "question": "essay question text",
    "answer": "answer guideline or key points expected in a good answer",
}

_LETTERS = ", ".join(OPTION_LETTERS[:-1]) + f" or {OPTION_LETTERS[-1]}"


def _source_block(context: SourceContext) -> str:
    if context.source_text and context.source_text.strip():
        return f"---\n{context.source_text.strip()}\n---"
    return IMAGE_SOURCE_TEXT


def difficulty_distribution(bands: Sequence[DifficultyBand]) -> str:
    """
    Render one line per band.

    Example:
        >>> print(difficulty_distribution(to_bands(ranges)))
        - Questions 1 to 3: Easy (recall of facts stated explicitly in the material)
        - Questions 4 to 5: Hard (analysis, synthesis or evaluation requiring critical thinking)
    """
    return "\n".join(
        f"- Questions {b.start} to {b.end}: {b.difficulty.label} ({b.difficulty.instruction})"
        for b in bands
    )


def exam_shape(mcq_count: int, essay_count: int) -> str:
    """JSON shape description for the bulk response."""
    shape = {
        "mcqs": [MCQ_SHAPE] if mcq_count else [],
        "essays": [ESSAY_SHAPE] if essay_count else [],
    }
    return json.dumps(shape, indent=2)


def build_exam_prompt(request: GenerationRequest) -> str:
    """
    Build the bulk generation prompt.

    Args:
        request: Bulk generation request

    Returns:
        Prompt text for the user turn
    """
    ctx = request.context
    counts = (
        f"{request.total} questions in total "
        f"({request.mcq_count} multiple-choice and {request.essay_count} essay)"
    )

    if ctx.has_subject_and_topic and ctx.has_source:
        intro = (
            "Write exam questions that combine three elements: the subject, "
            "the topic, and the context or theme of the source material."
        )
        body = (
            f"Subject: {ctx.subject}\n"
            f"Topic: {ctx.topic}\n"
            f"Context/theme from the source material:\n{_source_block(ctx)}\n\n"
            f"Write {counts}.\n"
            f'The questions must test understanding of "{ctx.topic}" within "{ctx.subject}".\n'
            "Use information, characters or scenarios from the source material as the "
            "background or context of each question.\n"
            "Do NOT merely ask about facts in the source material; use it as INSPIRATION "
            "for questions relevant to the subject and topic."
        )
    else:
        intro = "Write exam questions from the information given."
        body = f"Subject: {ctx.subject}\nTopic: {ctx.topic}\n"
        if ctx.has_source:
            body += (
                f"\nSource material:\n{_source_block(ctx)}\n\n"
                f"Write {counts} based on the material above."
            )
        else:
            body += (
                f"\nWrite {counts} about this topic in general. No source material was "
                "provided, so base the questions on your general knowledge of the topic."
            )

    return (
        f"{intro}\n\n"
        f"{body}\n\n"
        f"Difficulty distribution:\n{difficulty_distribution(request.bands)}\n\n"
        f"Order the questions with all {request.mcq_count} multiple-choice questions first, "
        f"then the {request.essay_count} essay questions.\n\n"
        "Output rules:\n"
        "- Return a single valid JSON object with exactly this shape:\n"
        f"{exam_shape(request.mcq_count, request.essay_count)}\n"
        f'- "mcqs" must hold exactly {request.mcq_count} items and "essays" exactly '
        f"{request.essay_count} items (an empty array when the count is 0).\n"
        "- Do not include any text or markdown outside the JSON object.\n"
        f"- Every multiple-choice question has 5 options and the answer is a letter ({_LETTERS})."
    )


def build_regeneration_prompt(request: RegenerationRequest) -> str:
    """
    Build the prompt for replacing one question.

    Args:
        request: Regeneration request with the resolved difficulty

    Returns:
        Prompt text for the user turn
    """
    ctx = request.context
    kind_label = "multiple-choice" if request.kind is QuestionKind.MULTIPLE_CHOICE else "essay"

    if ctx.has_subject_and_topic and ctx.has_source:
        body = (
            "Based on the following:\n"
            f'- Subject: "{ctx.subject}"\n'
            f'- Topic: "{ctx.topic}"\n'
            f"- Context/theme from the source material:\n{_source_block(ctx)}\n\n"
            f"Write one new, creative {kind_label} question. It must test understanding of "
            "the topic within the subject, using the source material's context as its theme."
        )
    else:
        source = _source_block(ctx) if ctx.has_source else NO_SOURCE_TEXT
        body = (
            f'Based on the source material about "{ctx.topic}" in "{ctx.subject}", '
            f"write one new {kind_label} question.\n\n"
            f"Source material:\n{source}"
        )

    shape = MCQ_SHAPE if request.kind is QuestionKind.MULTIPLE_CHOICE else ESSAY_SHAPE
    rules = (
        "Output rules:\n"
        "- Return a single valid JSON object with exactly this shape:\n"
        f"{json.dumps(shape, indent=2)}\n"
        "- Do not include any text or markdown outside the JSON object."
    )
    if request.kind is QuestionKind.MULTIPLE_CHOICE:
        rules += f"\n- Provide 5 options; the answer is a letter ({_LETTERS})."

    return (
        f"{body}\n\n"
        f"Difficulty: {request.difficulty.label} ({request.difficulty.instruction})\n\n"
        "IMPORTANT: the new question MUST differ from this existing question:\n"
        f'"{request.exclude_text}"\n\n'
        f"{rules}"
    )
