"""
Generation Package

Prompt construction and question generators.
"""

from .client import OpenAIQuestionGenerator, QuestionGenerator
from .prompts import build_exam_prompt, build_regeneration_prompt
from .requests import GenerationRequest, RegenerationRequest, SourceContext

__all__ = [
    "OpenAIQuestionGenerator",
    "QuestionGenerator",
    "build_exam_prompt",
    "build_regeneration_prompt",
    "GenerationRequest",
    "RegenerationRequest",
    "SourceContext",
]
