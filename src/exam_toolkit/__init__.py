"""Top-level package for the AI Exam Builder.

Provides subpackages:
- exam_toolkit.core – immutable models and payload schemas
- exam_toolkit.partition – difficulty-range partition manager
- exam_toolkit.generation – prompts and the LLM question generator
- exam_toolkit.ingestion – source material loading (text, PDF, image)
- exam_toolkit.export – PDF export with answer key
- exam_toolkit.session – exam session controller
"""

from importlib.metadata import PackageNotFoundError, version as _pkg_version

try:
    __version__ = _pkg_version("exam_toolkit")
except PackageNotFoundError:
    # Running from a source checkout without an install
    __version__ = "0.0.0"

__all__: list[str] = ["__version__"]
