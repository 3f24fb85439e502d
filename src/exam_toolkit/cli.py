"""
Module: cli

Purpose:
    Command-line entry point. Drives an ExamSession end-to-end:

    exam-toolkit generate --subject Biology --topic "Cell division" \\
        --source notes.pdf --mcq 5 --essay 3 --band 3:easy --band 8:hard \\
        --output out/biology.pdf --json out/biology.json

    exam-toolkit regenerate out/biology.json --number 4 --band 3:easy \\
        --band 8:hard --output out/biology.pdf

Exit codes: 0 success, 1 service/ingestion/export failure, 2 invalid input.

Key Functions:
    - main(): Console-script entry point
    - parse_band(): Parse a TO:DIFFICULTY option

Dependencies:
    - argparse (std)
    - dotenv: .env loading for the API key and model settings
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from dotenv import load_dotenv

from exam_toolkit import __version__
from exam_toolkit.config import GeneratorConfig
from exam_toolkit.core.models import Difficulty, DifficultyRange, ExamSet
from exam_toolkit.errors import ExamToolkitError, ValidationError
from exam_toolkit.export import ExportConfig
from exam_toolkit.generation import OpenAIQuestionGenerator, QuestionGenerator
from exam_toolkit.partition import to_bands
from exam_toolkit.session import ExamSession

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2


def parse_band(value: str) -> Tuple[int, Difficulty]:
    """
    Parse "TO:DIFFICULTY", e.g. "3:easy".

    Raises:
        argparse.ArgumentTypeError: If the value is malformed
    """
    to_text, sep, label = value.partition(":")
    try:
        if not sep:
            raise ValueError("expected TO:DIFFICULTY")
        to = int(to_text)
        if to < 1:
            raise ValueError("TO must be >= 1")
        return to, Difficulty.parse(label)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid band {value!r}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="exam-toolkit",
        description="Generate multiple-choice and essay exams with an LLM.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--env-file", type=Path, default=None, help="Path to a .env file")
    parser.add_argument("--model", type=str, default=None, help="Override the chat model")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_context(p: argparse.ArgumentParser) -> None:
        p.add_argument("--subject", type=str, default="")
        p.add_argument("--topic", type=str, default="")
        src = p.add_mutually_exclusive_group()
        src.add_argument("--source", type=Path, default=None, help="Text, PDF or image file")
        src.add_argument("--source-text", type=str, default=None, help="Source material as text")
        p.add_argument(
            "--band", type=parse_band, action="append", default=[],
            metavar="TO:DIFFICULTY",
            help="Difficulty band ending at question TO (repeatable, ascending)",
        )
        p.add_argument("--output", type=Path, default=None, help="PDF output file or directory")
        p.add_argument("--title", type=str, default=None)
        p.add_argument("--no-answer-key", action="store_true")

    gen = sub.add_parser("generate", help="Generate a new exam")
    add_context(gen)
    gen.add_argument("--mcq", type=int, default=3, help="Number of multiple-choice questions")
    gen.add_argument("--essay", type=int, default=2, help="Number of essay questions")
    gen.add_argument("--split", type=int, default=0, help="Split the last band this many times")
    gen.add_argument("--json", type=Path, default=None, help="Also write the exam as JSON")

    regen = sub.add_parser("regenerate", help="Regenerate one question of a saved exam")
    regen.add_argument("exam", type=Path, help="Exam JSON written by 'generate --json'")
    add_context(regen)
    regen.add_argument("--number", type=int, required=True, help="1-based question number")

    return parser


def _apply_context(session: ExamSession, args: argparse.Namespace) -> None:
    session.set_subject(args.subject)
    session.set_topic(args.topic)
    if args.source is not None:
        session.load_source(args.source)
    elif args.source_text:
        session.set_source_text(args.source_text)


def _apply_bands(session: ExamSession, bands: Sequence[Tuple[int, Difficulty]]) -> None:
    if not bands:
        return
    tos = [to for to, _ in bands]
    if tos != sorted(set(tos)):
        raise ValidationError(f"Band upper bounds must be strictly increasing: {tos}")
    session.set_ranges([DifficultyRange.create(to, difficulty) for to, difficulty in bands])


def _export_config(args: argparse.Namespace) -> ExportConfig:
    return ExportConfig(include_answer_key=not args.no_answer_key)


def _log_bands(session: ExamSession) -> None:
    for band in to_bands(session.form.ranges):
        logger.info(f"  Questions {band.start}-{band.end}: {band.difficulty}")


async def run_generate(args: argparse.Namespace, generator: QuestionGenerator) -> int:
    session = ExamSession(generator)
    _apply_context(session, args)
    session.set_counts(args.mcq, args.essay)
    _apply_bands(session, args.band)
    for _ in range(max(0, args.split)):
        session.split_range()
    _log_bands(session)

    exam = await session.generate()
    logger.info(f"Generated {len(exam.mcqs)} multiple-choice and {len(exam.essays)} essay questions")

    if args.json is not None:
        args.json.parent.mkdir(parents=True, exist_ok=True)
        args.json.write_text(json.dumps(exam.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Wrote {args.json}")

    result = session.export_pdf(args.output, config=_export_config(args), title=args.title)
    logger.info(f"Wrote {result.path} ({result.page_count} pages)")
    return EXIT_OK


async def run_regenerate(args: argparse.Namespace, generator: QuestionGenerator) -> int:
    try:
        exam = ExamSet.from_dict(json.loads(args.exam.read_text(encoding="utf-8")))
    except (OSError, ValueError, KeyError) as e:
        raise ValidationError(f"Could not load exam from {args.exam}: {e}") from e
    if not 1 <= args.number <= exam.total:
        raise ValidationError(f"Question number must be between 1 and {exam.total}")

    session = ExamSession(generator)
    _apply_context(session, args)
    session.set_counts(len(exam.mcqs), len(exam.essays))
    _apply_bands(session, args.band)
    session.exam = exam

    target = list(exam)[args.number - 1]
    fresh = await session.regenerate_one(target.id)
    logger.info(f"Regenerated question {args.number}: {fresh.prompt_text}")

    args.exam.write_text(json.dumps(session.exam.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Updated {args.exam}")
    if args.output is not None:
        result = session.export_pdf(args.output, config=_export_config(args), title=args.title)
        logger.info(f"Wrote {result.path} ({result.page_count} pages)")
    return EXIT_OK


def main(argv: Optional[List[str]] = None, generator: Optional[QuestionGenerator] = None) -> int:
    """
    Run the CLI.

    Args:
        argv: Arguments (defaults to sys.argv[1:])
        generator: Generator to use instead of the OpenAI one

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )
    load_dotenv(args.env_file)

    try:
        if generator is None:
            config = GeneratorConfig.from_env()
            if args.model:
                config = replace(config, model=args.model)
            generator = OpenAIQuestionGenerator(config)

        if args.command == "generate":
            return asyncio.run(run_generate(args, generator))
        return asyncio.run(run_regenerate(args, generator))
    except ValidationError as e:
        logger.error(str(e))
        return EXIT_INVALID
    except ExamToolkitError as e:
        logger.error(getattr(e, "user_message", None) or str(e))
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
