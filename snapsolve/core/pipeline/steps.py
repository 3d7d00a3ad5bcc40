import json
from typing import List

import structlog

from snapsolve.core.normalizer import AnswerNormalizer
from snapsolve.core.parsing import (
    answer_parser,
    debug_parser,
    problem_parser,
    question_parser,
    solution_parser,
)
from snapsolve.core.prompts import (
    DEBUG_PROMPT,
    MCQ_ANSWER_PROMPT,
    SOLUTION_PROMPT,
    notes_section,
)
from snapsolve.infrastructure.llm.base import ProviderAdapter
from snapsolve.models.context import PipelineRequest
from snapsolve.models.schema import Answer, SolutionResult
from snapsolve.models.types import Mode, StagePurpose

from .emitter import EventEmitter

logger = structlog.get_logger(__name__)

MCQ_THOUGHTS = ["MCQ analysis completed"]
MCQ_COMPLEXITY = "N/A - MCQ Mode"


def render_mcq_code(answers: List[Answer]) -> str:
    """Plain-text listing of MCQ answers shown in the code panel."""
    if not answers:
        return "// MCQ Solution - No answers found"

    lines = ["// MCQ Solutions", ""]
    for idx, answer in enumerate(answers):
        lines.append(f"/* Question {answer.question_number or idx + 1} */")
        lines.append(answer.question_text or "Question text not available")
        lines.append("")
        if answer.options:
            lines.extend(f"{key}: {value}" for key, value in answer.options.items())
            lines.append("")
        lines.append(f"/* Answer: {answer.correct_answer or '?'} */")
        lines.append(
            f"/* Explanation: {answer.explanation or 'No explanation provided'} */"
        )
        lines.append("")
    return "\n".join(lines) + "\n"


class ExtractStep:
    """Reads the screenshots into a ProblemInfo or a QuestionSet."""

    def __init__(self, normalizer: AnswerNormalizer):
        self.normalizer = normalizer

    async def run(
        self, ctx: PipelineRequest, adapter: ProviderAdapter, emit: EventEmitter
    ) -> PipelineRequest:
        ctx.token.raise_if_canceled()
        is_mcq = ctx.config.mode == Mode.MCQ
        await emit.progress(
            "Analyzing MCQ questions from screenshots..."
            if is_mcq
            else "Analyzing problem from screenshots...",
            20,
        )

        raw = await adapter.extract(
            ctx.images, ctx.config.language, ctx.config.mode, token=ctx.token
        )
        ctx.token.raise_if_canceled()

        if is_mcq:
            outcome = question_parser.parse(raw)
            questions = self.normalizer.normalize_questions(outcome.value)
            logger.info(
                "Questions extracted",
                count=len(questions.questions),
                strategy=outcome.strategy.value,
                degraded=outcome.degraded,
            )
            ctx = ctx.model_copy(update={"questions": questions, "problem": None})
        else:
            outcome = problem_parser.parse(raw)
            logger.info(
                "Problem extracted",
                strategy=outcome.strategy.value,
                degraded=outcome.degraded,
            )
            ctx = ctx.model_copy(update={"problem": outcome.value, "questions": None})

        await emit.progress(
            "Problem analyzed successfully. Preparing to generate solution...", 40
        )
        return ctx


class SolveStep:
    """Generates a coding solution for the extracted problem."""

    async def run(
        self, ctx: PipelineRequest, adapter: ProviderAdapter, emit: EventEmitter
    ) -> PipelineRequest:
        assert ctx.problem is not None, "Problem info required"
        ctx.token.raise_if_canceled()
        await emit.progress("Creating optimal solution with detailed explanations...", 60)

        problem = ctx.problem
        prompt = SOLUTION_PROMPT.format(
            problem_statement=problem.problem_statement,
            constraints=problem.constraints or "No specific constraints provided.",
            example_input=problem.example_input or "No example input provided.",
            example_output=problem.example_output or "No example output provided.",
            language=ctx.config.language,
        )
        raw = await adapter.synthesize(prompt, StagePurpose.SOLUTION, token=ctx.token)
        ctx.token.raise_if_canceled()

        outcome = solution_parser.parse(raw)
        await emit.progress("Solution generated successfully", 100)
        return ctx.model_copy(update={"solution": outcome.value})


class AnswerMcqStep:
    """Answers the extracted questions in one synthesis call."""

    def __init__(self, normalizer: AnswerNormalizer):
        self.normalizer = normalizer

    async def run(
        self, ctx: PipelineRequest, adapter: ProviderAdapter, emit: EventEmitter
    ) -> PipelineRequest:
        assert ctx.questions is not None, "Question set required"
        ctx.token.raise_if_canceled()
        await emit.progress("Analyzing MCQ questions and generating answers...", 60)

        questions_json = json.dumps(
            [q.model_dump() for q in ctx.questions.questions],
            indent=2,
            ensure_ascii=False,
        )
        raw = await adapter.synthesize(
            MCQ_ANSWER_PROMPT.format(questions_json=questions_json),
            StagePurpose.SOLUTION,
            token=ctx.token,
        )
        ctx.token.raise_if_canceled()

        outcome = answer_parser.parse(raw)
        answers = self.normalizer.normalize_answers(outcome.value, ctx.questions).answers
        solution = SolutionResult(
            code=render_mcq_code(answers),
            thoughts=list(MCQ_THOUGHTS),
            time_complexity=MCQ_COMPLEXITY,
            space_complexity=MCQ_COMPLEXITY,
            answers=answers,
            is_mcq=True,
        )
        await emit.progress("MCQ answers generated successfully", 100)
        return ctx.model_copy(update={"solution": solution})


class DebugStep:
    """Analyzes debug screenshots and notes against the stored problem."""

    async def run(
        self, ctx: PipelineRequest, adapter: ProviderAdapter, emit: EventEmitter
    ) -> PipelineRequest:
        ctx.token.raise_if_canceled()
        await emit.progress("Processing debug screenshots and text inputs...", 30)

        prompt = DEBUG_PROMPT.format(
            problem=ctx.problem_text(),
            language=ctx.config.language,
            notes_section=notes_section(ctx.notes),
        )
        await emit.progress("Analyzing code and generating debug feedback...", 60)
        raw = await adapter.synthesize(
            prompt, StagePurpose.DEBUGGING, token=ctx.token, images=ctx.images
        )
        ctx.token.raise_if_canceled()

        outcome = debug_parser.parse(raw)
        await emit.progress("Debug analysis complete", 100)
        return ctx.model_copy(update={"debug": outcome.value})
