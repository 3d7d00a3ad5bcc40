# tests/core/test_orchestrator.py

import asyncio
import json

import pytest

from snapsolve.core.pipeline import ProcessingOrchestrator
from snapsolve.core.prompts import NOTES_HEADER
from snapsolve.domain.exceptions import (
    ConfigurationError,
    ProcessingError,
    RateLimitError,
)
from snapsolve.models.schema import TextNote
from snapsolve.models.types import (
    Mode,
    PipelineKind,
    PipelineStatus,
    ViewState,
)
from tests._helpers.fakes import (
    CallbackEventSink,
    FakeAdapter,
    StatusError,
    TokenIgnoringAdapter,
    registry_factory_for,
)

pytestmark = pytest.mark.asyncio

PROBLEM_JSON = json.dumps(
    {
        "problem_statement": "Return indices of the two numbers that add up to target.",
        "constraints": "2 <= len(nums) <= 10^4",
        "example_input": "nums = [2, 7, 11, 15], target = 9",
        "example_output": "[0, 1]",
    }
)

OTHER_PROBLEM_JSON = json.dumps({"problem_statement": "Reverse a linked list."})

SOLUTION_REPLY = (
    "Here is the solution:\n```json\n"
    + json.dumps(
        {
            "code": "def two_sum(nums, target):\n    seen = {}\n    return []",
            "thoughts": ["Use a hash map of seen values"],
            "time_complexity": "O(n) - single pass over the list",
            "space_complexity": "O(n) - the map holds up to n values",
        }
    )
    + "\n```"
)

QUESTIONS_JSON = json.dumps(
    {
        "questions": [
            {
                "question_number": "1",
                "question_text": "What is 2 + 2?",
                "options": {"1": "3", "2": "4", "3": "5"},
            }
        ]
    }
)

ANSWERS_JSON = json.dumps(
    {
        "answers": [
            {
                "question_number": "1",
                "correct_answer": "2",
                "explanation": "Two plus two is four.",
            }
        ]
    }
)

DEBUG_REPLY = (
    "### Issues Identified\n"
    "- Off by one in the loop bound\n\n"
    "```python\nfor i in range(len(nums)):\n    pass\n```\n"
)


def _lifecycle_names(sink):
    return [name for name in sink.names() if name != "progress"]


@pytest.fixture
def build(screenshots, config_store, notes, sink):
    """Orchestrator factory for tests that need their own adapter or sink."""
    created = []

    def _build(adapter, events=None):
        factory = registry_factory_for(adapter)
        orch = ProcessingOrchestrator(
            screenshots=screenshots,
            config_store=config_store,
            notes=notes,
            events=events or sink,
            registry_factory=factory,
        )
        orch.factory = factory
        created.append(orch)
        return orch

    yield _build
    for orch in created:
        orch.close()


async def _solve_coding(orchestrator, screenshots, adapter):
    screenshots.add("/shots/1.png")
    adapter.replies = [PROBLEM_JSON, SOLUTION_REPLY]
    outcome = await orchestrator.start_primary()
    assert outcome.ok
    return outcome


class TestPrimaryPipeline:
    async def test_empty_queue(self, orchestrator, sink, adapter):
        outcome = await orchestrator.start_primary()

        assert outcome.status == PipelineStatus.NO_INPUT
        assert sink.names() == ["no-screenshots"]
        assert orchestrator.view == ViewState.QUEUE
        assert adapter.calls == []

    async def test_coding_success(self, orchestrator, screenshots, sink, adapter):
        screenshots.add("/shots/1.png")
        screenshots.add("/shots/2.png")
        screenshots.add("/debug/old.png", debug=True)
        adapter.replies = [PROBLEM_JSON, SOLUTION_REPLY]

        outcome = await orchestrator.start_primary()

        assert outcome.status == PipelineStatus.SUCCEEDED
        assert _lifecycle_names(sink) == [
            "extraction-started",
            "problem-extracted",
            "solution-success",
        ]
        assert [e.payload["progress"] for e in sink.events("progress")] == [20, 40, 60, 100]

        extracted = sink.events("problem-extracted")[0].payload
        assert extracted["example_output"] == "[0, 1]"

        solution = orchestrator.solution
        assert solution.code.startswith("def two_sum")
        assert solution.time_complexity == "O(n) - single pass over the list"
        assert not solution.is_mcq
        assert sink.events("solution-success")[0].payload["code"] == solution.code

        assert orchestrator.view == ViewState.SOLUTIONS
        assert orchestrator.problem.constraints == "2 <= len(nums) <= 10^4"
        assert screenshots.debug == []
        assert screenshots.debug_clears == 1

        extract_call, solve_call = adapter.calls
        assert [image.path for image in extract_call["images"]] == [
            "/shots/1.png",
            "/shots/2.png",
        ]
        assert solve_call["images"] == []
        assert "Return indices of the two numbers" in solve_call["user_text"]
        assert solve_call["max_tokens"] == 8192

    async def test_mcq_success(self, orchestrator, config_store, screenshots, sink, adapter):
        config_store.update(mode="mcq")
        screenshots.add("/shots/quiz.png")
        adapter.replies = [QUESTIONS_JSON, ANSWERS_JSON]

        outcome = await orchestrator.start_primary()

        assert outcome.ok
        extracted = sink.events("problem-extracted")[0].payload
        assert extracted["questions"][0]["options"] == {"A": "3", "B": "4", "C": "5"}
        assert orchestrator.problem is None
        assert orchestrator.questions.questions[0].question_text == "What is 2 + 2?"

        solution = orchestrator.solution
        assert solution.is_mcq
        assert solution.code.startswith("// MCQ Solutions")
        assert "/* Answer: B */" in solution.code
        assert solution.time_complexity == "N/A - MCQ Mode"

        answer = solution.answers[0]
        assert answer.correct_answer == "B"
        assert answer.question_text == "What is 2 + 2?"
        assert answer.options == {"A": "3", "B": "4", "C": "5"}
        assert "What is 2 + 2?" in adapter.calls[1]["user_text"]

    async def test_rate_limit_is_surfaced_once(self, orchestrator, screenshots, sink, adapter):
        screenshots.add("/shots/1.png")
        adapter.replies = [StatusError("Too many requests", 429)]

        outcome = await orchestrator.start_primary()

        assert outcome.status == PipelineStatus.FAILED
        assert isinstance(outcome.error, RateLimitError)
        assert len(adapter.calls) == 1
        error_event = sink.events("solution-error")[0]
        assert error_event.payload == {
            "message": "OpenAI API rate limit exceeded. "
            "Please wait a few minutes before trying again.",
            "error_type": "RateLimitError",
        }
        assert orchestrator.view == ViewState.QUEUE

    async def test_missing_api_key(self, orchestrator, config_store, sink, adapter):
        config_store.update(api_key=None)

        outcome = await orchestrator.start_primary()

        assert outcome.status == PipelineStatus.FAILED
        assert isinstance(outcome.error, ConfigurationError)
        assert sink.names() == ["api-key-invalid"]
        assert sink.events()[0].payload["message"] == (
            "API key not configured or invalid. Please check your settings."
        )
        assert adapter.calls == []

    async def test_unknown_provider(self, orchestrator, config_store, sink):
        config_store.update(provider="mistral")

        outcome = await orchestrator.start_primary()

        assert outcome.status == PipelineStatus.FAILED
        assert sink.names() == ["api-key-invalid"]

    async def test_unreadable_screenshots_are_skipped(self, orchestrator, screenshots, adapter):
        screenshots.primary.append("/shots/deleted.png")
        screenshots.add("/shots/2.png")
        screenshots.add("/shots/3.png")
        adapter.replies = [PROBLEM_JSON, SOLUTION_REPLY]

        outcome = await orchestrator.start_primary()

        assert outcome.ok
        assert [image.path for image in adapter.calls[0]["images"]] == [
            "/shots/2.png",
            "/shots/3.png",
        ]

    async def test_all_screenshots_unreadable(self, orchestrator, screenshots, sink, adapter):
        screenshots.primary.extend(["/shots/a.png", "/shots/b.png"])

        outcome = await orchestrator.start_primary()

        assert outcome.status == PipelineStatus.NO_INPUT
        assert sink.names() == ["extraction-started", "no-screenshots"]
        assert adapter.calls == []

    async def test_unparseable_reply_degrades(self, orchestrator, screenshots, sink, adapter):
        screenshots.add("/shots/1.png")
        adapter.replies = ["I could not read this image clearly.", "no code here"]

        outcome = await orchestrator.start_primary()

        assert outcome.ok
        assert orchestrator.solution.code == "no code here"
        assert "solution-error" not in sink.names()


class TestCancellation:
    async def test_cancel_between_stages(self, build, screenshots, adapter):
        holder = {}
        events = CallbackEventSink(
            "problem-extracted",
            lambda: holder["orch"].lifecycle.cancel(PipelineKind.PRIMARY),
        )
        orch = build(adapter, events=events)
        holder["orch"] = orch
        screenshots.add("/shots/1.png")
        adapter.replies = [PROBLEM_JSON, SOLUTION_REPLY]

        outcome = await orch.start_primary()

        assert outcome.status == PipelineStatus.CANCELED
        assert len(adapter.calls) == 1
        assert "solution-success" not in events.names()
        assert "solution-error" not in events.names()
        assert orch.solution is None

    async def test_newer_primary_run_supersedes_older(self, build, screenshots, sink):
        gate = asyncio.Event()
        # the first call is held at the gate; replies are consumed in arrival order
        adapter = TokenIgnoringAdapter(
            replies=[OTHER_PROBLEM_JSON, SOLUTION_REPLY, PROBLEM_JSON],
            gates={0: gate},
        )
        orch = build(adapter)
        screenshots.add("/shots/1.png")

        first = asyncio.create_task(orch.start_primary())
        await adapter.entered.wait()
        second = await orch.start_primary()
        gate.set()
        first_outcome = await first

        assert second.status == PipelineStatus.SUCCEEDED
        assert first_outcome.status == PipelineStatus.CANCELED
        assert orch.problem.problem_statement == "Reverse a linked list."
        assert sink.names().count("solution-success") == 1
        assert sink.names().count("problem-extracted") == 1

    async def test_cancel_all_aborts_in_flight_call(self, build, screenshots, sink):
        adapter = FakeAdapter(replies=[PROBLEM_JSON], gates={0: asyncio.Event()})
        orch = build(adapter)
        screenshots.add("/shots/1.png")

        task = asyncio.create_task(orch.start_primary())
        await adapter.entered.wait()
        canceled = await orch.cancel_all()
        outcome = await asyncio.wait_for(task, timeout=1)

        assert canceled is True
        assert outcome.status == PipelineStatus.CANCELED
        assert sink.names() == ["extraction-started", "progress", "no-screenshots"]
        assert orch.view == ViewState.QUEUE
        assert orch.problem is None

    async def test_cancel_all_when_idle(self, orchestrator, screenshots, sink, adapter):
        await _solve_coding(orchestrator, screenshots, adapter)
        sink.clear()

        canceled = await orchestrator.cancel_all()

        assert canceled is False
        assert sink.names() == []
        assert orchestrator.view == ViewState.QUEUE
        assert orchestrator.solution is None

    async def test_key_change_mid_flight_cancels(self, build, config_store, screenshots, sink):
        adapter = FakeAdapter(replies=[PROBLEM_JSON], gates={0: asyncio.Event()})
        orch = build(adapter)
        screenshots.add("/shots/1.png")

        task = asyncio.create_task(orch.start_primary())
        await adapter.entered.wait()
        config_store.update(api_key="sk-rotated")
        outcome = await asyncio.wait_for(task, timeout=1)

        assert outcome.status == PipelineStatus.CANCELED
        assert "solution-error" not in sink.names()
        assert orch.registry.config.api_key == "sk-rotated"
        assert orch.factory.calls[-1].api_key == "sk-rotated"


class TestDebugPipeline:
    async def test_debug_success(self, orchestrator, screenshots, notes, sink, adapter):
        await _solve_coding(orchestrator, screenshots, adapter)
        screenshots.add("/debug/run.png", debug=True)
        notes.notes = [TextNote(id="n1", text="Fails when nums is empty")]
        adapter.replies = [DEBUG_REPLY]
        sink.clear()

        outcome = await orchestrator.process_screenshots()

        assert outcome.kind == PipelineKind.DEBUG
        assert outcome.ok
        assert _lifecycle_names(sink) == ["debug-started", "debug-success"]
        assert orchestrator.has_debugged
        assert orchestrator.view == ViewState.SOLUTIONS

        call = adapter.calls[-1]
        assert [image.path for image in call["images"]] == ["/shots/1.png", "/debug/run.png"]
        assert "Return indices of the two numbers" in call["user_text"]
        assert NOTES_HEADER in call["user_text"]
        assert "Fails when nums is empty" in call["user_text"]

        payload = sink.events("debug-success")[0].payload
        assert "Off by one" in payload["debug_analysis"]
        assert payload["code"].startswith("for i in range")
        assert payload["time_complexity"] == "N/A - Debug mode"

    async def test_debug_without_notes_has_no_notes_header(
        self, orchestrator, screenshots, adapter
    ):
        await _solve_coding(orchestrator, screenshots, adapter)
        screenshots.add("/debug/run.png", debug=True)
        adapter.replies = [DEBUG_REPLY]

        await orchestrator.start_debug()

        assert NOTES_HEADER not in adapter.calls[-1]["user_text"]

    async def test_debug_without_problem(self, orchestrator, screenshots, sink, adapter):
        screenshots.add("/debug/run.png", debug=True)

        outcome = await orchestrator.start_debug()

        assert outcome.status == PipelineStatus.FAILED
        assert isinstance(outcome.error, ProcessingError)
        assert sink.names() == ["debug-error"]
        assert sink.events()[0].payload["message"] == "No problem info available"
        assert adapter.calls == []

    async def test_debug_with_empty_queue(self, orchestrator, screenshots, sink, adapter):
        await _solve_coding(orchestrator, screenshots, adapter)
        sink.clear()

        outcome = await orchestrator.process_screenshots()

        assert outcome.status == PipelineStatus.NO_INPUT
        assert sink.names() == ["no-screenshots"]

    async def test_debug_failure_keeps_solution_view(
        self, orchestrator, screenshots, sink, adapter
    ):
        await _solve_coding(orchestrator, screenshots, adapter)
        screenshots.add("/debug/run.png", debug=True)
        adapter.replies = [StatusError("upstream exploded", 500)]

        outcome = await orchestrator.start_debug()

        assert outcome.status == PipelineStatus.FAILED
        assert sink.events("debug-error")[0].payload["message"] == (
            "OpenAI server error. Please try again later."
        )
        assert orchestrator.view == ViewState.SOLUTIONS
        assert orchestrator.solution is not None
        assert not orchestrator.has_debugged


class TestConfigChanges:
    async def test_mode_change_resets_session(
        self, orchestrator, config_store, screenshots, adapter
    ):
        await _solve_coding(orchestrator, screenshots, adapter)
        screenshots.add("/debug/run.png", debug=True)

        config_store.update(mode=Mode.MCQ)

        assert orchestrator.view == ViewState.QUEUE
        assert orchestrator.problem is None
        assert orchestrator.solution is None
        assert screenshots.debug == []

    async def test_language_change_keeps_result(
        self, orchestrator, config_store, screenshots, adapter
    ):
        await _solve_coding(orchestrator, screenshots, adapter)
        version = orchestrator.registry.version

        config_store.update(language="rust")

        assert orchestrator.view == ViewState.SOLUTIONS
        assert orchestrator.solution is not None
        assert orchestrator.registry.version == version + 1
        assert orchestrator.registry.config.language == "rust"

    async def test_run_keeps_its_config_snapshot(
        self, build, config_store, screenshots, sink
    ):
        gate = asyncio.Event()
        adapter = TokenIgnoringAdapter(replies=[PROBLEM_JSON, SOLUTION_REPLY], gates={0: gate})
        orch = build(adapter)
        screenshots.add("/shots/1.png")

        task = asyncio.create_task(orch.start_primary())
        await adapter.entered.wait()
        config_store.update(language="rust")
        gate.set()
        outcome = await task

        assert outcome.ok
        assert "LANGUAGE: python" in adapter.calls[1]["user_text"]
