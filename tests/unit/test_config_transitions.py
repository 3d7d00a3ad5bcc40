"""Tests for the config-change reducer."""

import pytest

from snapsolve.core.pipeline import reduce_config_change
from snapsolve.models.context import ProviderConfig
from snapsolve.models.types import Mode, ViewState


@pytest.fixture
def base() -> ProviderConfig:
    return ProviderConfig(provider="openai", api_key="sk-one", mode=Mode.CODING)


class TestReduceConfigChange:
    def test_identical_config_changes_nothing(self, base):
        transition = reduce_config_change(base, base, ViewState.SOLUTIONS)

        assert not transition.changed_anything
        assert transition.next_view == ViewState.SOLUTIONS

    def test_mode_change_clears_and_returns_to_queue(self, base):
        new = base.model_copy(update={"mode": Mode.MCQ})

        transition = reduce_config_change(base, new, ViewState.SOLUTIONS)

        assert transition.clear_problem
        assert transition.clear_debug_queue
        assert transition.next_view == ViewState.QUEUE
        assert transition.cancel_inflight
        assert transition.rebuild_registry

    def test_result_produced_under_other_mode(self, base):
        # the store already says coding, but the stored result came from MCQ
        transition = reduce_config_change(base, base, ViewState.SOLUTIONS, result_mode=Mode.MCQ)

        assert transition.clear_problem
        assert transition.next_view == ViewState.QUEUE
        assert not transition.rebuild_registry

    @pytest.mark.parametrize(
        "update",
        [{"provider": "gemini"}, {"api_key": "sk-two"}, {"api_key": None}],
    )
    def test_identity_change_cancels_but_keeps_result(self, base, update):
        new = base.model_copy(update=update)

        transition = reduce_config_change(base, new, ViewState.SOLUTIONS, result_mode=Mode.CODING)

        assert transition.cancel_inflight
        assert transition.rebuild_registry
        assert not transition.clear_problem
        assert transition.next_view == ViewState.SOLUTIONS

    def test_provider_case_is_ignored(self, base):
        new = base.model_copy(update={"provider": " OpenAI "})
        transition = reduce_config_change(base, new, ViewState.QUEUE)
        assert not transition.cancel_inflight

    def test_model_or_language_change_only_rebuilds(self, base):
        new = base.model_copy(
            update={"language": "rust", "models": {"solution": "gpt-4o-mini"}}
        )

        transition = reduce_config_change(base, new, ViewState.SOLUTIONS)

        assert transition.rebuild_registry
        assert not transition.cancel_inflight
        assert not transition.clear_problem
        assert transition.next_view == ViewState.SOLUTIONS
