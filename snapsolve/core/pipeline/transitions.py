"""Orchestrator reaction to a config change, as a pure function."""

from dataclasses import dataclass
from typing import Optional

from snapsolve.models.context import ProviderConfig
from snapsolve.models.types import Mode, ViewState


@dataclass(frozen=True)
class ConfigTransition:
    clear_problem: bool
    clear_debug_queue: bool
    next_view: ViewState
    cancel_inflight: bool
    rebuild_registry: bool

    @property
    def changed_anything(self) -> bool:
        return (
            self.clear_problem
            or self.clear_debug_queue
            or self.cancel_inflight
            or self.rebuild_registry
        )


def reduce_config_change(
    old: ProviderConfig,
    new: ProviderConfig,
    view: ViewState,
    result_mode: Optional[Mode] = None,
) -> ConfigTransition:
    """Decide what a new config snapshot does to the current session.

    ``result_mode`` is the mode the stored result was produced under, if any.
    A mode that no longer matches discards the result and returns to the
    queue. A new provider or API key cancels in-flight runs; a model-name or
    language change only rebuilds the registry for the next run.
    """
    mode_changed = new.mode != old.mode or (
        result_mode is not None and new.mode != result_mode
    )
    identity_changed = (
        new.provider.strip().lower() != old.provider.strip().lower()
        or (new.api_key or "") != (old.api_key or "")
    )
    return ConfigTransition(
        clear_problem=mode_changed,
        clear_debug_queue=mode_changed,
        next_view=ViewState.QUEUE if mode_changed else view,
        cancel_inflight=mode_changed or identity_changed,
        rebuild_registry=new != old,
    )
