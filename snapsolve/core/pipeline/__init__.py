from snapsolve.core.pipeline.orchestrator import PipelineOutcome, ProcessingOrchestrator
from snapsolve.core.pipeline.transitions import ConfigTransition, reduce_config_change

__all__ = [
    "ConfigTransition",
    "PipelineOutcome",
    "ProcessingOrchestrator",
    "reduce_config_change",
]
