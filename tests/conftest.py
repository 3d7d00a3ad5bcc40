"""Global test configuration and fixtures."""

import os

import pytest

# Set test environment
os.environ["SNAPSOLVE_ENVIRONMENT"] = "testing"
os.environ["SNAPSOLVE_LOG_FORMAT"] = "text"
os.environ.pop("SNAPSOLVE_API_KEY", None)

from snapsolve.adapters.config import InMemoryConfigStore
from snapsolve.adapters.events import QueueEventSink
from snapsolve.core.lifecycle import CancellationToken
from snapsolve.core.pipeline import ProcessingOrchestrator
from snapsolve.models.context import ProviderConfig
from snapsolve.models.types import Mode, PipelineKind
from tests._helpers.fakes import (
    FakeAdapter,
    FakeNoteStore,
    FakeScreenshotStore,
    registry_factory_for,
)


# Config fixtures
@pytest.fixture
def coding_config() -> ProviderConfig:
    return ProviderConfig(provider="openai", api_key="sk-test-key", mode=Mode.CODING)


@pytest.fixture
def mcq_config() -> ProviderConfig:
    return ProviderConfig(provider="openai", api_key="sk-test-key", mode=Mode.MCQ)


@pytest.fixture
def config_store(coding_config) -> InMemoryConfigStore:
    return InMemoryConfigStore(coding_config)


# Collaborator fixtures
@pytest.fixture
def screenshots() -> FakeScreenshotStore:
    return FakeScreenshotStore()


@pytest.fixture
def notes() -> FakeNoteStore:
    return FakeNoteStore()


@pytest.fixture
def sink() -> QueueEventSink:
    return QueueEventSink()


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def orchestrator(screenshots, config_store, notes, sink, adapter):
    orch = ProcessingOrchestrator(
        screenshots=screenshots,
        config_store=config_store,
        notes=notes,
        events=sink,
        registry_factory=registry_factory_for(adapter),
    )
    yield orch
    orch.close()


@pytest.fixture
def token() -> CancellationToken:
    return CancellationToken(PipelineKind.PRIMARY)
