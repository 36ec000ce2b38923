"""Pytest configuration and shared fixtures."""

import logging
import tempfile
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import pytest
import structlog

from featuretoggle import FeatureRegistry
from featuretoggle.utils.logging import HANDLER_NAME


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo logging configuration done by CLI and logging tests."""
    root = logging.getLogger()
    level = root.level
    yield
    structlog.reset_defaults()
    for handler in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry() -> FeatureRegistry:
    """Create an empty registry with default flags."""
    return FeatureRegistry()


class CountingProcessor:
    """Processor that records its calls and returns a scripted result."""

    def __init__(self, result: Any = True) -> None:
        self.result = result
        self.calls: list[tuple[Mapping[str, Any], Mapping[str, Any]]] = []

    def __call__(self, context: Mapping[str, Any], params: Mapping[str, Any]) -> Any:
        self.calls.append((context, params))
        return self.result


@pytest.fixture
def counting_processor() -> CountingProcessor:
    """Create a processor that returns True and counts invocations."""
    return CountingProcessor(True)


@pytest.fixture
def write_config(temp_dir: Path):
    """Return a helper writing YAML content to a file in the temp directory."""

    def _write(content: str, name: str = "toggles.yaml") -> Path:
        path = temp_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def processor_factory() -> type[CountingProcessor]:
    """Return the counting processor class for scripted results."""
    return CountingProcessor
