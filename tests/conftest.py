from __future__ import annotations

from typing import Callable, List

import pytest

from llmcli.config import CONFIG_DIR_ENV, ConfigStore
from llmcli.process import ProcessRunner, SpawnRequest
from llmcli.providers import ProviderRegistry, build_registry


class FakeRunner(ProcessRunner):
    """Records spawn requests instead of launching anything."""

    def __init__(self, returncode: int = 0) -> None:
        super().__init__(platform="linux")
        self.returncode = returncode
        self.requests: List[SpawnRequest] = []

    def run(self, request: SpawnRequest) -> int:
        self.requests.append(request)
        return self._finish(request, self.returncode)

    @property
    def argvs(self) -> List[List[str]]:
        return [r.argv for r in self.requests]


def make_probe(*installed: str) -> Callable[[str], bool]:
    return lambda name: name in installed


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_registry(runner: FakeRunner) -> Callable[..., ProviderRegistry]:
    def _make(*installed: str) -> ProviderRegistry:
        return build_registry(runner=runner, probe=make_probe(*installed))

    return _make


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    path = tmp_path / "config"
    monkeypatch.setenv(CONFIG_DIR_ENV, str(path))
    return path


@pytest.fixture
def config(config_dir) -> ConfigStore:
    return ConfigStore()
