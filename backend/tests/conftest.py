"""Shared fixtures: an AppContext wired to in-memory SQLite and mock GitHub transports."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from lochub.config import Settings
from lochub.context import AppContext
from lochub.db import make_engine, migrate
from lochub.github import AuthorizationGate
from lochub.main import create_app
from lochub.models import LanguageStat
from lochub.oauth import OAuthExchange
from lochub.state_store import LoginStateStore
from lochub.stats import PygountAggregator
from lochub.workspace import WorkspaceManager


class FakeFetcher:
    """Writes ``files`` into the destination instead of cloning."""

    def __init__(self, files: Optional[Dict[str, str]] = None, error: Optional[Exception] = None):
        self.files = files if files is not None else {"main.py": "x = 1\n"}
        self.error = error
        self.calls: List[tuple] = []

    def fetch(self, identity, credential, destination) -> None:
        self.calls.append((identity, credential, Path(destination)))
        Path(destination).mkdir(parents=True)
        for rel, text in self.files.items():
            target = Path(destination) / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text)
        if self.error is not None:
            raise self.error


class FakeAggregator:
    def __init__(self, result: Optional[Dict[str, LanguageStat]] = None, error: Optional[Exception] = None):
        self.result = result or {}
        self.error = error
        self.seen_paths: List[Path] = []

    def get_statistics(self, paths) -> Dict[str, LanguageStat]:
        self.seen_paths.extend(Path(p) for p in paths)
        if self.error is not None:
            raise self.error
        return self.result


def github_transport(status: int = 200, json: Optional[dict] = None, seen: Optional[list] = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=json if json is not None else {"full_name": "acme/widgets"})

    return httpx.MockTransport(handler)


def token_transport(status: int = 200, body: str = "access_token=gho_abc&scope=repo&token_type=bearer",
                    seen: Optional[list] = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, text=body)

    return httpx.MockTransport(handler)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        db_url="sqlite://",
        client_id="client-id",
        client_secret="client-secret",
        workspace_root=str(tmp_path / "repos"),
    )


@pytest.fixture
def engine(settings):
    engine = make_engine(settings.db_url)
    migrate(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine, settings) -> LoginStateStore:
    return LoginStateStore(engine, ttl=settings.state_ttl)


@pytest.fixture
def make_context(settings, engine, store) -> Callable[..., AppContext]:
    def _make(
        gate_transport: Optional[httpx.BaseTransport] = None,
        token: Optional[httpx.BaseTransport] = None,
        fetcher=None,
        aggregator=None,
    ) -> AppContext:
        return AppContext(
            settings=settings,
            engine=engine,
            states=store,
            gate=AuthorizationGate(settings.api_base, transport=gate_transport or github_transport()),
            workspaces=WorkspaceManager(settings.workspace_root),
            fetcher=fetcher or FakeFetcher(),
            aggregator=aggregator or PygountAggregator(),
            oauth=OAuthExchange(
                settings.client_id,
                settings.client_secret,
                web_base=settings.web_base,
                transport=token or token_transport(),
            ),
        )

    return _make


@pytest.fixture
def make_client(make_context) -> Callable[..., TestClient]:
    def _make(**kwargs) -> TestClient:
        return TestClient(create_app(make_context(**kwargs)))

    return _make


@pytest.fixture
def workspace_root(settings) -> Path:
    return Path(settings.workspace_root)


def leftover_workspaces(root: Path) -> list:
    if not root.exists():
        return []
    return [p for owner in root.iterdir() for p in owner.iterdir()]
