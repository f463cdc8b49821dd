from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol
from urllib.parse import urlparse

from sqlalchemy.engine import Engine

from lochub.config import Settings
from lochub.db import make_engine, migrate
from lochub.fetcher import GitFetcher
from lochub.github import AuthorizationGate
from lochub.models import LanguageStat, RepositoryIdentity
from lochub.oauth import OAuthExchange
from lochub.state_store import LoginStateStore
from lochub.stats import PygountAggregator
from lochub.workspace import WorkspaceManager


class Fetcher(Protocol):
    def fetch(self, identity: RepositoryIdentity, credential: Optional[str], destination) -> None: ...


class Aggregator(Protocol):
    def get_statistics(self, paths: Iterable) -> Dict[str, LanguageStat]: ...


@dataclass(frozen=True)
class AppContext:
    """Everything a handler needs, built once at startup and never mutated."""

    settings: Settings
    engine: Engine
    states: LoginStateStore
    gate: AuthorizationGate
    workspaces: WorkspaceManager
    fetcher: Fetcher
    aggregator: Aggregator
    oauth: OAuthExchange


def build_context(settings: Settings, refresh_schema: bool = False) -> AppContext:
    engine = make_engine(settings.db_url)
    migrate(engine, refresh=refresh_schema)
    return AppContext(
        settings=settings,
        engine=engine,
        states=LoginStateStore(engine, ttl=settings.state_ttl),
        gate=AuthorizationGate(settings.api_base, timeout=settings.metadata_timeout),
        workspaces=WorkspaceManager(settings.workspace_root),
        fetcher=GitFetcher(host=urlparse(settings.web_base).netloc, timeout=settings.clone_timeout),
        aggregator=PygountAggregator(),
        oauth=OAuthExchange(
            settings.client_id,
            settings.client_secret,
            web_base=settings.web_base,
            timeout=settings.exchange_timeout,
        ),
    )
