"""
The LOC pipeline: authorize, clone into a scratch workspace, count, clean up.

Rejections from the Authorization Gate happen before a workspace exists, so
nothing is cloned for a repository the caller cannot see. Once a workspace is
acquired it is released exactly once whatever happens after.
"""

from typing import List, Optional

from lochub.context import AppContext
from lochub.errors import LocHubError, StatisticsError
from lochub.github import raise_for_outcome
from lochub.logging import get_logger
from lochub.models import LanguageStat, RepositoryIdentity

logger = get_logger()


def count_lines(ctx: AppContext, identity: RepositoryIdentity, credential: Optional[str] = None) -> List[LanguageStat]:
    raise_for_outcome(ctx.gate.check(identity, credential))

    with ctx.workspaces.scoped(identity) as workspace:
        ctx.fetcher.fetch(identity, credential, workspace.path)
        try:
            languages = ctx.aggregator.get_statistics([workspace.path])
        except LocHubError:
            raise
        except Exception as e:
            raise StatisticsError(f"line count failed: {e}") from e

    logger.info("counted %s: %d languages", identity.full_name, len(languages))
    return [
        LanguageStat(language=str(lang), code=stat.code, comments=stat.comments, blanks=stat.blanks)
        for lang, stat in languages.items()
    ]
