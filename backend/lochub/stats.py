"""Per-language code/comment/blank counts for a checked-out tree, via pygount."""

import os
from pathlib import Path
from typing import Dict, Iterable

from pygount import SourceAnalysis
from pygount.analysis import SourceState

from lochub.errors import StatisticsError
from lochub.logging import get_logger
from lochub.models import LanguageStat

logger = get_logger("stats")

SKIP_DIRS = {".git"}


class PygountAggregator:
    def get_statistics(self, paths: Iterable[str | Path]) -> Dict[str, LanguageStat]:
        counts: Dict[str, LanguageStat] = {}
        for root_path in paths:
            root_path = str(root_path)
            if not os.path.isdir(root_path):
                raise StatisticsError(f"not a directory: {root_path}")
            group = os.path.basename(root_path.rstrip(os.sep))
            for root, dirs, files in os.walk(root_path):
                dirs[:] = [d for d in dirs if d not in SKIP_DIRS]
                for fn in files:
                    p = os.path.join(root, fn)
                    if os.path.islink(p) or not os.path.isfile(p):
                        continue
                    try:
                        analysis = SourceAnalysis.from_file(p, group)
                    except OSError as e:
                        raise StatisticsError(f"cannot read {os.path.relpath(p, root_path)}: {e}") from e
                    if analysis.state != SourceState.analyzed:
                        continue
                    stat = counts.setdefault(analysis.language, LanguageStat(language=analysis.language))
                    # pygount reports string-only lines apart from code
                    stat.code += analysis.code_count + analysis.string_count
                    stat.comments += analysis.documentation_count
                    stat.blanks += analysis.empty_count
        logger.debug("counted %d languages", len(counts))
        return counts
