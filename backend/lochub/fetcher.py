import os
import subprocess
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from lochub.errors import FetchError
from lochub.logging import get_logger, mask_sensitive_data
from lochub.models import RepositoryIdentity

logger = get_logger("fetch")


def _run(cmd: List[str], cwd: Optional[str] = None, timeout: int = 60, env: Optional[dict] = None) -> tuple[int, str, str]:
    p = subprocess.run(cmd, cwd=cwd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, timeout=timeout, env=env)
    return p.returncode, p.stdout, p.stderr


def clone_url(identity: RepositoryIdentity, credential: Optional[str] = None, host: str = "github.com") -> str:
    """Build the https clone URL. The result embeds the credential: treat it as a secret."""
    if credential:
        # Encoded so the token can never change the authority git connects to
        return f"https://{quote(credential, safe='')}@{host}/{identity.owner}/{identity.name}"
    return f"https://{host}/{identity.owner}/{identity.name}"


class GitFetcher:
    """Materializes a repository with a shallow ``git clone``."""

    def __init__(self, host: str = "github.com", timeout: int = 120, git: str = "git"):
        self.host = host
        self.timeout = timeout
        self.git = git

    def fetch(self, identity: RepositoryIdentity, credential: Optional[str], destination: Path) -> None:
        url = clone_url(identity, credential, self.host)
        env = dict(os.environ)
        # Fail instead of prompting when a private repo needs credentials
        env["GIT_TERMINAL_PROMPT"] = "0"
        logger.info("cloning %s into %s", identity.full_name, destination)
        try:
            code, out, err = _run(
                [self.git, "clone", "--depth", "1", "--", url, str(destination)],
                timeout=self.timeout,
                env=env,
            )
        except subprocess.TimeoutExpired:
            raise FetchError(f"git clone timed out after {self.timeout}s") from None
        except OSError as e:
            raise FetchError(f"git clone could not start: {e}") from e
        if code != 0:
            detail = mask_sensitive_data((err or out).strip())
            logger.warning("git clone of %s failed: %s", identity.full_name, detail)
            raise FetchError(f"git clone failed: {detail}")
