"""
Request-scoped scratch directories for cloned repositories.

Each acquisition gets its own directory under the workspace root, suffixed
with a random hex id, so two concurrent requests for the same repository
never share (or delete) each other's checkout.
"""

import shutil
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from lochub.errors import WorkspaceError
from lochub.logging import get_logger
from lochub.models import RepositoryIdentity

logger = get_logger("workspace")


@dataclass
class Workspace:
    path: Path
    identity: RepositoryIdentity
    released: bool = False


class WorkspaceManager:
    def __init__(self, root: str | Path = "./repos"):
        self.root = Path(root)

    def path_for(self, identity: RepositoryIdentity) -> Path:
        return self.root / identity.owner / f"{identity.name}-{uuid.uuid4().hex}"

    def acquire(self, identity: RepositoryIdentity) -> Workspace:
        path = self.path_for(identity)
        if path.exists():
            # Never reuse a leftover checkout
            raise WorkspaceError(f"workspace {path} already exists")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceError(f"cannot create workspace root: {e}") from e
        logger.debug("acquired workspace %s for %s", path, identity.full_name)
        # The clone step creates the directory itself
        return Workspace(path=path, identity=identity)

    def release(self, workspace: Workspace) -> None:
        """Delete the workspace. Failures are logged, never raised."""
        if workspace.released:
            return
        workspace.released = True
        if workspace.path.exists():
            try:
                shutil.rmtree(workspace.path)
            except OSError as e:
                logger.error("failed to remove workspace %s: %s", workspace.path, e)
                return
        logger.debug("released workspace %s", workspace.path)
        try:
            # Drop the owner directory once its last workspace is gone
            workspace.path.parent.rmdir()
        except OSError:
            pass

    @contextmanager
    def scoped(self, identity: RepositoryIdentity) -> Iterator[Workspace]:
        workspace = self.acquire(identity)
        try:
            yield workspace
        finally:
            self.release(workspace)
