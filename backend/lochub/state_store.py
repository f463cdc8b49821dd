"""
Login-State Store: single-use CSRF nonces for the OAuth redirect.

``consume`` is the whole CSRF defense. It is a single DELETE whose affected
row count decides the winner, so among concurrent callbacks presenting the
same token exactly one sees True.
"""

import secrets
import string
import time
from typing import Callable

from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from lochub.db import login_state
from lochub.errors import InternalError
from lochub.logging import get_logger

logger = get_logger("auth")

STATE_ALPHABET = string.ascii_letters + string.digits
STATE_LENGTH = 10


def generate_state(length: int = STATE_LENGTH) -> str:
    return "".join(secrets.choice(STATE_ALPHABET) for _ in range(length))


class LoginStateStore:
    def __init__(self, engine: Engine, ttl: float = 600, clock: Callable[[], float] = time.time):
        self.engine = engine
        self.ttl = ttl
        self.clock = clock

    def issue(self) -> str:
        now = self.clock()
        with self.engine.begin() as conn:
            pruned = conn.execute(delete(login_state).where(login_state.c.created_at < now - self.ttl)).rowcount
            if pruned:
                logger.debug("pruned %d expired login states", pruned)
        for _ in range(3):
            token = generate_state()
            try:
                with self.engine.begin() as conn:
                    conn.execute(insert(login_state).values(state=token, created_at=now))
            except IntegrityError:
                continue
            logger.info("issued login state")
            return token
        raise InternalError("could not generate a unique login state")

    def consume(self, token: str) -> bool:
        """Delete ``token``. True iff it existed and had not expired."""
        cutoff = self.clock() - self.ttl
        with self.engine.begin() as conn:
            fresh = conn.execute(
                delete(login_state).where(login_state.c.state == token, login_state.c.created_at >= cutoff)
            ).rowcount
            if fresh == 1:
                return True
            # An expired token is still spent
            stale = conn.execute(delete(login_state).where(login_state.c.state == token)).rowcount
        if stale:
            logger.info("rejected expired login state")
        return False

    def count(self) -> int:
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(login_state)).scalar_one()
