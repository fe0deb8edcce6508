"""Request-scoped inputs handed to service calls."""

from __future__ import annotations

from dataclasses import dataclass

from ..infra.database import SessionFactory
from .auth import Principal

DEFAULT_HISTORY_LIMIT = 10


@dataclass(slots=True, frozen=True)
class RequestContext:
    """Who is asking, and the database handle to answer with."""

    principal: Principal
    session_factory: SessionFactory
    history_limit: int = DEFAULT_HISTORY_LIMIT
