from contextvars import ContextVar
from contextlib import contextmanager


request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
athlete_id_var: ContextVar[str | None] = ContextVar("athlete_id", default=None)


@contextmanager
def athlete_context(athlete_id: int | str | None):
    token = athlete_id_var.set(str(athlete_id) if athlete_id is not None else None)
    try:
        yield
    finally:
        athlete_id_var.reset(token)
