from contextvars import ContextVar
from typing import Optional

from structlog.contextvars import bind_contextvars

user_id_ctx: ContextVar[Optional[str]] = ContextVar("user_id", default=None)
collection_id_ctx: ContextVar[Optional[str]] = ContextVar("collection_id", default=None)


def get_user_id() -> Optional[str]:
    return user_id_ctx.get()


def get_collection_id() -> Optional[str]:
    return collection_id_ctx.get()


def bind_context(**kwargs):
    """
    Binds the provided key-value pairs to the current structlog context.
    user_id / collection_id also land in their ContextVars for the trace block.
    """
    values = {k: v for k, v in kwargs.items() if v is not None}
    if "user_id" in values:
        user_id_ctx.set(str(values["user_id"]))
    if "collection_id" in values:
        collection_id_ctx.set(str(values["collection_id"]))
    bind_contextvars(**values)
