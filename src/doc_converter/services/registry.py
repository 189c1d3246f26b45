"""Maps each FileKind to the function that converts files of that kind."""
from typing import Callable, Dict

from doc_converter.models import FileKind

Handler = Callable[[str, str], None]

_handlers: Dict[FileKind, Handler] = {}


def register(kind: FileKind):
    def decorator(func: Handler) -> Handler:
        _handlers[kind] = func
        return func
    return decorator


def get_handler(kind: FileKind) -> Handler | None:
    return _handlers.get(kind)
