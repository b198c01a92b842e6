from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Set, TypeVar, cast

import numpy as np

from .types import Line, Point, TaperedDiagram

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 160
_repr.maxlist = 8
_repr.maxtuple = 8
_repr.maxdict = 8


def _summarize(value: Any, *, max_length: int = 300) -> str:
    """Compact rendering of geometry values for DEBUG traces."""

    if isinstance(value, Point):
        return f"({value.x:.6g}, {value.y:.6g})"
    if isinstance(value, Line):
        folds = [name for name, fold in (("start", value.start_fold), ("end", value.end_fold)) if fold]
        extra = f", folds={'+'.join(folds)}" if folds else ""
        return f"Line(id={value.id!r}, points={len(value.points)}{extra})"
    if isinstance(value, TaperedDiagram):
        return f"TaperedDiagram(id={value.id!r}, segments={len(value.segments)})"
    if isinstance(value, np.ndarray):
        return f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"
    if isinstance(value, (list, tuple)) and value and all(isinstance(v, Point) for v in value):
        head = ", ".join(_summarize(v) for v in value[:4])
        more = ", ..." if len(value) > 4 else ""
        return f"[{head}{more}] ({len(value)} points)"
    rendered = _repr.repr(value)
    if len(rendered) > max_length:
        return rendered[:max_length] + "... (truncated)"
    return rendered


def _format_arguments(args: Iterable[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = [_summarize(arg) for arg in args]
    parts.extend(f"{key}={_summarize(value)}" for key, value in kwargs.items())
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator that emits DEBUG logs on entry and exit."""

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        qualname = name or getattr(func, "__qualname__", getattr(func, "__name__", "<callable>"))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Entering %s (%s)", qualname, _format_arguments(args, kwargs))
            result = func(*args, **kwargs)
            if logger.isEnabledFor(logging.DEBUG):
                if log_result:
                    logger.debug("Exiting %s -> %s", qualname, _summarize(result))
                else:
                    logger.debug("Exiting %s", qualname)
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
) -> None:
    """Wrap the public module-level functions of ``namespace`` with DEBUG logging."""

    module_name = namespace.get("__name__")
    logger = logger or logging.getLogger(module_name or __name__)
    skip_set: Set[str] = set(skip or [])

    for name, value in list(namespace.items()):
        if name.startswith("_") or name in skip_set:
            continue
        if inspect.isfunction(value) and getattr(value, "__module__", None) == module_name:
            namespace[name] = debug_log_call(logger, name=name)(value)
