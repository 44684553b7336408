import abc
import contextvars
from typing import Optional

from ddsampling._trace.span import Span


_DD_CONTEXTVAR: contextvars.ContextVar[Optional[Span]] = contextvars.ContextVar("ddsampling_contextvar", default=None)


class BaseContextProvider(metaclass=abc.ABCMeta):
    """
    A ``ContextProvider`` is an interface that provides the blueprint
    for a callable class, capable to retrieve the span active in the
    current execution. Context providers must inherit this class
    and implement:
    * the ``active`` method, that returns the current active ``Span``
    * the ``activate`` method, that sets the current active ``Span``
    """

    @abc.abstractmethod
    def activate(self, span: Optional[Span]) -> None:
        pass

    @abc.abstractmethod
    def active(self) -> Optional[Span]:
        pass

    def active_root(self) -> Optional[Span]:
        """Returns the local root span of the active trace, if any."""
        span = self.active()
        if span is None:
            return None
        return span._local_root


class DefaultContextProvider(BaseContextProvider):
    """Context provider that retrieves the active span from a context variable.

    It is suitable for synchronous programming and for asynchronous executors
    that support contextvars.
    """

    def activate(self, span: Optional[Span]) -> None:
        """Makes the given span active in the current execution."""
        _DD_CONTEXTVAR.set(span)

    def active(self) -> Optional[Span]:
        """Returns the active span for the current execution."""
        return _DD_CONTEXTVAR.get()
