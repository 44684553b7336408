from typing import Optional

from ddsampling.constants import USER_KEEP
from ddsampling.constants import USER_REJECT
from ddsampling.internal.constants import PRIORITY_SAMPLING_UNKNOWN
from ddsampling.internal.constants import PRIORITY_SAMPLING_UNSET
from ddsampling.internal.constants import SAMPLING_DECISION_TRACE_TAG_KEY
from ddsampling.internal.logger import get_logger
from ddsampling.internal.sampling import is_keep
from ddsampling.internal.sampling import is_undecided
from ddsampling.internal.sampling import set_manual_priority
from ddsampling.internal.sampling import validate_sampling_decision
from ddsampling.settings import config

from .provider import BaseContextProvider
from .provider import DefaultContextProvider
from .sampler import PrioritySampler
from .span import Span


log = get_logger(__name__)


class Tracer(object):
    """
    Tracer holds the process-wide sampling state and is the entry point to read or
    force the sampling priority of traces.

    The priority of a trace is decided lazily, on its first read, and memoized on the
    trace's root span: later reads never decide again.

    If you're not using the default context provider, provide your own to track the
    active span of the current execution.
    """

    def __init__(
        self,
        sampler: Optional[PrioritySampler] = None,
        context_provider: Optional[BaseContextProvider] = None,
        default_priority: Optional[int] = None,
    ) -> None:
        """
        Create a new ``Tracer`` instance.

        :param sampler: The sampler deciding trace priorities, default is built from the configuration
        :param context_provider: Tracks the active span, default uses context variables
        :param default_priority: The process default priority. ``PRIORITY_SAMPLING_UNSET`` disables sampling,
            ``PRIORITY_SAMPLING_UNKNOWN`` lets the sampler decide, any other value is adopted by every trace.
            Default depends on ``DD_PRIORITY_SAMPLING``
        """
        self._sampler: PrioritySampler = sampler or PrioritySampler()
        self.context_provider: BaseContextProvider = context_provider or DefaultContextProvider()
        if default_priority is None:
            default_priority = PRIORITY_SAMPLING_UNKNOWN if config._priority_sampling else PRIORITY_SAMPLING_UNSET
        self._default_priority: int = default_priority

    def __repr__(self):
        return "{}(sampler={!r}, default_priority={!r})".format(
            self.__class__.__name__, self._sampler, self._default_priority
        )

    @property
    def default_priority(self) -> int:
        return self._default_priority

    def set_default_priority(self, priority: int) -> None:
        """Set the process default priority, applied to traces decided from now on."""
        log.debug("default sampling priority set to %s", priority)
        self._default_priority = priority

    def current_root_span(self) -> Optional[Span]:
        """Return the root span of the active trace, or ``None`` if no trace is active."""
        return self.context_provider.active_root()

    def get_priority_from_root(self, root: Span) -> int:
        """
        Return the sampling priority of the trace ``root`` belongs to

        The first call on an undecided trace runs the sampler; its result is stored on the
        root span and returned by every later call. When sampling is disabled for the
        process, ``PRIORITY_SAMPLING_UNKNOWN`` is returned and nothing is stored.
        """
        root = root._local_root
        priority = root.sampling_priority
        if priority is not None:
            return priority

        if self._default_priority == PRIORITY_SAMPLING_UNSET:
            return PRIORITY_SAMPLING_UNKNOWN
        return self._sampler.decide(root, self._default_priority)

    def get_priority(self) -> int:
        """Return the sampling priority of the active trace, deciding it if needed."""
        root = self.current_root_span()
        if root is None:
            if self._default_priority == PRIORITY_SAMPLING_UNSET:
                return PRIORITY_SAMPLING_UNKNOWN
            return self._default_priority
        return self.get_priority_from_root(root)

    def set_priority(self, priority: int) -> None:
        """
        Force the sampling priority of the active trace

        The sampler is bypassed and the decision is attributed to a manual override.
        ``PRIORITY_SAMPLING_UNKNOWN`` and ``PRIORITY_SAMPLING_UNSET`` clear the stored
        priority, so the next read decides again. Without an active trace this is a no-op.
        """
        root = self.current_root_span()
        if root is None:
            log.debug("no active trace, ignoring sampling priority %s", priority)
            return
        set_manual_priority(root, priority)

    def manual_keep(self) -> None:
        """Ask the backend to keep the active trace."""
        self.set_priority(USER_KEEP)

    def manual_drop(self) -> None:
        """Ask the backend to drop the active trace."""
        self.set_priority(USER_REJECT)

    def set_propagated_priority(self, priority: int, decision_maker: Optional[str] = None) -> None:
        """
        Record the sampling priority received from an upstream service on the active trace

        The priority becomes the decision of the trace and is remembered as inherited, so
        the decision maker tag is not rewritten for it. ``decision_maker`` is the ``_dd.p.dm``
        value received along with the priority, dropped if malformed. A rejected or undecided
        priority leaves the trace without a decision maker tag.
        """
        root = self.current_root_span()
        if root is None:
            log.debug("no active trace, ignoring propagated sampling priority %s", priority)
            return

        if is_undecided(priority):
            root._propagated_priority = None
            root.sampling_priority = None
            root._remove_tag(SAMPLING_DECISION_TRACE_TAG_KEY)
            return

        root._propagated_priority = priority
        root.sampling_priority = priority
        if not is_keep(priority):
            # a rejected trace carries no decision maker
            root._remove_tag(SAMPLING_DECISION_TRACE_TAG_KEY)
        elif decision_maker is not None:
            root._meta[SAMPLING_DECISION_TRACE_TAG_KEY] = decision_maker
            validate_sampling_decision(root._meta)
