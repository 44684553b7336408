"""Samplers manage the client-side trace sampling

Every trace gets exactly one priority decision, taken on its root span the first
time the priority is needed. ``priority > 0`` traces are kept by the backend.
"""
from typing import TYPE_CHECKING  # noqa:F401
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Sequence

from ddsampling.constants import _SAMPLING_LIMIT_DECISION
from ddsampling.constants import _SAMPLING_RULE_DECISION
from ddsampling.internal.constants import _KEEP_PRIORITY_INDEX
from ddsampling.internal.constants import _REJECT_PRIORITY_INDEX
from ddsampling.internal.constants import MAX_UINT_64BITS
from ddsampling.internal.constants import PRIORITY_SAMPLING_UNKNOWN
from ddsampling.internal.constants import PRIORITY_SAMPLING_UNSET
from ddsampling.internal.constants import SAMPLING_MECHANISM_TO_PRIORITIES
from ddsampling.internal.constants import SamplingMechanism
from ddsampling.internal.logger import get_logger
from ddsampling.internal.rand import Rand64
from ddsampling.internal.rand import get_rand64
from ddsampling.internal.rate_limiter import RateLimiter
from ddsampling.internal.sampling import update_sampling_decision_maker
from ddsampling.settings import config

from .sampling_rule import SamplingRule


if TYPE_CHECKING:  # pragma: no cover
    from .span import Span  # noqa:F401


log = get_logger(__name__)


class SampleRate(NamedTuple):
    sample_rate: float
    # True when the rate was configured by the user, through a rule or an explicit default
    rule_based: bool
    matched_rule: Optional[SamplingRule]


def get_sample_rate(
    span,  # type: Span
    rules: Sequence[SamplingRule],
    default_sample_rate: float,
    default_explicit: bool,
) -> SampleRate:
    """Return the rate of the first rule matching ``span``, or the default rate if none does."""
    for rule in rules:
        if rule.matches(span):
            return SampleRate(rule.sample_rate, True, rule)
    return SampleRate(default_sample_rate, default_explicit, None)


class RateSampler(object):
    """Sampler based on a rate

    Keeps (100 * ``sample_rate``)% of the traces by comparing a uniform 64-bit draw
    against ``sample_rate * MAX_UINT_64BITS``.
    """

    __slots__ = ("_rand",)

    def __init__(self, rand: Optional[Rand64] = None) -> None:
        """
        :param rand: The generator to draw from, default is the generator of the calling thread
        """
        self._rand = rand

    def keep(self, sample_rate: float) -> bool:
        rand = self._rand or get_rand64(config._trace_sampling_seed)
        return rand.next_u64() < sample_rate * MAX_UINT_64BITS

    def __repr__(self):
        return f"RateSampler(rand={self._rand!r})"


class PrioritySampler(object):
    """
    The PrioritySampler decides the sampling priority of a trace:
       - A list of sampling rules, applied in the order they are provided. The first matching rule is used.
       - If no rule matches, the default sample rate is used.
       - A global rate limit, applied to traces the sample rate kept, when the limiter is active.
       - A process default priority bypasses all of the above and is adopted as is.

    The decision is tagged ``USER_KEEP``/``USER_REJECT`` when the rate was configured by the user
    (through a rule or an explicit default rate) and ``AUTO_KEEP``/``AUTO_REJECT`` otherwise.

    Example sampling rules::

        PrioritySampler(rules=[
            SamplingRule(sample_rate=1.0, service="my-svc"),
            SamplingRule(sample_rate=0.0, service="less-important"),
        ])
    """

    __slots__ = (
        "default_sample_rate",
        "default_explicit",
        "limiter",
        "rate_sampler",
        "rules",
    )

    SAMPLE_DEBUG_MESSAGE = (
        "Sampling decision applied to %s: priority=%s sampled=%s limited=%s sample_rate=%s "
        "sampling_mechanism=%s matched_trace_sampling_rule=%s"
    )

    def __init__(
        self,
        rules: Optional[List[SamplingRule]] = None,
        default_sample_rate: Optional[float] = None,
        default_explicit: Optional[bool] = None,
        rate_limit: Optional[int] = None,
        rate_sampler: Optional[RateSampler] = None,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        """
        Constructor for PrioritySampler

        :param rules: List of :class:`SamplingRule` rules to apply to the root span of every trace,
            default ``DD_TRACE_SAMPLING_RULES``
        :param default_sample_rate: Sample rate applied when no rule matches, default ``DD_TRACE_SAMPLE_RATE``
        :param default_explicit: Whether ``default_sample_rate`` was configured by the user. It is when given
            in code, otherwise it is when ``DD_TRACE_SAMPLE_RATE`` is set
        :param rate_limit: Global rate limit (traces per second) applied to kept traces,
            default ``DD_TRACE_RATE_LIMIT``, 0 disables it
        :param rate_sampler: The probabilistic sampler, default draws from the thread's generator
        :param limiter: The rate limiter, takes precedence over ``rate_limit``
        """
        self.rules: List[SamplingRule] = list(config._trace_sampling_rules if rules is None else rules)

        if default_sample_rate is None:
            self.default_sample_rate = config._trace_sample_rate
            self.default_explicit = (
                config._trace_sample_rate_explicit if default_explicit is None else default_explicit
            )
        else:
            self.default_sample_rate = min(1.0, max(0.0, float(default_sample_rate)))
            self.default_explicit = True if default_explicit is None else default_explicit

        if limiter is None:
            limiter = RateLimiter(config._trace_rate_limit if rate_limit is None else rate_limit)
        self.limiter: RateLimiter = limiter
        self.rate_sampler: RateSampler = rate_sampler or RateSampler()

        log.debug("initialized %r", self)

    def __repr__(self):
        return "{}(rules={!r}, default_sample_rate={!r}, default_explicit={!r}, limiter={!r})".format(
            self.__class__.__name__,
            self.rules,
            self.default_sample_rate,
            self.default_explicit,
            self.limiter,
        )

    __str__ = __repr__

    def decide(self, span, default_priority=PRIORITY_SAMPLING_UNKNOWN):
        # type: (Span, int) -> int
        """
        Decide the sampling priority of the trace of ``span`` and store it on its root span

        :param span: A span of the trace, the decision is recorded on its local root
        :param default_priority: The process default priority. Any concrete value is adopted as is
        :returns: The decided priority
        """
        root = span._local_root
        if default_priority not in (PRIORITY_SAMPLING_UNKNOWN, PRIORITY_SAMPLING_UNSET):
            root.sampling_priority = default_priority
            update_sampling_decision_maker(root, SamplingMechanism.MANUAL)
            log.debug("Sampling decision applied to %s: inherited default priority=%s", root, default_priority)
            return default_priority

        rate = get_sample_rate(root, self.rules, self.default_sample_rate, self.default_explicit)
        sampled = self.rate_sampler.keep(rate.sample_rate)
        limited = sampled and self.limiter.active() and not self.limiter.allow()

        mechanism = SamplingMechanism.RULE if rate.rule_based else SamplingMechanism.AGENT_RATE
        priorities = SAMPLING_MECHANISM_TO_PRIORITIES[mechanism]
        priority = priorities[_KEEP_PRIORITY_INDEX if sampled and not limited else _REJECT_PRIORITY_INDEX]

        root.set_metric(_SAMPLING_RULE_DECISION, rate.sample_rate)
        if limited:
            root.set_metric(_SAMPLING_LIMIT_DECISION, self.limiter.current_rate())

        root.sampling_priority = priority
        update_sampling_decision_maker(root, mechanism)

        log.debug(
            self.SAMPLE_DEBUG_MESSAGE,
            root,
            priority,
            sampled,
            limited,
            rate.sample_rate,
            mechanism,
            rate.matched_rule,
        )
        return priority
