import re
from typing import TYPE_CHECKING  # noqa:F401
from typing import Any
from typing import Optional
from typing import Pattern

import attr

from ddsampling.internal.logger import get_logger
from ddsampling.internal.utils.cache import cached


if TYPE_CHECKING:  # pragma: no cover
    from ddsampling._trace.span import Span  # noqa:F401


log = get_logger(__name__)


@cached(maxsize=512)
def _compile(pattern: str) -> Optional[Pattern[str]]:
    # DEV: the pattern is wrapped in a group rather than anchored, so a match anywhere in the value counts
    try:
        return re.compile("(%s)" % pattern)
    except re.error:
        log.warning("invalid sampling rule pattern %r, the rule will not match", pattern, exc_info=True)
        return None


def pattern_matches(pattern: Any, value: Any) -> bool:
    """
    Return whether the span attribute ``value`` satisfies the rule field ``pattern``

    :param pattern: The regular expression of the rule field, ``None`` when the rule
        leaves the field unconstrained
    :param value: The span attribute to match against
    """
    if not isinstance(pattern, str):
        return True
    # DEV: unset span attributes match any pattern
    if not isinstance(value, str):
        return True

    regex = _compile(pattern)
    if regex is None:
        return False
    return regex.search(value) is not None


def _clamp_rate(sample_rate: Any) -> float:
    return min(1.0, max(0.0, float(sample_rate)))


@attr.s(frozen=True, slots=True)
class SamplingRule(object):
    """
    Definition of a sampling rule used by :class:`PrioritySampler` to pick the sample rate of a trace

    .. code:: python

        PrioritySampler(rules=[
            # Keep every trace of the payments service
            SamplingRule(sample_rate=1.0, service="payments"),

            # Sample half of the traces whose root span name ends with `.request`
            SamplingRule(sample_rate=0.5, name=r"\\.request$"),
        ])

    :param sample_rate: The sample rate to apply to matching traces, clamped between 0.0 and 1.0 inclusive
    :param service: Regular expression searched in ``span.service``, ``None`` to match any service
    :param name: Regular expression searched in ``span.name``, ``None`` to match any name
    """

    sample_rate = attr.ib(type=float, converter=_clamp_rate)
    service = attr.ib(type=Optional[str], default=None)
    name = attr.ib(type=Optional[str], default=None)

    def matches(self, span):
        # type: (Span) -> bool
        """
        Return if this span matches this rule

        Every field the rule defines must match; the first failing field short-circuits.
        """
        return pattern_matches(self.service, span.service) and pattern_matches(self.name, span.name)
