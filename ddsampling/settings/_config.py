import typing as t

from ddsampling.internal.constants import DEFAULT_SAMPLE_RATE
from ddsampling.internal.constants import DEFAULT_SAMPLING_RATE_LIMIT
from ddsampling.internal.logger import get_logger
from ddsampling.internal.sampling import parse_sampling_rules

from ._core import DDConfig
from ._core import ValueSource


log = get_logger(__name__)


def _parse_sample_rate(value: str) -> float:
    try:
        sample_rate = float(value)
    except ValueError:
        log.error("DD_TRACE_SAMPLE_RATE=%r is not a number, using %s", value, DEFAULT_SAMPLE_RATE)
        return DEFAULT_SAMPLE_RATE
    if not 0.0 <= sample_rate <= 1.0:
        log.warning("DD_TRACE_SAMPLE_RATE=%r is out of [0, 1], clamping it", value)
    return min(1.0, max(0.0, sample_rate))


def _parse_rate_limit(value: str) -> int:
    try:
        return int(float(value))
    except ValueError:
        log.error("DD_TRACE_RATE_LIMIT=%r is not a number, using %s", value, DEFAULT_SAMPLING_RATE_LIMIT)
        return DEFAULT_SAMPLING_RATE_LIMIT


def _parse_seed(value: str) -> t.Optional[int]:
    try:
        return int(value)
    except ValueError:
        log.error("DD_TRACE_SAMPLING_SEED=%r is not an integer, seeding from the OS instead", value)
        return None


class SamplingConfig(DDConfig):
    __prefix__ = "dd"

    SAMPLE_RATE_ENV = "DD_TRACE_SAMPLE_RATE"

    _trace_sample_rate = DDConfig.v(
        float,
        "trace.sample_rate",
        parser=_parse_sample_rate,
        default=DEFAULT_SAMPLE_RATE,
        help_type="Float",
        help="Sample rate applied to traces that match no sampling rule",
    )

    _trace_sampling_rules = DDConfig.v(
        list,
        "trace.sampling_rules",
        parser=parse_sampling_rules,
        default=[],
        help_type="JSON",
        help='Ordered list of sampling rules, e.g. [{"service": "payments", "sample_rate": 1.0}]',
    )

    _trace_rate_limit = DDConfig.v(
        int,
        "trace.rate_limit",
        parser=_parse_rate_limit,
        default=DEFAULT_SAMPLING_RATE_LIMIT,
        help_type="Integer",
        help="Maximum number of traces kept per second, 0 disables the limit",
    )

    _priority_sampling = DDConfig.v(
        bool,
        "priority_sampling",
        default=True,
        help_type="Boolean",
        help="Disables every sampling decision when false",
    )

    _trace_sampling_seed = DDConfig.v(
        t.Optional[int],
        "trace.sampling_seed",
        parser=_parse_seed,
        default=None,
        help_type="Integer",
        help="Seed of the random generator used for sampling decisions",
    )

    @property
    def _trace_sample_rate_explicit(self) -> bool:
        """Whether the default sample rate was configured rather than left to the library default."""
        return self.value_source(self.SAMPLE_RATE_ENV) != ValueSource.DEFAULT


config = SamplingConfig()
