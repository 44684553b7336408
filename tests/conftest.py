import pytest

from ddsampling._trace.provider import _DD_CONTEXTVAR
from ddsampling._trace.sampler import PrioritySampler
from ddsampling._trace.tracer import Tracer
from ddsampling.internal.constants import PRIORITY_SAMPLING_UNKNOWN
from ddsampling.internal.rand import reset_rand64
from tests.utils import CountingRateSampler
from tests.utils import StubLimiter


@pytest.fixture(autouse=True)
def clear_context_after_every_test():
    try:
        yield
    finally:
        _DD_CONTEXTVAR.set(None)
        reset_rand64()


@pytest.fixture
def rate_sampler():
    return CountingRateSampler(True)


@pytest.fixture
def limiter():
    return StubLimiter(active=False)


@pytest.fixture
def tracer(rate_sampler, limiter):
    sampler = PrioritySampler(
        rules=[],
        default_sample_rate=1.0,
        default_explicit=False,
        rate_sampler=rate_sampler,
        limiter=limiter,
    )
    return Tracer(sampler=sampler, default_priority=PRIORITY_SAMPLING_UNKNOWN)
