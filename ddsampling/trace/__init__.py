from ddsampling._trace.provider import BaseContextProvider
from ddsampling._trace.provider import DefaultContextProvider
from ddsampling._trace.sampler import PrioritySampler
from ddsampling._trace.sampler import RateSampler
from ddsampling._trace.sampling_rule import SamplingRule
from ddsampling._trace.span import Span
from ddsampling._trace.tracer import Tracer


# a global tracer instance holding the process-wide sampling state
tracer = Tracer()


__all__ = [
    "BaseContextProvider",
    "DefaultContextProvider",
    "PrioritySampler",
    "RateSampler",
    "SamplingRule",
    "Span",
    "Tracer",
    "tracer",
]
