import contextlib
import os

from ddsampling import config as dd_config
from ddsampling._trace.span import Span
from ddsampling.constants import _SAMPLING_LIMIT_DECISION
from ddsampling.constants import _SAMPLING_PRIORITY_KEY
from ddsampling.constants import _SAMPLING_RULE_DECISION
from ddsampling.internal.constants import SAMPLING_DECISION_TRACE_TAG_KEY


@contextlib.contextmanager
def override_env(env, replace_os_env=False):
    """
    Temporarily override ``os.environ`` with provided values::

        >>> with override_env(dict(DD_TRACE_SAMPLE_RATE="0.5")):
            # Your test
    """
    original = dict(os.environ)

    if replace_os_env:
        os.environ.clear()

    for k in list(os.environ.keys()):
        if k.startswith("DD_"):
            del os.environ[k]

    os.environ.update(env)
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(original)


@contextlib.contextmanager
def override_global_config(values):
    """
    Temporarily override the global configuration::

        >>> with override_global_config(dict(_trace_rate_limit=10)):
            # Your test
    """
    global_config_keys = [
        "_trace_sample_rate",
        "_trace_sampling_rules",
        "_trace_rate_limit",
        "_priority_sampling",
        "_trace_sampling_seed",
    ]

    originals = dict((key, getattr(dd_config, key)) for key in global_config_keys)

    for key, value in values.items():
        if key in global_config_keys:
            setattr(dd_config, key, value)
    try:
        yield
    finally:
        for key, value in originals.items():
            setattr(dd_config, key, value)


class CountingRateSampler(object):
    """Probabilistic sampler stub returning a fixed outcome and counting its calls."""

    def __init__(self, outcome=True):
        self.outcome = outcome
        self.calls = []

    def keep(self, sample_rate):
        self.calls.append(sample_rate)
        return self.outcome


class StubLimiter(object):
    """Rate limiter stub with a fixed outcome."""

    def __init__(self, active=True, allowed=True, rate=1.0):
        self._active = active
        self.allowed = allowed
        self.rate = rate
        self.allow_calls = 0

    def active(self):
        return self._active

    def allow(self):
        self.allow_calls += 1
        return self.allowed

    def current_rate(self):
        return self.rate


def make_trace(service="payments", name="web.request"):
    """Return a root span and one of its children."""
    root = Span(name, service=service)
    child = Span("child", service=service, parent=root)
    return root, child


def assert_sampling_decision_tags(span, limit=None, rule=None, sampling_priority=None, trace_tag=None):
    """Check span attribute given an expected sampling decision

    :param limit: expected rate limit ``_dd.limit_psr``, ``None`` if it must be absent
    :param rule: expected sampler rule rate ``_dd.rule_psr``
    :param sampling_priority: expected sampling priority ``_sampling_priority_v1``
    :param trace_tag: expected sampling decision trace tag ``_dd.p.dm``, ``None`` if it must be absent
    """
    root = span._local_root
    assert root.get_metric(_SAMPLING_LIMIT_DECISION) == limit
    if rule is not None:
        assert root.get_metric(_SAMPLING_RULE_DECISION) == rule
    if sampling_priority is not None:
        assert root.get_metric(_SAMPLING_PRIORITY_KEY) == sampling_priority

    if trace_tag:
        assert root.get_tag(SAMPLING_DECISION_TRACE_TAG_KEY) == trace_tag
    else:
        assert SAMPLING_DECISION_TRACE_TAG_KEY not in root._meta
