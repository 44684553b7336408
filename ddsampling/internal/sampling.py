import json
import re
from typing import TYPE_CHECKING  # noqa:F401
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from ddsampling._trace.sampling_rule import SamplingRule
from ddsampling.constants import _PROPAGATION_ERROR_KEY
from ddsampling.internal.constants import PRIORITY_SAMPLING_UNKNOWN
from ddsampling.internal.constants import PRIORITY_SAMPLING_UNSET
from ddsampling.internal.constants import SAMPLING_DECISION_TRACE_TAG_KEY
from ddsampling.internal.constants import SamplingMechanism
from ddsampling.internal.logger import get_logger


if TYPE_CHECKING:  # pragma: no cover
    from ddsampling._trace.span import Span  # noqa:F401


log = get_logger(__name__)

# Use regex to validate trace tag value
TRACE_TAG_RE = re.compile(r"^-([0-9])$")


def is_undecided(priority: Optional[int]) -> bool:
    return priority is None or priority in (PRIORITY_SAMPLING_UNKNOWN, PRIORITY_SAMPLING_UNSET)


def is_keep(priority: Optional[int]) -> bool:
    """Whether ``priority`` is a decided value asking the backend to keep the trace."""
    return not is_undecided(priority) and priority > 0  # type: ignore[operator]


def validate_sampling_decision(meta: Dict[str, str]) -> Dict[str, str]:
    value = meta.get(SAMPLING_DECISION_TRACE_TAG_KEY)
    if value:
        # Skip propagating invalid sampling mechanism trace tag
        if TRACE_TAG_RE.match(value) is None:
            del meta[SAMPLING_DECISION_TRACE_TAG_KEY]
            meta[_PROPAGATION_ERROR_KEY] = "decoding_error"
            log.warning("failed to decode _dd.p.dm: %r", value)
    return meta


def update_sampling_decision_maker(span, mechanism):
    # type: (Span, int) -> None
    """Keep the ``_dd.p.dm`` tag of the trace in line with its current priority.

    A decision inherited unchanged from upstream is left alone, and an existing tag
    is never overwritten since an upstream service may have stamped it.
    """
    root = span._local_root
    priority = root.sampling_priority
    if priority is not None and priority == root._propagated_priority:
        return

    if is_keep(priority):
        if SAMPLING_DECISION_TRACE_TAG_KEY not in root._meta:
            root._meta[SAMPLING_DECISION_TRACE_TAG_KEY] = "-%d" % mechanism
    else:
        root._remove_tag(SAMPLING_DECISION_TRACE_TAG_KEY)


def set_manual_priority(span, priority):
    # type: (Span, int) -> None
    """Force the priority of the span's trace, bypassing the sampler.

    UNKNOWN and UNSET clear the stored decision so that the next read decides again.
    """
    root = span._local_root
    root.sampling_priority = None if is_undecided(priority) else priority
    update_sampling_decision_maker(root, SamplingMechanism.MANUAL)


def parse_sampling_rules(raw_json_rules: str) -> List[SamplingRule]:
    """Build sampling rules from a JSON list, skipping the malformed entries."""
    try:
        json_rules = json.loads(raw_json_rules)
    except ValueError:
        log.error("Unable to parse DD_TRACE_SAMPLING_RULES=%r", raw_json_rules)
        return []

    if not isinstance(json_rules, list):
        log.error("DD_TRACE_SAMPLING_RULES is not a list, got %r", json_rules)
        return []

    sampling_rules = []
    for rule in json_rules:
        sampling_rule = _load_sampling_rule(rule)
        if sampling_rule is not None:
            sampling_rules.append(sampling_rule)
    return sampling_rules


def _load_sampling_rule(rule: Any) -> Optional[SamplingRule]:
    if not isinstance(rule, dict):
        log.warning("Sampling rule must be an object, got %r. Skipping.", rule)
        return None
    if "sample_rate" not in rule:
        log.warning("No sample_rate provided for sampling rule: %s. Skipping.", json.dumps(rule))
        return None

    patterns = {}
    for field in ("service", "name"):
        pattern = rule.get(field)
        if pattern is None:
            continue
        if not isinstance(pattern, str):
            # a non-string pattern leaves the field unconstrained
            log.warning("Sampling rule %s pattern must be a string, got %r. Ignoring it.", field, pattern)
            continue
        patterns[field] = pattern

    try:
        return SamplingRule(sample_rate=rule["sample_rate"], **patterns)
    except (TypeError, ValueError):
        log.warning("Invalid sample_rate for sampling rule: %s. Skipping.", json.dumps(rule))
        return None
