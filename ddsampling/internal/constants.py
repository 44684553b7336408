from ddsampling.constants import AUTO_KEEP
from ddsampling.constants import AUTO_REJECT
from ddsampling.constants import USER_KEEP
from ddsampling.constants import USER_REJECT


# The trace has no decision yet
PRIORITY_SAMPLING_UNKNOWN = 0x40000000
# Priority sampling is disabled for the process
PRIORITY_SAMPLING_UNSET = 0x40000001

DEFAULT_SAMPLE_RATE = 1.0
# 0 leaves the rate limiter inactive
DEFAULT_SAMPLING_RATE_LIMIT = 0
SAMPLING_DECISION_TRACE_TAG_KEY = "_dd.p.dm"
MAX_UINT_64BITS = (1 << 64) - 1


class SamplingMechanism(object):
    AGENT_RATE = 1
    REMOTE_RATE = 2
    RULE = 3
    MANUAL = 4


SAMPLING_MECHANISM_TO_PRIORITIES = {
    SamplingMechanism.AGENT_RATE: (AUTO_KEEP, AUTO_REJECT),
    SamplingMechanism.REMOTE_RATE: (AUTO_KEEP, AUTO_REJECT),
    SamplingMechanism.RULE: (USER_KEEP, USER_REJECT),
    SamplingMechanism.MANUAL: (USER_KEEP, USER_REJECT),
}
_KEEP_PRIORITY_INDEX = 0
_REJECT_PRIORITY_INDEX = 1
