import math
from typing import Dict
from typing import Optional
from typing import Union

from ddsampling.constants import _SAMPLING_PRIORITY_KEY
from ddsampling.constants import MANUAL_DROP_KEY
from ddsampling.constants import MANUAL_KEEP_KEY
from ddsampling.constants import USER_KEEP
from ddsampling.constants import USER_REJECT
from ddsampling.internal.logger import get_logger
from ddsampling.internal.sampling import set_manual_priority


log = get_logger(__name__)


NumericType = Union[int, float]


class Span(object):
    """One unit of work within a trace.

    Only the attributes priority sampling reads or writes are modelled here. The
    sampling state of a trace is stored on its local root span, which every span
    of the trace references through ``_local_root``.
    """

    __slots__ = [
        "name",
        "service",
        "resource",
        "_meta",
        "_metrics",
        "_parent",
        "_local_root_value",
        "_propagated_priority",
        "__weakref__",
    ]

    def __init__(
        self,
        name: str,
        service: Optional[str] = None,
        resource: Optional[str] = None,
        parent: Optional["Span"] = None,
    ) -> None:
        """
        Create a new span.

        :param str name: the name of the traced operation.
        :param str service: the service name
        :param str resource: the resource name
        :param Span parent: the parent span, ``None`` for the root span of a trace.
        """
        self.name = name
        self.service = service
        self.resource = resource or name

        self._meta: Dict[str, str] = {}
        self._metrics: Dict[str, NumericType] = {}

        self._parent = parent
        self._local_root_value: Optional["Span"] = parent._local_root if parent is not None else None
        # priority received from upstream, only meaningful on the local root
        self._propagated_priority: Optional[int] = None

    @property
    def _local_root(self) -> "Span":
        if self._local_root_value is None:
            return self
        return self._local_root_value

    @property
    def sampling_priority(self) -> Optional[int]:
        """The priority decided for this span's trace, ``None`` while undecided.

        Reads and writes always go to the local root span.
        """
        value = self._local_root._metrics.get(_SAMPLING_PRIORITY_KEY)
        if value is None:
            return None
        return int(value)

    @sampling_priority.setter
    def sampling_priority(self, value: Optional[int]) -> None:
        root = self._local_root
        if value is None:
            root._metrics.pop(_SAMPLING_PRIORITY_KEY, None)
        else:
            root._metrics[_SAMPLING_PRIORITY_KEY] = int(value)

    def set_tag(self, key: str, value: Optional[str] = None) -> None:
        """Set the given key / value tag pair on the span."""
        if key == MANUAL_KEEP_KEY:
            set_manual_priority(self, USER_KEEP)
            return
        elif key == MANUAL_DROP_KEY:
            set_manual_priority(self, USER_REJECT)
            return

        try:
            self._meta[key] = str(value)
        except Exception:
            log.warning("error setting tag %s, ignoring it", key, exc_info=True)
            return
        self._metrics.pop(key, None)

    def get_tag(self, key: str) -> Optional[str]:
        """Return the given tag or None if it doesn't exist."""
        return self._meta.get(key)

    def _remove_tag(self, key: str) -> None:
        self._meta.pop(key, None)

    def set_metric(self, key: str, value: NumericType) -> None:
        """Set a numeric tag value for the given key."""
        if not isinstance(value, (int, float)):
            try:
                value = float(value)
            except (ValueError, TypeError):
                log.debug("ignoring not number metric %s:%s", key, value)
                return

        # don't allow nan or inf
        if math.isnan(value) or math.isinf(value):
            log.debug("ignoring not real metric %s:%s", key, value)
            return

        self._meta.pop(key, None)
        self._metrics[key] = value

    def get_metric(self, key: str) -> Optional[NumericType]:
        return self._metrics.get(key)

    def __repr__(self):
        return "<Span(name=%s, service=%s, resource=%s, root=%s)>" % (
            self.name,
            self.service,
            self.resource,
            self._local_root_value is None,
        )
