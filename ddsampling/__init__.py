"""Priority sampling for distributed traces.

Decides once per trace whether it is kept or dropped, records the mechanism behind
the decision, and exposes the priority to the spans of the trace and to propagation.
"""
from ._version import version as __version__  # noqa: F401
from .settings import config


__all__ = ["config"]
