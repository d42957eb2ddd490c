"""GC (Garbage Collection) pass over the pods of one namespace.

Usage:
    from dvornik.gc import PodGC

    result = await PodGC(driver, params).run()
"""

from dvornik.gc.base import GCResult
from dvornik.gc.remover import Remover
from dvornik.gc.selector import is_eligible, is_exempt, select, staleness_threshold
from dvornik.gc.task import PodGC

__all__ = [
    "GCResult",
    "PodGC",
    "Remover",
    "is_eligible",
    "is_exempt",
    "select",
    "staleness_threshold",
]
