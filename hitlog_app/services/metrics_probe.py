"""
Process and OS metrics for the admin system-info panel.

Services call these through the MetricsProbe interface so tests can
inject a fake with fixed values.
"""

from abc import ABC, abstractmethod
from typing import Optional
import platform


class MetricsProbe(ABC):
    """Interface for process/OS metrics"""

    @abstractmethod
    def memory_usage_kb(self) -> Optional[int]:
        """Current resident memory of this process in KB, None if unknown"""
        pass

    @abstractmethod
    def os_version(self) -> str:
        pass


class ProcessMetricsProbe(MetricsProbe):
    """Reads VmRSS from /proc; other platforms report memory as unknown"""

    def memory_usage_kb(self) -> Optional[int]:
        try:
            with open("/proc/self/status") as f:
                for line in f:
                    if line.startswith("VmRSS:"):
                        return int(line.split()[1])
        except OSError:
            return None
        return None

    def os_version(self) -> str:
        uname = platform.uname()
        return f"{uname.system} {uname.release} {uname.machine}".strip() or "N/A"
