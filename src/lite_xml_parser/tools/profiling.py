"""Performance profiling tools for Lite XML Parser.

Times individual parse runs and records the process resident memory before
and after each run, then aggregates the runs into a report.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import psutil

from lite_xml_parser.api import XMLParser
from lite_xml_parser.shared import ParserConfig, XMLSyntaxError, get_logger

BYTES_PER_MB = 1024 * 1024


@dataclass
class ProfilingSession:
    """Measurements for a single profiled parse."""

    session_id: str
    start_time: float
    end_time: float
    input_size: int  # characters
    memory_start: int  # bytes
    memory_end: int  # bytes
    node_count: int = 0
    element_count: int = 0
    success: bool = True
    error: Optional[str] = None

    @property
    def duration_ms(self) -> float:
        """Processing duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    @property
    def memory_delta(self) -> int:
        """Resident memory change in bytes."""
        return self.memory_end - self.memory_start

    @property
    def throughput_mb_per_s(self) -> float:
        """Processing throughput in MB/s."""
        duration_s = self.end_time - self.start_time
        if duration_s <= 0:
            return 0.0
        return (self.input_size / BYTES_PER_MB) / duration_s

    def to_dict(self) -> Dict[str, Any]:
        """Convert session to dictionary representation."""
        return {
            "session_id": self.session_id,
            "success": self.success,
            "duration_ms": self.duration_ms,
            "memory_delta_bytes": self.memory_delta,
            "throughput_mb_per_s": self.throughput_mb_per_s,
            "node_count": self.node_count,
            "element_count": self.element_count,
            "error": self.error,
        }


@dataclass
class PerformanceReport:
    """Aggregate of profiled sessions."""

    sessions: List[ProfilingSession] = field(default_factory=list)
    generation_time: float = field(default_factory=time.time)

    @property
    def session_count(self) -> int:
        """Total number of profiled sessions."""
        return len(self.sessions)

    @property
    def average_duration_ms(self) -> float:
        """Average processing duration across sessions."""
        if not self.sessions:
            return 0.0
        return sum(s.duration_ms for s in self.sessions) / len(self.sessions)

    @property
    def peak_memory_delta(self) -> int:
        """Largest resident memory growth seen in one session."""
        return max((s.memory_delta for s in self.sessions), default=0)

    @property
    def total_input_size(self) -> int:
        """Characters parsed across all sessions."""
        return sum(s.input_size for s in self.sessions)


class PerformanceProfiler:
    """Profiler for parse operations.

    Examples:
        >>> profiler = PerformanceProfiler()
        >>> session = profiler.profile_parse("<a><b/></a>", "small")
        >>> session.element_count
        2
        >>> profiler.generate_report().session_count
        1
    """

    def __init__(self, config: Optional[ParserConfig] = None) -> None:
        """Initialize performance profiler.

        Args:
            config: Configuration used for every profiled parse
        """
        self.parser = XMLParser(config)
        self.sessions: List[ProfilingSession] = []
        self.process = psutil.Process()
        self.logger = get_logger(__name__, None, "performance_profiler")

    def _resident_memory(self) -> int:
        return self.process.memory_info().rss

    def profile_parse(self, text: str, session_id: str) -> ProfilingSession:
        """Parse ``text`` and record timing and memory for the run.

        A syntax error does not propagate; it is recorded on the session.

        Args:
            text: Document text
            session_id: Identifier for the session, e.g. a file name

        Returns:
            Recorded session
        """
        memory_start = self._resident_memory()
        start_time = time.time()
        document = None
        error = None
        try:
            document = self.parser.parse(text)
        except XMLSyntaxError as e:
            error = str(e)
        end_time = time.time()

        session = ProfilingSession(
            session_id=session_id,
            start_time=start_time,
            end_time=end_time,
            input_size=len(text),
            memory_start=memory_start,
            memory_end=self._resident_memory(),
            node_count=document.node_count if document is not None else 0,
            element_count=document.element_count if document is not None else 0,
            success=document is not None,
            error=error,
        )
        self.sessions.append(session)

        self.logger.debug(
            "Profiled parse",
            extra={
                "session_id": session_id,
                "duration_ms": session.duration_ms,
                "memory_delta": session.memory_delta,
            }
        )
        return session

    def generate_report(self) -> PerformanceReport:
        """Aggregate every session recorded so far."""
        return PerformanceReport(sessions=list(self.sessions))
