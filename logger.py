"""
Status Logger - keeps the history of melody events and chat feedback.

SRP: This class has one responsibility - logging and status management.
Engines never import it; the application root wires their callbacks here.
"""

from datetime import datetime
from typing import Callable, List, Optional
from dataclasses import dataclass


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class LogEntry:
    """Represents a single log entry."""
    timestamp: datetime
    message: str
    level: str = "INFO"
    source: str = "melody"

    def __str__(self) -> str:
        time_str = self.timestamp.strftime("%H:%M:%S")
        return f"[{time_str}] {self.level} {self.source}: {self.message}"


class StatusLogger:
    """
    Manages status updates and maintains a bounded log history.

    An optional echo callback receives every formatted entry, which is how
    the command-line runner prints the log as it grows.
    """

    def __init__(self, max_entries: int = 200, echo: Optional[Callable[[str], None]] = None):
        """
        Initialize the logger.

        Args:
            max_entries: Maximum number of log entries to keep in memory
            echo: Called with each formatted entry as it is added
        """
        self._log_entries: List[LogEntry] = []
        self._max_entries = max_entries
        self._current_status = "Idle"
        self._echo = echo

    def log_debug(self, message: str, source: str = "melody") -> None:
        self._add_entry(message, "DEBUG", source)

    def log_info(self, message: str, source: str = "melody") -> None:
        self._add_entry(message, "INFO", source)

    def log_warning(self, message: str, source: str = "melody") -> None:
        self._add_entry(message, "WARNING", source)

    def log_error(self, message: str, source: str = "melody") -> None:
        self._add_entry(message, "ERROR", source)

    def callback(self, source: str, level: str = "INFO") -> Callable[[str], None]:
        """
        Build an ``on_log`` callback that records messages under ``source``.

        Args:
            source: Component name shown in each entry
            level: Level assigned to every message from that component

        Returns:
            A callable suitable for ``Sequencer.on_log`` and friends
        """
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        return lambda message: self._add_entry(message, level, source)

    def update_status(self, status: str) -> None:
        """
        Update the current status.

        Args:
            status: The new status message
        """
        self._current_status = status
        self.log_info(status, source="status")

    def get_current_status(self) -> str:
        """Returns the current status message."""
        return self._current_status

    def get_recent_logs(self, count: int = 10, min_level: str = "DEBUG") -> List[LogEntry]:
        """
        Get the most recent log entries at or above ``min_level``.

        Args:
            count: Number of recent entries to return
            min_level: Lowest level to include

        Returns:
            List of recent log entries
        """
        threshold = LEVELS.index(min_level)
        entries = [e for e in self._log_entries if LEVELS.index(e.level) >= threshold]
        return entries[-count:] if count > 0 else []

    def get_all_logs(self) -> List[LogEntry]:
        """Returns all log entries."""
        return self._log_entries.copy()

    def clear_logs(self) -> None:
        """Clear all log entries."""
        self._log_entries.clear()
        self.log_info("Log history cleared")

    def _add_entry(self, message: str, level: str, source: str) -> None:
        entry = LogEntry(
            timestamp=datetime.now(),
            message=message,
            level=level,
            source=source,
        )

        self._log_entries.append(entry)

        # Trim old entries if we exceed max
        if len(self._log_entries) > self._max_entries:
            self._log_entries = self._log_entries[-self._max_entries:]

        if self._echo:
            try:
                self._echo(str(entry))
            except Exception:
                pass

    def export_logs_to_file(self, filepath: str) -> bool:
        """
        Export all logs to a text file.

        Args:
            filepath: Path where the log file should be saved

        Returns:
            bool: True if export was successful
        """
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write("Melody Loop - Log Export\n")
                f.write(f"Generated: {datetime.now()}\n")
                f.write("=" * 50 + "\n\n")

                for entry in self._log_entries:
                    time_str = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                    f.write(f"[{time_str}] {entry.level} {entry.source}: {entry.message}\n")

            return True
        except OSError as e:
            print(f"Failed to export logs: {e}")
            return False
