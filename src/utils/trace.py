"""Tracing module: logs grid-loop propagation steps and writes them to CSV."""

import csv
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class TraceStep:
    """A single step in the propagation process."""

    timestamp: float
    step_number: int
    action_type: str  # 'decide', 'join', 'contradiction', 'solved', 'sweep'
    position: Optional[str] = None  # lattice position as "y,x"
    state: Optional[str] = None
    chain_size: Optional[int] = None
    decided_edges: Optional[int] = None
    decided_lines: Optional[int] = None
    reason: Optional[str] = None


def _fmt_pos(pos) -> Optional[str]:
    if pos is None:
        return None
    return f"{pos[0]},{pos[1]}"


class Tracer:
    """Records kernel steps for logging and analysis."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.steps: List[TraceStep] = []
        self.start_time = datetime.now().timestamp()
        self.step_counter = 0

    def _get_timestamp(self) -> float:
        """Get elapsed time in seconds since tracer creation."""
        return datetime.now().timestamp() - self.start_time

    def _record(self, action_type: str, **fields: Any) -> None:
        self.step_counter += 1
        self.steps.append(TraceStep(
            timestamp=self._get_timestamp(),
            step_number=self.step_counter,
            action_type=action_type,
            **fields,
        ))

    def log_decide(self, position, state: str, chain_size: int, decided_edges: int, decided_lines: int):
        """Log a whole chain being decided."""
        if not self.enabled:
            return
        self._record(
            'decide',
            position=_fmt_pos(position),
            state=state,
            chain_size=chain_size,
            decided_edges=decided_edges,
            decided_lines=decided_lines,
        )

    def log_join(self, position, state: str, chain_size: int):
        """Log two chains merged at a shared vertex."""
        if not self.enabled:
            return
        self._record('join', position=_fmt_pos(position), state=state, chain_size=chain_size)

    def log_contradiction(self, reason: str, position=None):
        """Log the transition to an inconsistent instance."""
        if not self.enabled:
            return
        self._record('contradiction', position=_fmt_pos(position), reason=reason)

    def log_solved(self, decided_lines: int):
        """Log when the single loop is closed."""
        if not self.enabled:
            return
        self._record('solved', decided_lines=decided_lines)

    def log_sweep(self, name: str, decided_edges: int, decided_lines: int, reason: str = ""):
        """Log a global sweep (in/out rule, loop connection, connectability)."""
        if not self.enabled:
            return
        self._record(
            'sweep',
            decided_edges=decided_edges,
            decided_lines=decided_lines,
            reason=f"{name}: {reason}" if reason else name,
        )

    def to_csv(self, filepath: Path) -> None:
        """Write trace to CSV file."""
        if not self.steps:
            print("No trace steps to write")
            return

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fieldnames = [
            'timestamp', 'step_number', 'action_type', 'position', 'state',
            'chain_size', 'decided_edges', 'decided_lines', 'reason'
        ]

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for step in self.steps:
                writer.writerow(asdict(step))

        print(f"Trace written to {filepath} ({len(self.steps)} steps)")

    def summary(self) -> Dict[str, Any]:
        """Get a summary of the trace."""
        action_counts = {}
        for step in self.steps:
            action_counts[step.action_type] = action_counts.get(step.action_type, 0) + 1

        return {
            'total_steps': len(self.steps),
            'elapsed_time_seconds': self._get_timestamp(),
            'action_counts': action_counts,
            'num_decisions': action_counts.get('decide', 0),
            'num_joins': action_counts.get('join', 0),
            'num_contradictions': action_counts.get('contradiction', 0),
        }


# Global tracer instance
_global_tracer: Optional[Tracer] = None


def get_tracer() -> Tracer:
    """Get or create the global tracer. A new tracer records nothing until `enable_tracing()`."""
    global _global_tracer
    if _global_tracer is None:
        _global_tracer = Tracer(enabled=False)
    return _global_tracer


def reset_tracer() -> None:
    """Reset the global tracer."""
    global _global_tracer
    _global_tracer = None


def enable_tracing(enabled: bool = True) -> None:
    """Enable or disable tracing."""
    get_tracer().enabled = enabled
