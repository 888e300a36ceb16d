"""CSV export functionality for the Physarum transport simulation."""

import csv
import logging
from pathlib import Path
from typing import IO, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.state import SimulationState

logger = logging.getLogger(__name__)

FIELDNAMES = ['step', 'agent_index', 'x', 'y', 'state', 'heading']


class CSVWriter:
    """
    Streams agent positions to CSV, one row per agent per logged step.

    Output format:
        step,agent_index,x,y,state,heading
        1,0,17.3021,22.9147,seek_pickup,4.1872
        ...

    With ``every > 1`` only steps divisible by ``every`` are logged, which
    keeps long runs with large swarms to a manageable file size.
    """

    def __init__(self, output_path: Path, every: int = 1):
        if every < 1:
            raise ValueError(f"CSV interval must be >= 1, got {every}")
        self.output_path = Path(output_path)
        self.every = every
        self.rows_written = 0
        self.steps_written = 0
        self._handle: Optional[IO[str]] = None
        self._writer: Optional[csv.DictWriter] = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def open(self) -> None:
        """Create the file (and parent directories) and write the header."""
        if self.is_open:
            return
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = open(self.output_path, 'w', newline='')
        self._writer = csv.DictWriter(self._handle, fieldnames=FIELDNAMES)
        self._writer.writeheader()

    def wants(self, step: int) -> bool:
        return step % self.every == 0

    def append(self, state: "SimulationState") -> int:
        """Log the agents of ``state`` if its step is sampled; returns rows written."""
        if not self.wants(state.step):
            return 0
        if not self.is_open:
            self.open()
        rows = state.to_csv_rows()
        self._writer.writerows(rows)
        self._handle.flush()
        self.rows_written += len(rows)
        self.steps_written += 1
        return len(rows)

    def close(self) -> None:
        if self._handle is None:
            return
        self._handle.close()
        self._handle = None
        self._writer = None
        logger.debug("Closed %s after %d steps (%d rows)",
                     self.output_path, self.steps_written, self.rows_written)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
