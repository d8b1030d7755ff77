"""Inbound macro request as seen by the pipeline.

The host hands over one request per display refresh. The pipeline only needs
a mutable ``format`` string, an optional client identity, and a way to report
status and results. Any object exposing the same members can be used.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RequestStatus(Enum):
    """Lifecycle of a macro request."""

    NEW = "new"
    PROCESSING = "processing"  # Waiting on a fetch
    DONE = "done"
    FAILED = "failed"  # Downstream handler raised


@dataclass
class MacroRequest:
    """A display-format request travelling through the macro pipeline."""

    format: str = ""
    client_id: str | None = None
    status: RequestStatus = RequestStatus.NEW
    results: dict[str, Any] = field(default_factory=dict)

    def add_result(self, name: str, value: Any) -> None:
        self.results[name] = value

    def set_processing(self) -> None:
        self.status = RequestStatus.PROCESSING

    def set_done(self) -> None:
        self.status = RequestStatus.DONE

    def set_failed(self) -> None:
        self.status = RequestStatus.FAILED
