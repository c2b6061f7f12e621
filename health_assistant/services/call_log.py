import itertools
from collections import deque
from typing import List, Protocol

from health_assistant.schemas.chat_schemas import CallRecord
from health_assistant.utils.config import CALL_LOG_MAX_RECORDS


class CallLogStore(Protocol):
    def append(self, record: CallRecord) -> None: ...

    def list_all(self) -> List[CallRecord]: ...


class InMemoryCallLog:
    """Process-lifetime call history.

    Holds at most ``max_records`` entries; once full, each append evicts the
    oldest record. Nothing survives a restart.
    """

    def __init__(self, max_records: int = CALL_LOG_MAX_RECORDS):
        if max_records < 1:
            raise ValueError("max_records must be at least 1")
        self._records = deque(maxlen=max_records)
        self._sequence = itertools.count()

    def append(self, record: CallRecord) -> None:
        # deque.append is atomic, so concurrent requests never lose an entry
        self._records.append((next(self._sequence), record))

    def list_all(self) -> List[CallRecord]:
        """Newest first; records sharing a timestamp keep later-inserted first."""
        ordered = sorted(self._records, key=lambda entry: (entry[1].timestamp, entry[0]), reverse=True)
        return [record for _, record in ordered]

    def __len__(self) -> int:
        return len(self._records)
