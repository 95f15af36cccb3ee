"""Session and report storage.

Sessions, interactions and analysis results are appended to JSONL files.
When the files cannot be written or read, records go to an in-memory
TTL cache instead, so storage problems never block an analysis.
"""
import json
import logging
import threading
import time
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from hlsa.api.schemas import (
    AnalysisRecord, AnalysisReport, InteractionRecord, SessionRecord, SessionResponse
)
from hlsa.config import get_settings

logger = logging.getLogger(__name__)

SESSIONS = "sessions"
INTERACTIONS = "interactions"
ANALYSIS_RESULTS = "analysis_results"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TTLCache:
    """Bounded in-memory map with per-entry expiry.

    Entries expire ``ttl_seconds`` after their last write. When full, the
    least recently written entry is evicted.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: OrderedDict[str, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._data[key]
                return default
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data.pop(key, None)
            self._data[key] = (self._clock() + self.ttl_seconds, value)
            self._purge_expired()
            while len(self._data) > self.max_entries:
                evicted, _ = self._data.popitem(last=False)
                logger.debug(f"Evicted cache entry {evicted}")

    def append(self, key: str, item: Any) -> None:
        """Append to a list entry, creating it if needed."""
        items = list(self.get(key, []))
        items.append(item)
        self.set(key, items)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._data)


class SessionStore:
    """JSONL-backed store with an in-memory fallback."""

    def __init__(
        self,
        data_dir: Optional[str] = None,
        cache: Optional[TTLCache] = None,
        enabled: Optional[bool] = None,
    ):
        """Initialize store.

        Args:
            data_dir: Directory for the JSONL files (defaults to config)
            cache: Fallback cache (defaults to one sized from config)
            enabled: Whether to use the durable files at all
        """
        settings = get_settings()
        self.data_dir = Path(data_dir or settings.data_path)
        self.enabled = settings.storage_enabled if enabled is None else enabled
        self.cache = cache if cache is not None else TTLCache(
            max_entries=settings.fallback_cache_max_entries,
            ttl_seconds=settings.fallback_cache_ttl_seconds,
        )
        self._degraded = False

    @property
    def status(self) -> str:
        """'durable', 'degraded' (fell back at least once) or 'memory'."""
        if not self.enabled:
            return "memory"
        return "degraded" if self._degraded else "durable"

    # === Low-level ===

    def _table_path(self, table: str) -> Path:
        return self.data_dir / f"{table}.jsonl"

    def _write(self, table: str, record: dict, cache_key: str) -> None:
        if self.enabled:
            try:
                self.data_dir.mkdir(parents=True, exist_ok=True)
                with open(self._table_path(table), "a", encoding="utf-8") as f:
                    f.write(json.dumps(record, ensure_ascii=False) + "\n")
                return
            except (OSError, TypeError, ValueError) as e:
                self._degraded = True
                logger.warning(f"Storage error writing {table}, falling back to memory: {e}")
        if table == SESSIONS:
            self.cache.set(cache_key, record)
        else:
            self.cache.append(cache_key, record)

    def _read(self, table: str, field: str, value: str) -> list[dict]:
        if not self.enabled:
            return []
        path = self._table_path(table)
        if not path.exists():
            return []

        records = []
        try:
            with open(path, encoding="utf-8") as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning(f"Skipping invalid line in {path}")
                        continue
                    if record.get(field) == value:
                        records.append(record)
        except OSError as e:
            self._degraded = True
            logger.warning(f"Storage error reading {table}, using memory only: {e}")
        return records

    @staticmethod
    def _merge(durable: list[dict], cached: list[dict]) -> list[dict]:
        seen = {r["id"] for r in durable}
        merged = durable + [r for r in cached if r["id"] not in seen]
        return sorted(merged, key=lambda r: r.get("created_at", ""))

    # === Sessions ===

    def create_session(self) -> SessionRecord:
        """Create and store a new session."""
        record = SessionRecord(id=str(uuid.uuid4()), created_at=_now())
        self._write(SESSIONS, record.model_dump(), f"session:{record.id}")
        logger.info(f"Created session {record.id}")
        return record

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        """Look up a session by id."""
        durable = self._read(SESSIONS, "id", session_id)
        if durable:
            return SessionRecord.model_validate(durable[-1])
        cached = self.cache.get(f"session:{session_id}")
        return SessionRecord.model_validate(cached) if cached else None

    # === Interactions ===

    def add_interaction(
        self,
        session_id: str,
        question: str,
        response: str,
        follow_up_question: Optional[str] = None,
        depth: int = 1,
    ) -> InteractionRecord:
        """Store a question/response pair for a session."""
        record = InteractionRecord(
            id=str(uuid.uuid4()),
            session_id=session_id,
            question=question,
            response=response,
            follow_up_question=follow_up_question,
            depth=depth,
            created_at=_now(),
        )
        self._write(INTERACTIONS, record.model_dump(), f"interactions:{session_id}")
        return record

    def get_interactions(self, session_id: str) -> list[InteractionRecord]:
        records = self._merge(
            self._read(INTERACTIONS, "session_id", session_id),
            self.cache.get(f"interactions:{session_id}", []),
        )
        return [InteractionRecord.model_validate(r) for r in records]

    # === Analysis results ===

    def save_analysis(self, session_id: str, text: str, report: AnalysisReport) -> AnalysisRecord:
        """Store an analysis report for a session."""
        record = AnalysisRecord(
            id=str(uuid.uuid4()),
            session_id=session_id,
            text=text,
            report=report,
            created_at=_now(),
        )
        self._write(
            ANALYSIS_RESULTS,
            record.model_dump(mode="json"),
            f"analysis_results:{session_id}",
        )
        return record

    def get_analyses(self, session_id: str) -> list[AnalysisRecord]:
        records = self._merge(
            self._read(ANALYSIS_RESULTS, "session_id", session_id),
            self.cache.get(f"analysis_results:{session_id}", []),
        )
        return [AnalysisRecord.model_validate(r) for r in records]

    def get_session_bundle(self, session_id: str) -> Optional[SessionResponse]:
        """Session with its interactions and analysis results, or None if unknown."""
        session = self.get_session(session_id)
        if session is None:
            return None
        return SessionResponse(
            session=session,
            interactions=self.get_interactions(session_id),
            analysis_results=self.get_analyses(session_id),
        )


# Singleton instance
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create session store singleton."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore()
    return _session_store


def reset_session_store() -> None:
    """Reset the session store singleton (useful for testing)."""
    global _session_store
    _session_store = None
