"""Logging utilities for HLSA.

Provides audit logging for analysis requests. User text is never written
to the audit log, only its hash and length.
"""
import logging
import hashlib
from typing import Optional
from pathlib import Path

from hlsa.config import get_settings


def get_audit_logger() -> logging.Logger:
    """Get or create audit logger.

    Returns:
        Logger configured for audit logging
    """
    logger = logging.getLogger("hlsa.audit")

    if not logger.handlers:
        settings = get_settings()
        log_path = Path(settings.log_path)
        log_path.mkdir(parents=True, exist_ok=True)

        # File handler for audit logs
        handler = logging.FileHandler(log_path / "audit.log", encoding="utf-8")
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(levelname)s - %(message)s"
        ))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)

    return logger


def hash_text(text: str) -> str:
    """Create SHA256 hash of text for logging.

    Args:
        text: Text to hash

    Returns:
        First 16 characters of SHA256 hash
    """
    return hashlib.sha256(text.encode()).hexdigest()[:16]


def log_analysis_request(
    text: str,
    n_delays: int,
    session_id: Optional[str] = None,
) -> None:
    """Log an analysis request (without the text itself).

    Args:
        text: Input text (will be hashed)
        n_delays: Number of delay samples kept after filtering
        session_id: Session identifier, if any
    """
    logger = get_audit_logger()
    logger.info(
        f"ANALYZE_REQUEST | "
        f"text_hash={hash_text(text)} | "
        f"text_len={len(text)} | "
        f"n_delays={n_delays} | "
        f"session_id={session_id}"
    )


def log_analysis_result(
    text_hash: str,
    overall_score: float,
    classification: str,
    fallback_count: int,
    processing_time_ms: int,
) -> None:
    """Log an analysis result.

    Args:
        text_hash: Hash of input text
        overall_score: Final human-likeness score
        classification: Final label
        fallback_count: Number of judges that fell back or could not be parsed
        processing_time_ms: Processing time in milliseconds
    """
    logger = get_audit_logger()
    logger.info(
        f"ANALYZE_RESULT | "
        f"text_hash={text_hash} | "
        f"overall_score={overall_score:.4f} | "
        f"classification={classification} | "
        f"fallback_count={fallback_count} | "
        f"processing_time_ms={processing_time_ms}"
    )


def log_judge_outcome(
    text_hash: str,
    dimension: str,
    status: str,
    score: float,
) -> None:
    """Log how a judge result was obtained.

    Args:
        text_hash: Hash of judged text
        dimension: Dimension name
        status: ok, unparsed or fallback
        score: Reported score
    """
    logger = get_audit_logger()
    logger.info(
        f"JUDGE_OUTCOME | "
        f"text_hash={text_hash} | "
        f"dimension={dimension} | "
        f"status={status} | "
        f"score={score:.4f}"
    )
