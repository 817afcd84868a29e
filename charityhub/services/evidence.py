"""Stored report evidence: public URLs and removal."""

from __future__ import annotations

import logging
from pathlib import Path

from charityhub.core.config import settings

logger = logging.getLogger(__name__)

EVIDENCE_URL_PREFIX = "/static/evidence"


def _resolve(evidence_path: str) -> Path | None:
    root = Path(settings.EVIDENCE_DIR).resolve()
    candidate = (root / evidence_path).resolve()
    if root != candidate and root not in candidate.parents:
        return None
    return candidate


def evidence_url(evidence_path: str | None) -> str | None:
    if not evidence_path:
        return None
    relative = evidence_path.lstrip("/").replace("\\", "/")
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{EVIDENCE_URL_PREFIX}/{relative}"


def delete_evidence(evidence_path: str | None) -> bool:
    """Remove the stored file. Returns ``True`` when a file was deleted."""
    if not evidence_path:
        return False
    path = _resolve(evidence_path)
    if path is None:
        logger.warning("evidence_path_rejected", extra={"evidence_path": evidence_path})
        return False
    if not path.is_file():
        return False
    try:
        path.unlink()
    except OSError:
        logger.exception("evidence_delete_failed", extra={"evidence_path": evidence_path})
        return False
    logger.info("evidence_deleted", extra={"evidence_path": evidence_path})
    return True
