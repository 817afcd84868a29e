from __future__ import annotations

from pathlib import Path

from charityhub.core.config import settings
from charityhub.services import evidence


def test_evidence_url_uses_public_base():
    assert evidence.evidence_url(None) is None
    url = evidence.evidence_url("2026/06/receipt.jpg")
    assert url == f"{settings.PUBLIC_BASE_URL.rstrip('/')}/static/evidence/2026/06/receipt.jpg"


def test_delete_evidence_removes_file():
    target = Path(settings.EVIDENCE_DIR) / "nested" / "proof.pdf"
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(b"%PDF-1.7")

    assert evidence.delete_evidence("nested/proof.pdf") is True
    assert not target.exists()
    assert evidence.delete_evidence("nested/proof.pdf") is False


def test_delete_evidence_stays_inside_evidence_dir():
    outside = Path(settings.EVIDENCE_DIR).parent / "outside-evidence.txt"
    outside.write_text("keep me")
    try:
        assert evidence.delete_evidence(f"../{outside.name}") is False
        assert outside.exists()
    finally:
        outside.unlink()
