"""Document reference model for lending domain."""

from collections.abc import Iterable
from dataclasses import dataclass

from coop_lending.models.lending.enums import DocumentCategory, DocumentType


@dataclass
class CustomerDocument:
    """Reference to a stored file, tagged with an archive category."""

    id: str
    name: str
    type: DocumentType
    category: DocumentCategory
    url: str  # handle returned by the document storage collaborator


DEFAULT_CATEGORY_LIMIT = 3

CATEGORY_LIMITS: dict[DocumentCategory, int] = {
    DocumentCategory.SURAT_KEMATIAN: 10,
    DocumentCategory.SLIP_GAJI: 5,
    DocumentCategory.SLIK: 5,
    DocumentCategory.ASABRI: 5,
    DocumentCategory.REK_KORAN: 5,
}

# Proof-of-resolution categories, replaced on status changes
SETTLEMENT_CATEGORIES = frozenset({DocumentCategory.BUKTI_LUNAS, DocumentCategory.SURAT_KEMATIAN})


def category_limit(category: DocumentCategory) -> int:
    """Get the maximum number of documents accepted for a category."""
    return CATEGORY_LIMITS.get(category, DEFAULT_CATEGORY_LIMIT)


def can_accept(
    documents: Iterable[CustomerDocument],
    category: DocumentCategory,
    incoming: int,
) -> bool:
    """Check whether ``incoming`` more documents fit in ``category``."""
    current = sum(1 for doc in documents if doc.category == category)
    return current + incoming <= category_limit(category)


def document_type_for_mime(mime_type: str) -> DocumentType:
    """Classify an uploaded file by its MIME type."""
    mime_type = (mime_type or "").lower()
    if mime_type.startswith("image/"):
        return DocumentType.IMAGE
    if mime_type == "application/pdf":
        return DocumentType.PDF
    if mime_type.startswith("video/"):
        return DocumentType.VIDEO
    if mime_type.startswith("audio/"):
        return DocumentType.AUDIO
    return DocumentType.OTHER
