"""Document service — versioned story files with full-snapshot history."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storymaster.exceptions import DocumentNotFound, VersionNotFound
from storymaster.models.document import Document, DocumentVersion
from storymaster.schemas.document import DiffChange, DocumentDiff

logger = logging.getLogger(__name__)


async def create_document(
    db: AsyncSession,
    project_id: str,
    filename: str,
    content: str = "",
    metadata: dict[str, Any] | None = None,
    created_by: str = "system",
) -> Document:
    doc = Document(
        project_id=project_id,
        filename=filename,
        content=content,
        version=1,
        meta=dict(metadata or {}),
    )
    db.add(doc)
    await db.flush()  # assigns doc.id

    _snapshot(db, doc, "Initial creation", created_by)

    await db.commit()
    await db.refresh(doc)
    return doc


async def get_document(db: AsyncSession, document_id: str) -> Document:
    doc = await db.get(Document, document_id)
    if not doc:
        raise DocumentNotFound(f"Document {document_id} not found")
    return doc


async def list_documents(db: AsyncSession, project_id: str | None = None) -> list[Document]:
    stmt = select(Document).order_by(Document.created_at, Document.filename)
    if project_id is not None:
        stmt = stmt.where(Document.project_id == project_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def update_document(
    db: AsyncSession,
    document_id: str,
    content: str,
    commit_message: str = "Updated content",
    updated_by: str = "system",
    metadata: dict[str, Any] | None = None,
) -> Document:
    """Write new content as the next version.

    Identical content is a no-op: history never holds two consecutive
    versions with the same content.
    """
    doc = await get_document(db, document_id)
    if doc.content == content:
        return doc

    doc.content = content
    doc.version += 1
    doc.meta = {**doc.meta, **(metadata or {})}

    _snapshot(db, doc, commit_message, updated_by)

    await db.commit()
    await db.refresh(doc)
    return doc


async def get_versions(db: AsyncSession, document_id: str) -> list[DocumentVersion]:
    await get_document(db, document_id)
    stmt = (
        select(DocumentVersion)
        .where(DocumentVersion.document_id == document_id)
        .order_by(DocumentVersion.version)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_version(
    db: AsyncSession, document_id: str, version: int
) -> DocumentVersion | None:
    stmt = select(DocumentVersion).where(
        DocumentVersion.document_id == document_id,
        DocumentVersion.version == version,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def revert_document(
    db: AsyncSession,
    document_id: str,
    target_version: int,
    commit_message: str | None = None,
    reverted_by: str = "system",
) -> Document:
    """Restore an old version's content as a new version (never rewinds in place)."""
    await get_document(db, document_id)
    target = await get_version(db, document_id, target_version)
    if not target:
        raise VersionNotFound(
            f"Version {target_version} not found for document {document_id}",
            details={"document_id": document_id, "version": target_version},
        )

    logger.info("Reverting document %s to version %d", document_id, target_version)
    return await update_document(
        db,
        document_id,
        target.content,
        commit_message or f"Reverted to version {target_version}",
        reverted_by,
        {"revertedFrom": target_version},
    )


async def diff_versions(
    db: AsyncSession, document_id: str, from_version: int, to_version: int
) -> DocumentDiff:
    await get_document(db, document_id)
    old = await get_version(db, document_id, from_version)
    new = await get_version(db, document_id, to_version)
    if not old or not new:
        missing = [v for v, row in ((from_version, old), (to_version, new)) if row is None]
        raise VersionNotFound(
            "One or both versions not found",
            details={"document_id": document_id, "missing": missing},
        )
    return compute_line_diff(old.content, new.content)


def compute_line_diff(old_content: str, new_content: str) -> DocumentDiff:
    """Positional line comparison.

    Lines are compared index by index with no realignment, so a single
    inserted line shows up as a run of modifications below it.
    """
    old_lines = old_content.split("\n")
    new_lines = new_content.split("\n")

    diff = DocumentDiff()
    for i in range(max(len(old_lines), len(new_lines))):
        old_line = old_lines[i] if i < len(old_lines) else None
        new_line = new_lines[i] if i < len(new_lines) else None

        if old_line is None:
            diff.changes.append(DiffChange(type="add", line_number=i + 1, content=new_line))
            diff.additions += 1
        elif new_line is None:
            diff.changes.append(DiffChange(type="delete", line_number=i + 1, content=old_line))
            diff.deletions += 1
        elif old_line != new_line:
            diff.changes.append(DiffChange(type="modify", line_number=i + 1, content=new_line))
            diff.additions += 1
            diff.deletions += 1

    return diff


async def delete_document(db: AsyncSession, document_id: str) -> bool:
    doc = await db.get(Document, document_id)
    if not doc:
        return False

    await db.execute(delete(DocumentVersion).where(DocumentVersion.document_id == document_id))
    await db.delete(doc)
    await db.commit()
    return True


def _snapshot(db: AsyncSession, doc: Document, commit_message: str, created_by: str) -> None:
    db.add(
        DocumentVersion(
            document_id=doc.id,
            version=doc.version,
            content=doc.content,
            meta=dict(doc.meta),
            created_by=created_by,
            commit_message=commit_message,
        )
    )
