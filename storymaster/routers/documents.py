"""Document endpoints — story files, version history, revert and diff."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storymaster.database import get_db
from storymaster.dependencies import current_user
from storymaster.exceptions import DocumentNotFound, VersionNotFound
from storymaster.schemas.auth import User
from storymaster.schemas.document import (
    DocumentCreate,
    DocumentDiff,
    DocumentResponse,
    DocumentRevert,
    DocumentUpdate,
    DocumentVersionResponse,
)
from storymaster.services import document_service

router = APIRouter()


@router.get("/", response_model=list[DocumentResponse])
async def list_documents(project_id: str | None = None, db: AsyncSession = Depends(get_db)):
    return await document_service.list_documents(db, project_id)


@router.post("/", response_model=DocumentResponse, status_code=201)
async def create_document(
    data: DocumentCreate,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    return await document_service.create_document(
        db, data.project_id, data.filename, data.content, data.metadata, created_by=user.id
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str, db: AsyncSession = Depends(get_db)):
    return await document_service.get_document(db, document_id)


@router.put("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: str,
    data: DocumentUpdate,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    return await document_service.update_document(
        db, document_id, data.content, data.commit_message, user.id, data.metadata
    )


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    deleted = await document_service.delete_document(db, document_id)
    if not deleted:
        raise DocumentNotFound(f"Document {document_id} not found")


@router.get("/{document_id}/versions", response_model=list[DocumentVersionResponse])
async def list_versions(document_id: str, db: AsyncSession = Depends(get_db)):
    return await document_service.get_versions(db, document_id)


@router.get("/{document_id}/versions/{version}", response_model=DocumentVersionResponse)
async def get_version(document_id: str, version: int, db: AsyncSession = Depends(get_db)):
    await document_service.get_document(db, document_id)
    row = await document_service.get_version(db, document_id, version)
    if not row:
        raise VersionNotFound(f"Version {version} not found for document {document_id}")
    return row


@router.post("/{document_id}/revert", response_model=DocumentResponse)
async def revert_document(
    document_id: str,
    data: DocumentRevert,
    user: User = Depends(current_user),
    db: AsyncSession = Depends(get_db),
):
    return await document_service.revert_document(
        db, document_id, data.version, data.commit_message, user.id
    )


@router.get("/{document_id}/diff", response_model=DocumentDiff)
async def diff_versions(
    document_id: str,
    from_version: int,
    to_version: int,
    db: AsyncSession = Depends(get_db),
):
    return await document_service.diff_versions(db, document_id, from_version, to_version)
