import logging
import uuid
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile, status

from teamdash.core.config import Config
from teamdash.core.exceptions import AuthenticationError, FieldValidationError, NotFoundError
from teamdash.core.schemas import ApiResponse
from teamdash.dependencies import (
    get_activity_logger,
    get_auth_gateway,
    get_settings,
    get_storage_gateway,
    get_bearer_token,
    get_table_gateway,
)
from teamdash.gateways import AuthGateway, Failure, QueryOptions, StorageGateway, TableGateway, unwrap
from teamdash.gateways.tables import DEFAULT_LIMIT, DEFAULT_ORDER, ORDER_PATTERN, eq
from teamdash.schemas.documents import DocumentCategory, DocumentUpdate
from teamdash.services.activity import ActivityLogEntry, ActivityLogger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])

DOCUMENTS_TABLE = "documents"


def _fetch_document(tables: TableGateway, document_id: str) -> dict:
    """Single document by id; any lookup failure or empty result is a 404."""
    rows = unwrap(
        tables.query(DOCUMENTS_TABLE, {"id": eq(document_id)}),
        "Document not found",
        status_code=status.HTTP_404_NOT_FOUND,
    )
    if not rows:
        raise NotFoundError("Document not found")
    return rows[0]


@router.get("")
def list_documents(
    team_id: Optional[str] = None,
    employee_id: Optional[str] = None,
    category: Optional[DocumentCategory] = None,
    order: str = Query(DEFAULT_ORDER, pattern=ORDER_PATTERN),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    tables: TableGateway = Depends(get_table_gateway),
):
    filters = {}
    if team_id:
        filters["team_id"] = eq(team_id)
    if employee_id:
        filters["employee_id"] = eq(employee_id)
    if category:
        filters["category"] = eq(category.value)

    result = tables.query(DOCUMENTS_TABLE, filters, QueryOptions(order=order, limit=limit))
    return ApiResponse.ok(unwrap(result, "Failed to fetch documents")).to_response()


@router.get("/{document_id}")
def get_document(document_id: str, tables: TableGateway = Depends(get_table_gateway)):
    return ApiResponse.ok(_fetch_document(tables, document_id)).to_response()


@router.get("/{document_id}/download")
def download_document(
    document_id: str,
    tables: TableGateway = Depends(get_table_gateway),
    storage: StorageGateway = Depends(get_storage_gateway),
):
    document = _fetch_document(tables, document_id)
    url = storage.public_url(document["bucket_name"], document["file_path"])
    return ApiResponse.ok({"url": url, "document": document}).to_response()


@router.post("/upload", status_code=status.HTTP_201_CREATED)
def upload_document(
    background_tasks: BackgroundTasks,
    team_id: UUID = Form(...),
    title: str = Form(..., max_length=255),
    category: DocumentCategory = Form(...),
    employee_id: Optional[UUID] = Form(None),
    description: Optional[str] = Form(None),
    file: UploadFile = File(...),
    token: Optional[str] = Depends(get_bearer_token),
    settings: Config = Depends(get_settings),
    tables: TableGateway = Depends(get_table_gateway),
    storage: StorageGateway = Depends(get_storage_gateway),
    auth: AuthGateway = Depends(get_auth_gateway),
    activity: ActivityLogger = Depends(get_activity_logger),
):
    """
    Store the file, then record it.

    Steps run in order and stop at the first failure. If the record insert
    fails, the uploaded object is removed again; whether that removal works
    is only logged.
    """
    # Checked after form validation so a bad form is still a 422.
    if not token:
        raise AuthenticationError("No token provided")

    limit = settings.max_upload_bytes
    too_large = FieldValidationError({
        "file": [f"The file may not be greater than {limit // 1024} kilobytes."]
    })
    if file.size is not None and file.size > limit:
        raise too_large
    content = file.file.read(limit + 1)
    if len(content) > limit:
        raise too_large

    bucket = settings.documents_bucket
    file_path = f"{team_id}/{uuid.uuid4()}_{file.filename}"
    content_type = file.content_type or "application/octet-stream"

    # 1. Object bytes
    unwrap(storage.upload(bucket, file_path, content, content_type), "File upload failed")

    # 2. Attribution
    identity = auth.resolve_user(token)
    if isinstance(identity, Failure):
        raise AuthenticationError("Unauthorized", body=identity.body)
    user_id = identity.payload["id"]

    # 3. Record
    record = {
        "team_id": str(team_id),
        "employee_id": str(employee_id) if employee_id else None,
        "uploaded_by": user_id,
        "title": title,
        "description": description,
        "file_path": file_path,
        "file_type": content_type,
        "file_size": len(content),
        "bucket_name": bucket,
        "category": category.value,
    }
    inserted = tables.insert(DOCUMENTS_TABLE, record)
    if isinstance(inserted, Failure):
        _discard_object(storage, bucket, file_path)
        unwrap(inserted, "Failed to create document record")

    # 4. Activity feed, after the response
    background_tasks.add_task(activity.record, ActivityLogEntry(
        team_id=str(team_id),
        user_id=user_id,
        action_type="document_uploaded",
        action_description=f"Uploaded document: {title}",
        metadata={
            "file_name": file.filename,
            "file_size": len(content),
            "category": category.value,
        },
    ))

    logger.info(f"Uploaded {file_path} ({len(content)} bytes) to bucket {bucket}")
    return ApiResponse.ok(inserted.payload, message="Document uploaded successfully").to_response(status.HTTP_201_CREATED)


def _discard_object(storage: StorageGateway, bucket: str, path: str) -> None:
    try:
        removed = storage.remove(bucket, path)
    except Exception as e:
        logger.error(f"Orphaned object {bucket}/{path}: cleanup raised {e}", exc_info=True)
        return
    if isinstance(removed, Failure):
        logger.error(f"Orphaned object {bucket}/{path}: cleanup returned {removed.status_code}")


@router.patch("/{document_id}")
def update_document(
    document_id: str,
    data: DocumentUpdate,
    tables: TableGateway = Depends(get_table_gateway),
):
    changes = data.model_dump(mode="json", exclude_unset=True)
    result = tables.update(DOCUMENTS_TABLE, {"id": eq(document_id)}, changes)
    return ApiResponse.ok(unwrap(result, "Failed to update document"), message="Document updated successfully").to_response()


@router.delete("/{document_id}")
def delete_document(
    document_id: str,
    tables: TableGateway = Depends(get_table_gateway),
    storage: StorageGateway = Depends(get_storage_gateway),
):
    document = _fetch_document(tables, document_id)

    # Storage failures do not block removing the record.
    removed = storage.remove(document["bucket_name"], document["file_path"])
    if isinstance(removed, Failure):
        logger.warning(f"Could not delete object {document['bucket_name']}/{document['file_path']}")

    unwrap(tables.remove(DOCUMENTS_TABLE, {"id": eq(document_id)}), "Failed to delete document")
    return ApiResponse.ok(message="Document deleted successfully").to_response()
