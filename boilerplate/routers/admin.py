"""Admin endpoints for user management and operational jobs."""

from __future__ import annotations

import math
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session

from boilerplate.core.deps import require_admin, require_staff
from boilerplate.core.exceptions import BadRequestError, NotFoundError
from boilerplate.core.rate_limit import rate_limit
from boilerplate.core.security import AccessTokenPayload
from boilerplate.db.session import get_database, get_db
from boilerplate.schemas.admin import BackupCreated, BackupListing, BackupOut, BackupStats, CleanupResponse
from boilerplate.schemas.user import Pagination, UserOut, UserPage, UserRoleUpdate, UserStats
from boilerplate.services import backup as backup_service
from boilerplate.services.cleanup import cleanup_expired_tokens
from boilerplate.services.users import delete_user, list_users, update_role, user_stats

router = APIRouter(dependencies=[Depends(rate_limit())])


@router.get("/users", response_model=UserPage, dependencies=[Depends(require_admin)])
def get_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    db: Session = Depends(get_db),
) -> UserPage:
    limit = min(limit, 100)
    users, total = list_users(db, page=page, limit=limit)
    total_pages = math.ceil(total / limit) if total else 0
    return UserPage(
        users=[UserOut.model_validate(u) for u in users],
        pagination=Pagination(
            page=page,
            limit=limit,
            total_count=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        ),
    )


@router.patch("/users/{user_id}/role", response_model=UserOut, dependencies=[Depends(require_admin)])
def set_role(user_id: UUID, payload: UserRoleUpdate, db: Session = Depends(get_db)) -> UserOut:
    user = update_role(db, user_id, payload.role, force_reauth=payload.force_reauth)
    if not user:
        raise NotFoundError("User not found", details={"user_id": str(user_id)})
    return UserOut.model_validate(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response, response_model=None)
def remove_user(
    user_id: UUID,
    caller: AccessTokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
) -> Response:
    if user_id == caller.user_id:
        raise BadRequestError("You cannot delete your own account")
    if not delete_user(db, user_id):
        raise NotFoundError("User not found", details={"user_id": str(user_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/cleanup-tokens", response_model=CleanupResponse, dependencies=[Depends(require_admin)])
def run_token_cleanup(request: Request) -> CleanupResponse:
    report = cleanup_expired_tokens(get_database(request))
    return CleanupResponse(
        message="Token cleanup completed" if report.ok else "Token cleanup completed with errors",
        deleted=report.deleted,
        total_deleted=report.total_deleted,
        errors=report.errors,
    )


@router.post("/backup", response_model=BackupCreated, dependencies=[Depends(require_admin)])
def create_backup() -> BackupCreated:
    return BackupCreated(message="Backup created", backup_path=backup_service.create_backup())


@router.get("/backups", response_model=BackupListing, dependencies=[Depends(require_admin)])
def get_backups() -> BackupListing:
    backups = backup_service.list_backups()
    return BackupListing(
        backups=[
            BackupOut(
                filename=b.filename,
                path=b.path,
                size=b.size,
                size_formatted=b.size_formatted,
                created_at=b.created_at,
            )
            for b in backups
        ],
        stats=BackupStats(**backup_service.backup_stats()),
    )


@router.get("/stats", response_model=UserStats, dependencies=[Depends(require_staff)])
def get_stats(db: Session = Depends(get_db)) -> UserStats:
    return UserStats(**user_stats(db))
