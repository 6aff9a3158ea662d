# labtrack/routers/users.py
"""Registration, profile edits, lookups and hours for users."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from labtrack.database import get_db
from labtrack.schemas.user import (
    CardUpdate,
    HoursOut,
    MajorUpdate,
    StudentIdPath,
    TagsUpdate,
    UserCreate,
    UserOut,
    UserUpdate,
)
from labtrack.services import directory_service, session_service, user_service
from labtrack.utils.clock import now_ms

router = APIRouter()


def _image_media_type(data: bytes) -> str:
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    return "application/octet-stream"


@router.post("/users", response_model=UserOut, status_code=201, summary="Register a new user")
def register_user(body: UserCreate, db: Session = Depends(get_db)):
    return user_service.register_user(db, body.student_id, body.first_name, body.last_name, body.tags)


@router.get("/users/search", response_model=list[UserOut], summary="Search users by name or ID")
def search_users(q: str = "", db: Session = Depends(get_db)):
    """Case-insensitive substring match; no match returns an empty list."""
    return directory_service.search(db, q)


@router.get("/users/{student_id}", response_model=UserOut, summary="Get one user")
def get_user(student_id: StudentIdPath, db: Session = Depends(get_db)):
    return directory_service.get_user(db, student_id)


@router.patch("/users/{student_id}", response_model=UserOut, summary="Update names and/or tags")
def update_user(student_id: StudentIdPath, body: UserUpdate, db: Session = Depends(get_db)):
    return user_service.update_user(db, student_id, body.first_name, body.last_name, body.tags)


@router.put("/users/{student_id}/tags", response_model=UserOut, summary="Replace the tag bitmask")
def edit_tags(student_id: StudentIdPath, body: TagsUpdate, db: Session = Depends(get_db)):
    return session_service.edit_tags(db, student_id, body.tags)


@router.put("/users/{student_id}/major", response_model=UserOut, summary="Set major")
def set_major(student_id: StudentIdPath, body: MajorUpdate, db: Session = Depends(get_db)):
    return user_service.set_major(db, student_id, body.major, body.other)


@router.put("/users/{student_id}/card", response_model=UserOut, summary="Bind an ID card")
def set_card(student_id: StudentIdPath, body: CardUpdate, db: Session = Depends(get_db)):
    return user_service.set_card_id(db, student_id, body.card_id)


@router.put("/users/{student_id}/photo", summary="Upload a profile photo (raw image body)")
async def upload_photo(student_id: StudentIdPath, request: Request, db: Session = Depends(get_db)):
    data = await request.body()
    user_service.set_photo(db, student_id, data)
    return {"status": "stored", "student_id": student_id, "bytes": len(data)}


@router.get("/users/{student_id}/photo", summary="Fetch the profile photo")
def get_photo(student_id: StudentIdPath, db: Session = Depends(get_db)):
    data = user_service.get_photo(db, student_id)
    return Response(content=data, media_type=_image_media_type(data))


@router.delete("/users/{student_id}", summary="Delete a user with no log history")
def delete_user(student_id: StudentIdPath, db: Session = Depends(get_db)):
    user_service.delete_user(db, student_id)
    return {"status": "deleted", "student_id": student_id}


@router.get("/users/{student_id}/hours", response_model=HoursOut, summary="Total hours logged")
def total_hours(student_id: StudentIdPath, as_of: Optional[int] = None, db: Session = Depends(get_db)):
    """Open sessions count up to as_of (epoch ms, default now)."""
    as_of = as_of if as_of is not None else now_ms()
    hours = directory_service.total_hours(db, student_id, as_of)
    return {"student_id": student_id, "total_hours": round(hours, 4), "as_of": as_of}


@router.get("/cards/{card_id}", response_model=UserOut, summary="Look up a user by card")
def get_user_by_card(card_id: str, db: Session = Depends(get_db)):
    return directory_service.get_user_by_card(db, card_id)
