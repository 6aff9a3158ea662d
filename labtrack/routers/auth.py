# labtrack/routers/auth.py
"""Admin/supervisor password management and verification."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from labtrack.database import get_db
from labtrack.schemas.credential import CredentialSet, CredentialVerify, VerifyOut
from labtrack.schemas.user import StudentIdPath
from labtrack.services.credential_service import set_credential, verify_credential

router = APIRouter()


@router.put("/credentials/{student_id}", summary="Set or replace a password")
def put_credential(student_id: StudentIdPath, body: CredentialSet, db: Session = Depends(get_db)):
    set_credential(db, student_id, body.password)
    return {"status": "updated", "student_id": student_id}


@router.post("/auth/verify", response_model=VerifyOut, summary="Check a password")
def verify(body: CredentialVerify, db: Session = Depends(get_db)):
    return {"student_id": body.student_id, "valid": verify_credential(db, body.student_id, body.password)}
