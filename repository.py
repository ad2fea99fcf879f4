# repository.py
from typing import Dict, Any, List, TypedDict

import db
from models import FormSubmission

class SubmissionRow(TypedDict):
    id: int
    service: str
    name: str
    phone: str
    email: str
    storage: str
    location: str
    files: List[Dict[str, Any]]
    created_at: Any

def save_submission(
    service: str,
    name: str,
    phone: str,
    email: str,
    storage: str,
    location: str,
    files: List[Dict[str, Any]],
) -> int:
    session = db.SessionLocal()
    try:
        obj = FormSubmission(
            service=service,
            name=name,
            phone=phone,
            email=email,
            storage=storage,
            location=location,
            files=files,
        )
        session.add(obj)
        session.commit()
        session.refresh(obj)
        return obj.id
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

def get_submissions(limit: int = 50) -> List[SubmissionRow]:
    session = db.SessionLocal()
    try:
        rows = (
            session.query(FormSubmission)
            .order_by(FormSubmission.created_at.desc(), FormSubmission.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": r.id,
                "service": r.service,
                "name": r.name,
                "phone": r.phone,
                "email": r.email,
                "storage": r.storage,
                "location": r.location,
                "files": r.files or [],
                "created_at": r.created_at,
            }
            for r in rows
        ]
    finally:
        session.close()

def record_submission(metadata, location, storage_name: str) -> int:
    """Index a stored submission (SubmissionHandler recorder)."""
    return save_submission(
        service=metadata.service,
        name=metadata.name,
        phone=metadata.phone,
        email=metadata.email,
        storage=storage_name,
        location=location.path,
        files=[f.model_dump(by_alias=True) for f in metadata.files],
    )
