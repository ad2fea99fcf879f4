from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Any, List, Optional
from datetime import datetime


# ---------- 1) Stored files + metadata ----------

class UploadedFileRecord(BaseModel):
    original_name: str = Field(alias="originalName")
    storage_location_id: str = Field(alias="storageLocationId")  # path, Drive id, object path or public id
    access_url: Optional[str] = Field(default=None, alias="accessURL")
    size: int

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class SubmissionMetadata(BaseModel):
    service: str
    name: str
    phone: str
    email: str
    submitted_at: datetime = Field(alias="submittedAt")
    files: List[UploadedFileRecord]

    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


# ---------- 2) Service catalog endpoints ----------

class ServiceSummary(BaseModel):
    key: str
    name: str


class ServicesList(BaseModel):
    services: List[ServiceSummary]


class RechargeOptionOut(BaseModel):
    name: str
    icon: str


class ServiceDetail(BaseModel):
    key: str
    name: str
    icon: str
    description: str
    category: str
    documents: List[str]
    recharge_options: List[RechargeOptionOut] = Field(default_factory=list, alias="rechargeOptions")

    model_config = ConfigDict(populate_by_name=True)


# ---------- 3) Submit endpoint ----------

class SubmitData(BaseModel):
    service: str
    files_uploaded: int = Field(alias="filesUploaded")
    files: List[UploadedFileRecord]

    model_config = ConfigDict(populate_by_name=True)


class SubmitResponse(BaseModel):
    success: bool = True
    message: str = "Form submitted successfully"
    data: SubmitData


class ErrorResponse(BaseModel):
    error: str
    message: str
    kind: str


# ---------- 4) Health + inspection endpoints ----------

class HealthResponse(BaseModel):
    status: str
    message: str
    storage: str


class StoredFileEntry(BaseModel):
    name: str
    path: str
    size: int


class StoredUserFiles(BaseModel):
    user: str
    files: List[StoredFileEntry]


class StoredFilesList(BaseModel):
    services: Dict[str, List[StoredUserFiles]]


class Submission(BaseModel):
    id: int
    service: str
    name: str
    phone: str
    email: str
    storage: str
    location: str
    files: List[Dict[str, Any]]
    created_at: Optional[datetime] = None

    #pydantic v2 style
    model_config = ConfigDict(from_attributes=True)


class SubmissionsList(BaseModel):
    items: List[Submission]
