from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, Integer, String, TIMESTAMP, JSON, func

Base = declarative_base()

class FormSubmission(Base):
    __tablename__ = "form_submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service = Column(String(200))
    name = Column(String(200))
    phone = Column(String(50))
    email = Column(String(200))
    storage = Column(String(50))
    location = Column(String(500))
    files = Column(JSON)
    created_at = Column(TIMESTAMP, server_default=func.now())
