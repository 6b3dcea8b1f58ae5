from __future__ import annotations
from functools import lru_cache
from gateway.config import settings
from gateway.db import SessionLocal
from gateway.services.files import FileStorageBackend, InlineFileStorage, ObjectFileStorage
from gateway.services.mailer import Mailer
from gateway.services.repository import InMemorySubmissionRepository, SqlSubmissionRepository, SubmissionRepository
from gateway.services.storage import get_object_store
from gateway.services.workflow import SubmissionWorkflow

@lru_cache
def get_repository() -> SubmissionRepository:
    if settings.submission_store == "memory":
        return InMemorySubmissionRepository()
    return SqlSubmissionRepository(SessionLocal)

@lru_cache
def get_file_storage() -> FileStorageBackend:
    if settings.file_storage == "inline":
        return InlineFileStorage()
    return ObjectFileStorage(get_object_store(), settings.s3_public_base_url)

@lru_cache
def get_mailer() -> Mailer:
    return Mailer(settings)

def get_workflow() -> SubmissionWorkflow:
    return SubmissionWorkflow(get_repository(), get_file_storage(), get_mailer(), settings)
