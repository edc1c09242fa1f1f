"""Ingestion services: upload orchestration."""

from ar_ingestion.services.import_service import (
    DEFAULT_MAX_BYTES,
    ImportService,
    preview_upload,
)

__all__ = ["DEFAULT_MAX_BYTES", "ImportService", "preview_upload"]
