"""Editing pipeline: an in-memory working copy with save and publish."""

from folio.editor.session import EditingSession
from folio.editor.stores import (
    ConfigStore,
    HttpConfigStore,
    ServiceConfigStore,
    StorageUploader,
    Uploader,
    UploadFile,
)

__all__ = [
    "ConfigStore",
    "EditingSession",
    "HttpConfigStore",
    "ServiceConfigStore",
    "StorageUploader",
    "UploadFile",
    "Uploader",
]
