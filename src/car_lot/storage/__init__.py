"""Photo storage."""

from car_lot.storage.photo_store import (
    InvalidPhotoError,
    PhotoFile,
    PhotoStore,
    PhotoUploadError,
    StagedPhoto,
)

__all__ = ["InvalidPhotoError", "PhotoFile", "PhotoStore", "PhotoUploadError", "StagedPhoto"]
