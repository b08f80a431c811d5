"""
Attachment storage.

Uploaded files are filed into a bucket by MIME type and saved through Django's
default storage backend. Messages only keep the returned storage name.
"""

import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)

PICTURE = 'picture'
VIDEO = 'video'
OTHER = 'other'


def classify(content_type) -> str:
    """Bucket for a MIME type: image/* -> picture, video/* -> video, else other"""
    content_type = (content_type or '').strip().lower()
    if content_type.startswith('image/'):
        return PICTURE
    if content_type.startswith('video/'):
        return VIDEO
    return OTHER


def attachment_path(bucket: str, filename: str) -> str:
    # Random name; only the (lower-cased) extension of the upload is kept
    _, ext = os.path.splitext(filename or '')
    return f'{settings.ATTACHMENT_ROOT}/{bucket}/{uuid.uuid4().hex}{ext.lower()}'


def store_attachment(uploaded_file) -> str:
    """
    Save an uploaded file and return its opaque storage reference

    Args:
        uploaded_file: Django ``UploadedFile`` (or any File with ``name``
            and optionally ``content_type``)
    """
    bucket = classify(getattr(uploaded_file, 'content_type', None))
    name = default_storage.save(attachment_path(bucket, uploaded_file.name), uploaded_file)
    logger.info(f'Stored attachment {name} ({bucket})')
    return name


def delete_attachment(name: str) -> None:
    """Remove a stored attachment; used to clean up after a failed write"""
    if name and default_storage.exists(name):
        default_storage.delete(name)
