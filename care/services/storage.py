"""
File storage collaborator: ``upload(bucket, path, file) -> public URL``.

Buckets are top-level folders of Django's default storage.  Uploading
to an existing path replaces the file.  Size and content-type limits
come from ``UPLOAD_MAX_MB`` and ``ALLOWED_UPLOAD_TYPES``.
"""
from __future__ import annotations

import logging
import posixpath
from typing import Optional

from django.conf import settings
from django.core.exceptions import SuspiciousFileOperation
from django.core.files.storage import Storage, default_storage

from care.exceptions import StorageError

logger = logging.getLogger(__name__)


class FileStorage:
    def __init__(self, storage: Optional[Storage] = None):
        self.storage = storage or default_storage

    def _check_file(self, file) -> None:
        size_mb = (getattr(file, 'size', 0) or 0) / (1024 * 1024)
        if size_mb > settings.UPLOAD_MAX_MB:
            raise ValueError('Datei ist zu groß')
        ctype = getattr(file, 'content_type', '') or ''
        if not any(ctype.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES):
            raise ValueError('Dateityp wird nicht unterstützt')

    def _object_name(self, bucket: str, path: str) -> str:
        if bucket not in settings.UPLOAD_BUCKETS:
            raise ValueError(f'Unbekannter Speicherbereich: {bucket}')
        clean = posixpath.normpath((path or '').lstrip('/'))
        if clean in ('', '.') or clean.startswith('..'):
            raise ValueError('Ungültiger Dateipfad')
        return f"{bucket}/{clean}"

    def upload(self, bucket: str, path: str, file) -> str:
        """Store ``file`` at ``bucket/path`` and return its public URL.

        Raises ``ValueError`` for rejected input and
        :class:`~care.exceptions.StorageError` when the backend fails.
        """
        name = self._object_name(bucket, path)
        self._check_file(file)
        try:
            if self.storage.exists(name):
                self.storage.delete(name)
            saved = self.storage.save(name, file)
            url = self.storage.url(saved)
        except SuspiciousFileOperation as exc:
            raise ValueError('Ungültiger Dateipfad') from exc
        except OSError as exc:
            logger.error("upload to %s failed: %s", name, exc)
            raise StorageError(f'Hochladen fehlgeschlagen: {exc}') from exc
        logger.info("uploaded %s (%s bytes)", saved, getattr(file, 'size', '?'))
        return url
