import logging
import os
import uuid
from typing import Iterable, List, Optional, Tuple

from werkzeug.utils import secure_filename

from puzzlesync.errors import AssetStorageError

logger = logging.getLogger(__name__)


class AssetStore:
    """Puzzle images on local disk, served back under ``url_prefix``.

    The session only ever sees the URL returned by ``save`` and calls
    ``delete_all`` on reset. A file that cannot be removed is logged and
    reported in the return value, never raised.
    """

    def __init__(self, folder: str, url_prefix: str = '/uploads',
                 allowed_extensions: Optional[Iterable[str]] = None):
        self.folder = folder
        self.url_prefix = url_prefix.rstrip('/')
        self.allowed_extensions = {e.lower().lstrip('.') for e in (allowed_extensions or ())}

    def url_for(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    def is_allowed(self, filename: str) -> bool:
        if not self.allowed_extensions:
            return True
        ext = os.path.splitext(filename or '')[1].lower().lstrip('.')
        return ext in self.allowed_extensions

    def save(self, file_storage) -> Tuple[str, str]:
        """Store an uploaded werkzeug FileStorage; returns (filename, url)."""
        original = secure_filename(file_storage.filename or '')
        if not original:
            raise AssetStorageError('upload has no usable filename')
        if not self.is_allowed(original):
            raise AssetStorageError(f'file type not allowed: {original}')
        ext = os.path.splitext(original)[1].lower()
        filename = f"{uuid.uuid4().hex}{ext}"
        try:
            os.makedirs(self.folder, exist_ok=True)
            file_storage.save(os.path.join(self.folder, filename))
        except OSError as exc:
            logger.warning(f"[asset-save-failed] file={original} error={exc}")
            raise AssetStorageError(f'could not store {original}') from exc
        logger.info(f"[asset-saved] file={filename} original={original}")
        return filename, self.url_for(filename)

    def path_for(self, filename: str) -> Optional[str]:
        safe = secure_filename(filename or '')
        if not safe or safe != filename:
            return None
        return os.path.join(self.folder, safe)

    def list_files(self) -> List[str]:
        if not os.path.isdir(self.folder):
            return []
        try:
            names = os.listdir(self.folder)
        except OSError as exc:
            logger.warning(f"[asset-list-failed] folder={self.folder} error={exc}")
            return []
        return sorted(name for name in names if os.path.isfile(os.path.join(self.folder, name)))

    def delete_all(self) -> List[str]:
        """Remove every stored file; returns the names that could not be removed."""
        failures = []
        for name in self.list_files():
            try:
                os.remove(os.path.join(self.folder, name))
            except OSError as exc:
                failures.append(name)
                logger.warning(f"[asset-delete-failed] file={name} error={exc}")
        if failures:
            logger.warning(f"[asset-delete] {len(failures)} file(s) left behind")
        return failures
