from pathlib import Path
from dms.config import settings


def ensure_data_dirs(data_path: Path | None = None) -> Path:
    path = data_path or settings.data_path
    path.mkdir(parents=True, exist_ok=True)
    (path / "files").mkdir(exist_ok=True)
    return path


def ensure_document_dir(document_id: str, data_path: Path | None = None) -> Path:
    path = data_path or settings.data_path
    doc_dir = path / "files" / document_id
    doc_dir.mkdir(parents=True, exist_ok=True)
    return doc_dir


def sanitize_filename(name: str) -> str:
    keep = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-")
    return "".join(c if c in keep else "_" for c in name)
