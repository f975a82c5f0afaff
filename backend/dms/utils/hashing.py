"""SHA-256 digests recorded for stored document files."""
import hashlib
from pathlib import Path

READ_CHUNK_BYTES = 64 * 1024


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_file(file_path: Path) -> str:
    """Digest a stored file without loading it whole; used to re-verify uploads."""
    digest = hashlib.sha256()
    with file_path.open("rb") as fh:
        while True:
            chunk = fh.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()
