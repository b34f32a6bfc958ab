import io

import olefile

from office2pdf.exceptions import FileEncryptedError

# Password-protected OOXML files are OLE2 compound files wrapping the package
_ENCRYPTION_STREAMS = ("EncryptionInfo", "EncryptedPackage")


def is_ooxml_encrypted(file_like: io.BytesIO) -> bool:
    file_like.seek(0)
    if not olefile.isOleFile(file_like):
        file_like.seek(0)
        return False

    file_like.seek(0)
    with olefile.OleFileIO(file_like) as ole:
        encrypted = any(ole.exists(stream) for stream in _ENCRYPTION_STREAMS)
    file_like.seek(0)
    return encrypted


def ensure_not_encrypted(file_like: io.BytesIO, kind: str) -> None:
    """Raise FileEncryptedError for a password-protected package."""
    if is_ooxml_encrypted(file_like):
        raise FileEncryptedError(f"{kind} file is encrypted or password-protected")
