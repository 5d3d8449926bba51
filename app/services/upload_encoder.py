"""Turn an in-memory upload into a base64 data URI for the remote media host."""

import base64
from dataclasses import dataclass

from starlette.datastructures import UploadFile

from app.core.errors import InvalidFileError


@dataclass(frozen=True)
class UploadedFile:
    """A multipart file part read fully into memory."""

    filename: str
    content_type: str
    content: bytes


@dataclass(frozen=True)
class EncodedUpload:
    """Self-contained representation of an upload: data URI plus file extension."""

    data_uri: str
    ext: str


def encode_upload(file: UploadedFile | None) -> EncodedUpload:
    """
    Encode file as data:<content_type>;base64,<payload>.

    Raises InvalidFileError if the file is missing or has no filename or content.
    No size or media-type restrictions are applied.
    """
    if file is None:
        raise InvalidFileError("No file provided")
    if not file.filename or not file.content:
        raise InvalidFileError("Invalid file object")

    ext = file.filename.rsplit(".", 1)[-1]
    payload = base64.b64encode(file.content).decode("ascii")
    return EncodedUpload(data_uri=f"data:{file.content_type};base64,{payload}", ext=ext)


async def read_upload(upload: UploadFile | None) -> UploadedFile | None:
    """Read a Starlette upload into memory. A part without a filename counts as no file."""
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return UploadedFile(
        filename=upload.filename,
        content_type=upload.content_type or "application/octet-stream",
        content=content,
    )
