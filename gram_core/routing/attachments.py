"""附件编码：把用户选择的文件转换为可内联传输的 base64 负载。

整个负载在返回前一次性读完，不做流式读取。
"""

import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

from gram_core.domain.exceptions import EncodingError
from gram_core.domain.models import ContentPart, InlineData


AttachmentSource = Union[bytes, bytearray, str, Path, BinaryIO]


@dataclass
class Attachment:
    """用户选择的文件。

    - source: 原始字节、文件路径或二进制文件对象。
    - mime_type: 声明的媒体类型；为空时按文件名推断。
    - filename: 可选文件名，仅用于推断媒体类型与日志。
    """

    source: AttachmentSource
    mime_type: Optional[str] = None
    filename: Optional[str] = None


def _read_payload(source: AttachmentSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    data = source.read()
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("attachment stream must be opened in binary mode")
    return bytes(data)


def _resolve_mime_type(attachment: Attachment) -> str:
    if attachment.mime_type:
        return attachment.mime_type.strip().lower()
    name = attachment.filename
    if not name and isinstance(attachment.source, (str, Path)):
        name = str(attachment.source)
    if not name:
        name = getattr(attachment.source, "name", None)
    if isinstance(name, str) and name:
        guessed, _ = mimetypes.guess_type(name)
        return (guessed or "").lower()
    return ""


def encode_attachment(attachment: Attachment) -> InlineData:
    """读取整个附件并编码为 InlineData。

    Raises:
        EncodingError: 读取失败、内容为空、缺少媒体类型或不是图片。
    """

    mime_type = _resolve_mime_type(attachment)
    if not mime_type:
        raise EncodingError(detail="attachment has no media type")
    if not mime_type.startswith("image/"):
        raise EncodingError(detail=f"unsupported attachment type: {mime_type}")
    try:
        payload = _read_payload(attachment.source)
    except (OSError, TypeError, ValueError) as e:
        raise EncodingError(detail=str(e))
    if not payload:
        raise EncodingError(detail="attachment is empty")
    return InlineData(data=base64.b64encode(payload).decode("ascii"), mime_type=mime_type)


def attachment_part(attachment: Attachment) -> ContentPart:
    return ContentPart(inline_data=encode_attachment(attachment))
