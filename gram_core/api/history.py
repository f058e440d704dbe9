"""历史记录视图与导出文件命名。

把会话日志按 (user, model) 配对为 HistoryItem，供历史页面渲染；
图片下载与 PDF 渲染由外部完成，这里只提供文件名与原始字节。
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Iterable, List, Optional

from gram_core.domain.exceptions import EncodingError
from gram_core.domain.models import ContentPart, InlineData, Turn


@dataclass(frozen=True)
class HistoryItem:
    prompt: str
    response_text: str
    generated_image: Optional[InlineData] = None
    user_image: Optional[InlineData] = None


@dataclass(frozen=True)
class ExportFile:
    filename: str
    data: bytes
    mime_type: str


def build_history(turns: Iterable[Turn]) -> List[HistoryItem]:
    items: List[HistoryItem] = []
    pending: Optional[Turn] = None
    for turn in turns:
        if turn.role == "user":
            pending = turn
            continue
        if pending is None:
            continue
        user_images = pending.images
        model_images = turn.images
        items.append(
            HistoryItem(
                prompt=pending.text,
                response_text=turn.text,
                generated_image=model_images[0] if model_images else None,
                user_image=user_images[0] if user_images else None,
            )
        )
        pending = None
    return items


def extension_for(mime_type: str) -> str:
    """由媒体类型推断扩展名，如 image/jpeg -> jpeg，缺失时为 png。"""

    subtype = (mime_type or "").split("/", 1)[1] if "/" in (mime_type or "") else ""
    subtype = subtype.split(";", 1)[0].split("+", 1)[0].strip()
    return subtype or "png"


def export_image(part: ContentPart, prefix: str = "gram-gpt-image", index: Optional[int] = None) -> ExportFile:
    if part.inline_data is None:
        raise ValueError("only inline-data parts can be exported as images")
    inline = part.inline_data
    try:
        data = base64.b64decode(inline.data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(detail=f"invalid base64 payload: {e}")
    stem = prefix if index is None else f"{prefix}-{index}"
    return ExportFile(filename=f"{stem}.{extension_for(inline.mime_type)}", data=data, mime_type=inline.mime_type)


def history_pdf_filename(index: int) -> str:
    return f"gram-gpt-history-{index + 1}.pdf"
