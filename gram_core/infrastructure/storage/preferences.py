import json
from pathlib import Path
from typing import Any, Dict, Optional

from gram_core.config.settings import settings
from gram_core.domain.exceptions import BusinessError


class JsonPreferenceStore:
    """本地唯一的持久化键值槽位，目前只保存主题偏好。

    会话记录和附件都不落盘。
    """

    def __init__(self, root: str | Path | None = None):
        self._root = Path(root or settings.storage_root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._path = self._root / "preferences.json"

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else default

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        tmp_path = self._path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            raise BusinessError(code="STORE_WRITE_ERROR", message=str(e))

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise BusinessError(code="STORE_READ_ERROR", message=str(e))
        return data if isinstance(data, dict) else {}
