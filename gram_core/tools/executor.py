from typing import Callable, Dict, Any, List
import json

from .definitions import ToolCall, ToolResult, ToolDef, ToolParam


ToolFunc = Callable[[Dict[str, Any]], str]

WEATHER_TOOL_NAME = "getWeather"

# 示例数据，键为地名的匹配片段
WEATHER_DATA: Dict[str, Dict[str, str]] = {
    "ঢাকা": {"location": "ঢাকা", "temperature": "32°C", "condition": "বজ্রসহ বৃষ্টি", "humidity": "80%"},
    "chittagong": {"location": "চট্টগ্রাম", "temperature": "29°C", "condition": "মেঘলা আকাশ", "humidity": "85%"},
    "চট্টগ্রাম": {"location": "চট্টগ্রাম", "temperature": "29°C", "condition": "মেঘলা আকাশ", "humidity": "85%"},
    "rajshahi": {"location": "রাজশাহী", "temperature": "35°C", "condition": "রৌদ্রোজ্জ্বল", "humidity": "70%"},
    "রাজশাহী": {"location": "রাজশাহী", "temperature": "35°C", "condition": "রৌদ্রোজ্জ্বল", "humidity": "70%"},
}


class ToolExecutor:
    def __init__(self, tools: Dict[str, ToolFunc]):
        self._tools = tools
        self._cache: Dict[tuple, str] = {}

    def execute(self, call: ToolCall) -> ToolResult:
        key = (call.name, json.dumps(call.arguments, sort_keys=True, ensure_ascii=False))
        if key in self._cache:
            result = self._cache[key]
        else:
            func = self._tools.get(call.name)
            if not func:
                result = json.dumps({"error": f"Tool not registered: {call.name}"})
            else:
                result = func(call.arguments)
            self._cache[key] = result
        return ToolResult(call_id=call.id, name=call.name, content=result)


def lookup_weather(location: str) -> Dict[str, str]:
    """按地名查找天气记录，找不到时返回 unknown 记录。"""

    needle = (location or "").strip().lower()
    if needle:
        for key, record in WEATHER_DATA.items():
            if key.lower() in needle:
                return dict(record)
    return {"location": location, "temperature": "unknown", "condition": "ডেটা পাওয়া যায়নি"}


def _make_weather_tool() -> ToolFunc:
    def _run(args: Dict[str, Any]) -> str:
        location = str(args.get("location") or "")
        return json.dumps(lookup_weather(location), ensure_ascii=False)

    return _run


def default_tools() -> Dict[str, ToolFunc]:
    return {WEATHER_TOOL_NAME: _make_weather_tool()}


def default_tool_defs() -> List[ToolDef]:
    return [
        ToolDef(
            name=WEATHER_TOOL_NAME,
            description="নির্দিষ্ট এলাকার বর্তমান আবহাওয়ার তথ্য প্রদান করে।",
            params={
                "location": ToolParam(
                    name="location",
                    description="যে এলাকার আবহাওয়ার তথ্য প্রয়োজন, যেমন: ঢাকা, চট্টগ্রাম।",
                    required=True,
                    schema={"type": "string"},
                ),
            },
        ),
    ]
