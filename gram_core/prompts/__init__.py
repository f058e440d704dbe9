"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取对应的 system instruction
文本，用于构造对话请求的 system_instruction。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent

_PROMPT_FILES = {
    "gram-gpt": "gram_gpt_system.md",
    "gram-gpt-tools": "gram_gpt_tools_system.md",
}


def load_system_prompt(agent_type: str = "gram-gpt", locale: str = "bn") -> str:
    """根据 Agent 类型和语言加载系统提示词文本。

    agent_type 为 "gram-gpt"（普通对话）或 "gram-gpt-tools"
    （附带 getWeather 函数声明的变体）。
    """

    try:
        fname = PROMPTS_DIR / locale / _PROMPT_FILES[agent_type]
    except KeyError:
        raise KeyError(f"Unknown agent type: {agent_type!r}") from None
    return fname.read_text(encoding="utf-8").strip()
