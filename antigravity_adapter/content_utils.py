"""内容转换工具函数模块。

提供 OpenAI content → Antigravity parts 的纯函数转换：文本/图片/思考内容的提取、
思考片段的统一表示，以及工具定义转换。
所有函数均为无状态纯函数，不修改传入的对象。
"""

import logging
import re
from copy import deepcopy
from typing import Any, Dict, List, Optional, Tuple

from .models import ModelPolicy, NormalizedContent

logger = logging.getLogger(__name__)

REASONING_PART_TYPES = ("thinking", "reasoning")
TOOL_PAYLOAD_KEYS = ("functionCall", "functionResponse")

_IMAGE_DATA_URL_RE = re.compile(r"^data:image/(\w+);base64,(.+)$", re.DOTALL)


# ---------------------------------------------------------------------------
# 通用工具
# ---------------------------------------------------------------------------

def safe_list(value: Any) -> List[Any]:
    """安全地将值转换为列表，如果不是列表则返回空列表。"""
    return value if isinstance(value, list) else []


# ---------------------------------------------------------------------------
# data: URL 解析
# ---------------------------------------------------------------------------

def parse_image_data_url(value: Any) -> Optional[Tuple[str, str]]:
    """解析 data:image/{format};base64,{data}，返回 (mime_type, base64_data)。"""
    if not isinstance(value, str):
        return None
    match = _IMAGE_DATA_URL_RE.match(value)
    if not match:
        return None
    return f"image/{match.group(1)}", match.group(2)


def _image_url_of(part: dict) -> Any:
    image_url = part.get("image_url")
    if isinstance(image_url, dict):
        return image_url.get("url", "")
    return image_url


# ---------------------------------------------------------------------------
# 思考内容
# ---------------------------------------------------------------------------

def extract_reasoning_text(obj: Any) -> Optional[str]:
    """提取思考内容；不是思考结构时返回 None。

    支持 {"thinking": {"content"|"text": ...}}、{"thinking": "..."}
    以及 {"type": "thinking"|"reasoning", "content"|"text": ...}。
    """
    if not isinstance(obj, dict):
        return None
    thinking = obj.get("thinking")
    if isinstance(thinking, dict):
        return _first_text(thinking.get("content"), thinking.get("text"))
    if isinstance(thinking, str):
        return thinking
    if obj.get("type") in REASONING_PART_TYPES:
        return _first_text(obj.get("content"), obj.get("text"))
    return None


def _first_text(*candidates: Any) -> str:
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return ""


def build_reasoning_part(text: str, policy: ModelPolicy) -> Dict[str, Any]:
    """按模型策略生成思考片段：需要标记时带 thought，否则退化为普通文本。"""
    if policy.mark_thoughts:
        return {"text": text, "thought": True}
    return {"text": text}


def sanitize_parts(value: Any, policy: ModelPolicy) -> Any:
    """深度消毒：把任意层级残留的思考结构统一转换为目标格式。

    functionCall / functionResponse 的载荷是工具数据，原样保留。
    """
    if isinstance(value, list):
        return [sanitize_parts(item, policy) for item in value]
    if isinstance(value, dict):
        reasoning = extract_reasoning_text(value)
        if reasoning is not None:
            return build_reasoning_part(reasoning, policy)
        return {
            key: item if key in TOOL_PAYLOAD_KEYS else sanitize_parts(item, policy)
            for key, item in value.items()
        }
    return value


# ---------------------------------------------------------------------------
# 内容提取
# ---------------------------------------------------------------------------

def normalize_content(content: Any, policy: ModelPolicy, allow_thoughts: bool = True) -> NormalizedContent:
    """将 OpenAI content 拆分为文本、图片和思考内容。

    思考内容在不能以 thought 形式发送时（未启用思考或 allow_thoughts=False）
    按原位置并入文本，不会被丢弃。
    """
    if content is None:
        return NormalizedContent()
    if isinstance(content, str):
        return NormalizedContent(text=content)
    if isinstance(content, dict):
        content = [content]
    if not isinstance(content, list):
        return NormalizedContent(text=str(content))

    keep_thoughts = allow_thoughts and policy.thinking_enabled
    text_chunks: List[str] = []
    thought_chunks: List[str] = []
    images: List[Dict[str, Any]] = []
    for part in content:
        if not isinstance(part, dict):
            continue
        reasoning = extract_reasoning_text(part)
        if reasoning is not None:
            thought_chunks.append(reasoning)
            if not keep_thoughts:
                text_chunks.append(reasoning)
            continue
        p_type = part.get("type")
        if p_type == "image_url":
            parsed = parse_image_data_url(_image_url_of(part))
            if parsed:
                mime_type, data = parsed
                images.append({"inlineData": {"mimeType": mime_type, "data": data}})
            else:
                logger.debug("Dropped image part with unsupported url")
        elif isinstance(part.get("text"), str):
            text_chunks.append(part["text"])

    return NormalizedContent(
        text="".join(text_chunks),
        images=images,
        thought_text="".join(thought_chunks) if thought_chunks else None,
    )


# ---------------------------------------------------------------------------
# 工具定义转换
# ---------------------------------------------------------------------------

def openai_tools_to_antigravity_tools(tools: Optional[List[dict]]) -> List[dict]:
    """将 OpenAI tools 转换为 Antigravity tools，每个声明单独包一层 functionDeclarations。"""
    result = []
    for tool in safe_list(tools):
        if not isinstance(tool, dict) or not isinstance(tool.get("function"), dict):
            continue
        fn = tool["function"]
        parameters = fn.get("parameters")
        if isinstance(parameters, dict):
            parameters = deepcopy(parameters)
            parameters.pop("$schema", None)
        else:
            parameters = {"type": "object", "properties": {}}
        result.append({
            "functionDeclarations": [
                {
                    "name": fn.get("name"),
                    "description": fn.get("description"),
                    "parameters": parameters,
                }
            ]
        })
    return result
