"""模型策略解析模块。

根据原始模型名推导：后端实际模型名、是否启用思考（thinking）、思考片段是否需要 thought 标记。
所有函数均为无状态纯函数。
"""

import logging
from typing import Dict, NamedTuple, Optional

from .models import ModelFamily, ModelPolicy, TranslatorConfig

logger = logging.getLogger(__name__)

THINKING_SUFFIX = "-thinking"


class FamilyPolicy(NamedTuple):
    # 是否接受 {"thought": true} 标记
    accepts_thought_marker: bool
    # 思考模式下是否接受 topP
    top_p_with_thinking: bool


# 新增后端模型家族只需在此处登记
FAMILY_POLICIES: Dict[ModelFamily, FamilyPolicy] = {
    ModelFamily.GEMINI: FamilyPolicy(accepts_thought_marker=True, top_p_with_thinking=True),
    ModelFamily.CLAUDE: FamilyPolicy(accepts_thought_marker=False, top_p_with_thinking=False),
    ModelFamily.OTHER: FamilyPolicy(accepts_thought_marker=False, top_p_with_thinking=True),
}

_DEFAULT_CONFIG = TranslatorConfig()


def map_model_name(model_id: str, config: Optional[TranslatorConfig] = None) -> str:
    """将客户端模型别名映射为后端模型名（精确匹配，未登记的原样返回）。"""
    aliases = (config or _DEFAULT_CONFIG).model_aliases
    return aliases.get(model_id, model_id)


def is_thinking_enabled(model_id: str, config: Optional[TranslatorConfig] = None) -> bool:
    """判断原始模型名是否默认启用思考。"""
    cfg = config or _DEFAULT_CONFIG
    if model_id.endswith(THINKING_SUFFIX):
        return True
    if model_id in cfg.thinking_models:
        return True
    return any(model_id.startswith(prefix) for prefix in cfg.thinking_model_prefixes)


def detect_family(canonical_name: str) -> ModelFamily:
    if canonical_name.startswith("gemini-"):
        return ModelFamily.GEMINI
    if "claude" in canonical_name:
        return ModelFamily.CLAUDE
    return ModelFamily.OTHER


def family_policy(family: ModelFamily) -> FamilyPolicy:
    return FAMILY_POLICIES[family]


def resolve_policy(model_id: str, config: Optional[TranslatorConfig] = None) -> ModelPolicy:
    """解析单次请求的模型策略。

    thinking 基于原始模型名判断，家族与 thought 标记基于映射后的模型名判断。
    未知模型按非思考模型处理，名称保持不变。
    """
    model_id = model_id or ""
    canonical_name = map_model_name(model_id, config)
    thinking_enabled = is_thinking_enabled(model_id, config)
    family = detect_family(canonical_name)
    mark_thoughts = thinking_enabled and family_policy(family).accepts_thought_marker

    logger.debug(
        "Resolved model policy: %s -> %s (family=%s, thinking=%s, mark_thoughts=%s)",
        model_id,
        canonical_name,
        family.value,
        thinking_enabled,
        mark_thoughts,
    )
    return ModelPolicy(
        model_id=model_id,
        canonical_name=canonical_name,
        family=family,
        thinking_enabled=thinking_enabled,
        mark_thoughts=mark_thoughts,
    )
