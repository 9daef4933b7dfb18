"""格式转换模块。

将 OpenAI chat-completion 请求转换为 Antigravity 请求体：
消息 → contents、tools → functionDeclarations、采样参数 → generationConfig。
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Set

from . import content_utils as cu
from .model_policy import family_policy, resolve_policy
from .models import AntigravityToken, ModelPolicy, TranslatorConfig
from .utils import generate_request_id

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_MODEL = "model"

DEFAULT_TOOL_THOUGHT = "I will use the tool to process this request."
STOP_SEQUENCES = [
    "<|user|>",
    "<|bot|>",
    "<|context_request|>",
    "<|endoftext|>",
    "<|end_of_turn|>",
]
FUNCTION_CALLING_MODE = "VALIDATED"
USER_AGENT = "antigravity"


class _TranscodeState:
    """单次转换的可变状态，不跨请求保留。"""

    def __init__(self, policy: ModelPolicy):
        self.policy = policy
        self.turns: List[dict] = []
        # tool_call_id → function name，后出现的覆盖先出现的
        self.call_names: Dict[str, str] = {}
        # 含可见文本的 model turn 下标
        self.text_turns: Set[int] = set()

    @property
    def last_turn(self) -> Optional[dict]:
        return self.turns[-1] if self.turns else None

    def append(self, role: str, parts: List[dict], has_text: bool = False) -> dict:
        turn = {"role": role, "parts": parts}
        self.turns.append(turn)
        if has_text:
            self.text_turns.add(len(self.turns) - 1)
        return turn


class AntigravityConverter:
    """OpenAI → Antigravity 请求转换器。"""

    def __init__(self, config: Optional[TranslatorConfig] = None):
        self.config = config or TranslatorConfig()

    # ------------------------------------------------------------------
    # 消息级转换
    # ------------------------------------------------------------------

    def openai_messages_to_antigravity(self, messages: Any, policy: ModelPolicy) -> List[dict]:
        """按顺序将 OpenAI 消息列表转换为 Antigravity contents。"""
        state = _TranscodeState(policy)
        for msg in cu.safe_list(messages):
            if not isinstance(msg, dict):
                continue
            role = msg.get("role")
            if role in ("system", "user"):
                self._handle_user_message(msg, state)
            elif role == "assistant":
                self._handle_assistant_message(msg, state)
            elif role == "tool":
                self._handle_tool_message(msg, state)
            else:
                logger.debug("Skipping message with unsupported role: %s", role)

        for turn in state.turns:
            turn["parts"] = cu.sanitize_parts(turn["parts"], policy)
        return state.turns

    @staticmethod
    def _handle_user_message(msg: dict, state: _TranscodeState):
        extracted = cu.normalize_content(msg.get("content"), state.policy, allow_thoughts=False)
        state.append(ROLE_USER, [{"text": extracted.text}, *extracted.images])

    def _handle_assistant_message(self, msg: dict, state: _TranscodeState):
        policy = state.policy
        extracted = cu.normalize_content(msg.get("content"), policy)
        has_text = extracted.text.strip() != ""
        function_calls = self._build_function_calls(msg, state)
        has_tool_calls = bool(function_calls)

        reasoning_parts: List[dict] = []
        if policy.thinking_enabled and extracted.thought_text:
            reasoning_parts.append(cu.build_reasoning_part(extracted.thought_text, policy))

        last = state.last_turn
        if (
            last is not None
            and last["role"] == ROLE_MODEL
            and len(state.turns) - 1 not in state.text_turns
            and has_tool_calls
            and not has_text
        ):
            # 把工具调用并入前一个思考 turn
            if not reasoning_parts and policy.thinking_enabled:
                reasoning_parts.append(cu.build_reasoning_part(DEFAULT_TOOL_THOUGHT, policy))
            last["parts"].extend(reasoning_parts)
            last["parts"].extend(function_calls)
            return

        parts: List[dict] = list(reasoning_parts)
        if has_tool_calls and not has_text and not parts and policy.thinking_enabled:
            # 思考模式下后端拒绝没有前导内容的工具调用 turn
            parts.append(cu.build_reasoning_part(DEFAULT_TOOL_THOUGHT, policy))
        if has_text:
            parts.append({"text": extracted.text.rstrip()})
        parts.extend(function_calls)
        state.append(ROLE_MODEL, parts, has_text=has_text)

    @staticmethod
    def _build_function_calls(msg: dict, state: _TranscodeState) -> List[dict]:
        function_calls = []
        for tool_call in cu.safe_list(msg.get("tool_calls")):
            if not isinstance(tool_call, dict):
                continue
            function = tool_call.get("function") or {}
            call_id = tool_call.get("id")
            name = function.get("name", "")
            part: Dict[str, Any] = {
                "functionCall": {
                    "id": call_id,
                    "name": name,
                    "args": {"query": function.get("arguments")},
                }
            }
            if state.policy.mark_thoughts:
                part["thought"] = True
            function_calls.append(part)
            if call_id is not None:
                state.call_names[call_id] = name
        return function_calls

    @staticmethod
    def _handle_tool_message(msg: dict, state: _TranscodeState):
        tool_call_id = msg.get("tool_call_id")
        function_name = state.call_names.get(tool_call_id, "") if tool_call_id is not None else ""
        if not function_name:
            logger.warning("No prior function call matches tool_call_id %s", tool_call_id)

        function_response = {
            "functionResponse": {
                "id": tool_call_id,
                "name": function_name,
                "response": {"output": msg.get("content")},
            }
        }

        last = state.last_turn
        if (
            last is not None
            and last["role"] == ROLE_USER
            and any(isinstance(p, dict) and "functionResponse" in p for p in last["parts"])
        ):
            last["parts"].append(function_response)
        else:
            state.append(ROLE_USER, [function_response])

    # ------------------------------------------------------------------
    # generationConfig
    # ------------------------------------------------------------------

    def build_generation_config(self, parameters: Optional[Mapping[str, Any]], policy: ModelPolicy) -> dict:
        """将采样参数映射为 generationConfig，缺省值取自配置。"""
        parameters = parameters or {}
        defaults = self.config.defaults

        def pick(key: str, default: Any) -> Any:
            value = parameters.get(key)
            return default if value is None else value

        generation_config = {
            "topP": pick("top_p", defaults.top_p),
            "topK": pick("top_k", defaults.top_k),
            "temperature": pick("temperature", defaults.temperature),
            "candidateCount": 1,
            "maxOutputTokens": pick("max_tokens", defaults.max_tokens),
            "stopSequences": list(STOP_SEQUENCES),
            "thinkingConfig": {
                "includeThoughts": policy.thinking_enabled,
                "thinkingBudget": defaults.thinking_budget if policy.thinking_enabled else 0,
            },
        }
        if policy.thinking_enabled and not family_policy(policy.family).top_p_with_thinking:
            del generation_config["topP"]
        return generation_config

    # ------------------------------------------------------------------
    # 请求组装
    # ------------------------------------------------------------------

    def generate_request_body(
        self,
        messages: Any,
        model_name: str,
        parameters: Optional[Mapping[str, Any]],
        tools: Optional[List[dict]],
        token: Any,
    ) -> dict:
        """组装完整的 Antigravity 请求体。

        token 需提供 projectId / sessionId（映射或对象属性均可），
        缺失时抛出 pydantic.ValidationError。
        """
        routing = AntigravityToken.model_validate(token, from_attributes=True)
        policy = resolve_policy(model_name, self.config)

        body = {
            "project": routing.project_id,
            "requestId": generate_request_id(),
            "request": {
                "contents": self.openai_messages_to_antigravity(messages, policy),
                "systemInstruction": {
                    "role": ROLE_USER,
                    "parts": [{"text": self.config.system_instruction}],
                },
                "tools": cu.openai_tools_to_antigravity_tools(tools),
                "toolConfig": {"functionCallingConfig": {"mode": FUNCTION_CALLING_MODE}},
                "generationConfig": self.build_generation_config(parameters, policy),
                "sessionId": routing.session_id,
            },
            "model": policy.canonical_name,
            "userAgent": USER_AGENT,
        }
        logger.debug(
            "Built request %s for model %s with %s contents",
            body["requestId"],
            policy.canonical_name,
            len(body["request"]["contents"]),
        )
        return body


_default_converter = AntigravityConverter()


def generate_request_body(
    messages: Any,
    model_name: str,
    parameters: Optional[Mapping[str, Any]] = None,
    tools: Optional[List[dict]] = None,
    token: Any = None,
) -> dict:
    """使用默认配置组装请求体。"""
    return _default_converter.generate_request_body(messages, model_name, parameters, tools, token)
