"""
Admin AI chat: natural-language questions about the store answered by Claude

Claude decides which store data tools to call (products, orders, inbox,
discount codes, exports), the tools run against the services, and the loop
continues until Claude replies with text. Export requests come back as
actions the admin UI turns into downloads.
"""
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple

import anthropic

from gamestore.core.config import settings
from gamestore.domain.message import MESSAGE_CATEGORIES, MESSAGE_PRIORITIES, MESSAGE_STATUSES
from gamestore.domain.order import ORDER_STATUSES, PAYMENT_STATUSES
from gamestore.domain.product import PRODUCT_CATEGORIES
from gamestore.services.ai.admin_chat_tools import execute_tool, EXPORT_ROUTES

logger = logging.getLogger(__name__)

# Tool-use round trips allowed per question
MAX_TOOL_ROUNDS = 6

FALLBACK_REPLY = "لم أتمكن من إعداد إجابة. حاول إعادة صياغة سؤالك."


def estimate_tokens(text: str) -> int:
    """Rough estimate, about 4 characters per token"""
    return len(text) // 4


def limit_history(history: List[Dict[str, str]]) -> Tuple[List[Dict[str, str]], int]:
    """
    Trim conversation history to the configured message and token budgets.

    Keeps the newest messages, dropping the oldest first, but never fewer
    than two.

    Returns:
        (limited_history, estimated_tokens)
    """
    if not history:
        return [], 0

    max_messages = settings.ADMIN_CHAT_MAX_HISTORY_MESSAGES
    limited = history[-max_messages:] if len(history) > max_messages else list(history)

    total_tokens = sum(estimate_tokens(msg.get("content", "")) for msg in limited)
    while total_tokens > settings.ADMIN_CHAT_MAX_HISTORY_TOKENS and len(limited) > 2:
        removed = limited.pop(0)
        total_tokens -= estimate_tokens(removed.get("content", ""))

    if len(limited) < len(history):
        logger.info(f"Chat history trimmed: {len(history)} -> {len(limited)} messages (~{total_tokens} tokens)")

    return limited, total_tokens


def get_system_prompt() -> str:
    """System prompt with today's date so relative periods resolve correctly"""
    today = datetime.now().strftime("%Y-%m-%d")

    return f"""You are the back-office assistant of {settings.STORE_NAME}, an online gaming store in Kuwait.

Today is {today}. Use it for every relative period ("this week", "last month", "اليوم").

## Your role
Answer the store admins' questions about:
- Products: catalog search, stock levels, low stock alerts
- Orders: search, counts by status, revenue, best sellers
- Contact messages: unread and urgent messages, inbox statistics
- Discount codes: active, exhausted and unused codes, usage
- CSV exports of products, orders, messages or discount codes

Always use the tools for figures. Never invent numbers.

## Store reference
- Currency: KWD with 3 decimals (e.g. 19.990 KWD)
- Product categories: {", ".join(PRODUCT_CATEGORIES)}
- Order statuses: {", ".join(ORDER_STATUSES)}
- Payment statuses: {", ".join(PAYMENT_STATUSES)} (revenue counts paid orders only)
- Message statuses: {", ".join(MESSAGE_STATUSES)}
- Message priorities: {", ".join(MESSAGE_PRIORITIES)}

## Answer format
- Reply in the language of the question (Arabic or English)
- Be concise; use short lists or small tables for several items
- When an export is requested call export_data and tell the admin the download is ready
"""


def _tool(name: str, description: str, properties: Optional[Dict[str, Any]] = None,
          required: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "input_schema": {
            "type": "object",
            "properties": properties or {},
            "required": required or [],
        },
    }


DATE_PROPERTY = {"type": "string", "description": "Date as YYYY-MM-DD"}

TOOLS = [
    _tool(
        "get_store_overview",
        "Dashboard overview: product, order and message statistics, paid revenue, low stock, "
        "recent orders and discount code usage. Use it for general 'how is the store doing' questions.",
    ),
    _tool(
        "search_products",
        "Search products by Arabic/English title or SKU, optionally within a category. "
        "An empty query lists active products.",
        {
            "query": {"type": "string", "description": "Title or SKU fragment"},
            "category": {"type": "string", "enum": PRODUCT_CATEGORIES},
        },
    ),
    _tool("get_product_stats", "Product counts: total, active, inactive, draft, digital and per category."),
    _tool("get_low_stock_products", "Active products at or below the low stock threshold."),
    _tool(
        "search_orders",
        "Search orders by order number, customer name or e-mail, status, payment status and date range.",
        {
            "query": {"type": "string", "description": "Order number, customer name or e-mail"},
            "status": {"type": "string", "enum": ORDER_STATUSES},
            "payment_status": {"type": "string", "enum": PAYMENT_STATUSES},
            "date_from": DATE_PROPERTY,
            "date_to": DATE_PROPERTY,
        },
    ),
    _tool("get_order_stats", "Order counts per status, orders awaiting payment and total paid revenue."),
    _tool(
        "get_revenue",
        "Paid revenue, order count and average order value for a period. "
        "Defaults to the last 30 days.",
        {
            "date_from": DATE_PROPERTY,
            "date_to": DATE_PROPERTY,
            "days": {"type": "integer", "description": "Period length when no dates are given"},
        },
    ),
    _tool(
        "get_best_sellers",
        "Best selling products by units sold over the last N days.",
        {
            "days": {"type": "integer", "description": "Look-back period in days (default 30)"},
            "limit": {"type": "integer", "description": "Number of products (default 10)"},
        },
    ),
    _tool(
        "search_messages",
        "Search contact form messages by text, status, priority or category.",
        {
            "query": {"type": "string", "description": "Text in name, e-mail, subject or body"},
            "status": {"type": "string", "enum": MESSAGE_STATUSES},
            "priority": {"type": "string", "enum": MESSAGE_PRIORITIES},
            "category": {"type": "string", "enum": MESSAGE_CATEGORIES},
        },
    ),
    _tool("get_message_stats", "Message counts: total, unread, replied, high priority and urgent."),
    _tool(
        "get_discount_codes",
        "Discount codes with a usage summary (active, exhausted, most used).",
        {"state": {
            "type": "string",
            "enum": ["all", "active", "inactive", "available", "exhausted", "unused"],
        }},
    ),
    _tool(
        "export_data",
        "Prepare a CSV download of products, orders, messages or discount codes.",
        {
            "kind": {"type": "string", "enum": list(EXPORT_ROUTES)},
            "status": {"type": "string", "description": "Optional status filter for orders or messages"},
        },
        required=["kind"],
    ),
]


@dataclass
class ChatResult:
    """Result of one chat turn"""
    response: str
    tools_used: List[str]
    model: str
    input_tokens: int
    output_tokens: int
    actions: List[Dict[str, Any]] = field(default_factory=list)
    estimated_cost_usd: float = 0.0
    context_messages: int = 0

    def __post_init__(self):
        # Claude Haiku 4.5 pricing: $1/1M input, $5/1M output
        input_cost = (self.input_tokens / 1_000_000) * 1.0
        output_cost = (self.output_tokens / 1_000_000) * 5.0
        self.estimated_cost_usd = round(input_cost + output_cost, 6)


def _export_action(result: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(result)
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("action") == "export":
        return {"type": "export", "kind": data["kind"], "url": data["url"]}
    return None


class AdminChatService:
    """Answers admin questions with Claude tool use over store data"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        api_key = api_key or settings.ANTHROPIC_API_KEY
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY is not configured")

        self.client = anthropic.Anthropic(api_key=api_key, timeout=settings.AI_TIMEOUT_SECONDS * 2)
        self.model = model or settings.ADMIN_CHAT_MODEL
        logger.info(f"AdminChatService initialized with model: {self.model}")

    def _create(self, messages: List[Dict[str, Any]]):
        return self.client.messages.create(
            model=self.model,
            max_tokens=settings.ADMIN_CHAT_MAX_TOKENS,
            system=get_system_prompt(),
            tools=TOOLS,
            messages=messages,
        )

    def process_query(self, message: str, history: Optional[List[Dict[str, str]]] = None) -> ChatResult:
        """
        Answer one admin question.

        Args:
            message: The admin's question, Arabic or English
            history: Earlier turns as {"role": "user"|"assistant", "content": "..."}
        """
        tools_used: List[str] = []
        actions: List[Dict[str, Any]] = []
        input_tokens = output_tokens = 0

        limited, history_tokens = limit_history(history or [])
        messages: List[Dict[str, Any]] = [{"role": m["role"], "content": m["content"]} for m in limited]
        messages.append({"role": "user", "content": message})

        logger.info(
            f"Admin chat: {len(messages)} messages, ~{history_tokens + estimate_tokens(message)} tokens, "
            f"question: {message[:100]}"
        )

        response = self._create(messages)
        input_tokens += response.usage.input_tokens
        output_tokens += response.usage.output_tokens

        rounds = 0
        while response.stop_reason == "tool_use" and rounds < MAX_TOOL_ROUNDS:
            rounds += 1
            tool_results = []
            for block in response.content:
                if block.type != "tool_use":
                    continue

                logger.info(f"Executing chat tool: {block.name} with input: {block.input}")
                tools_used.append(block.name)
                result = execute_tool(block.name, block.input or {})

                action = _export_action(result)
                if action:
                    actions.append(action)

                tool_results.append({
                    "type": "tool_result",
                    "tool_use_id": block.id,
                    "content": result,
                })

            messages.append({"role": "assistant", "content": response.content})
            messages.append({"role": "user", "content": tool_results})

            response = self._create(messages)
            input_tokens += response.usage.input_tokens
            output_tokens += response.usage.output_tokens

        if response.stop_reason == "tool_use":
            logger.warning(f"Admin chat stopped after {MAX_TOOL_ROUNDS} tool rounds")

        text = "".join(block.text for block in response.content if block.type == "text").strip()

        logger.info(f"Admin chat done. Tools used: {tools_used}, tokens: {input_tokens}/{output_tokens}")

        return ChatResult(
            response=text or FALLBACK_REPLY,
            tools_used=tools_used,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            actions=actions,
            context_messages=len(messages),
        )


_service_instance: Optional[AdminChatService] = None


def get_admin_chat_service() -> AdminChatService:
    """
    Shared service instance.

    Raises:
        ValueError: no Anthropic API key is configured
    """
    global _service_instance
    if _service_instance is None:
        _service_instance = AdminChatService()
    return _service_instance
