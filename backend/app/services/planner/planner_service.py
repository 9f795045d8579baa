# backend/app/services/planner/planner_service.py
"""
AI screening planner.

Builds a prompt from the user's taste and the edition's screenings, then runs
a chat-completions tool loop in which the model proposes a schedule through
``suggestScreenings``. Recommendations are checked against the catalog
before they reach the client.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.constants import BRAND_NAME
from app.core.exceptions import ServiceUnavailableException, ValidationException
from app.monitoring.prometheus_metrics import prometheus_metrics
from app.services.base import BaseService
from app.services.catalog.store import CatalogStore, get_catalog
from app.services.planner.context import get_screenings_context, get_user_taste_context
from app.services.planner.llm_schema import (
    SUGGEST_SCREENINGS_TOOL,
    SuggestScreeningsInput,
    suggest_screenings_tool,
)
from app.utils.formatting import hm, ymd

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
You are an expert film festival programmer and curator for '{brand}'.

[YOUR GOAL]
Recommend the best screening schedule for the user based on their taste and the available screenings.

[DATA CONTEXT]
1. User's Taste (High rated films):
{taste}

2. Available Screenings (Grouped by date):
{screenings}

[RULES]
1. Analyze User Taste (genres/directors/mood).
2. Match screenings accordingly.
3. Logistics:
   - Ensure at least a 30-minute gap between movies.
   - Do not schedule overlapping movies.
4. Quantity: roughly 2-3 per day, prioritize match quality.
5. Output: when you have a solid schedule, call the tool 'suggestScreenings'.
   - reason must be Korean and persuasive.
"""

ALLOWED_ROLES = ("user", "assistant")


@dataclass
class PlannerRequest:
    """A prepared conversation, ready to send to the model."""

    user_id: str
    edition_id: str
    dates: List[str]
    messages: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class PlannerResult:
    message: str
    recommendations: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "recommendations": self.recommendations}


def _sse(event: str, payload: Mapping[str, Any]) -> Dict[str, str]:
    return {"event": event, "data": json.dumps(payload, ensure_ascii=False)}


async def _read_until(stream: AsyncIterator[Any], deadline: float) -> AsyncIterator[Any]:
    """Yield stream chunks, raising ``asyncio.TimeoutError`` once ``deadline`` passes."""
    loop = asyncio.get_running_loop()
    iterator = stream.__aiter__()
    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise asyncio.TimeoutError
        try:
            chunk = await asyncio.wait_for(iterator.__anext__(), timeout=remaining)
        except StopAsyncIteration:
            return
        yield chunk


class PlannerService(BaseService):
    """
    Screening recommendations over OpenAI chat completions.

    Usage:
        service = PlannerService(db)
        request = service.build_request(user.id, messages, "edition_jiff_2025", ["2025-05-01"])
        result = await service.chat(request)
    """

    def __init__(
        self,
        db: Session,
        store: Optional[CatalogStore] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        super().__init__(db)
        self.store = store or get_catalog()
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy initialization of OpenAI client with strict timeouts."""
        if self._client is None:
            api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
            self._client = AsyncOpenAI(
                api_key=api_key,
                timeout=settings.openai_timeout_s,
                max_retries=max(0, settings.openai_max_retries),
            )
        return self._client

    # ── Request preparation ───────────────────────────────────────

    @BaseService.measure_operation("build_planner_request")
    def build_request(
        self,
        user_id: str,
        messages: Sequence[Mapping[str, Any]],
        edition_id: Optional[str],
        dates: Optional[Sequence[str]],
    ) -> PlannerRequest:
        """
        Load the prompt context and assemble the conversation.

        Raises:
            ValidationException: edition or dates missing
        """
        if not edition_id or not dates:
            raise ValidationException("Missing editionId or dates", code="MISSING_PLANNER_CONTEXT")

        date_list = [str(d) for d in dates]
        screenings = get_screenings_context(self.store, edition_id, date_list)
        taste = get_user_taste_context(self.db, self.store, user_id)
        system_prompt = SYSTEM_PROMPT.format(
            brand=BRAND_NAME,
            taste=json.dumps(taste, ensure_ascii=False),
            screenings=json.dumps(screenings, ensure_ascii=False),
        )

        conversation: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        for message in messages:
            role = message.get("role")
            content = message.get("content")
            if role in ALLOWED_ROLES and isinstance(content, str) and content.strip():
                conversation.append({"role": role, "content": content})

        self.log_operation(
            "build_planner_request",
            user_id=user_id,
            edition_id=edition_id,
            dates=len(date_list),
            taste=len(taste),
        )
        return PlannerRequest(
            user_id=user_id, edition_id=edition_id, dates=date_list, messages=conversation
        )

    # ── Tool execution ────────────────────────────────────────────

    def _run_tool(self, name: str, arguments: str) -> Dict[str, Any]:
        """Execute a tool call; ``suggestScreenings`` echoes its validated input."""
        if name != SUGGEST_SCREENINGS_TOOL:
            logger.warning(f"Planner model called unknown tool {name!r}")
            return {"error": f"unknown tool {name}"}
        try:
            parsed = SuggestScreeningsInput.model_validate_json(arguments or "{}")
        except ValidationError as e:
            logger.warning(f"Invalid suggestScreenings arguments: {e}")
            return {"error": "invalid arguments"}
        return parsed.model_dump(by_alias=True)

    def enrich_recommendations(self, raw: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Attach catalog details; unknown and repeated screening ids are dropped."""
        out: List[Dict[str, Any]] = []
        seen = set()
        for item in raw:
            screening_id = item.get("screeningId")
            if not screening_id or screening_id in seen:
                continue
            screening = self.store.screening(screening_id)
            if screening is None:
                continue
            entry = self.store.entry(screening.entry_id)
            film = self.store.film(entry.film_id) if entry else None
            seen.add(screening_id)
            out.append(
                {
                    "screening_id": screening_id,
                    "reason": item.get("reason") or "",
                    "film_id": entry.film_id if entry else None,
                    "title": film.display_title if film else None,
                    "date": ymd(screening.starts_at),
                    "time": hm(screening.starts_at),
                    "venue": screening.venue,
                }
            )
        return out

    @staticmethod
    def _assistant_turn(content: Optional[str], calls: List[Dict[str, str]]) -> Dict[str, Any]:
        return {
            "role": "assistant",
            "content": content or None,
            "tool_calls": [
                {
                    "id": call["id"],
                    "type": "function",
                    "function": {"name": call["name"], "arguments": call["arguments"]},
                }
                for call in calls
            ],
        }

    def _apply_tool_calls(
        self, conversation: List[Dict[str, Any]], content: Optional[str], calls: List[Dict[str, str]]
    ) -> List[Dict[str, Any]]:
        """Append the assistant turn and tool outputs; return suggested items."""
        conversation.append(self._assistant_turn(content, calls))
        suggested: List[Dict[str, Any]] = []
        for call in calls:
            output = self._run_tool(call["name"], call["arguments"])
            suggested.extend(output.get("recommendations", []))
            conversation.append(
                {
                    "role": "tool",
                    "tool_call_id": call["id"],
                    "content": json.dumps(output, ensure_ascii=False),
                }
            )
        return suggested

    # ── JSON mode ─────────────────────────────────────────────────

    async def _run_loop(self, request: PlannerRequest) -> PlannerResult:
        conversation = list(request.messages)
        texts: List[str] = []
        suggested: List[Dict[str, Any]] = []

        for _ in range(settings.planner_max_steps):
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=settings.openai_model,
                    messages=conversation,
                    tools=[suggest_screenings_tool()],
                ),
                timeout=settings.openai_timeout_s,
            )
            message = response.choices[0].message
            if message.content:
                texts.append(message.content)
            tool_calls = message.tool_calls or []
            if not tool_calls:
                break
            calls = [
                {"id": tc.id, "name": tc.function.name, "arguments": tc.function.arguments}
                for tc in tool_calls
            ]
            suggested.extend(self._apply_tool_calls(conversation, message.content, calls))

        return PlannerResult(
            message="\n".join(texts).strip(),
            recommendations=self.enrich_recommendations(suggested),
        )

    @BaseService.measure_operation("planner_chat")
    async def chat(self, request: PlannerRequest) -> PlannerResult:
        """
        Run the tool loop to completion.

        Each model round-trip gets ``openai_timeout_s``; the loop makes at most
        ``planner_max_steps`` of them.

        Raises:
            ServiceUnavailableException: the model timed out or the API failed
        """
        try:
            result = await self._run_loop(request)
        except asyncio.TimeoutError:
            logger.warning(f"Planner model call exceeded {settings.openai_timeout_s:.1f}s")
            prometheus_metrics.inc_planner_request("json", "timeout")
            raise ServiceUnavailableException("Planner timed out", code="PLANNER_TIMEOUT")
        except OpenAIError as e:
            logger.warning(f"OpenAI API error: {e}")
            prometheus_metrics.inc_planner_request("json", "error")
            raise ServiceUnavailableException("Planner is unavailable", code="PLANNER_UNAVAILABLE")

        prometheus_metrics.inc_planner_request("json", "success")
        return result

    # ── Streaming mode ────────────────────────────────────────────

    async def _stream_loop(self, request: PlannerRequest) -> AsyncIterator[Dict[str, str]]:
        conversation = list(request.messages)
        texts: List[str] = []
        suggested: List[Dict[str, Any]] = []

        loop = asyncio.get_running_loop()
        for _ in range(settings.planner_max_steps):
            deadline = loop.time() + settings.openai_timeout_s
            stream = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=settings.openai_model,
                    messages=conversation,
                    tools=[suggest_screenings_tool()],
                    stream=True,
                ),
                timeout=deadline - loop.time(),
            )

            content_parts: List[str] = []
            partial_calls: Dict[int, Dict[str, str]] = {}
            async for chunk in _read_until(stream, deadline):
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                if delta.content:
                    content_parts.append(delta.content)
                    yield _sse("text", {"delta": delta.content})
                for tc in delta.tool_calls or []:
                    slot = partial_calls.setdefault(tc.index, {"id": "", "name": "", "arguments": ""})
                    if tc.id:
                        slot["id"] = tc.id
                    if tc.function is not None:
                        slot["name"] += tc.function.name or ""
                        slot["arguments"] += tc.function.arguments or ""

            content = "".join(content_parts)
            if content:
                texts.append(content)
            if not partial_calls:
                break
            calls = [partial_calls[idx] for idx in sorted(partial_calls)]
            suggested.extend(self._apply_tool_calls(conversation, content, calls))

        recommendations = self.enrich_recommendations(suggested)
        if recommendations:
            yield _sse("recommendations", {"recommendations": recommendations})
        yield _sse("done", {"message": "\n".join(texts).strip()})

    async def stream_events(self, request: PlannerRequest) -> AsyncIterator[Dict[str, str]]:
        """
        Server-sent events for one planner turn.

        Events: ``text`` deltas, one ``recommendations`` event when the model
        suggested anything, then ``done``. Failures end the stream with ``error``.
        """
        status = "success"
        try:
            async for event in self._stream_loop(request):
                yield event
        except asyncio.TimeoutError:
            status = "timeout"
            logger.warning("Planner stream timed out")
            yield _sse("error", {"code": "PLANNER_TIMEOUT", "message": "Planner timed out"})
        except OpenAIError as e:
            status = "error"
            logger.warning(f"OpenAI API error during stream: {e}")
            yield _sse("error", {"code": "PLANNER_UNAVAILABLE", "message": "Planner is unavailable"})
        finally:
            prometheus_metrics.inc_planner_request("stream", status)
