import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .. import configs
from ..errors import AIProviderError

logger = logging.getLogger(__name__)

SMART_REPLY_FALLBACK = ["Hey there!", "How's it going?", "Good to see you!"]
STARTERS_FALLBACK = ["What's new with you?", "Any plans for the weekend?", "What made you smile today?"]
CAPTION_FALLBACK = ["Sharing a little moment from my day ✨"]
SUMMARY_EMPTY = "No summary available."
SUMMARY_FAILED = "Could not generate summary."
ADVICE_EMPTY = "Have a wonderful day!"
ADVICE_FAILED = "Enjoy your day and stay positive! ✨"
ASSISTANT_EMPTY = "I'm sorry, I couldn't process that. Could you try again?"
ASSISTANT_FAILED = "Oops! I'm having trouble connecting right now."

ASSISTANT_INSTRUCTION = (
    "You are the helpful AI assistant for 'Saad Social Chat', a modern real-time social networking app. "
    "Help users navigate the app, suggest conversation starters, or just chat. "
    "Be friendly, concise, and use emojis."
)

STRING_ARRAY_SCHEMA = {"type": "ARRAY", "items": {"type": "STRING"}}


class GeminiClient:
    """Gọi endpoint generateContent của Gemini qua HTTP; mọi lỗi được gói thành AIProviderError."""

    def __init__(self, api_key: Optional[str] = None, endpoint: Optional[str] = None,
                 timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._api_key = api_key if api_key is not None else configs.GEMINI_API_KEY
        self._endpoint = (endpoint or configs.GEMINI_ENDPOINT).rstrip("/")
        self._timeout = timeout or configs.HTTP_TIMEOUT
        self._transport = transport

    async def generate(
        self,
        model: str,
        contents: List[Dict[str, Any]],
        system_instruction: Optional[str] = None,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        if not self._api_key:
            raise AIProviderError("GEMINI_API_KEY is not configured")

        payload: Dict[str, Any] = {"contents": contents}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if response_schema:
            payload["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }

        url = f"{self._endpoint}/models/{model}:generateContent"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, params={"key": self._api_key})
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("Gemini timeout | model=%s timeout=%s", model, self._timeout)
            raise AIProviderError("Gemini request timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error("Gemini HTTP status error | model=%s status=%s", model, exc.response.status_code)
            raise AIProviderError("Gemini request failed") from exc
        except httpx.HTTPError as exc:
            logger.error("Gemini transport error | model=%s error=%s", model, type(exc).__name__)
            raise AIProviderError("Gemini request failed") from exc

        try:
            data = response.json()
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            raise AIProviderError("Invalid Gemini response format") from exc


def user_turn(text: str) -> Dict[str, Any]:
    return {"role": "user", "parts": [{"text": text}]}


def inline_image_part(image: str) -> Dict[str, Any]:
    """Tách data URL thành phần inlineData mà Gemini yêu cầu."""
    header, _, data = image.partition(",")
    mime_type = "image/jpeg"
    if header.startswith("data:") and ";" in header:
        mime_type = header[5:header.index(";")] or mime_type
    return {"inlineData": {"mimeType": mime_type, "data": data or header}}


class AdvisoryService:
    """
    Các lời gọi AI không trạng thái. Không bao giờ ném lỗi ra ngoài: mọi thất bại
    (mạng, JSON hỏng, sai định dạng, văn bản rỗng) đều trả về chuỗi dự phòng cố định.
    """

    def __init__(self, client: Optional[GeminiClient] = None, model: Optional[str] = None,
                 chat_model: Optional[str] = None):
        self.client = client or GeminiClient()
        self.model = model or configs.GEMINI_MODEL
        self.chat_model = chat_model or configs.GEMINI_CHAT_MODEL

    async def _text(self, contents, empty: str, failed: str, model: Optional[str] = None,
                    system_instruction: Optional[str] = None) -> str:
        try:
            text = await self.client.generate(model or self.model, contents, system_instruction=system_instruction)
        except AIProviderError as exc:
            logger.warning("AI text request failed: %s", exc)
            return failed
        return text.strip() or empty

    async def _string_list(self, contents, fallback: List[str]) -> List[str]:
        try:
            text = await self.client.generate(self.model, contents, response_schema=STRING_ARRAY_SCHEMA)
            items = json.loads(text or "[]")
        except AIProviderError as exc:
            logger.warning("AI list request failed: %s", exc)
            return list(fallback)
        except ValueError:
            logger.warning("AI list response was not valid JSON")
            return list(fallback)

        if not isinstance(items, list) or not items or not all(isinstance(item, str) for item in items):
            logger.warning("AI list response had an unexpected shape")
            return list(fallback)
        return items

    async def get_smart_reply(self, context: str, last_message: str) -> List[str]:
        prompt = (
            f"Context of conversation: {context}\n"
            f"Last message: \"{last_message}\"\n"
            "Based on the context and the last message, suggest 3 short, friendly, "
            "and natural-sounding replies."
        )
        return await self._string_list([user_turn(prompt)], SMART_REPLY_FALLBACK)

    async def suggest_captions(self, draft: str, image: Optional[str] = None) -> List[str]:
        draft = (draft or "").strip()
        if image:
            prompt = (f"Look at this image and the draft text: '{draft}'. "
                      "Suggest 3 catchy social media captions for this post.")
        else:
            prompt = f"Draft text: '{draft}'. Rewrite this 3 ways to be more engaging for a social feed."
        parts = [{"text": prompt}]
        if image:
            parts.append(inline_image_part(image))
        fallback = [draft] if draft else CAPTION_FALLBACK
        return await self._string_list([{"role": "user", "parts": parts}], fallback)

    async def suggest_conversation_starters(self, friend_name: str) -> List[str]:
        prompt = (f"Suggest 3 short, warm conversation starters I could send to my friend {friend_name} "
                  "on a social chat app.")
        return await self._string_list([user_turn(prompt)], STARTERS_FALLBACK)

    async def summarize_chat(self, lines: Sequence[str]) -> str:
        prompt = "Summarize the following conversation in one short sentence: \n" + "\n".join(lines)
        return await self._text([user_turn(prompt)], SUMMARY_EMPTY, SUMMARY_FAILED)

    async def get_daily_advice(self, city: str, condition: str, temp: int) -> str:
        prompt = (
            f"I am at a personal social networking dashboard in {city}. "
            f"Current local weather is {condition} at {temp}°C. "
            "Give me one very short, helpful, and friendly sentence of lifestyle advice for today. "
            "Use a warm tone and a relevant emoji."
        )
        return await self._text([user_turn(prompt)], ADVICE_EMPTY, ADVICE_FAILED)

    async def ask_assistant(self, history: Sequence[Dict[str, str]], prompt: str) -> str:
        """
        Trò chuyện với trợ lý AI. `history` là danh sách {"role": "user"|"model", "text": ...}.
        Gemini yêu cầu lịch sử bắt đầu bằng lượt 'user' nên lời chào đầu tiên của model bị bỏ.
        """
        turns = list(history)
        if turns and turns[0].get("role") == "model":
            turns = turns[1:]
        contents = [{"role": turn["role"], "parts": [{"text": turn["text"]}]} for turn in turns]
        contents.append(user_turn(prompt))
        return await self._text(contents, ASSISTANT_EMPTY, ASSISTANT_FAILED,
                                model=self.chat_model, system_instruction=ASSISTANT_INSTRUCTION)


def assistant_greeting(name: str) -> str:
    return f"Hi {name}! I'm Gemini, your Saad Social Assistant. How can I help you today?"


def reply_context(messages) -> str:
    """Ngữ cảnh cho gợi ý trả lời: văn bản của 5 tin nhắn gần nhất."""
    return ". ".join(m.text for m in list(messages)[-5:] if m.text)


def summary_lines(messages, me_id: str, peer_name: str) -> List[str]:
    """Tối đa 10 tin nhắn văn bản gần nhất, gắn nhãn 'Me' hoặc tên người kia."""
    return [
        f"{'Me' if m.senderId == me_id else peer_name}: {m.text}"
        for m in list(messages)[-10:]
        if m.text
    ]
