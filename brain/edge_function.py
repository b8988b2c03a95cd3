"""Brain backed by the hosted ``ai-brain`` edge function."""

import json
from typing import Any, Optional

from loguru import logger

from contracts import AiConfig
from config import settings
from .base import Brain, BrainError


class EdgeFunctionBrain(Brain):
    """Forwards the message to a Supabase edge function.

    The function receives ``{message, session_id, user_id}`` and answers with
    ``{response: str}``. It reads the user's credential on the server side.
    """

    name = "edge_function"

    def __init__(self, client=None, function_name: Optional[str] = None):
        self._client = client
        self.function_name = function_name or settings.brain_function_name

    def _get_client(self):
        if self._client is None:
            if not settings.supabase_configured():
                raise BrainError("Supabase no está configurado (NOVA_SUPABASE_URL / NOVA_SUPABASE_KEY)")
            from supabase import create_client
            self._client = create_client(settings.supabase_url, settings.supabase_key)
        return self._client

    def invoke(
        self,
        message: str,
        session_id: str,
        user_id: Optional[str],
        config: Optional[AiConfig] = None,
    ) -> str:
        body = {"message": message, "session_id": session_id, "user_id": user_id}
        logger.debug("Invoking edge function {} for session {}", self.function_name, session_id)
        try:
            raw = self._get_client().functions.invoke(
                self.function_name, invoke_options={"body": body}
            )
        except BrainError:
            raise
        except Exception as e:
            logger.warning("Edge function {} failed: {}", self.function_name, e)
            raise BrainError(str(e)) from e

        text = self._parse(raw)
        if not text:
            raise BrainError("respuesta vacía del servidor")
        return text

    @staticmethod
    def _parse(raw: Any) -> str:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8", errors="replace")
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError:
                return raw.strip()
        if isinstance(raw, dict):
            if raw.get("error"):
                raise BrainError(str(raw["error"]))
            return str(raw.get("response") or "").strip()
        return ""
