"""Relay-chat use case: validate, build the prompt, dispatch, wrap.

This is the single entry point for the business logic.  It depends only on
the :class:`ChatBackend` port; the interface layer injects the concrete
adapter at runtime.
"""

from __future__ import annotations

import logging

from saudai_relay.domain.entities import (
    BackendRequest,
    ChatRole,
    ChatTurn,
    GenerationOptions,
    ReplyResult,
)
from saudai_relay.domain.ports.chat_backend import ChatBackend
from saudai_relay.domain.value_objects import UserMessage

logger = logging.getLogger(__name__)

# ── Prompt templates ────────────────────────────────────────────────────────

PERSONA_PROMPT = """\
You are SaudAI, an AI version of Saud Rehman.

Speak in the first person as "I", as if you are Saud.
Tone: friendly, professional, honest, slightly informal when appropriate.

Background you MUST use:
- Technical Marketing Manager at NASTP (aerospace & defence ecosystem).
- Experience in renewable energy, C&I solar, IoT & AI products.
- Past roles: SkyElectric, Renergy Solutions, Rapidev, Spacedome.
- Education: MEng Renewable Electrical Engineering, BE Electrical & Electronics (COMSATS).
- Final year project: wind speed forecasting using Bi-LSTM and Bi-GRU.

Guidelines:
- Be clear and concise.
- If you don't know something from Saud's real experience, say that you would \
"need to check" rather than inventing.
- When asked for advice (career, learning, tools), give practical, step-by-step suggestions.
"""

NO_REPLY_MESSAGE = (
    "I couldn't generate a response right now. Check model logs or increase timeout."
)


def build_turns(message: UserMessage) -> tuple[ChatTurn, ...]:
    """Return the two-turn prompt: persona first, user message last."""
    return (
        ChatTurn(role=ChatRole.SYSTEM, content=PERSONA_PROMPT),
        ChatTurn(role=ChatRole.USER, content=message.text),
    )


# ── Use case ────────────────────────────────────────────────────────────────


class RelayChatUseCase:
    """Forwards one user message to the backend and returns its reply.

    Parameters
    ----------
    backend:
        Adapter that talks to the model server.
    model_id:
        Model identifier sent with every request.
    options:
        Sampling parameters passed through to the backend.
    timeout_ms:
        Bound for the streaming path.
    sync_timeout_ms:
        Bound for the non-streaming compatibility path.
    """

    def __init__(
        self,
        backend: ChatBackend,
        model_id: str,
        options: GenerationOptions | None = None,
        timeout_ms: int = 60_000,
        sync_timeout_ms: int = 120_000,
    ) -> None:
        self._backend = backend
        self._model_id = model_id
        self._options = options or GenerationOptions()
        self._timeout_ms = timeout_ms
        self._sync_timeout_ms = sync_timeout_ms

    async def execute(self, message: object, *, streaming: bool = True) -> ReplyResult:
        """Validate *message*, call the backend and return the reply."""
        user_message = UserMessage.from_raw(message)
        request = BackendRequest(
            model_id=self._model_id,
            turns=build_turns(user_message),
            streaming=streaming,
            options=self._options,
        )
        timeout_ms = self._timeout_ms if streaming else self._sync_timeout_ms

        logger.info(
            "Relaying %d-char message to %s (%s, timeout %d ms)",
            len(user_message.text),
            self._model_id,
            "stream" if streaming else "sync",
            timeout_ms,
        )

        text = (await self._backend.complete(request, timeout_ms=timeout_ms)).strip()

        if not text:
            logger.warning("Backend produced an empty reply for model %s", self._model_id)
            return ReplyResult(text=NO_REPLY_MESSAGE)

        return ReplyResult(text=text)
