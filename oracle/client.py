"""Clients for the stat-allocation oracle.

Two providers share one prompt: Claude through the Anthropic SDK and Gemini
through its REST endpoint. Both are synchronous and time-bounded; any failure
surfaces as ``OracleError`` for the allocator to absorb.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import anthropic
import httpx

from .models import StatSplit, parse_stat_reply

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

LEVEL_UP_PROMPT = """\
You are the SYSTEM in a Solo Leveling-inspired habit tracker game. A hunter has just leveled up to level {level}.

Their daily quests (habits) include: {habits}

Based on their progress and the nature of their quests, allocate stat points for this level-up. \
You have {budget} points to distribute across 4 stats: STR (Strength), VIT (Vitality), AGI (Agility), INT (Intelligence).

Consider:
- Physical/exercise habits like gym, running, workout -> favor STR, VIT, AGI
- Learning/reading habits like study, read, learn -> favor INT
- Meditation, sleep habits -> favor VIT
- Speed/agility tasks -> favor AGI
- General productivity -> balanced distribution
- Be creative and thematic!

Respond with ONLY a valid JSON object, no markdown, no extra text:
{{"str": X, "vit": Y, "agi": Z, "int": W}}

Where X + Y + Z + W = {budget}. Each value must be 0 or greater."""


class OracleError(Exception):
    """Raised when the oracle cannot produce a usable reply."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class StatOracle(Protocol):
    def propose(self, habit_names: list[str], level: int, budget: int) -> StatSplit: ...


def build_prompt(habit_names: list[str], level: int, budget: int) -> str:
    habits = ", ".join(habit_names) if habit_names else "None"
    return LEVEL_UP_PROMPT.format(level=level, habits=habits, budget=budget)


def _split_from_text(text: str) -> StatSplit:
    split = parse_stat_reply(text)
    if split is None:
        raise OracleError(f"No stat JSON in reply: {text[:120]!r}")
    return split


class ClaudeStatOracle:
    """Ask Claude for a thematic stat split."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        timeout: float = DEFAULT_TIMEOUT,
        client: Any = None,
    ):
        self._client = client or anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model

    def propose(self, habit_names: list[str], level: int, budget: int) -> StatSplit:
        try:
            msg = self._client.messages.create(
                model=self._model,
                max_tokens=100,
                temperature=0.7,
                messages=[{"role": "user", "content": build_prompt(habit_names, level, budget)}],
            )
        except anthropic.APIError as e:
            raise OracleError(f"Claude request failed: {e}") from e

        if not msg.content:
            raise OracleError("Empty reply from Claude")
        text = getattr(msg.content[0], "text", "").strip()
        logger.debug("Claude stat reply: %s", text[:80])
        return _split_from_text(text)


class GeminiStatOracle:
    """Ask Gemini (REST ``generateContent``) for a thematic stat split."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self._model = model
        self._client = httpx.Client(
            base_url=self.BASE_URL,
            headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def propose(self, habit_names: list[str], level: int, budget: int) -> StatSplit:
        payload = {"contents": [{"parts": [{"text": build_prompt(habit_names, level, budget)}]}]}
        try:
            resp = self._client.post(f"/models/{self._model}:generateContent", json=payload)
        except httpx.HTTPError as e:
            raise OracleError(f"Gemini request failed: {e}") from e

        if resp.status_code >= 400:
            raise OracleError(f"Gemini returned HTTP {resp.status_code}", status_code=resp.status_code)

        try:
            body = resp.json()
        except ValueError as e:
            raise OracleError("Gemini reply is not JSON") from e

        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise OracleError("Empty reply from Gemini") from e
        logger.debug("Gemini stat reply: %s", str(text)[:80])
        return _split_from_text(str(text).strip())


def build_oracle(cfg: dict) -> StatOracle | None:
    """Pick the configured provider; ``None`` when disabled or keyless."""
    oracle_cfg = cfg.get("oracle", {})
    provider = str(oracle_cfg.get("provider", "claude")).strip().lower()
    secrets = cfg.get("_secrets", {})
    timeout = float(oracle_cfg.get("timeout_seconds", DEFAULT_TIMEOUT))
    model = oracle_cfg.get("model")

    if provider == "claude":
        key = secrets.get("anthropic_api_key", "")
        if not key:
            logger.warning("ANTHROPIC_API_KEY not set; level-up stats will be random")
            return None
        kwargs = {"model": model} if model else {}
        return ClaudeStatOracle(api_key=key, timeout=timeout, **kwargs)
    if provider == "gemini":
        key = secrets.get("gemini_api_key", "")
        if not key:
            logger.warning("GEMINI_API_KEY not set; level-up stats will be random")
            return None
        kwargs = {"model": model} if model else {}
        return GeminiStatOracle(api_key=key, timeout=timeout, **kwargs)
    if provider not in ("none", ""):
        logger.warning("Unknown oracle provider %r; level-up stats will be random", provider)
    return None
