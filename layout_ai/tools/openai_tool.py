"""layout_ai.tools.openai_tool

Remote intent model over the `openai` SDK, with **OpenAI key, Azure OpenAI key or Azure MSI** auth.

Azure pattern:
  msi = ManagedIdentityCredential(client_id=AZURE_MSI_CLIENT_ID)
  token_provider = get_bearer_token_provider(msi, "https://cognitiveservices.azure.com/.default")
  client = AzureOpenAI(azure_endpoint=..., api_version=..., azure_ad_token_provider=token_provider)

Contract:
- The model is asked to return a single JSON object describing the prompt.
- Parsing is strict: we extract the first JSON object from the response text. Field names are
  NOT normalized here; that is layout_ai.nlp.normalizer's job.
- Client-level retries are disabled; the extractor bounds the whole call with its own timeout.
"""

from __future__ import annotations
import json
import logging
import re
from typing import Any, Optional

import openai
from openai import AzureOpenAI, OpenAI

from layout_ai.auth import azure_openai_configured, get_aoai_client_kwargs
from layout_ai.config import Settings
from layout_ai.contracts.tool_base import IntentModelTool
from layout_ai.errors import LLMOutputError, ToolError


SYSTEM_PROMPT = (
    "You are an expert assistant that analyzes user prompts for notebook layout generation.\n"
    "Understand what the user wants to accomplish, the complexity and scope of the request, the emotional "
    "tone and context, the entities mentioned and the layout requirements.\n"
    "Return ONLY valid JSON.\n"
    "Allowed values:\n"
    "- primary_intent: planning, tracking, creative, study, business, fitness, journal, general\n"
    "- complexity: simple, medium, complex\n"
    "- context.timeframe: daily, weekly, monthly, yearly, ongoing; context.urgency: low, medium, high\n"
    "- emotional_tone: professional, casual, creative, academic, personal\n"
    "- layout_requirements.structure: linear, grid, hierarchical, freeform\n"
    "- layout_requirements.interactivity: low, medium, high\n"
    "- layout_requirements.visual_style: minimal, detailed, colorful, professional\n"
    'Schema example: {"primary_intent":"planning","secondary_intents":["tracking"],"complexity":"medium",'
    '"context":{"timeframe":"weekly","domain":"work","urgency":"medium","collaboration":false},'
    '"emotional_tone":"professional","entities":{"dates":[],"topics":["projects"],"people":[],'
    '"locations":[],"numbers":[]},"layout_requirements":{"structure":"grid","elements":["calendar","tasks"],'
    '"interactivity":"medium","visual_style":"professional"},"confidence_score":0.8}\n'
)


def _extract_json(text: str) -> dict[str, Any]:
    """Extract the first JSON object from model output."""
    if not text:
        raise LLMOutputError("Empty model output")

    m = re.search(r"```json\s*(\{.*?\})\s*```", text, flags=re.DOTALL)
    candidate = m.group(1) if m else None
    if candidate is None:
        m2 = re.search(r"(\{.*\})", text, flags=re.DOTALL)
        if not m2:
            raise LLMOutputError("No JSON object found in model output")
        candidate = m2.group(1)

    try:
        out = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise LLMOutputError(f"Model output is not valid JSON: {e}") from e
    if not isinstance(out, dict):
        raise LLMOutputError("Model output JSON is not an object")
    return out


def _user_message(prompt: str, context: dict[str, Any]) -> str:
    parts = [f'Analyze this prompt for notebook layout generation: "{prompt}"']
    if context.get("user_id"):
        parts.append(f"User ID: {context['user_id']}")
    extra = {k: v for k, v in context.items() if k != "user_id" and v}
    if extra:
        parts.append(f"Additional context: {json.dumps(extra, default=str)[:4000]}")
    return "\n".join(parts)


class OpenAIIntentTool(IntentModelTool):
    """Chat-completions wrapper returning the model's raw JSON analysis."""

    def __init__(
        self,
        client: Any,
        model: str,
        logger: logging.Logger,
        temperature: float = 0.3,
        max_tokens: int = 1000,
    ):
        self.client = client
        self.model = model
        self.logger = logger
        self.temperature = temperature
        self.max_tokens = max_tokens

    def extract_intent(self, prompt: str, context: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": _user_message(prompt, context)},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            raise ToolError(f"Intent model call failed: {type(e).__name__}: {e}") from e

        text = resp.choices[0].message.content if resp.choices else ""
        return _extract_json(text or "")

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if callable(close):
            close()


def build_intent_tool(settings: Settings, logger: logging.Logger) -> Optional[OpenAIIntentTool]:
    """Construct the remote tool from settings, or None when no credential is configured."""
    timeout = settings.extractor_timeout_seconds
    if azure_openai_configured(settings):
        client = AzureOpenAI(
            api_version=settings.azure_openai_api_version,
            azure_endpoint=settings.azure_openai_endpoint,
            timeout=timeout,
            max_retries=0,
            **get_aoai_client_kwargs(),
        )
        logger.info("Intent model: Azure OpenAI deployment=%s", settings.azure_openai_chat_deployment)
        return OpenAIIntentTool(
            client,
            settings.azure_openai_chat_deployment,
            logger,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )

    if settings.openai_api_key:
        client = OpenAI(api_key=settings.openai_api_key, timeout=timeout, max_retries=0)
        logger.info("Intent model: OpenAI model=%s", settings.openai_model)
        return OpenAIIntentTool(
            client,
            settings.openai_model,
            logger,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )

    logger.info("Intent model: no credential configured, rule-based extraction only")
    return None
