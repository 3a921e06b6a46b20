"""
AI Financial Advisor

DESIGN DECISION: The language model only ever sees the records the user is
looking at (one module, one month). It summarizes and suggests; it never
writes records and its output never feeds back into totals or goals.

CRITICAL BOUNDARIES:
- CAN: Summarize the month, give three tactical tips, rate the risk
- CANNOT: Modify or persist data
- MUST: Return the fixed JSON shape; anything else is treated as a failure

The fallback results below are what AdviceFlow shows when the model is
unavailable or answers badly.
"""

import json
from typing import Iterable, Optional

import google.generativeai as genai
import structlog
from pydantic import ValidationError

from finfamily.config import GeminiSettings, get_settings
from finfamily.models.record import AdviceResult, Record, RiskLevel


logger = structlog.get_logger(__name__)


NOT_CONFIGURED_ADVICE = AdviceResult(
    summary="API Key não configurada no servidor.",
    tips=[
        "Configure a variável de ambiente GEMINI_API_KEY.",
        "Reinicie a aplicação.",
        "Consulte a documentação.",
    ],
    risk_level=RiskLevel.LOW,
)

UNAVAILABLE_ADVICE = AdviceResult(
    summary="Não foi possível analisar os dados no momento.",
    tips=[
        "Verifique sua conexão.",
        "Tente novamente mais tarde.",
        "Contate o suporte se o erro persistir.",
    ],
    risk_level=RiskLevel.LOW,
)


class AdvisorError(Exception):
    """Base exception for advice generation."""
    pass


class AdvisorNotConfiguredError(AdvisorError):
    """No API key is configured."""
    pass


class AdviceGenerationError(AdvisorError):
    """The model call failed or returned something unusable."""
    pass


def build_prompt(records: Iterable[Record], module_title: str) -> str:
    """Prompt asking for a JSON analysis of one module's month."""
    context_data = json.dumps(
        [record.to_prompt_dict() for record in records],
        ensure_ascii=False,
    )

    return f"""Act as a senior financial consultant for a family.
Analyse the following records from the "{module_title}" module:
{context_data}

Please provide, in Brazilian Portuguese:
1. A short summary of the situation (max 2 sentences).
2. 3 tactical tips to save money or improve the financial situation based on these records.
3. A financial risk level (Low, Medium, High).

Respond ONLY with JSON in the following structure, without markdown code blocks:
{{
  "summary": "string",
  "tips": ["string", "string", "string"],
  "riskLevel": "Low" | "Medium" | "High"
}}"""


def parse_advice(text: Optional[str]) -> AdviceResult:
    """
    Parse the model's answer into an AdviceResult.

    Tolerates surrounding prose or code fences by taking the outermost
    JSON object.

    Raises:
        AdviceGenerationError: If there is no valid advice in the text
    """
    if not text:
        raise AdviceGenerationError("No response from AI")

    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise AdviceGenerationError("Response contains no JSON object")

    try:
        data = json.loads(text[start:end])
        return AdviceResult.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise AdviceGenerationError(f"Malformed advice: {e}")


class FinancialAdvisor:
    """
    Gemini-backed advice for one module's month of records.

    RESPONSIBILITIES:
    - Build the prompt from already-filtered records
    - Call the model and validate its JSON answer

    BOUNDARIES:
    - NEVER persists data
    - NEVER sees records outside the active module and month
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model=None,
    ):
        """
        Args:
            settings: Gemini settings; read from the environment if omitted
            model: Pre-built model object (anything with
                   `generate_content_async`); built from settings if omitted
        """
        self._settings = settings or get_settings().gemini
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
                "response_mime_type": "application/json",
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    async def generate_advice(
        self,
        records: list[Record],
        module_title: str,
    ) -> AdviceResult:
        """
        Ask the model for advice.

        Raises:
            AdvisorNotConfiguredError: If no API key is configured
            AdviceGenerationError: If the call fails or the answer is unusable
        """
        if self._model is None:
            raise AdvisorNotConfiguredError("Gemini API key is not configured")

        prompt = build_prompt(records, module_title)

        try:
            response = await self._model.generate_content_async(prompt)
            text = response.text
        except Exception as e:
            logger.warning("advice_request_failed", module=module_title, error=str(e))
            raise AdviceGenerationError(f"Gemini request failed: {e}")

        return parse_advice(text)
