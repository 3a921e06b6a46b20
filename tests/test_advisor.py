"""
Tests for the AI advisor.

The Gemini model is replaced by a fake with the same async method; no
network calls are made.
"""

import asyncio
import json

import pytest

from finfamily.agents import (
    AdviceGenerationError,
    AdvisorNotConfiguredError,
    FinancialAdvisor,
    build_prompt,
    parse_advice,
)
from finfamily.config import GeminiSettings
from finfamily.models.record import ModuleId, RiskLevel

from conftest import make_record


VALID_ANSWER = json.dumps({
    "summary": "Gastos sob controle.",
    "tips": ["Dica 1", "Dica 2", "Dica 3"],
    "riskLevel": "Low",
})


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text=None, error=None):
        self._text = text
        self._error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self._error:
            raise self._error
        return FakeResponse(self._text)


def unconfigured_settings():
    return GeminiSettings(api_key="")


class TestPrompt:

    def test_prompt_contains_records_and_module(self):
        records = [make_record(ModuleId.TRAVEL, "Hotel Copacabana", 900, "2024-03-02")]
        prompt = build_prompt(records, "Viagens")
        assert '"Viagens"' in prompt
        assert "Hotel Copacabana" in prompt
        assert "riskLevel" in prompt


class TestParseAdvice:

    def test_plain_json(self):
        advice = parse_advice(VALID_ANSWER)
        assert advice.summary == "Gastos sob controle."
        assert advice.risk_level == RiskLevel.LOW

    def test_json_inside_code_fence(self):
        advice = parse_advice(f"```json\n{VALID_ANSWER}\n```")
        assert len(advice.tips) == 3

    @pytest.mark.parametrize("text", [
        None,
        "",
        "sem json aqui",
        '{"summary": "x"}',
        '{"summary": "x", "tips": ["a", "b", "c"], "riskLevel": "Extreme"}',
        "{not json}",
    ])
    def test_unusable_answers(self, text):
        with pytest.raises(AdviceGenerationError):
            parse_advice(text)


class TestFinancialAdvisor:

    def test_not_configured(self):
        advisor = FinancialAdvisor(settings=unconfigured_settings())
        assert not advisor.is_available
        with pytest.raises(AdvisorNotConfiguredError):
            asyncio.run(advisor.generate_advice([], "Orçamento Mensal"))

    def test_generate_advice(self):
        model = FakeModel(text=VALID_ANSWER)
        advisor = FinancialAdvisor(settings=unconfigured_settings(), model=model)
        records = [make_record(ModuleId.BUDGET, "Mercado", 300, "2024-03-02")]

        advice = asyncio.run(advisor.generate_advice(records, "Orçamento Mensal"))

        assert advice.risk_level == RiskLevel.LOW
        assert len(model.prompts) == 1
        assert "Mercado" in model.prompts[0]

    def test_model_failure_becomes_generation_error(self):
        model = FakeModel(error=RuntimeError("quota exceeded"))
        advisor = FinancialAdvisor(settings=unconfigured_settings(), model=model)
        with pytest.raises(AdviceGenerationError):
            asyncio.run(advisor.generate_advice([], "Viagens"))

    def test_malformed_answer_raises(self):
        model = FakeModel(text="Desculpe, não posso ajudar.")
        advisor = FinancialAdvisor(settings=unconfigured_settings(), model=model)
        with pytest.raises(AdviceGenerationError):
            asyncio.run(advisor.generate_advice([], "Viagens"))
