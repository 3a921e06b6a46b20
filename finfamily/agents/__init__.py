"""AI Agents package."""

from finfamily.agents.advisor import (
    NOT_CONFIGURED_ADVICE,
    UNAVAILABLE_ADVICE,
    AdviceGenerationError,
    AdvisorError,
    AdvisorNotConfiguredError,
    FinancialAdvisor,
    build_prompt,
    parse_advice,
)

__all__ = [
    "NOT_CONFIGURED_ADVICE",
    "UNAVAILABLE_ADVICE",
    "AdviceGenerationError",
    "AdvisorError",
    "AdvisorNotConfiguredError",
    "FinancialAdvisor",
    "build_prompt",
    "parse_advice",
]
