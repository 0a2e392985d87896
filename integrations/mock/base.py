"""Shared base for mock providers: scenario fixtures parsed like live payloads."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from app.config import Settings
from core.exceptions import ConfigurationError, PayloadParseError

logger = logging.getLogger(__name__)

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"
SCENARIOS_DIR = FIXTURES_DIR / "scenarios"

MOCK_DELAYS: dict[str, float] = {
    "socorro": 0.3,
    "correlations": 0.2,
    "crash_pings": 0.4,
}

ModelT = TypeVar("ModelT", bound=BaseModel)


class MockBase:
    """Base class for mock providers.

    Each scenario file holds one section per provider key; payloads inside a
    section use the exact JSON shapes the live services return, and go through
    the same model validation.
    """

    provider_key: str = ""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._scenario_data: dict[str, Any] = {}
        self._load_scenario()

    def _load_scenario(self) -> None:
        scenario_name = self._settings.mock_scenario
        scenario_path = SCENARIOS_DIR / f"{scenario_name}.json"

        if not scenario_path.exists():
            raise ConfigurationError(
                f"Unknown mock scenario '{scenario_name}'. "
                f"Available: {', '.join(self._settings.available_scenarios)}"
            )

        with open(scenario_path, encoding="utf-8") as f:
            full_scenario = json.load(f)

        self._scenario_data = full_scenario.get(self.provider_key, {})
        logger.debug("Loaded mock scenario %s for %s", scenario_name, self.provider_key)

    def reload_scenario(self) -> None:
        """Re-read the scenario file (e.g. after switching scenarios)."""
        self._load_scenario()

    async def _simulate_delay(self) -> None:
        if self._settings.mock_delay_enabled:
            await asyncio.sleep(MOCK_DELAYS.get(self.provider_key, 0.2))

    def _get(self, key: str, default: Any = None) -> Any:
        return self._scenario_data.get(key, default)

    def _parse(self, model: type[ModelT], payload: Any) -> ModelT:
        """Validate a fixture payload, failing the way a live client would."""
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise PayloadParseError(self.provider_key, str(e), json.dumps(payload)) from e
