# engine/state.py
import logging
import threading
import uuid
from typing import Any, Dict, List, Optional

import pandas as pd

from ..config import STORAGE_PATH
from ..data_model import Params, SimulationResult, SimulationSeries
from .storage import load_scenarios, save_scenarios

logger = logging.getLogger(__name__)

ROMAN_NUMERALS = [
    "I", "II", "III", "IV", "V", "VI", "VII", "VIII",
    "IX", "X", "XI", "XII", "XIII", "XIV", "XV",
]


def scenario_name(index: int) -> str:
    if 0 <= index < len(ROMAN_NUMERALS):
        return f"Scenario {ROMAN_NUMERALS[index]}"
    return f"Scenario {index + 1}"


class ScenarioState:
    def __init__(self, storage_path: str = STORAGE_PATH):
        self.storage_path = storage_path
        store = load_scenarios(storage_path)
        self.scenarios: List[Dict[str, Any]] = store["scenarios"]
        self.active_id: Optional[str] = store["activeScenarioId"] or self._first_id()

    def _first_id(self) -> Optional[str]:
        return self.scenarios[0]["id"] if self.scenarios else None

    def _index(self, scenario_id: str) -> int:
        for i, scenario in enumerate(self.scenarios):
            if scenario.get("id") == scenario_id:
                return i
        raise KeyError(scenario_id)

    def get(self, scenario_id: str) -> Dict[str, Any]:
        return self.scenarios[self._index(scenario_id)]

    def add(self, params: Params, result: SimulationResult) -> Dict[str, Any]:
        scenario = {
            "id": str(uuid.uuid4()),
            "name": scenario_name(len(self.scenarios)),
            "params": params.to_dict(),
            "results": result.to_dict(),
        }
        self.scenarios.append(scenario)
        self.active_id = scenario["id"]
        self._save()
        logger.info("Saved %s (%s)", scenario["name"], scenario["id"])
        return scenario

    def activate(self, scenario_id: str) -> Dict[str, Any]:
        scenario = self.get(scenario_id)
        self.active_id = scenario_id
        self._save()
        return scenario

    def delete(self, scenario_id: str) -> None:
        index = self._index(scenario_id)
        removed = self.scenarios.pop(index)
        if self.active_id == scenario_id:
            if index < len(self.scenarios):
                self.active_id = self.scenarios[index]["id"]
            elif index > 0:
                self.active_id = self.scenarios[index - 1]["id"]
            else:
                self.active_id = None
        self._save()
        logger.info("Deleted %s (%s)", removed.get("name"), scenario_id)

    def clear(self) -> None:
        self.scenarios = []
        self.active_id = None
        self._save()

    def _save(self) -> None:
        save_scenarios(self.storage_path, {"scenarios": self.scenarios, "activeScenarioId": self.active_id})

    def list_names(self) -> List[str]:
        return [scenario["name"] for scenario in self.scenarios]

    def get_all_monthly(self) -> pd.DataFrame:
        frames = [
            SimulationSeries.from_dict((scenario.get("results") or {}).get("series")).to_frame(scenario["name"])
            for scenario in self.scenarios
        ]
        if not frames:
            return pd.DataFrame()
        return pd.concat(frames, ignore_index=True)


class PreviewCoordinator:
    """Latest-wins bookkeeping for live preview requests.

    A result is accepted only if no newer request was submitted after it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest = 0
        self._published: Optional[int] = None
        self.result: Optional[SimulationResult] = None

    def submit(self) -> int:
        with self._lock:
            self._latest += 1
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest

    def publish(self, ticket: int, result: SimulationResult) -> bool:
        with self._lock:
            if ticket != self._latest:
                logger.debug("Discarding stale preview %d (latest %d)", ticket, self._latest)
                return False
            self._published = ticket
            self.result = result
            return True

    @property
    def published_ticket(self) -> Optional[int]:
        return self._published
