import os
import json
import logging

from ..utils.configuration import Configuration, BACKENDS


logger = logging.getLogger(__name__)


class ConfigController:
    def __init__(self, path: str):
        self.configuration_path = path

    def _verify_configuration(self, configuration: dict) -> bool:
        """Verifies the integrity of the configuration"""
        for section in ("Grid", "Persistence", "misc"):
            if not isinstance(configuration.get(section), dict):
                return False

        grid = configuration["Grid"]

        if any(
            argument not in grid
            for argument in ("Rows", "Columns", "Debounce (ms)", "Settle (ms)")
        ):
            return False

        for argument in ("Rows", "Debounce (ms)", "Settle (ms)"):
            if not isinstance(grid[argument], int) or grid[argument] < 0:
                return False

        # NOTE: default columns have to be usable as unique labels
        columns = grid["Columns"]

        if not isinstance(columns, list) or not all(isinstance(c, str) for c in columns):
            return False

        if len(set(columns)) != len(columns):
            return False

        persistence = configuration["Persistence"]

        if any(
            argument not in persistence
            for argument in ("Backend", "Database location", "API", "Cache location", "Poll interval (s)")
        ):
            return False

        if persistence["Backend"] not in BACKENDS:
            return False

        if not isinstance(persistence["Poll interval (s)"], (int, float)):
            return False

        if not isinstance(persistence["API"], dict) or any(
            argument not in persistence["API"]
            for argument in ("url", "key", "table")
        ):
            return False

        if any(argument not in configuration["misc"] for argument in ("Table", "Log level")):
            return False

        return True

    def get_configuration(self) -> Configuration:
        if not os.path.exists(self.configuration_path):
            return Configuration.get_default()

        with open(self.configuration_path, "r", encoding="utf-8") as f:
            try:
                configuration = json.load(f)
            except ValueError:
                logger.warning("Configuration '%s' is not valid json, using defaults", self.configuration_path)
                return Configuration.get_default()

        if not isinstance(configuration, dict):
            return Configuration.get_default()

        if self._verify_configuration(configuration):
            return Configuration.from_json(configuration)

        logger.warning("Configuration '%s' is not valid, using defaults", self.configuration_path)
        return Configuration.get_default()

    def save_configuration(self, configuration: Configuration) -> None:
        with open(self.configuration_path, "w", encoding="utf-8") as f:
            json.dump(configuration.to_json(), f, indent=4)
