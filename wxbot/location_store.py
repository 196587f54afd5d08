#!/usr/bin/env python3
"""
Saved location storage for the Weather Bot
Persists the ordered list of saved location names as a JSON array on disk
"""

import json
import logging
import os
from pathlib import Path
from typing import List, Optional

from .settings import WeatherSettings


class LocationStore:
    """Flat-file store for saved locations.

    The list is read from disk on every load() and fully rewritten on every
    save(). Nothing is cached between calls, so two overlapping mutations
    race and the last save wins.
    """

    def __init__(self, settings: WeatherSettings, logger: Optional[logging.Logger] = None):
        self.path = Path(settings.locations_file)
        self.logger = logger or logging.getLogger('WeatherBot.locations')

    def load(self) -> List[str]:
        """Read the saved locations.

        Returns:
            List[str]: Saved location names in insertion order, or an empty
            list if the file is missing, unreadable or malformed.
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            self.logger.warning(f"Locations file not found: {self.path}")
            return []
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading locations from {self.path}: {e}")
            return []

        if not isinstance(data, list):
            self.logger.error(f"Locations file {self.path} does not contain a JSON array")
            return []
        return [str(item) for item in data]

    def save(self, locations: List[str]) -> bool:
        """Write the full list back to disk.

        Args:
            locations: The complete list to persist.

        Returns:
            bool: True on success, False if the file could not be written.
        """
        tmp_path = self.path.with_name(self.path.name + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(list(locations), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
            self.logger.debug(f"Saved {len(locations)} location(s) to {self.path}")
            return True
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Error saving locations to {self.path}: {e}")
            try:
                tmp_path.unlink()
            except OSError:
                pass
            return False

    @staticmethod
    def add(locations: List[str], name: str) -> bool:
        """Append name unless an identical (case-sensitive) entry exists.

        Returns:
            bool: True if added, False if already present.
        """
        if name in locations:
            return False
        locations.append(name)
        return True

    @staticmethod
    def remove(locations: List[str], name: str) -> bool:
        """Remove the exact entry matching name.

        Returns:
            bool: True if removed, False if not present.
        """
        if name not in locations:
            return False
        locations.remove(name)
        return True
