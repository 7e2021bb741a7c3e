"""Activity catalog service."""

import json
import logging
import re
from pathlib import Path
from typing import Optional
from backend.models.activity import Activity

logger = logging.getLogger(__name__)


class ActivityCatalog:
    """Read-only lookup of activity definitions."""

    # Extra search tags for common words in activity names
    SYNONYMS = {
        "client": ["customer", "customer service"],
        "work": ["working", "job", "task"],
        "meeting": ["call", "conference", "discussion"],
        "writing": ["write", "document", "documenting"],
        "reading": ["read", "study", "learning"],
        "exercise": ["workout", "fitness", "gym"],
        "cooking": ["cook", "meal", "food"],
        "cleaning": ["clean", "tidy", "organizing"],
    }

    def __init__(self, activities: list[Activity]):
        self._activities = sorted(activities, key=lambda a: a.hourly_value, reverse=True)
        self._by_id = {activity.id: activity for activity in self._activities}

    @classmethod
    def from_file(cls, path: Path) -> "ActivityCatalog":
        """
        Load the catalog from a JSON document.

        Args:
            path: Path to a file with an "activity_categories" mapping

        Returns:
            ActivityCatalog instance

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the document is not valid JSON or has no categories
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in activity catalog: {e}")

        catalog = cls.from_dict(data)
        logger.info(f"Loaded {len(catalog.get_all())} activities from {path}")
        return catalog

    @classmethod
    def from_dict(cls, data: dict) -> "ActivityCatalog":
        if not isinstance(data.get("activity_categories"), dict):
            raise ValueError("Activity catalog must contain an 'activity_categories' mapping")

        activities = []
        for value_str, category in data["activity_categories"].items():
            hourly_value = int(float(value_str))
            label = category.get("label", value_str)
            for index, name in enumerate(category.get("activities", [])):
                activities.append(
                    Activity(
                        id=f"{value_str}_{index}",
                        name=name,
                        category=label,
                        hourly_value=hourly_value,
                        search_tags=tuple(cls.generate_search_tags(name, label)),
                    )
                )
        return cls(activities)

    @classmethod
    def generate_search_tags(cls, name: str, category: str) -> list[str]:
        """Build the ordered, de-duplicated search tags of an activity."""
        words = [w for w in re.split(r"[\s&,]+", name.lower()) if w]
        tags = [name.lower(), *words, category.lower()]
        for word in words:
            tags.extend(cls.SYNONYMS.get(word, []))
        return list(dict.fromkeys(tags))

    def get_by_id(self, activity_id: str) -> Optional[Activity]:
        return self._by_id.get(activity_id)

    def get_all(self) -> list[Activity]:
        """All activities, highest hourly value first."""
        return list(self._activities)

    def get_by_category(self, category: str) -> list[Activity]:
        return [a for a in self._activities if a.category == category]

    def get_by_value_range(self, min_value: float, max_value: float) -> list[Activity]:
        return [a for a in self._activities if min_value <= a.hourly_value <= max_value]

    def get_categories(self) -> list[str]:
        return sorted({a.category for a in self._activities})

    def search(self, query: str, limit: Optional[int] = None) -> list[Activity]:
        """
        Search activities by name, tags and loose character matching.

        Args:
            query: Free text
            limit: Maximum number of results (optional)

        Returns:
            Matching activities, best match first, then by hourly value
        """
        term = query.strip().lower()
        if not term:
            return self._activities[:limit] if limit else list(self._activities)

        scored = []
        for activity in self._activities:
            score = self._score(activity, term)
            if score:
                scored.append((score, activity))

        scored.sort(key=lambda item: (-item[0], -item[1].hourly_value))
        results = [activity for _, activity in scored]
        return results[:limit] if limit else results

    @classmethod
    def _score(cls, activity: Activity, term: str) -> int:
        name = activity.name.lower()
        if name == term:
            return 100
        if name.startswith(term):
            return 90
        if term in name:
            return 80
        if any(term in tag for tag in activity.search_tags):
            if any(tag.startswith(term) for tag in activity.search_tags):
                return 75
            return 70
        if cls._fuzzy_match(name, term):
            return 60
        return 0

    @staticmethod
    def _fuzzy_match(text: str, pattern: str) -> bool:
        """True if every character of ``pattern`` appears in ``text`` in order."""
        chars = iter(text)
        return all(c in chars for c in pattern)
