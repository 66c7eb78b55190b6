from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

LEVELS = ("Easy Peasy", "Amateur Chef", "UltraPro Chef")

DEFAULT_IMAGE = "https://images.media-allrecipes.com/images/75131.jpg"

# Document keys, in the order they are serialized.
RECIPE_FIELDS = (
    "title",
    "instructions",
    "level",
    "ingredients",
    "image",
    "duration",
    "isArchived",
    "created",
)


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    id: str
    title: str
    instructions: str
    level: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    image: Optional[str] = DEFAULT_IMAGE
    duration: Optional[float] = None
    is_archived: bool = False
    created: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation sent to clients."""

        return {
            "id": self.id,
            "title": self.title,
            "instructions": self.instructions,
            "level": self.level,
            "ingredients": list(self.ingredients),
            "image": self.image,
            "duration": self.duration,
            "isArchived": self.is_archived,
            "created": self.created.isoformat() if self.created else None,
        }


def parse_created(value: Any) -> datetime:
    """Parse a ``created`` value into an aware datetime.

    Accepts ISO-8601 strings (``Z`` suffix allowed, naive values are UTC) and
    numbers of milliseconds since the epoch. Raises :class:`ValueError` for
    anything else.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, bool):
        raise ValueError(f"Not a date: {value!r}")
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError(f"Timestamp out of range: {value!r}") from exc
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Not a date: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def new_recipe_document(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Build the stored document for a new recipe, filling in defaults.

    ``created`` is left as ``None`` when the client did not send one so the
    storage backend can stamp it.
    """

    created = fields.get("created")
    return {
        "title": fields["title"],
        "instructions": fields["instructions"],
        "level": fields.get("level"),
        "ingredients": list(fields.get("ingredients", [])),
        "image": fields.get("image", DEFAULT_IMAGE),
        "duration": fields.get("duration"),
        "isArchived": fields.get("isArchived", False),
        "created": parse_created(created) if created is not None else None,
    }


def recipe_updates(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Keep the known recipe fields of a partial update payload."""

    updates = {key: fields[key] for key in RECIPE_FIELDS if key in fields}
    if updates.get("created") is not None:
        updates["created"] = parse_created(updates["created"])
    return updates


__all__ = [
    "DEFAULT_IMAGE",
    "LEVELS",
    "RECIPE_FIELDS",
    "Recipe",
    "new_recipe_document",
    "parse_created",
    "recipe_updates",
]
