from __future__ import annotations

import hashlib
import logging
import re
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from google.api_core import exceptions as gcloud_exceptions
from google.cloud import firestore

from .errors import (
    DuplicateTitleError,
    InvalidRecipeIdError,
    RecipeStorageError,
    RecipeValidationError,
)
from .models import DEFAULT_IMAGE, Recipe, new_recipe_document, recipe_updates
from .storage import RecipeRepository
from .validation import validate_recipe

logger = logging.getLogger(__name__)

MAX_DOCUMENT_ID_BYTES = 1500
_RESERVED_ID = re.compile(r"^__.*__$")


def _title_key(title: str) -> str:
    # Titles may contain "/" which is not allowed in a document id.
    return hashlib.sha256(title.encode("utf-8")).hexdigest()


class FirestoreRecipeStorage(RecipeRepository):
    """Recipe storage backed by a Firestore collection.

    Title uniqueness is kept in a second collection whose document ids are
    derived from the title. Claims are written with ``create`` in the same
    batch as the recipe, so a taken title fails the whole write.
    """

    def __init__(
        self,
        *,
        project: Optional[str] = None,
        collection_name: str = "recipes",
        titles_collection_name: str = "recipe_titles",
        client: Optional[firestore.Client] = None,
    ) -> None:
        self._project = project
        self._collection_name = collection_name
        self._titles_collection_name = titles_collection_name

        self._firestore_client = client or firestore.Client(project=project)
        self._collection = self._firestore_client.collection(collection_name)
        self._titles = self._firestore_client.collection(titles_collection_name)

        logger.info(
            "Using Firestore collection %r (titles in %r)",
            collection_name,
            titles_collection_name,
        )

    def list_recipes(self) -> Iterable[Recipe]:
        try:
            for doc in self._collection.stream():
                data = doc.to_dict() or {}
                yield self._doc_to_recipe(doc.id, data)
        except gcloud_exceptions.GoogleAPICallError as exc:
            raise RecipeStorageError(f"Failed to list recipes: {exc}") from exc

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        snapshot = self._get(self._document(recipe_id))
        if not snapshot.exists:
            return None
        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

    def add_recipe(self, fields: Mapping[str, Any]) -> Recipe:
        errors = validate_recipe(fields)
        if errors:
            raise RecipeValidationError(errors)

        doc = new_recipe_document(dict(fields))
        if doc["created"] is None:
            doc["created"] = firestore.SERVER_TIMESTAMP

        doc_ref = self._collection.document()
        batch = self._firestore_client.batch()
        batch.create(self._titles.document(_title_key(doc["title"])), {"recipe_id": doc_ref.id})
        batch.set(doc_ref, doc)
        self._commit(batch, doc["title"])

        snapshot = self._get(doc_ref)
        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

    def update_recipe(self, recipe_id: str, fields: Mapping[str, Any]) -> Optional[Recipe]:
        doc_ref = self._document(recipe_id)
        snapshot = self._get(doc_ref)

        if not snapshot.exists:
            return None

        updates = recipe_updates(dict(fields))
        if not updates:
            return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

        current_title = (snapshot.to_dict() or {}).get("title")
        new_title = updates.get("title", current_title)

        batch = self._firestore_client.batch()
        if new_title != current_title:
            batch.create(self._titles.document(_title_key(new_title)), {"recipe_id": recipe_id})
            if current_title is not None:
                batch.delete(self._titles.document(_title_key(current_title)))
        batch.update(doc_ref, updates)
        self._commit(batch, new_title)

        snapshot = self._get(doc_ref)
        return self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

    def delete_recipe(self, recipe_id: str) -> Optional[Recipe]:
        doc_ref = self._document(recipe_id)
        snapshot = self._get(doc_ref)

        if not snapshot.exists:
            return None

        recipe = self._doc_to_recipe(snapshot.id, snapshot.to_dict() or {})

        batch = self._firestore_client.batch()
        batch.delete(doc_ref)
        batch.delete(self._titles.document(_title_key(recipe.title)))
        self._commit(batch, recipe.title)
        return recipe

    def _document(self, recipe_id: str):
        if (
            not recipe_id
            or "/" in recipe_id
            or recipe_id in (".", "..")
            or _RESERVED_ID.match(recipe_id)
            or len(recipe_id.encode("utf-8")) > MAX_DOCUMENT_ID_BYTES
        ):
            raise InvalidRecipeIdError(recipe_id)
        return self._collection.document(recipe_id)

    def _get(self, doc_ref):
        try:
            return doc_ref.get()
        except gcloud_exceptions.GoogleAPICallError as exc:
            raise RecipeStorageError(f"Failed to read recipe {doc_ref.id!r}: {exc}") from exc

    def _commit(self, batch, title: str) -> None:
        try:
            batch.commit()
        except gcloud_exceptions.AlreadyExists as exc:
            raise DuplicateTitleError(title) from exc
        except gcloud_exceptions.GoogleAPICallError as exc:
            raise RecipeStorageError(f"Failed to write recipe: {exc}") from exc

    def _doc_to_recipe(self, doc_id: str, data: dict) -> Recipe:
        ingredients = data.get("ingredients")
        if not isinstance(ingredients, list):
            ingredients = []

        created = data.get("created")
        if not isinstance(created, datetime):
            created = None

        return Recipe(
            id=doc_id,
            title=data.get("title", ""),
            instructions=data.get("instructions", ""),
            level=data.get("level"),
            ingredients=ingredients,
            image=data.get("image", DEFAULT_IMAGE),
            duration=data.get("duration"),
            is_archived=bool(data.get("isArchived", False)),
            created=created,
        )


__all__ = ["FirestoreRecipeStorage"]
