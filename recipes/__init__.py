import logging
from typing import Any, Dict, Optional, Type

from flask import Flask, jsonify, request
from werkzeug.exceptions import BadRequest

from .config import Config
from .errors import DuplicateTitleError, RecipeValidationError
from .models import Recipe
from .observability import register_request_logging, setup_logging
from .storage import RecipeRepository
from .validation import validate_recipe

try:
    from .gcp_storage import FirestoreRecipeStorage
except ImportError:  # pragma: no cover - allows running tests without optional deps
    FirestoreRecipeStorage = None  # type: ignore[assignment,misc]

logger = logging.getLogger(__name__)

INTERNAL_ERROR = {"error": "Internal Server Error"}


def create_app(
    storage: Optional[RecipeRepository] = None,
    config: Type[Config] = Config,
) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    storage:
        Optional recipe repository. When ``None`` the application will use
        :class:`FirestoreRecipeStorage` configured from ``config``.
    config:
        Settings class loaded into ``app.config``.
    """

    app = Flask(__name__, static_folder=config.PUBLIC_FOLDER, static_url_path="")
    app.config.from_object(config)

    setup_logging(app.config["LOG_LEVEL"])
    register_request_logging(app)

    if storage is None:
        if FirestoreRecipeStorage is None:
            raise RuntimeError(
                "google-cloud-firestore is not installed. Install it or pass an "
                "explicit storage backend to create_app."
            )
        storage = FirestoreRecipeStorage(
            project=app.config["GCP_PROJECT"],
            collection_name=app.config["RECIPES_COLLECTION"],
            titles_collection_name=app.config["RECIPE_TITLES_COLLECTION"],
        )
    app.config["RECIPE_STORAGE"] = storage

    @app.errorhandler(BadRequest)
    def bad_request(exc: BadRequest):
        return jsonify({"error": exc.description}), 400

    @app.get("/")
    def index() -> str:
        return "<h1>Recipes API</h1>"

    @app.post("/recipes")
    def create_recipe():
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        payload = _json_body()

        errors = validate_recipe(payload)
        if errors:
            return jsonify({"errors": errors}), 400

        try:
            recipe = storage_backend.add_recipe(payload)
        except RecipeValidationError as exc:
            return jsonify({"errors": exc.errors}), 400
        except DuplicateTitleError:
            return jsonify({"errors": {"title": "Title must be unique"}}), 400
        except Exception:
            logger.exception("POST /recipes failed")
            return jsonify(INTERNAL_ERROR), 500

        logger.info("Created recipe %s", recipe.id)
        return jsonify(recipe.to_dict()), 201

    @app.get("/recipes")
    def list_recipes():
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            recipes = list(storage_backend.list_recipes())
        except Exception:
            logger.exception("GET /recipes failed")
            return jsonify(INTERNAL_ERROR), 500
        return jsonify([recipe.to_dict() for recipe in recipes])

    @app.get("/recipes/<recipe_id>")
    def get_recipe(recipe_id: str):
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            recipe = storage_backend.get_recipe(recipe_id)
        except Exception as exc:
            logger.exception("GET /recipes/%s failed", recipe_id)
            return jsonify(_raw_error(exc)), 500
        return jsonify(_serialize(recipe))

    @app.patch("/recipes/<recipe_id>")
    def update_recipe(recipe_id: str):
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        payload = _json_body()

        errors = validate_recipe(payload, partial=True)
        if errors:
            return jsonify({"errors": errors}), 400

        try:
            updated_recipe = storage_backend.update_recipe(recipe_id, payload)
        except RecipeValidationError as exc:
            return jsonify({"errors": exc.errors}), 400
        except DuplicateTitleError:
            return jsonify({"errors": {"title": "Title must be unique"}}), 400
        except Exception:
            logger.exception("PATCH /recipes/%s failed", recipe_id)
            return jsonify(INTERNAL_ERROR), 500

        logger.info("Updated recipe %s: %s", recipe_id, updated_recipe)
        return jsonify(_serialize(updated_recipe)), 201

    @app.delete("/recipes/<recipe_id>")
    def delete_recipe(recipe_id: str):
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            deleted = storage_backend.delete_recipe(recipe_id)
        except Exception as exc:
            logger.exception("DELETE /recipes/%s failed", recipe_id)
            return jsonify(_raw_error(exc)), 500
        return jsonify({"message": f"Recipe deleted: {deleted}"}), 202

    return app


def _json_body() -> Dict[str, Any]:
    # Non-JSON bodies read as empty; malformed JSON raises BadRequest.
    if not request.is_json:
        return {}
    payload = request.get_json()
    if not isinstance(payload, dict):
        return {}
    return payload


def _serialize(recipe: Optional[Recipe]) -> Optional[Dict[str, Any]]:
    return recipe.to_dict() if recipe is not None else None


def _raw_error(exc: Exception) -> Dict[str, str]:
    return {"name": type(exc).__name__, "message": str(exc)}


__all__ = ["create_app", "Recipe"]
