import logging
import os
from typing import Optional

from flask import Flask, Response, abort, flash, redirect, render_template, request, url_for

from .models import Ingredient, Recipe
from .recipe_format import FileFormatError
from .storage import FileRecipeRepository, RecipeRepository
from .views import format_recipe, format_recipes

try:
    from google.api_core import exceptions as gcloud_exceptions

    from .gcp_storage import CloudStorageRecipeRepository
except ImportError:  # pragma: no cover - allows running without optional deps
    gcloud_exceptions = None  # type: ignore[assignment]
    CloudStorageRecipeRepository = None  # type: ignore[assignment,misc]

if gcloud_exceptions is None:  # pragma: no cover
    STORAGE_ERRORS: tuple = (OSError,)
    MISSING_FILE_ERRORS: tuple = (FileNotFoundError,)
else:
    STORAGE_ERRORS = (OSError, gcloud_exceptions.GoogleAPIError)
    MISSING_FILE_ERRORS = (FileNotFoundError, gcloud_exceptions.NotFound)

# Recipe text that cannot be read as recipes: bad layout or bad encoding.
MALFORMED_FILE_ERRORS = (FileFormatError, UnicodeDecodeError)

logger = logging.getLogger(__name__)


def create_app(storage: Optional[RecipeRepository] = None) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    storage:
        Optional recipe repository. When ``None`` the repository is built from
        environment variables: :class:`CloudStorageRecipeRepository` when
        ``GCS_BUCKET`` is set, otherwise :class:`FileRecipeRepository`. A
        repository built this way is loaded straight away if its file exists.
    """

    app = Flask(__name__)
    app.secret_key = os.environ.get("FLASK_SECRET_KEY", "development-secret-change-me")

    if storage is None:
        storage = _storage_from_env()
        _initial_load(storage)
    storage.subscribe(lambda: logger.debug("Recipe collection changed"), key="filed_recipes.web")
    app.config["RECIPE_STORAGE"] = storage

    @app.get("/")
    def index() -> str:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        recipes = storage_backend.get_all()
        selected_index = request.args.get("selected", 0, type=int)
        selected_recipe: Recipe | None = None

        if recipes:
            if not 0 <= selected_index < len(recipes):
                selected_index = 0
            selected_recipe = recipes[selected_index]

        return render_template(
            "index.html",
            recipes=recipes,
            selected_recipe=selected_recipe,
            selected_index=selected_index,
            is_modified=storage_backend.is_modified,
            title="Recipe Library",
        )

    @app.get("/recipes.txt")
    def recipes_text() -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        return _plain_text(format_recipes(storage_backend.get_all()))

    @app.get("/recipes/<int:index>.txt")
    def recipe_text(index: int) -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            recipe = storage_backend.get_at(index)
        except IndexError:
            abort(404)
        return _plain_text(format_recipe(recipe))

    @app.post("/recipes/<int:index>/delete")
    def delete_recipe(index: int) -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            name = storage_backend.get_at(index).name
            storage_backend.delete_at(index)
        except IndexError:
            flash("Recipe not found.", "error")
        else:
            flash(f"Recipe '{name}' deleted. Save to keep the change.", "success")
        return redirect(url_for("index"))

    @app.post("/save")
    def save_recipes() -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            storage_backend.save()
        except STORAGE_ERRORS as exc:
            logger.exception("Saving recipes failed")
            flash(f"Failed to save recipes: {exc}", "error")
        else:
            flash(f"Saved {len(storage_backend)} recipes.", "success")
        return redirect(url_for("index"))

    @app.post("/load")
    def load_recipes() -> Response:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            storage_backend.load()
        except MALFORMED_FILE_ERRORS as exc:
            logger.warning("Recipe file is malformed: %s", exc)
            flash(f"The recipe file is malformed: {exc}", "error")
        except STORAGE_ERRORS as exc:
            logger.exception("Loading recipes failed")
            flash(f"Failed to load recipes: {exc}", "error")
        else:
            flash(f"Loaded {len(storage_backend)} recipes.", "success")
        return redirect(url_for("index"))

    return app


def _storage_from_env() -> RecipeRepository:
    if os.environ.get("GCS_BUCKET"):
        if CloudStorageRecipeRepository is None:
            raise RuntimeError(
                "google-cloud-storage is not installed. Install optional dependencies "
                "or unset GCS_BUCKET to use a local recipe file."
            )
        return CloudStorageRecipeRepository.from_env()
    return FileRecipeRepository.from_env()


def _initial_load(storage: RecipeRepository) -> None:
    try:
        storage.load()
    except MISSING_FILE_ERRORS:
        logger.info("No recipe file yet; starting with an empty collection.")
    except MALFORMED_FILE_ERRORS as exc:
        logger.warning("Recipe file is malformed, starting with an empty collection: %s", exc)
    except STORAGE_ERRORS:
        logger.exception("Loading recipes failed, starting with an empty collection")


def _plain_text(body: str) -> Response:
    return Response(body, mimetype="text/plain")


__all__ = ["create_app", "Ingredient", "Recipe"]
