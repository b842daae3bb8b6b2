"""WSGI entrypoint for the Filed Recipes application.

The Flask development server is not started from this module. Local
development can use ``flask --app main run`` which imports the ``app`` object
defined below; ``RECIPES_PATH`` selects the recipe file.
"""

from filed_recipes import create_app

app = create_app()


__all__ = ["app"]
