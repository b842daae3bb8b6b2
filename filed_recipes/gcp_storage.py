from __future__ import annotations

import os
from typing import Optional, TextIO

from google.cloud import storage

from .storage import BaseRecipeRepository


class CloudStorageRecipeRepository(BaseRecipeRepository):
    """Recipe storage whose recipe file lives in a Cloud Storage bucket.

    Loading a blob that does not exist raises
    :class:`google.api_core.exceptions.NotFound`, leaving the held recipes
    untouched.
    """

    def __init__(
        self,
        *,
        bucket_name: str,
        blob_name: str = "recipes.txt",
        project: Optional[str] = None,
        client: Optional[storage.Client] = None,
    ) -> None:
        if not bucket_name:
            raise ValueError("A Cloud Storage bucket name is required.")
        if not blob_name:
            raise ValueError("A recipe blob name is required.")

        super().__init__()
        self._bucket_name = bucket_name
        self._blob_name = blob_name

        self._storage_client = client if client is not None else storage.Client(project=project)
        self._bucket = self._storage_client.bucket(bucket_name)

    @classmethod
    def from_env(cls) -> "CloudStorageRecipeRepository":
        """Build a storage instance from environment variables."""

        project = os.environ.get("GCP_PROJECT")
        bucket_name = os.environ.get("GCS_BUCKET", "")
        blob_name = os.environ.get("RECIPES_BLOB", "recipes.txt")
        return cls(bucket_name=bucket_name, blob_name=blob_name, project=project)

    def _open_for_reading(self) -> TextIO:
        return self._bucket.blob(self._blob_name).open("r", encoding="utf-8")

    def _open_for_writing(self) -> TextIO:
        return self._bucket.blob(self._blob_name).open(
            "w", encoding="utf-8", content_type="text/plain"
        )

    def _location(self) -> str:
        return f"gs://{self._bucket_name}/{self._blob_name}"


__all__ = ["CloudStorageRecipeRepository"]
