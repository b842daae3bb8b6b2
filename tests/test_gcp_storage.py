from __future__ import annotations

from pathlib import Path
import io
import sys

import pytest
from google.api_core import exceptions as gcloud_exceptions

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from filed_recipes.gcp_storage import CloudStorageRecipeRepository
from filed_recipes.models import Ingredient


class _BlobWriter(io.StringIO):
    def __init__(self, bucket: "FakeBucket", name: str) -> None:
        super().__init__()
        self._bucket = bucket
        self._name = name

    def close(self) -> None:
        if not self.closed:
            self._bucket.objects[self._name] = self.getvalue()
        super().close()


class FakeBlob:
    def __init__(self, bucket: "FakeBucket", name: str) -> None:
        self._bucket = bucket
        self.name = name

    def open(self, mode: str = "r", **kwargs):
        self._bucket.open_calls.append((self.name, mode, kwargs))
        if mode == "w":
            return _BlobWriter(self._bucket, self.name)
        if self.name not in self._bucket.objects:
            raise gcloud_exceptions.NotFound(f"{self.name} does not exist")
        return io.StringIO(self._bucket.objects[self.name])


class FakeBucket:
    def __init__(self, name: str) -> None:
        self.name = name
        self.objects: dict[str, str] = {}
        self.open_calls: list = []

    def blob(self, name: str) -> FakeBlob:
        return FakeBlob(self, name)


class FakeClient:
    def __init__(self) -> None:
        self.buckets: dict[str, FakeBucket] = {}

    def bucket(self, name: str) -> FakeBucket:
        return self.buckets.setdefault(name, FakeBucket(name))


def create_repository(content: str | None = None):
    client = FakeClient()
    if content is not None:
        client.bucket("kitchen").objects["recipes.txt"] = content
    repository = CloudStorageRecipeRepository(bucket_name="kitchen", client=client)
    return repository, client.bucket("kitchen")


@pytest.mark.parametrize(
    "kwargs",
    [{"bucket_name": ""}, {"bucket_name": "kitchen", "blob_name": ""}],
)
def test_requires_bucket_and_blob_names(kwargs):
    with pytest.raises(ValueError):
        CloudStorageRecipeRepository(client=FakeClient(), **kwargs)


def test_path_names_the_blob_not_a_local_file():
    repository = CloudStorageRecipeRepository(
        bucket_name="kitchen", blob_name="menus/recipes.txt", client=FakeClient()
    )

    assert repository.path == "gs://kitchen/menus/recipes.txt"


def test_empty_blob_name_is_reported_as_blob_error():
    with pytest.raises(ValueError, match="blob name"):
        CloudStorageRecipeRepository(bucket_name="kitchen", blob_name="", client=FakeClient())


def test_loads_recipes_from_blob():
    repository, _ = create_repository(
        "[Recept]\nWaffles\n[Ingredienser]\n3;dl;milk\n"
        "[Recept]\nCrepes\n[Instruktioner]\nFry thin.\n"
    )

    repository.load()

    assert [recipe.name for recipe in repository.get_all()] == ["Crepes", "Waffles"]
    assert repository.get_at(1).ingredients == [Ingredient("3", "dl", "milk")]
    assert repository.path == "gs://kitchen/recipes.txt"


def test_missing_blob_raises_not_found():
    repository, _ = create_repository()

    with pytest.raises(gcloud_exceptions.NotFound):
        repository.load()

    assert len(repository) == 0


def test_save_writes_blob_as_text():
    repository, bucket = create_repository("[Recept]\nWaffles\n[Instruktioner]\nBake.\n")
    repository.load()

    repository.save()

    assert bucket.objects["recipes.txt"] == (
        "[Recept]\nWaffles\n\n[Ingredienser]\n\n[Instruktioner]\nBake.\n\n"
    )
    name, mode, kwargs = bucket.open_calls[-1]
    assert (name, mode) == ("recipes.txt", "w")
    assert kwargs["content_type"] == "text/plain"
    assert not repository.is_modified


def test_delete_then_save_removes_recipe_from_blob():
    repository, bucket = create_repository("[Recept]\nWaffles\n[Recept]\nCrepes\n")
    repository.load()

    repository.delete_at(0)
    repository.save()

    assert "Crepes" not in bucket.objects["recipes.txt"]
    assert "Waffles" in bucket.objects["recipes.txt"]
