from pathlib import Path

import pytest

from kubeshape.schema.catalog import load_catalog

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def catalog_path() -> Path:
    return FIXTURES / "openapi_v1.yaml"


@pytest.fixture
def catalog(catalog_path):
    return load_catalog(catalog_path)
