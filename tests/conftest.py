import json
import os

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
FIXTURES = os.path.join(ROOT, "test_vectors", "p256_ecdsa_fixtures.json")


@pytest.fixture
def fixtures_path():
    return FIXTURES


@pytest.fixture
def fixtures():
    with open(FIXTURES) as f:
        return json.load(f)


@pytest.fixture
def seed_keys(fixtures):
    return [int(k) for k in fixtures["seed_privkeys"]]


@pytest.fixture
def sample_document(fixtures):
    doc = fixtures["document"]
    return doc["payload"], doc["public_key_pem"]
