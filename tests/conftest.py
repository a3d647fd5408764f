"""Shared fixtures.

Generated records are seeded once per run. Re-run a failure with the seed
printed in the pytest header:

    SCOUTNOTES_TEST_SEED=1234 pytest
"""

import os
import random

import pytest

from scoutnotes.dao import InMemoryTeamStore
from scoutnotes.services import TeamNotesService
from scoutnotes.testing import RecordGenerator

RUN_SEED = int(os.environ.get("SCOUTNOTES_TEST_SEED") or random.SystemRandom().randrange(2**32))


def pytest_report_header(config):
    return f"scoutnotes seed: {RUN_SEED} (set SCOUTNOTES_TEST_SEED to reproduce)"


@pytest.fixture
def generator() -> RecordGenerator:
    """Provide a RecordGenerator seeded for this run."""
    return RecordGenerator(seed=RUN_SEED)


@pytest.fixture
def store() -> InMemoryTeamStore:
    """Provide an empty in-memory team store."""
    return InMemoryTeamStore()


@pytest.fixture
def service(store: InMemoryTeamStore) -> TeamNotesService:
    """Provide a TeamNotesService over the in-memory store."""
    return TeamNotesService(store)
