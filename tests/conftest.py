"""Pytest fixtures for Family Board tests."""

import pytest

from familyboard.config import BoardConfig
from familyboard.ledger import LedgerWriter
from familyboard.paths import BoardPaths
from familyboard.store import ArtifactStore

from fakes import FakeHistoryBackend


@pytest.fixture
def temp_home(tmp_path):
    """Board home directory inside pytest's temporary directory."""
    home = tmp_path / "FamilyHomepage"
    home.mkdir()
    return home


@pytest.fixture
def board_config(temp_home):
    return BoardConfig(home_path=temp_home)


@pytest.fixture
def board_paths(board_config):
    """BoardPaths with the store directory already present."""
    paths = BoardPaths.from_config(board_config)
    paths.notes.mkdir(parents=True, exist_ok=True)
    return paths


@pytest.fixture
def fake_backend():
    return FakeHistoryBackend()


@pytest.fixture
def ledger_writer(board_paths):
    return LedgerWriter(board_paths.ledger_file)


@pytest.fixture
def store(board_paths, fake_backend, ledger_writer):
    """ArtifactStore over the temporary store directory and the fake backend."""
    return ArtifactStore(board_paths.notes, fake_backend, ledger_writer=ledger_writer)
