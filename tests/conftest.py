import logging

import pytest

from layout_ai.config import Settings
from layout_ai.corpus.store import TemplateCorpus
from layout_ai.main import build_service
from layout_ai.paths import default_corpus_path
from layout_ai.store.learning_store import LearningStore

from tests.fakes import FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def logger():
    lg = logging.getLogger("layout_ai.tests")
    lg.setLevel(logging.DEBUG)
    return lg


@pytest.fixture
def store():
    return LearningStore()


@pytest.fixture(scope="session")
def corpus():
    return TemplateCorpus.load(default_corpus_path())


@pytest.fixture
def settings(tmp_path):
    return Settings(log_dir=str(tmp_path / "logs"), corpus_path=str(default_corpus_path()))


@pytest.fixture
def service(settings, corpus, store, clock, logger):
    svc = build_service(settings=settings, store=store, corpus=corpus, clock=clock, logger=logger)
    yield svc
    svc.close()
