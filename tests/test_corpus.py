import json

import pandas as pd
import pytest

from layout_ai.corpus.store import TemplateCorpus, structure_hints, validate_frame
from layout_ai.errors import ConfigError

from tests.fakes import template_record


def test_packaged_corpus_loads(corpus):
    assert len(corpus) == 16
    assert corpus.get("cornell-notes").popularity == 90
    assert "productivity" in corpus.categories()
    weekly = corpus.get("weekly-planner")
    assert "weekly" in weekly.keywords
    assert {"grid", "hierarchical", "linear"} <= weekly.structure_hints


def test_summary_per_category(corpus):
    summary = corpus.summary()
    assert list(summary.columns) == ["category", "templates", "avg_popularity", "avg_fields"]
    assert summary["templates"].sum() == 16


def test_structure_hints():
    assert structure_hints("<svg><path d='M0 0'/><text>x</text></svg>") == frozenset({"freeform", "hierarchical"})
    assert structure_hints("") == frozenset()


def test_validate_frame_problems():
    good = template_record("a")
    dup = template_record("a")
    bad_pop = template_record("b", popularity=150)
    no_field_id = template_record("c", fields=[{"type": "text"}])
    problems = validate_frame(pd.DataFrame([good, dup, bad_pop, no_field_id]))
    text = " ".join(problems)
    assert "Duplicate template ids" in text
    assert "Popularity" in text
    assert "every editable field needs an id" in text


def test_missing_columns():
    assert validate_frame(pd.DataFrame([{"id": "x"}]))[0].startswith("Missing columns")


def test_load_rejects_invalid_file(tmp_path):
    p = tmp_path / "bad.jsonl"
    p.write_text(json.dumps(template_record("a", popularity=-5)) + "\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        TemplateCorpus.load(p)


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        TemplateCorpus.load(tmp_path / "nope.jsonl")


def test_load_round_trip(tmp_path):
    p = tmp_path / "small.jsonl"
    rows = [template_record("a", keywords=["Weekly"]), template_record("b", category="Study")]
    p.write_text("\n".join(json.dumps(r) for r in rows) + "\n", encoding="utf-8")
    corpus = TemplateCorpus.load(p)
    assert [t.id for t in corpus] == ["a", "b"]
    assert corpus.get("a").keywords == frozenset({"weekly"})
    assert corpus.get("b").category == "study"
