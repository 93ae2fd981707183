"""layout_ai.corpus.store

Loads the candidate template corpus from a JSON Lines file into immutable CandidateTemplate records.

- Designed for small corpora (tens to a few thousand templates) held fully in memory.
- Loaded once at startup; read-only during requests, so no locking is needed.
- Structural hints are derived here, once, from the SVG element tags.

Environment variables:
  LAYOUT_AI_CORPUS: path to the corpus file (default: packaged layout_ai/data/templates.jsonl)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, Optional

import pandas as pd

from layout_ai.contracts.models import CandidateTemplate, EditableField
from layout_ai.errors import ConfigError


REQUIRED_COLUMNS = ["id", "name", "category", "description", "keywords", "tags", "editable_fields", "popularity"]

# SVG element tag -> structure hint
SVG_STRUCTURE_HINTS: dict[str, str] = {
    "rect": "grid",
    "text": "hierarchical",
    "path": "freeform",
    "line": "linear",
}

_SVG_TAG = re.compile(r"<\s*([A-Za-z][A-Za-z0-9]*)")


def structure_hints(svg: str) -> frozenset[str]:
    tags = {t.lower() for t in _SVG_TAG.findall(svg or "")}
    return frozenset(hint for tag, hint in SVG_STRUCTURE_HINTS.items() if tag in tags)


def _norm_set(values: Any) -> frozenset[str]:
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, (list, tuple)):
        return frozenset()
    return frozenset(str(v).strip().lower() for v in values if str(v).strip())


def _field(raw: dict[str, Any]) -> EditableField:
    options = raw.get("options") or ()
    return EditableField(
        id=str(raw["id"]),
        type=str(raw.get("type") or "text"),
        x=float(raw.get("x", 0)),
        y=float(raw.get("y", 0)),
        width=float(raw.get("width", 0)),
        height=float(raw.get("height", 0)),
        placeholder=(str(raw["placeholder"]) if raw.get("placeholder") else None),
        options=tuple(str(o) for o in options),
    )


def template_from_record(rec: dict[str, Any]) -> CandidateTemplate:
    svg = rec.get("svg_template")
    svg = svg if isinstance(svg, str) else ""
    return CandidateTemplate(
        id=str(rec["id"]),
        name=str(rec["name"]),
        category=str(rec["category"]).strip().lower(),
        description=str(rec.get("description") or ""),
        keywords=_norm_set(rec.get("keywords")),
        tags=_norm_set(rec.get("tags")),
        editable_fields=tuple(_field(f) for f in (rec.get("editable_fields") or [])),
        popularity=int(rec["popularity"]),
        svg_template=svg,
        structure_hints=structure_hints(svg),
    )


def validate_frame(df: pd.DataFrame) -> list[str]:
    """Return a list of problems with a raw corpus frame; empty means loadable."""
    problems: list[str] = []
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        problems.append(f"Missing columns: {missing}")
        return problems
    if df.empty:
        problems.append("Corpus is empty")
        return problems

    dup = df["id"].astype(str)[df["id"].astype(str).duplicated()].tolist()
    if dup:
        problems.append(f"Duplicate template ids: {sorted(set(dup))}")

    pop = pd.to_numeric(df["popularity"], errors="coerce")
    bad_pop = df.loc[pop.isna() | (pop < 0) | (pop > 100) | (pop % 1 != 0), "id"].astype(str).tolist()
    if bad_pop:
        problems.append(f"Popularity must be an integer in [0, 100]: {bad_pop}")

    for _, row in df.iterrows():
        fields = row["editable_fields"]
        if not isinstance(fields, list):
            problems.append(f"{row['id']}: editable_fields must be a list")
            continue
        ids = [f.get("id") for f in fields if isinstance(f, dict)]
        if len(ids) != len(fields) or any(not i for i in ids):
            problems.append(f"{row['id']}: every editable field needs an id")
        elif len(set(ids)) != len(ids):
            problems.append(f"{row['id']}: duplicate editable field ids")
    return problems


class TemplateCorpus:
    """In-memory, read-only candidate corpus."""

    def __init__(self, templates: Iterable[CandidateTemplate], source: str = "<memory>"):
        self._templates: tuple[CandidateTemplate, ...] = tuple(templates)
        self._by_id: dict[str, CandidateTemplate] = {t.id: t for t in self._templates}
        self.source = source

    @staticmethod
    def read_frame(path: str | Path) -> pd.DataFrame:
        p = Path(path).expanduser()
        if not p.exists():
            raise ConfigError(f"Corpus file not found: {p}")
        if p.suffix == ".jsonl":
            return pd.read_json(p, lines=True, dtype=False, convert_dates=False)
        if p.suffix == ".json":
            return pd.read_json(p, dtype=False, convert_dates=False)
        raise ConfigError(f"Unsupported corpus format: {p.suffix}")

    @classmethod
    def load(cls, path: str | Path, logger: Optional[logging.Logger] = None) -> "TemplateCorpus":
        df = cls.read_frame(path)
        problems = validate_frame(df)
        if problems:
            raise ConfigError(f"Invalid corpus {path}: " + "; ".join(problems))
        records = df.to_dict(orient="records")
        corpus = cls((template_from_record(r) for r in records), source=str(path))
        if logger:
            logger.info("Loaded %d templates from %s", len(corpus), path)
        return corpus

    @classmethod
    def from_records(cls, records: Iterable[dict[str, Any]]) -> "TemplateCorpus":
        return cls(template_from_record(r) for r in records)

    def __len__(self) -> int:
        return len(self._templates)

    def __iter__(self):
        return iter(self._templates)

    def templates(self) -> tuple[CandidateTemplate, ...]:
        return self._templates

    def get(self, template_id: str) -> Optional[CandidateTemplate]:
        return self._by_id.get(template_id)

    def categories(self) -> list[str]:
        return sorted({t.category for t in self._templates})

    def summary(self) -> pd.DataFrame:
        """Per-category template count, mean popularity and mean field count."""
        if not self._templates:
            return pd.DataFrame(columns=["category", "templates", "avg_popularity", "avg_fields"])
        df = pd.DataFrame(
            [{"category": t.category, "popularity": t.popularity, "fields": t.field_count} for t in self._templates]
        )
        out = (
            df.groupby("category")
            .agg(templates=("popularity", "size"), avg_popularity=("popularity", "mean"), avg_fields=("fields", "mean"))
            .reset_index()
            .sort_values("category")
        )
        return out.round(2)
