"""
Puzzle Catalog

Loads the puzzle data file (a JSON object keyed by difficulty bucket) and
exposes it as an immutable, restartable collection of PuzzleRecord values.

The file layout is the one produced by the catalog builder:

    {
      "beginner":     [{"id": "b1", "fen": "...", "solution": ["Qg7#"]}, ...],
      "intermediate": [...],
      "expert":       [...]
    }

Extra per-puzzle fields (description, difficulty, estimatedSolveTime, source)
are accepted; description and source are kept on the record.
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from .errors import MalformedCatalog
from .puzzle_types import BUCKET_ORDER, Bucket, PuzzleRecord

logger = logging.getLogger(__name__)

CatalogSource = Union[str, Path, Mapping[str, Any]]


# ═══════════════════════════════════════════════════════════
# Schemas
# ═══════════════════════════════════════════════════════════


class CatalogEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: StrictStr = Field(min_length=1)
    fen: StrictStr = Field(min_length=1)
    solution: List[StrictStr] = Field(min_length=1)
    description: Optional[str] = None
    source: Optional[Dict[str, Any]] = None


class CatalogFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    beginner: List[CatalogEntry] = Field(default_factory=list)
    intermediate: List[CatalogEntry] = Field(default_factory=list)
    expert: List[CatalogEntry] = Field(default_factory=list)


def _format_validation_errors(exc: ValidationError) -> List[str]:
    out = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        out.append(f"{loc}: {err.get('msg')}")
    return out


def _read_source(source: CatalogSource) -> Any:
    if isinstance(source, Mapping):
        return source

    if isinstance(source, str) and source.lstrip().startswith(("{", "[")):
        text = source
    else:
        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise MalformedCatalog(f"Cannot read catalog {path}: {exc}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedCatalog(f"Catalog is not valid JSON: {exc}") from exc


# ═══════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════


class PuzzleCatalog:
    """
    Read-only puzzle collection grouped by bucket.

    Safe to share between verification threads: nothing mutates it after
    construction.
    """

    def __init__(self, buckets: Mapping[Bucket, Sequence[PuzzleRecord]]):
        frozen = {b: tuple(buckets.get(b, ())) for b in BUCKET_ORDER}
        self._buckets: Mapping[Bucket, Tuple[PuzzleRecord, ...]] = MappingProxyType(frozen)
        self._by_id: Dict[str, PuzzleRecord] = {}
        for bucket, records in frozen.items():
            for record in records:
                if record.bucket != bucket:
                    raise MalformedCatalog(
                        f"Puzzle {record.id!r} is filed under {bucket.value} "
                        f"but belongs to {record.bucket.value}"
                    )
                if record.id in self._by_id:
                    raise MalformedCatalog(f"Duplicate puzzle id {record.id!r}")
                self._by_id[record.id] = record

    @classmethod
    def load(cls, source: CatalogSource) -> PuzzleCatalog:
        """
        Load and validate a catalog.

        `source` may be a file path, JSON text, or an already decoded mapping.
        Raises MalformedCatalog on any structural problem; nothing is partially
        loaded.
        """
        raw = _read_source(source)
        if not isinstance(raw, Mapping):
            raise MalformedCatalog(
                f"Catalog must be an object keyed by bucket, got {type(raw).__name__}"
            )
        try:
            parsed = CatalogFile.model_validate(raw)
        except ValidationError as exc:
            raise MalformedCatalog("Catalog failed validation", _format_validation_errors(exc)) from exc

        buckets: Dict[Bucket, List[PuzzleRecord]] = {}
        for bucket in BUCKET_ORDER:
            entries: List[CatalogEntry] = getattr(parsed, bucket.value)
            buckets[bucket] = [
                PuzzleRecord(
                    id=e.id,
                    bucket=bucket,
                    start=e.fen,
                    solution=tuple(e.solution),
                    description=e.description,
                    source=e.source,
                )
                for e in entries
            ]

        catalog = cls(buckets)
        logger.info(
            "Loaded %d puzzles (%s)",
            len(catalog),
            ", ".join(f"{b.value}={len(catalog.by_bucket(b))}" for b in BUCKET_ORDER),
        )
        return catalog

    @property
    def buckets(self) -> Mapping[Bucket, Tuple[PuzzleRecord, ...]]:
        return self._buckets

    def iterate(self) -> Iterator[Tuple[Bucket, PuzzleRecord]]:
        """Yield (bucket, record) pairs in bucket order, then file order."""
        for bucket in BUCKET_ORDER:
            for record in self._buckets[bucket]:
                yield bucket, record

    def __iter__(self) -> Iterator[Tuple[Bucket, PuzzleRecord]]:
        return self.iterate()

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, puzzle_id: str) -> Optional[PuzzleRecord]:
        return self._by_id.get(puzzle_id)

    def by_bucket(self, bucket: Bucket | str) -> Tuple[PuzzleRecord, ...]:
        return self._buckets[Bucket(bucket)]

    def random_puzzle(self, bucket: Bucket | str, rng: Optional[random.Random] = None) -> Optional[PuzzleRecord]:
        records = self.by_bucket(bucket)
        if not records:
            return None
        return (rng or random).choice(records)

    def to_dict(self) -> dict:
        return {
            b.value: [r.to_dict() for r in self._buckets[b]]
            for b in BUCKET_ORDER
        }

    def dump(self, path: Union[str, Path]) -> None:
        """Write the catalog in the data file format."""
        with Path(path).open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
            f.write("\n")


def load_catalog(source: CatalogSource) -> PuzzleCatalog:
    return PuzzleCatalog.load(source)
