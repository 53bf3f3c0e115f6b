"""Built-in sample datasets loaded from YAML files.

Layout:
    datasets/<collection>.yaml: a YAML list of records, in seeding order.

Records without an ``id`` get a fresh one on every load. Any key ending in
``_offset_days`` is replaced by the key without the suffix, holding the ISO
date that many days from today (e.g. ``start_date_offset_days: 1`` becomes
``start_date: <tomorrow>``).
"""

import copy
import logging
from collections.abc import Callable
from datetime import date, timedelta
from pathlib import Path

import yaml

from tripstore.application.interfaces import SampleDataRepository
from tripstore.domain.entities import Record, new_record_id

logger = logging.getLogger(__name__)

DATASETS_DIR = Path(__file__).resolve().parent / "datasets"

_OFFSET_SUFFIX = "_offset_days"


class YamlSampleDataRepository(SampleDataRepository):
    """Reads sample datasets from ``<datasets_dir>/<collection>.yaml``."""

    def __init__(
        self,
        datasets_dir: str | Path = DATASETS_DIR,
        today: Callable[[], date] = date.today,
    ):
        self._datasets_dir = Path(datasets_dir)
        self._today = today
        self._cache: dict[str, list[Record]] = {}

    def load(self, collection: str) -> list[Record]:
        raw = self._read(collection)
        today = self._today()
        return [self._materialize(record, today) for record in raw]

    def available(self) -> list[str]:
        """Names of collections that ship a sample dataset."""
        return sorted(path.stem for path in self._datasets_dir.glob("*.yaml"))

    def _read(self, collection: str) -> list[Record]:
        if collection not in self._cache:
            path = self._datasets_dir / f"{collection}.yaml"
            if not path.exists():
                logger.debug("No sample dataset for %s", collection)
                self._cache[collection] = []
            else:
                with path.open("r", encoding="utf-8") as fh:
                    data = yaml.safe_load(fh) or []
                if not isinstance(data, list):
                    raise ValueError(f"Sample dataset {path} must be a YAML list")
                self._cache[collection] = data
                logger.debug("Loaded %d sample %s records", len(data), collection)
        return self._cache[collection]

    @staticmethod
    def _materialize(raw: Record, today: date) -> Record:
        record: Record = {}
        if not raw.get("id"):
            record["id"] = new_record_id()
        for key, value in raw.items():
            if key.endswith(_OFFSET_SUFFIX):
                field_name = key[: -len(_OFFSET_SUFFIX)]
                record[field_name] = (today + timedelta(days=int(value))).isoformat()
            else:
                record[key] = copy.deepcopy(value)
        return record
