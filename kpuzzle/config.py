from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
import logging
import os

from kpuzzle.heuristics.pattern_db import PartitionModel

HEURISTICS = ("MANHATTAN", "PATTERN")

# 5-5-5 split: tiles 11-15, 6-10 and 1-5, each together with the blank.
MODEL_555 = PartitionModel(
    (0xFFFFF0000000000F, 0x00000FFFFF00000F, 0x0000000000FFFFFF),
    name="555",
)
# Five groups of three consecutive tiles. Weaker, but builds in seconds.
MODEL_33333 = PartitionModel(
    (0xFFF000000000000F, 0x000FFF000000000F, 0x000000FFF000000F,
     0x000000000FFF000F, 0x000000000000FFFF),
    name="33333",
)
PARTITION_MODELS: Dict[str, PartitionModel] = {m.name: m for m in (MODEL_555, MODEL_33333)}
DEFAULT_MODEL = "555"


def default_pdb_dir() -> Path:
    return Path(os.environ.get("KPUZZLE_PDB_DIR", "."))


def default_pdb_file(model_name: str) -> Path:
    return default_pdb_dir() / f"patternDB_{model_name}.data"


@dataclass
class SolverSettings:
    heuristic: str = "MANHATTAN"
    model: str = DEFAULT_MODEL
    pdb_file: Optional[Path] = None
    interactive: bool = False
    refresh_period: float = 0.2
    workers: int = 1

    def __post_init__(self):
        self.heuristic = self.heuristic.upper()
        if self.heuristic not in HEURISTICS:
            raise ValueError(f"heuristic must be one of {HEURISTICS}, got {self.heuristic!r}")
        if self.model not in PARTITION_MODELS:
            raise ValueError(f"unknown partition model {self.model!r}")
        if self.pdb_file is None:
            self.pdb_file = default_pdb_file(self.model)
        self.pdb_file = Path(self.pdb_file)

    @property
    def partition_model(self) -> PartitionModel:
        return PARTITION_MODELS[self.model]


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
