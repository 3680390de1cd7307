# pairing_core/io_layer/paths.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class InputPaths:
    """
    workbook: roster xlsx (people / subjects / expertise / needs / availability
              / meetings / conflicts sheets; see WorkbookConfig for the names)
    out: where reports are written
    """
    workbook: str
    out: Optional[str] = None
