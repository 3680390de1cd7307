# pairing_core/reporting/export_xlsx.py
from __future__ import annotations

from pathlib import Path
from typing import Dict

import pandas as pd


def export_result_xlsx(out_path: str, sheets: Dict[str, pd.DataFrame]) -> str:
    """One sheet per frame; the calendar sheet keeps its time index."""
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="openpyxl") as w:
        for name, df in sheets.items():
            keep_index = df.index.name is not None
            df.to_excel(w, sheet_name=name, index=keep_index)
    return out_path
