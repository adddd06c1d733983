import json
import os
from typing import Any, Dict, List, Optional

import pandas as pd

from src.utils.io import load_json


def load_boards(file_path: str) -> List[Dict[str, Any]]:
    """
    Reads boards from a file. Handles .txt, .json, .jsonl, .csv and .parquet.
    Returns a list of {"id": ..., "board": [rows]} dictionaries.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    stem = os.path.splitext(os.path.basename(file_path))[0]

    def _normalize_board(value: Any) -> Optional[List[str]]:
        if isinstance(value, str):
            rows = value.split("\n")
        elif hasattr(value, "tolist"):
            rows = [str(r) for r in value.tolist()]
        elif isinstance(value, (list, tuple)):
            rows = [str(r) for r in value]
        else:
            return None
        rows = [r.rstrip("\r") for r in rows]
        while rows and not rows[-1].strip():
            rows.pop()
        return rows or None

    def _normalize_records(records: List[Any]) -> List[Dict[str, Any]]:
        out = []
        for idx, record in enumerate(records):
            if not isinstance(record, dict):
                continue
            board = _normalize_board(record.get("board", record.get("grid")))
            if board is None:
                continue
            record = dict(record)
            record["board"] = board
            if record.get("id") in (None, ""):
                record["id"] = f"{stem}_{idx}"
            out.append(record)
        return out

    # Case 1: Parquet / CSV via pandas
    if file_path.endswith(".parquet") or file_path.endswith(".csv"):
        try:
            if file_path.endswith(".parquet"):
                df = pd.read_parquet(file_path)
            else:
                df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
            return _normalize_records(df.to_dict(orient="records"))
        except Exception as e:
            print(f"Error reading {file_path}: {e}")
            return []

    # Case 2: plain text, boards separated by blank lines
    if file_path.endswith(".txt"):
        with open(file_path, "r", encoding="utf-8") as f:
            blocks = f.read().split("\n\n")
        boards = [b for b in blocks if b.strip()]
        return _normalize_records([{"board": b} for b in boards])

    # Case 3: JSON File (array or object)
    if file_path.endswith(".json"):
        try:
            payload = load_json(file_path)
            if isinstance(payload, list):
                return _normalize_records(payload)
            if isinstance(payload, dict):
                return _normalize_records([payload])
            return []
        except json.JSONDecodeError:
            # Some sources use ".json" but actually store JSONL.
            pass

    # Case 4: JSONL File
    data = []
    with open(file_path, "r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                try:
                    obj = json.loads(line)
                except json.JSONDecodeError:
                    continue
                data.append(obj)
    return _normalize_records(data)
