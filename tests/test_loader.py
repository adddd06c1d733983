import json

import pandas as pd
import pytest

from src.gridloop.loader import load_boards

BOARD = [
    "+-+ + +",
    "      x",
    "+ + + +",
    "       ",
    "+ + + +",
    "      |",
    "+x+ + +",
]


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_boards(str(tmp_path / "missing.json"))


def test_load_jsonl(tmp_path):
    path = tmp_path / "boards.jsonl"
    path.write_text(
        json.dumps({"id": "a", "board": BOARD}) + "\n"
        + "not json\n"
        + json.dumps({"grid": "\n".join(BOARD)}) + "\n",
        encoding="utf-8",
    )

    boards = load_boards(str(path))

    assert [b["id"] for b in boards] == ["a", "boards_1"]
    assert boards[0]["board"] == BOARD
    assert boards[1]["board"] == BOARD


def test_load_json_object_and_array(tmp_path):
    single = tmp_path / "single.json"
    single.write_text(json.dumps({"id": "one", "board": BOARD}), encoding="utf-8")
    many = tmp_path / "many.json"
    many.write_text(json.dumps([{"board": BOARD}, {"id": "skip"}]), encoding="utf-8")

    assert [b["id"] for b in load_boards(str(single))] == ["one"]
    assert [b["id"] for b in load_boards(str(many))] == ["many_0"]


def test_json_suffix_with_jsonl_content(tmp_path):
    path = tmp_path / "lines.json"
    path.write_text(
        json.dumps({"id": "a", "board": BOARD}) + "\n" + json.dumps({"id": "b", "board": BOARD}) + "\n",
        encoding="utf-8",
    )
    assert [b["id"] for b in load_boards(str(path))] == ["a", "b"]


def test_load_txt_splits_on_blank_lines(tmp_path):
    path = tmp_path / "boards.txt"
    path.write_text("\n".join(BOARD) + "\n\n" + "\n".join(BOARD) + "\n", encoding="utf-8")

    boards = load_boards(str(path))

    assert [b["id"] for b in boards] == ["boards_0", "boards_1"]
    assert boards[1]["board"] == BOARD


def test_load_csv_with_pandas(tmp_path):
    path = tmp_path / "boards.csv"
    pd.DataFrame([
        {"id": "c1", "board": "\n".join(BOARD)},
        {"id": "", "board": "\n".join(BOARD)},
    ]).to_csv(path, index=False)

    boards = load_boards(str(path))

    assert [b["id"] for b in boards] == ["c1", "boards_1"]
    assert boards[0]["board"] == BOARD


def test_load_parquet_with_pandas(tmp_path):
    pytest.importorskip("pyarrow")
    path = tmp_path / "boards.parquet"
    pd.DataFrame([{"id": "p1", "board": BOARD}]).to_parquet(path)

    boards = load_boards(str(path))

    assert boards[0]["id"] == "p1"
    assert boards[0]["board"] == BOARD
