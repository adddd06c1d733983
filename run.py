"""CLI entrypoint: load board(s), propagate, and report results."""

import argparse
import csv
import json
import os
from pathlib import Path

from tqdm import tqdm

from solver import board_status, solve_board
from src.gridloop.board import render_board
from src.gridloop.loader import load_boards
from src.utils.io import save_json
from src.utils.trace import enable_tracing, get_tracer, reset_tracer

BOARD_SUFFIXES = [".txt", ".json", ".jsonl", ".parquet", ".csv"]


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Propagate single-loop grid boards to a fixed point")
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        default=None,
        help="Path to a board file or directory of board files (default: $GRIDLOOP_DATA_PATH)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write results (.csv or .json)")
    parser.add_argument("--trace-dir", type=Path, default=None, help="Write one trace CSV per board here")
    parser.add_argument("--max", type=int, default=0, help="Max number of boards to process (0 = all)")
    parser.add_argument(
        "--no-sweeps",
        action="store_true",
        help="Only run local propagation; skip the in/out and loop-connection sweeps.",
    )
    args = parser.parse_args(argv)
    if args.input is None:
        env_path = os.environ.get("GRIDLOOP_DATA_PATH")
        if not env_path:
            parser.error("either an input path or GRIDLOOP_DATA_PATH is required")
        args.input = Path(env_path)
    return args


def collect_boards(path: Path) -> list:
    if path.is_file():
        return load_boards(str(path))
    if path.is_dir():
        boards = []
        for file_path in sorted(path.iterdir()):
            if file_path.suffix in BOARD_SUFFIXES:
                boards.extend(load_boards(str(file_path)))
        return boards
    raise ValueError(f"Input path {path} is neither file nor directory")


def write_results_csv(results, output_path: Path):
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["id", "status", "decided_edges", "decided_lines", "board", "steps"])

        for r in results:
            writer.writerow([
                r["id"],
                r["status"],
                r["decided_edges"],
                r["decided_lines"],
                json.dumps(r["board"], ensure_ascii=False, separators=(",", ":")),
                r["steps"],
            ])


def main(argv=None):
    args = parse_args(argv)
    boards = collect_boards(args.input)
    if args.max > 0:
        boards = boards[:args.max]

    results = []
    for record in tqdm(boards, desc="Propagating", unit="board"):
        reset_tracer()
        enable_tracing()
        tracer = get_tracer()
        board_id = record.get("id", "unknown")

        try:
            grid_loop = solve_board(record["board"], sweeps=not args.no_sweeps)
            summary = tracer.summary()
            results.append({
                "id": board_id,
                "status": board_status(grid_loop),
                "decided_edges": grid_loop.num_decided_edges(),
                "decided_lines": grid_loop.num_decided_lines(),
                "board": render_board(grid_loop),
                "steps": summary["num_decisions"],
            })
        except ValueError as e:
            print(f"ERROR: Failed to read board {board_id}: {e}")
            results.append({
                "id": board_id,
                "status": "error",
                "decided_edges": -1,
                "decided_lines": -1,
                "board": [],
                "steps": -1,
            })

        if args.trace_dir:
            tracer.to_csv(args.trace_dir / f"{board_id}.csv")

    if args.output:
        if args.output.suffix == ".json":
            save_json(args.output, results)
        else:
            write_results_csv(results, args.output)
    else:
        for r in results:
            print(f"{r['id']}: {r['status']} ({r['decided_lines']} lines, {r['decided_edges']} edges decided)")
            for row in r["board"]:
                print(f"  {row}")
    return results


if __name__ == "__main__":
    main()
