from __future__ import annotations
import json, os, sys, traceback, zipfile
from datetime import datetime
from pathlib import Path

import pandas as pd

# ---------- Paths ----------
ROOT = Path.cwd()
LOG_PATH = ROOT / "logs" / "markwatch.log"
OUTPUT_PATH = ROOT / "output.xlsx"
STATE_PATH = ROOT / "state" / "cursor.json"
SHEET = "Mark Data"

def human(n: float) -> str:
    return f"{n:,.0f}"

def workbook_count(path: Path, sheet: str = SHEET) -> int | None:
    """Data rows in the mark sheet, None if the workbook is absent, -1 if unreadable."""
    if not path.exists():
        return None
    try:
        df = pd.read_excel(str(path), sheet_name=sheet, dtype=str, engine="openpyxl")
    except (OSError, ValueError, KeyError, zipfile.BadZipFile):
        return -1
    return int(len(df.dropna(how="all")))

def latest_mark(path: Path, sheet: str = SHEET) -> tuple[str, str, str] | None:
    if not path.exists():
        return None
    try:
        df = pd.read_excel(str(path), sheet_name=sheet, dtype=str, keep_default_na=False, engine="openpyxl")
    except (OSError, ValueError, KeyError, zipfile.BadZipFile):
        return None
    if df.empty:
        return None
    last = df.iloc[-1]
    return tuple(str(v) for v in last.iloc[:3])

def cursor_state(path: Path) -> dict | None:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None

def tail(path: Path, lines: int = 20) -> list[str]:
    if not path.exists():
        return ["<log file not found>"]
    try:
        with open(path, "rb") as f:
            f.seek(0, os.SEEK_END)
            size = f.tell()
            block = 1024
            data = b""
            while size > 0 and data.count(b"\n") <= lines:
                step = min(block, size)
                f.seek(size - step)
                data = f.read(step) + data
                size -= step
        txt = data.decode("utf-8", errors="replace").splitlines()[-lines:]
        return txt if txt else ["<empty>"]
    except OSError:
        return [traceback.format_exc()]

def main(argv: list[str] | None = None):
    argv = sys.argv[1:] if argv is None else argv
    output = Path(argv[0]) if len(argv) > 0 else OUTPUT_PATH
    state = Path(argv[1]) if len(argv) > 1 else STATE_PATH

    print("="*70)
    print("markwatch — Health Report")
    print(f"As of: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("="*70)

    n = workbook_count(output)
    if n is None:
        print(f"\nWorkbook: {output} not found")
    elif n == -1:
        print(f"\nWorkbook: {output} unreadable (or sheet '{SHEET}' missing)")
    else:
        print(f"\nWorkbook rows ({output}): {human(n)}")
        last = latest_mark(output)
        if last:
            print(f"  Latest mark: {' | '.join(last)}")

    st = cursor_state(state)
    if st is None:
        print(f"\nCursor state: {state} not found (restarts rescan from byte 0)")
    else:
        print(f"\nCursor state: {st.get('path')} @ {human(st.get('offset', 0))} bytes")
        src = Path(st.get("path", ""))
        if src.exists():
            lag = src.stat().st_size - int(st.get("offset", 0))
            print(f"  Unread bytes: {human(max(lag, 0))}")

    print(f"\nLog tail: {LOG_PATH}")
    for line in tail(LOG_PATH, lines=20):
        print("  " + line)

    print("\nDone.\n")

if __name__ == "__main__":
    main()
