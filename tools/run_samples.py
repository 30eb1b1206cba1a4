import json
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SAMPLES_DIR = ROOT / "data" / "samples"
CLI_CMD = [sys.executable, "-m", "fab_social.cli", "generate"]


def run_sample(path: Path) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    has_text = any(str(data.get(key) or "").strip() for key in ("body", "summary", "content"))
    if not str(data.get("title") or "").strip() or not has_text:
        print(f"[skip] {path.name}: needs a title and a body or summary.")
        return

    out_path = path.with_suffix(path.suffix + ".out.md")
    cmd = CLI_CMD + [str(path), "--out", str(out_path)]
    print(f"[run] {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=ROOT)
    if result.returncode == 0:
        print(f"[ok ] wrote {out_path}")
    else:
        print(f"[fail] {path.name} (exit {result.returncode})")


def main():
    if not SAMPLES_DIR.exists():
        print("data/samples directory not found; nothing to do.")
        return
    for json_path in sorted(SAMPLES_DIR.glob("*.json")):
        run_sample(json_path)


if __name__ == "__main__":
    main()
