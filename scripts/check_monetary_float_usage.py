"""Guard against binary float creeping into recovery money and percentage arithmetic.

Scans the calculator engine and its hosts for lines that mention a monetary or
percentage concept alongside `float`. Lines marked `# monetary-float-allow` and
findings recorded in the allowlist file are accepted.
"""

import argparse
import json
import re
from pathlib import Path

KEYWORDS = (
    "amount",
    "price",
    "cost",
    "investment",
    "profit",
    "loss",
    "rise",
    "drop",
    "return",
    "value",
)
DEFAULT_ROOTS = (
    "src/libs/recovery-calculator-engine",
    "src/services/recovery_service",
    "tools",
)
IGNORE_DIRS = {"tests", ".venv", "venv", "build", "dist", "__pycache__"}

FLOAT_USAGE = re.compile(r"\bfloat\b")
ALLOW_MARKER = "# monetary-float-allow"


def is_candidate(path: Path) -> bool:
    if any(p in IGNORE_DIRS for p in path.parts):
        return False
    return path.suffix == ".py"


def scan_paths(repo_root: Path, roots: tuple[str, ...] = DEFAULT_ROOTS) -> list[str]:
    findings: list[str] = []
    for root in roots:
        base = repo_root / root
        if not base.exists():
            continue
        for file_path in base.rglob("*.py"):
            rel_path = file_path.relative_to(repo_root)
            if not is_candidate(rel_path):
                continue
            rel = rel_path.as_posix()
            for line_no, line in enumerate(file_path.read_text(encoding="utf-8").splitlines(), start=1):
                lowered = line.lower()
                if ALLOW_MARKER in lowered:
                    continue
                if not FLOAT_USAGE.search(lowered):
                    continue
                if not any(k in lowered for k in KEYWORDS):
                    continue
                findings.append(f"{rel}:{line_no}:{line.strip()}")
    return sorted(set(findings))


def load_allowlist(path: Path) -> set[str]:
    if not path.exists():
        return set()
    data = json.loads(path.read_text(encoding="utf-8"))
    return set(data.get("allowlist", []))


def write_allowlist(path: Path, findings: list[str]) -> None:
    payload = {
        "description": "Approved monetary-float findings. New findings fail the check.",
        "allowlist": findings,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Guard against monetary float usage in the recovery calculator")
    parser.add_argument("--repo-root", default=".")
    parser.add_argument("--allowlist", default="scripts/monetary-float-allowlist.json")
    parser.add_argument("--update-allowlist", action="store_true")
    args = parser.parse_args(argv)

    repo_root = Path(args.repo_root).resolve()
    allowlist_path = (repo_root / args.allowlist).resolve()
    findings = scan_paths(repo_root)

    if args.update_allowlist:
        write_allowlist(allowlist_path, findings)
        print(f"Updated allowlist with {len(findings)} finding(s): {allowlist_path}")
        return 0

    unexpected = sorted(set(findings) - load_allowlist(allowlist_path))
    if unexpected:
        print("Monetary float usage detected:")
        for item in unexpected:
            print(f" - {item}")
        print(f"\nMark intentional wire conversions with '{ALLOW_MARKER}' or update {allowlist_path}.")
        return 1

    print(f"Monetary float guard passed. Findings={len(findings)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
