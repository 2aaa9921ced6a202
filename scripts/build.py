"""
Compile the Algorand Python contracts to TEAL.

Runs the puyapy compiler over every contract module and writes build/ with
<Contract>.approval.teal, <Contract>.clear.teal and a manifest of SHA-256
hashes that deployments compare against.

Usage:
    python -m scripts.build
"""

import json
import subprocess
import sys

from scripts.deployments import ARTIFACTS, BUILD_DIR, ROOT_DIR, sha256_hex

CONTRACT_SOURCES = (
    ROOT_DIR / "contracts" / "mock_v3_aggregator" / "contract.py",
    ROOT_DIR / "contracts" / "fund_me" / "contract.py",
)


def compile_contracts() -> None:
    command = [
        "puyapy",
        *[str(path) for path in CONTRACT_SOURCES],
        "--out-dir",
        str(BUILD_DIR),
        "--output-arc56",
    ]
    subprocess.run(command, cwd=ROOT_DIR, check=True)


def write_manifest() -> dict:
    manifest = {"contracts": {}}
    for artifact in ARTIFACTS.values():
        approval_source, clear_source = artifact.read_teal(BUILD_DIR)
        manifest["contracts"][artifact.name] = {
            "create_method": artifact.create_method,
            "approval": {
                "file": f"{artifact.name}.approval.teal",
                "sha256": sha256_hex(approval_source),
            },
            "clear": {
                "file": f"{artifact.name}.clear.teal",
                "sha256": sha256_hex(clear_source),
            },
        }

    (BUILD_DIR / "manifest.json").write_text(json.dumps(manifest, indent=2), encoding="utf-8")
    return manifest


def main():
    BUILD_DIR.mkdir(exist_ok=True)
    try:
        compile_contracts()
    except FileNotFoundError:
        print("puyapy not found. Install it with: pip install -e .[build]")
        sys.exit(1)

    write_manifest()
    print("Wrote artifacts to", BUILD_DIR)


if __name__ == "__main__":
    main()
