"""
SOPS-encrypted configuration loader.

The config file holds the Datadog API and application keys, so it is kept
encrypted in the repository and decrypted on the fly with the sops CLI.
"""

import subprocess
from pathlib import Path
from typing import Any

import yaml

SOPS_COMMAND = "sops"

SOPS_INSTALL_HINT = (
    "SOPS not installed. Install with: brew install sops (macOS) "
    "or download from https://github.com/getsops/sops/releases"
)


def _run_sops(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [SOPS_COMMAND, *args],
        capture_output=True,
        text=True,
        check=True,
    )


def decrypt_sops_file(file_path: Path) -> dict[str, Any]:
    """
    Decrypt a SOPS-encrypted YAML file into a configuration mapping.

    Args:
        file_path: Path to the encrypted file

    Returns:
        Decrypted configuration (empty dict for an empty document)

    Raises:
        FileNotFoundError: If file doesn't exist
        RuntimeError: If decryption fails or the document is not a mapping
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Encrypted config file not found: {file_path}")

    try:
        decrypted = _run_sops("--decrypt", str(file_path)).stdout
    except FileNotFoundError as e:
        raise RuntimeError(SOPS_INSTALL_HINT) from e
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"SOPS decryption of {file_path} failed: {e.stderr}") from e

    try:
        config = yaml.safe_load(decrypted)
    except yaml.YAMLError as e:
        raise RuntimeError(f"Decrypted {file_path} is not valid YAML: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise RuntimeError(
            f"Decrypted {file_path} must be a mapping, got {type(config).__name__}"
        )
    return config


def check_sops_installed() -> bool:
    """Check if the sops CLI can be run."""
    try:
        _run_sops("--version")
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False
    return True
