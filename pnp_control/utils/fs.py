"""Filesystem helpers for machine, job and G-code files.

Provides:
    - ``load_yaml``: safe YAML loading for ``machine.yaml`` and job files
    - ``atomic_write_text``: write a G-code program via a sibling tmp file
      and rename, so a print host watching the output directory never sees
      a half-written program
    - ``ensure_dir``: create an output directory and its parents

Usage:
    from pnp_control.utils import fs
    data = fs.load_yaml("board.yaml")
    fs.atomic_write_text("out/board.gcode", gcode)
"""

import os
from pathlib import Path
from typing import Any, Union

import yaml


def ensure_dir(p: Union[str, Path]) -> Path:
    """Create ``p`` (and parents) if missing and return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_text(
    path: Union[str, Path],
    text: str,
    encoding: str = "utf-8",
) -> None:
    """Replace ``path`` with ``text`` in one rename.

    Parameters
    ----------
    path : Union[str, Path]
        Target file.  Missing parent directories are created.
    text : str
        Full file content.
    encoding : str
        Text encoding, default UTF-8.

    Raises
    ------
    OSError
        If the program cannot be written or moved into place.  The tmp
        file is removed first.
    """
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")

    try:
        ensure_dir(path.parent)
        tmp_path.write_bytes(text.encode(encoding))
        with open(tmp_path, "rb+") as f:
            os.fsync(f.fileno())
        tmp_path.replace(path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise OSError(f"Failed to write {path}: {e}") from e


def load_yaml(path: Union[str, Path]) -> Any:
    """Parse a YAML file with ``yaml.safe_load``.

    Returns
    -------
    Any
        Parsed document, ``None`` for an empty file.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    yaml.YAMLError
        If the document is malformed; the message names the file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"{path}: {e}") from e
