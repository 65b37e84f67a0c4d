"""
Helpers for names and files used by the artifact pipeline.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Optional

from .errors import BuildError

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 15


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def get_valid_name(name: str) -> str:
    """Lower-case, dash separated name of at most 15 characters."""
    if name.startswith("/"):
        name = name[1:]
    name = name.lower()
    name = re.sub(r"[_.]", "-", name)
    name = name.replace("$", "").replace("/", "-")
    name = name[:MAX_NAME_LENGTH]
    if name.endswith("-"):
        name = name[:-1]
    return name


def extract_jar_name(jar_path: Optional[str | Path]) -> Optional[str]:
    """Base name of the executable without its extension."""
    if jar_path is None:
        return None
    name = Path(jar_path).name
    if name.endswith(".jar"):
        return name[: -len(".jar")]
    return Path(name).stem or None


def copy_file_or_directory(source: str | Path, destination: str | Path) -> None:
    src = Path(source)
    dst = Path(destination)
    try:
        if src.is_file():
            if dst.is_dir():
                shutil.copy2(src, dst / src.name)
            else:
                dst.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src, dst)
        elif src.is_dir():
            shutil.copytree(src, dst, dirs_exist_ok=True)
        else:
            raise BuildError(f"error while copying file: {src} does not exist")
    except OSError as e:
        raise BuildError(f"error while copying file {src}", e) from e


def delete_directory(path: str | Path) -> None:
    target = Path(path).resolve()
    if not target.exists():
        return
    try:
        shutil.rmtree(target)
    except OSError as e:
        raise BuildError(f"unable to delete directory: {target}", e) from e


def read_file_content(path: str | Path) -> bytes:
    p = Path(path)
    if not p.is_file():
        raise BuildError(f"unable to read contents of the file {p}")
    try:
        return p.read_bytes()
    except OSError as e:
        raise BuildError(f"unable to read contents of the file {p}", e) from e
