"""File output for chart previews and YAML I/O.

Every writer goes through the same sequence: write a sibling tmp file in the
target directory, then rename it over the target. A viewer polling the output
directory sees either the previous chart.png / geometry.yaml or the new one,
never a partial file.

Usage:
    from src.utils import fs
    out_dir = fs.ensure_dir("outputs/preview_chart")
    fs.atomic_save_image(pil_img, out_dir / "chart.png")
    fs.atomic_yaml_dump(geometry_dict, out_dir / "geometry.yaml")
    cfg = fs.load_yaml("configs/agp_chart.v1.yaml")
"""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

import yaml
from PIL import Image


def ensure_dir(p: Union[str, Path]) -> Path:
    """mkdir -p; returns the directory as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


@contextmanager
def _replace_on_success(path: Path, tmp_path: Path) -> Iterator[Path]:
    """Yield ``tmp_path`` for writing; rename it onto ``path`` if the block succeeds.

    On failure the tmp file is removed and the error is re-raised as
    RuntimeError naming the target.
    """
    ensure_dir(path.parent)
    try:
        yield tmp_path
        tmp_path.replace(path)
    except Exception as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise RuntimeError(f"Failed to write {path} atomically: {e}") from e


def atomic_write_text(path: Union[str, Path], text: str) -> None:
    """Write UTF-8 text atomically, fsynced before the rename."""
    path = Path(path)
    with _replace_on_success(path, path.with_name(path.name + ".tmp")) as tmp_path:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())


def atomic_save_image(
    img: Image.Image,
    path: Union[str, Path],
    pil_kwargs: Optional[Dict[str, Any]] = None
) -> None:
    """Save a rendered chart atomically.

    Parameters
    ----------
    img : PIL.Image.Image
        Output of preview_chart.render_chart()
    path : Union[str, Path]
        Target file; its extension selects the format
    pil_kwargs : Optional[Dict[str, Any]]
        Passed to Image.save (e.g., optimize=True)
    """
    path = Path(path)
    # tmp name keeps the real suffix last for PIL's format lookup
    with _replace_on_success(path, path.with_name(f"{path.stem}.tmp{path.suffix}")) as tmp_path:
        img.save(tmp_path, **(pil_kwargs or {}))


def atomic_yaml_dump(obj: Any, path: Union[str, Path]) -> None:
    """Dump plain data (dicts, lists, numbers, strings) as block-style YAML, keys unsorted."""
    atomic_write_text(
        path,
        yaml.safe_dump(obj, default_flow_style=False, sort_keys=False, allow_unicode=True),
    )


def load_yaml(path: Union[str, Path]) -> Any:
    """Parse a YAML file with safe_load.

    Returns None for an empty file.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    yaml.YAMLError
        On malformed YAML; the message names the file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Malformed YAML in {path}: {e}") from e
