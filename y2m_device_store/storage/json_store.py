import json
import logging
import os
import shutil
import tempfile
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Union

_LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_json(path: PathLike, default: Any = None) -> Any:
    """
    Read a JSON file, returning ``default`` when it is missing or unreadable.

    A file that exists but holds broken JSON is copied once to
    ``<name>.corrupt`` next to it before falling back.
    """
    path = Path(path)
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except JSONDecodeError:
        _LOGGER.warning("corrupt JSON in %s", path)
        # back up the corrupt file once
        bad = path.with_name(path.name + ".corrupt")
        if not bad.exists():
            try:
                shutil.copy2(path, bad)
            except OSError:
                _LOGGER.exception("could not back up %s", path)
        return default
    except (OSError, UnicodeDecodeError):
        _LOGGER.exception("could not read %s", path)
        return default


def write_text_atomic(path: PathLike, text: str) -> None:
    """
    Replace ``path`` with ``text`` in one step; parent folders are created.

    A symlink at ``path`` is followed so the link survives, and the file keeps
    its permission bits. New files get the usual umask-based mode.
    """
    path = Path(path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=path.name, suffix=".tmp")
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        else:
            os.chmod(tmp_path, 0o666 & ~_umask())
        os.replace(tmp_path, path)
    finally:
        try:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        except OSError:
            pass


def _umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def save_json(path: PathLike, data: Any) -> None:
    write_text_atomic(path, json.dumps(data, ensure_ascii=False, indent=2))
