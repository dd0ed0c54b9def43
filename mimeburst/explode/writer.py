"""
mimeburst/explode/writer.py
---------------------------
Writes decoded leaf parts as regular files into one output directory.
"""

import os
from pathlib import Path
from typing import Optional, Union

from mimeburst.errors import PartWriteError
from mimeburst.utils.config import CONFIG


class PartWriter:
    def __init__(self, out_dir: Union[str, Path, None] = None, mode: Optional[int] = None):
        self.out_dir = Path(out_dir if out_dir is not None else CONFIG.OUTPUT_DIR)
        self.mode = CONFIG.FILE_MODE if mode is None else mode

    def path_for(self, name: str) -> Path:
        return self.out_dir / name

    def write(self, name: str, data: bytes) -> Path:
        """
        Write data to out_dir/name. A failed write leaves no file behind
        and raises PartWriteError.
        """
        path = self.path_for(name)
        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
            os.chmod(path, self.mode)
        except OSError as e:
            try:
                if path.is_file():
                    path.unlink()
            except OSError:
                pass
            raise PartWriteError(name, e) from e
        return path
