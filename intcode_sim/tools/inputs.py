# inputs.py: puzzle programs loaded from a data directory, keyed by day
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.encoding import parse_program

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


def day_key(day: Union[int, str]) -> str:
    """7, '7', '07' and 'day07' all name the same input file."""
    s = str(day).lower()
    if s.startswith("day"):
        s = s[3:]
    return f"day{int(s):02d}"


def load_program(path: Union[str, Path]) -> List[int]:
    return parse_program(Path(path).read_text(encoding="utf-8"))


class PuzzleInputs:
    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        self.data_dir = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
        self._cache: Dict[str, List[int]] = {}

    def path_for(self, day: Union[int, str]) -> Path:
        return self.data_dir / f"{day_key(day)}.txt"

    def available(self) -> List[str]:
        if not self.data_dir.is_dir():
            return []
        return sorted(p.stem for p in self.data_dir.glob("day*.txt"))

    def program(self, day: Union[int, str]) -> List[int]:
        """Return a fresh copy of the day's program; the parsed text is cached."""
        key = day_key(day)
        if key not in self._cache:
            path = self.path_for(day)
            if not path.exists():
                raise FileNotFoundError(f"No puzzle input for {key} in '{self.data_dir}'")
            self._cache[key] = load_program(path)
        return list(self._cache[key])
