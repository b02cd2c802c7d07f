import json
import os
import sys
import logging
from typing import Any, Iterable, Iterator, List

# -------------------- Logging Configuration --------------------
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("Utils")

JAVA_SUFFIX = ".java"


def set_verbosity(verbose: bool):
    """Switch the root logger between INFO and DEBUG."""
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.INFO)


# -------------------- Utility Functions --------------------
def save_json(path: str, obj: Any):
    """Save object to JSON file with proper directory creation."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)


def load_json(path: str) -> Any:
    """Load object from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def read_source(path: str) -> str:
    # newline="" keeps \r\n intact so offsets match the bytes written back
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def iter_java_files(paths: Iterable[str]) -> Iterator[str]:
    """
    Expand files and directories into the Java sources they contain.

    Directories are walked recursively in sorted order; explicit file
    arguments are yielded as given, whatever their suffix.
    """
    seen = set()
    for path in paths:
        if os.path.isdir(path):
            for root, dirs, files in os.walk(path):
                dirs.sort()
                for file in sorted(files):
                    if not file.endswith(JAVA_SUFFIX):
                        continue
                    file_path = os.path.join(root, file)
                    if file_path not in seen:
                        seen.add(file_path)
                        yield file_path
        elif os.path.isfile(path):
            if path not in seen:
                seen.add(path)
                yield path
        else:
            logger.warning(f"Skipping {path}: no such file or directory")


def line_starts(source: str) -> List[int]:
    """Offsets of the first character of every line."""
    starts = [0]
    index = source.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = source.find("\n", index + 1)
    return starts
