# --- Directory scanning & class discovery -------------------------------------
import os
from dataclasses import dataclass, field

from php_solid.config import SolidConfig
from php_solid.errors import ParseError
from php_solid.indexer import PhpIndexer
from php_solid.logging import get_logger
from php_solid.logging_tags import SCAN
from php_solid.models.ast_models import ClassKind

logger = get_logger(__name__)


@dataclass
class ScanResult:
    classes: list = field(default_factory=list)  # concrete class names to check, sorted
    errors: list = field(default_factory=list)  # [{"file": path, "message": ...}]


def _is_under(path: str, directory: str) -> bool:
    path, directory = os.path.abspath(path), os.path.abspath(directory)
    return path == directory or path.startswith(directory.rstrip(os.sep) + os.sep)


def find_php_files(config: SolidConfig) -> list[str]:
    """
    Recursively lists the .php files selected by the config: every file under
    ``directories`` plus explicit ``files``, minus exclusions. Sorted, no
    duplicates.
    """
    excluded_dirs = [os.path.abspath(d) for d in config.exclude_directories]
    excluded_files = {os.path.abspath(f) for f in config.exclude_files}

    def keep(path: str) -> bool:
        if path in excluded_files:
            return False
        return not any(_is_under(path, d) for d in excluded_dirs)

    found: set[str] = set()
    for root_dir in config.directories:
        if not os.path.isdir(root_dir):
            logger.warning(f"{SCAN} Not a directory, skipping: {root_dir}")
            continue
        for dirpath, dirnames, filenames in os.walk(root_dir):
            dirnames[:] = [d for d in dirnames if keep(os.path.abspath(os.path.join(dirpath, d)))]
            for fn in filenames:
                if fn.endswith(".php"):
                    full = os.path.abspath(os.path.join(dirpath, fn))
                    if keep(full):
                        found.add(full)

    for file_path in config.files:
        full = os.path.abspath(file_path)
        if os.path.isfile(full) and keep(full):
            found.add(full)
        elif not os.path.isfile(full):
            logger.warning(f"{SCAN} File not found, skipping: {file_path}")

    return sorted(found)


def index_paths(indexer: PhpIndexer, config: SolidConfig) -> ScanResult:
    """
    Indexes every selected file and returns the concrete classes to check.
    Interfaces, traits and enums are indexed (they are contracts) but not
    returned. A file that fails to parse is reported and skipped.
    """
    result = ScanResult()
    for full in find_php_files(config):
        try:
            descriptors = indexer.index_file(full)
        except ParseError as e:
            logger.warning(f"{SCAN} Failed to index {full}: {e}")
            result.errors.append({"file": full, "message": str(e)})
            continue
        result.classes.extend(d.name for d in descriptors if d.kind is ClassKind.CLASS)

    result.classes.sort()
    logger.info(f"{SCAN} Found {len(result.classes)} classes in {len(indexer.files)} files")
    return result
