from pathlib import Path
from typing import List, Optional, Tuple


def validate_jar_filename(jar_filename: Optional[str]) -> Tuple[bool, List[str]]:
    errors = []

    if not jar_filename or not jar_filename.strip():
        errors.append("Jar filename cannot be empty")
        return False, errors

    if jar_filename != jar_filename.strip():
        errors.append("Jar filename cannot start or end with whitespace")

    if any(ch in jar_filename for ch in "\0\n\r"):
        errors.append("Jar filename contains control characters")

    return len(errors) == 0, errors


def validate_server_jar(directory: Path, jar_filename: str) -> Tuple[bool, List[str]]:
    errors = []

    jar_path = directory / jar_filename
    if not jar_path.exists():
        errors.append(f"Server jar not found: {jar_path}")
    elif not jar_path.is_file():
        errors.append(f"Server jar is not a file: {jar_path}")

    return len(errors) == 0, errors
