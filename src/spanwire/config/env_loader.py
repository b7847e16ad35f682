"""Environment variable file loader.

Loads ``.env`` files from a project directory before the settings model
reads ``os.environ``.
"""

from pathlib import Path

from dotenv import load_dotenv

from spanwire.telemetry import ENV_FILES_LOADED, get_logger

log = get_logger(__name__)

ENV_FILE_NAMES = (".env", ".env.local")


def load_env_files(project_root: Path | None = None) -> list[Path]:
    """Load .env files in priority order.

    ``.env.local`` overrides ``.env``; explicitly exported environment
    variables win over both.

    Args:
        project_root: Directory holding the files. Defaults to the current
            working directory.

    Returns:
        Files that were found and loaded.
    """
    root = project_root if project_root is not None else Path.cwd()

    loaded: list[Path] = []
    # Reverse so the highest-priority file is loaded first; override=False
    # keeps the first value seen for each variable.
    for name in reversed(ENV_FILE_NAMES):
        env_file = root / name
        if env_file.exists():
            load_dotenv(env_file, override=False)
            loaded.append(env_file)

    if loaded:
        log.info(ENV_FILES_LOADED, files=[str(p) for p in loaded], project_root=str(root))
    return loaded
