# lazyconf/settings.py

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .errors import UnsupportedExtensionError

CONFIG_DIRECTORY_ENV = "CONFIG_DIRECTORY"
CONFIG_DIR_ENV = "CONFIG_DIR"
ENVIRONMENT_ENV = "APP_ENV"

DEFAULT_CONFIG_DIRECTORY = "./config"
DEFAULT_EXTENSION = ".py"
DEFAULT_EXPORT_NAME = "CONFIG"
SUPPORTED_EXTENSIONS = (".py", ".yaml", ".yml", ".json")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessorSettings:
    """
    Immutable settings for a ConfigAccessor.

    Attributes:
        directory: Absolute directory holding one file per configuration key.
        environment: Advisory environment name; consumers branch on it, the
            accessor itself does not.
        extension: File extension appended to every key.
        export_name: Module attribute treated as the exported configuration.
    """

    directory: Path = field(default_factory=lambda: Path(DEFAULT_CONFIG_DIRECTORY))
    environment: str = ""
    extension: str = DEFAULT_EXTENSION
    export_name: str = DEFAULT_EXPORT_NAME

    def __post_init__(self) -> None:
        extension = self.extension if self.extension.startswith(".") else f".{self.extension}"
        extension = extension.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedExtensionError(
                f"Unsupported configuration extension '{self.extension}'; "
                f"expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
            )
        # Relative directories are pinned to the working directory at creation
        object.__setattr__(self, "directory", Path(self.directory).resolve())
        object.__setattr__(self, "extension", extension)

    @classmethod
    def from_env(
        cls,
        *,
        dotenv_path: str | Path | None = None,
        extension: str = DEFAULT_EXTENSION,
        export_name: str = DEFAULT_EXPORT_NAME,
    ) -> "AccessorSettings":
        """Build settings from the process environment.

        Resolution order for the directory: CONFIG_DIRECTORY, then CONFIG_DIR,
        then ./config. The environment name comes from APP_ENV (default "").

        Args:
            dotenv_path: Optional .env file loaded first. Variables already set
                in the environment win over the file.
        """
        if dotenv_path is not None:
            if load_dotenv(dotenv_path, override=False):
                logger.info("Loaded environment overrides from %s", dotenv_path)
            else:
                logger.warning("No environment variables loaded from %s", dotenv_path)

        directory = os.environ.get(CONFIG_DIRECTORY_ENV) or os.environ.get(CONFIG_DIR_ENV)
        if directory:
            logger.info("Config directory overridden via environment: %s", directory)
        else:
            directory = DEFAULT_CONFIG_DIRECTORY

        return cls(
            directory=Path(directory),
            environment=os.environ.get(ENVIRONMENT_ENV, ""),
            extension=extension,
            export_name=export_name,
        )
