"""Curation configuration loader with validation and state machine."""

import hashlib
import json
import time
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from curator.config.constants import COMPONENT_CONFIG
from curator.config.errors import ConfigurationError
from curator.config.schemas.categories import CurationConfig
from curator.config.state_machine import ConfigState, ConfigStateMachine


logger = structlog.get_logger()


class CurationConfigLoader:
    """Loads and validates the curation configuration.

    Implements a state machine for configuration loading:
    UNLOADED -> LOADING -> VALIDATED -> READY

    Every failure is recorded, logged and raised as ``ConfigurationError``.
    """

    def __init__(self, run_id: str) -> None:
        """Initialize the loader.

        Args:
            run_id: Identifier of the current run.
        """
        self._run_id = run_id
        self._state_machine = ConfigStateMachine()
        self._file_checksum: str | None = None
        self._validation_errors: list[dict[str, str]] = []
        self._validation_duration_ms: float = 0.0

    @property
    def state(self) -> ConfigState:
        """Get the current loader state."""
        return self._state_machine.state

    @property
    def file_checksum(self) -> str | None:
        """SHA-256 of the loaded file, if a file was read."""
        return self._file_checksum

    @property
    def validation_errors(self) -> list[dict[str, str]]:
        """Get validation errors if any."""
        return self._validation_errors.copy()

    @property
    def validation_duration_ms(self) -> float:
        """Get validation duration in milliseconds."""
        return self._validation_duration_ms

    def _load_yaml_file(self, file_path: Path) -> dict[str, object]:
        """Read a YAML file and record its checksum."""
        content_bytes = file_path.read_bytes()
        self._file_checksum = hashlib.sha256(content_bytes).hexdigest()
        parsed = yaml.safe_load(content_bytes.decode("utf-8")) or {}
        if not isinstance(parsed, dict):
            msg = "top-level YAML document must be a mapping"
            raise yaml.YAMLError(msg)
        return parsed

    def load(self, config_path: Path | None = None) -> CurationConfig:
        """Load and validate the configuration.

        Args:
            config_path: YAML file to load; ``None`` uses built-in defaults.

        Returns:
            Validated configuration.

        Raises:
            ConfigurationError: If the file is missing, unparsable or invalid.
        """
        start_time = time.perf_counter()
        self._state_machine.transition(ConfigState.LOADING)

        source = str(config_path) if config_path else "<defaults>"
        log = logger.bind(
            run_id=self._run_id,
            component=COMPONENT_CONFIG,
            file_path=source,
        )
        log.info("loading_config", phase="LOADING")

        try:
            data = self._load_yaml_file(config_path) if config_path else {}
            config = CurationConfig.model_validate(data)
        except ValidationError as e:
            self._fail_validation(e, log)
            error_count = len(self._validation_errors)
            msg = f"Validation failed for {source}: {error_count} errors"
            raise ConfigurationError(
                msg, errors=self.validation_errors, source=source
            ) from e
        except FileNotFoundError as e:
            self._fail("file", str(e), "file_not_found", log)
            msg = f"Configuration file not found: {source}"
            raise ConfigurationError(
                msg, errors=self.validation_errors, source=source
            ) from e
        except yaml.YAMLError as e:
            self._fail("yaml", str(e), "yaml_parse_error", log)
            msg = f"Invalid YAML in {source}"
            raise ConfigurationError(
                msg, errors=self.validation_errors, source=source
            ) from e

        self._state_machine.transition(ConfigState.VALIDATED)
        self._validation_duration_ms = (time.perf_counter() - start_time) * 1000

        log.info(
            "config_validation_complete",
            phase="VALIDATED",
            category_count=len(config.categories),
            period_count=len(config.periods),
            file_sha256=self._file_checksum,
            config_validation_duration_ms=self._validation_duration_ms,
        )

        self._state_machine.transition(ConfigState.READY)
        log.info("config_ready", phase="READY", checksum=config.compute_checksum())
        return config

    def _fail_validation(
        self, error: ValidationError, log: structlog.stdlib.BoundLogger
    ) -> None:
        """Record Pydantic validation errors."""
        self._state_machine.transition(ConfigState.FAILED)
        for err in error.errors():
            self._validation_errors.append(
                {
                    "loc": ".".join(str(loc) for loc in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
            )
        log.error(
            "config_validation_failed",
            phase="FAILED",
            validation_error_count=len(self._validation_errors),
            errors=self._validation_errors,
        )

    def _fail(
        self,
        loc: str,
        message: str,
        error_type: str,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        """Record a file or parse failure."""
        self._state_machine.transition(ConfigState.FAILED)
        self._validation_errors.append({"loc": loc, "msg": message, "type": error_type})
        log.error(f"config_{error_type}", phase="FAILED", error=message)

    def get_validation_summary(self) -> dict[str, object]:
        """Get a summary of the validation process."""
        return {
            "run_id": self._run_id,
            "state": self._state_machine.state.name,
            "file_checksum": self._file_checksum,
            "validation_error_count": len(self._validation_errors),
            "validation_errors": self._validation_errors,
            "validation_duration_ms": self._validation_duration_ms,
        }

    def get_validation_summary_json(self) -> str:
        """Get validation summary as JSON string with stable ordering."""
        return json.dumps(self.get_validation_summary(), sort_keys=True, indent=2)


def load_config(
    config_path: Path | None = None, run_id: str = "config"
) -> CurationConfig:
    """Load a curation configuration in one call.

    Args:
        config_path: YAML file, or ``None`` for built-in defaults.
        run_id: Run identifier for logging.

    Returns:
        Validated configuration.
    """
    return CurationConfigLoader(run_id).load(config_path)
