"""GitHub Actions runtime helpers: inputs, step outputs, failure and logging."""

import logging
import os
import sys
import uuid

logger = logging.getLogger(__name__)

_COMMAND_BY_LEVEL = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def escape_data(value: str) -> str:
    """Escape a message so it survives inside a workflow command."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandFormatter(logging.Formatter):
    """Render log records as workflow commands (``::warning::msg``).

    INFO records are printed as-is so they show up as plain step log lines.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _COMMAND_BY_LEVEL.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_data(message)}"


def configure_logging() -> None:
    """Send all log records to stdout as workflow commands."""
    level = logging.DEBUG if os.environ.get("RUNNER_DEBUG") == "1" else logging.INFO
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


def get_input(name: str, env: dict[str, str] | None = None) -> str:
    """Read an action input the way the runner exposes it (``INPUT_GITHUB-TOKEN``)."""
    env = os.environ if env is None else env
    key = f"INPUT_{name.upper()}"
    value = env.get(key)
    if value is None:
        value = env.get(key.replace("-", "_"), "")
    return value.strip()


def set_output(name: str, value: str) -> None:
    """Set a step output, using the multi-line safe delimiter form."""
    output_path = os.environ.get("GITHUB_OUTPUT")
    if not output_path:
        logger.info("Output %s=%s", name, value)
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError(f"Unexpected input: value for {name} contains the delimiter")
    with open(output_path, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def set_failed(message: str) -> None:
    """Report the terminal failure of this step."""
    logger.error(message)
