"""
Stack output helpers.

Writes resolved stack outputs to a dotenv-style file so local tooling
(acceptance checks, shell scripts) can read them without the Pulumi CLI.
"""

from pathlib import Path
from typing import Any, Mapping

import pulumi


def format_env_lines(values: Mapping[str, Any]) -> list[str]:
    """
    Render key/value pairs as KEY=value lines.

    Keys are upper-cased; None values are written as empty strings and
    lists as comma-separated values.
    """
    lines = []
    for key, value in values.items():
        if value is None:
            rendered = ""
        elif isinstance(value, (list, tuple)):
            rendered = ",".join(str(item) for item in value)
        else:
            rendered = str(value)
        lines.append(f"{key.upper()}={rendered}")
    return lines


def write_outputs_to_env(
    outputs: Mapping[str, pulumi.Input[Any]],
    filename: str,
) -> pulumi.Output[str]:
    """
    Write stack outputs to a local .env file once they are known.

    During preview most values are unknown and the apply callback does not
    run, so no file is written.

    Args:
        outputs: Export name -> Output or plain value
        filename: Target file, relative to the current working directory

    Returns:
        Output resolving to the written file path
    """
    keys = list(outputs.keys())

    def _write(values: list[Any]) -> str:
        path = Path(filename)
        content = "\n".join(format_env_lines(dict(zip(keys, values))))
        path.write_text(content + "\n")
        pulumi.log.info(f"Wrote {len(keys)} stack outputs to {path}")
        return str(path)

    return pulumi.Output.all(*outputs.values()).apply(_write)
