"""Выход action: маскирование секретов, outputs и статус через workflow commands."""

import os
import uuid
from pathlib import Path

import typer


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class ActionsEnvironment:
    def __init__(self, output_file: str | Path | None = None):
        self.output_file = Path(output_file) if output_file else None

    @classmethod
    def from_env(cls) -> "ActionsEnvironment":
        return cls(os.environ.get("GITHUB_OUTPUT") or None)

    def set_secret(self, value: str):
        typer.echo(f"::add-mask::{escape_data(value)}")

    def set_output(self, name: str, value: str):
        if self.output_file is None:
            typer.echo(f"::set-output name={name}::{escape_data(value)}")
            return

        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        with self.output_file.open("a", encoding="utf-8") as f:
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")

    def info(self, message: str):
        typer.echo(message)

    def set_failed(self, message: str):
        typer.echo(f"::error::{escape_data(message)}")
