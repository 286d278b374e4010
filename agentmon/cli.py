#!/usr/bin/env python3
"""Command-line interface for agent card generation."""

import json
import logging
import zipfile
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from .client import (
    DEFAULT_IMAGE_MODEL,
    DEFAULT_TEXT_MODEL,
    OpenAIImageGenerator,
    OpenAIProfileGenerator,
    create_client,
    require_api_key,
)
from .errors import PipelineError, describe_error
from .image_utils import load_card_image
from .models import RARITIES
from .pipeline import CardPipeline, CardResult
from .rarity import is_rarity
from .skills import SkillLibrary
from .utils import LOGGER_NAME, basename, get_logger, slugify

LOGGER = get_logger(__name__)

TEXT_EXTENSIONS = (".md", ".txt", ".json", ".yaml", ".yml")

app = typer.Typer(help="Generate a trading card profile from agent configuration files.")


def clean_filename(name: str) -> str:
    """Turn a card name into a safe filename."""
    return slugify(name) or "card"


def _is_text_file(name: str) -> bool:
    return name.lower().endswith(TEXT_EXTENSIONS)


def _read_zip(path: Path) -> List[Tuple[str, str]]:
    files: List[Tuple[str, str]] = []
    with zipfile.ZipFile(path) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            name = basename(info.filename)
            if _is_text_file(name):
                files.append((name, archive.read(info).decode("utf-8", errors="replace")))
    return files


def collect_files(paths: List[Path]) -> List[Tuple[str, str]]:
    """Read text files, directories and .zip archives into (name, content) pairs."""
    files: List[Tuple[str, str]] = []
    for raw_path in paths:
        path = raw_path.expanduser().resolve()
        if not path.exists():
            raise typer.BadParameter(f"Path not found: {path}", param_name="paths")

        candidates = sorted(p for p in path.rglob("*") if p.is_file()) if path.is_dir() else [path]
        for candidate in candidates:
            if candidate.suffix.lower() == ".zip":
                files.extend(_read_zip(candidate))
            elif _is_text_file(candidate.name):
                files.append((candidate.name, candidate.read_text(encoding="utf-8", errors="replace")))
    return files


def _write_outputs(result: CardResult, out_dir: Path, image_png: Optional[bytes]) -> None:
    stem = f"{result.profile.serial_number:05d}_{clean_filename(result.profile.name)}"
    payload = result.profile.model_dump()
    try:
        with (out_dir / f"{stem}.json").open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
        (out_dir / f"{stem}.prompt.txt").write_text(result.prompt.prompt, encoding="utf-8")
        if image_png is not None:
            (out_dir / f"{stem}.png").write_bytes(image_png)
        typer.echo(f"  Saved: {out_dir / stem}.*")
    except OSError as exc:
        LOGGER.error("Failed to write outputs for %s: %s", result.profile.name, exc)


@app.command()
def generate(
    paths: List[Path] = typer.Argument(..., help="Agent files, folders, or .zip archives."),
    out_dir: Path = typer.Option(Path("output"), "--out-dir", help="Directory where results are stored."),
    model: str = typer.Option(DEFAULT_TEXT_MODEL, "--model", help="OpenAI model for the card profile."),
    image_model: str = typer.Option(DEFAULT_IMAGE_MODEL, "--image-model", help="OpenAI model for the card image."),
    temperature: float = typer.Option(0.7, "--temperature", help="Sampling temperature for the profile."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Optional seed when supported by the model."),
    rarity: Optional[str] = typer.Option(
        None, "--rarity", help=f"Force a rarity tier instead of drawing one ({', '.join(RARITIES)})."
    ),
    serial: int = typer.Option(1, "--serial", min=1, help="Serial number stamped on the card."),
    skills_db: Optional[Path] = typer.Option(None, "--skills-db", help="JSON skills database for skill matching."),
    render: bool = typer.Option(False, "--render/--no-render", help="Also generate the card image."),
    print_json: bool = typer.Option(False, "--print", help="Print JSON to stdout after writing.", show_default=False),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write any files.", show_default=False),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", show_default=False),
) -> None:
    """Generate one card from the given agent files."""

    if verbose:
        logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG)

    if rarity is not None and not is_rarity(rarity):
        raise typer.BadParameter(f"Unknown rarity: {rarity}", param_name="rarity")

    files = collect_files(paths)
    if not files:
        typer.echo("No supported text files found.")
        raise typer.Exit(code=1)

    try:
        client = create_client(require_api_key())
        library = SkillLibrary.from_file(skills_db) if skills_db else None
        pipeline = CardPipeline(
            OpenAIProfileGenerator(client, model, temperature=temperature, seed=seed),
            skill_library=library,
        )
        result = pipeline.run(files, serial_number=serial, rarity_override=rarity)

        image_png: Optional[bytes] = None
        if render:
            image = load_card_image(OpenAIImageGenerator(client, image_model)(result.prompt.prompt))
            image_png = image.png
    except PipelineError as exc:
        typer.echo(json.dumps(describe_error(exc), indent=2, ensure_ascii=False))
        raise typer.Exit(code=2 if exc.status_code == 503 else 1)

    typer.echo(f"Card: {result.profile.name} ({result.profile.rarity}, layout {result.prompt.layout_version})")

    if print_json or dry_run:
        typer.echo(json.dumps(result.profile.model_dump(), indent=2, ensure_ascii=False))

    if dry_run:
        typer.echo("  Dry run enabled, nothing written.")
        return

    resolved_out_dir = out_dir.expanduser().resolve()
    resolved_out_dir.mkdir(parents=True, exist_ok=True)
    _write_outputs(result, resolved_out_dir, image_png)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
