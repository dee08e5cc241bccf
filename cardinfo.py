import typer
from charcard import file_utils
from charcard.character import from_bytes
from charcard.errors import FormatError
from charcard.png_chunks import extract_chunks, iter_text_chunks
from pathlib import Path
from PIL import UnidentifiedImageError
from typing import Optional

import rich.traceback

DESCRIPTION_PREVIEW_CHARS = 120


def preview_text(text: str, limit: int = DESCRIPTION_PREVIEW_CHARS) -> str:
    first_line = text.strip().splitlines()[0] if text.strip() else ""
    if len(first_line) > limit:
        return first_line[:limit - 3] + "..."
    return first_line


def list_chunks(data: bytes) -> None:
    chunks = extract_chunks(data)
    keywords = {index: keyword for index, keyword, _ in iter_text_chunks(chunks)}
    for index, chunk in enumerate(chunks):
        type_name = chunk.type_tag.decode("latin-1")
        line = f"  [{index:3d}] {type_name}  {len(chunk.payload):>10d} bytes  crc=0x{chunk.checksum:08x}"
        if index in keywords:
            line += f"  keyword={keywords[index].decode('latin-1')!r}"
        typer.echo(line)


def cardinfo_cli(
    card_path: Path = typer.Argument(
        ...,
        help="Character card PNG file.",
        metavar="CARD_FILE",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full card metadata as JSON."),
    show_chunks: bool = typer.Option(False, "--list-chunks", help="List the PNG chunks found in the file."),
    export_avatar: Optional[Path] = typer.Option(
        None, "--export-avatar",
        help="Write the card's avatar to this PNG file.",
        file_okay=True, dir_okay=False, resolve_path=True,
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite existing files."),
):
    """
    Reads the character card embedded in a PNG and reports what it contains.
    """
    try:
        data = file_utils.read_card_bytes(card_path)
        if show_chunks:
            typer.echo(f"Chunks in {card_path.name}:")
            list_chunks(data)
        character = from_bytes(data)
    except FormatError as e:
        typer.secho(f"Error: {type(e).__name__}: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except OSError as e:
        typer.secho(f"Error reading card file {card_path}: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(character.metadata.model_dump_json(indent=2))
    else:
        typer.echo(f"Name: {character.name or '(unnamed)'}")
        typer.echo(f"Schema: {character.schema.name}")
        if character.description:
            typer.echo(f"Description: {preview_text(character.description)}")
        if character.metadata.tags:
            typer.echo(f"Tags: {', '.join(character.metadata.tags)}")

        if character.has_explicit_avatar:
            typer.echo(f"Avatar: explicit ({preview_text(character.avatar, 60)})")
        else:
            try:
                width, height, mode = file_utils.describe_avatar(file_utils.decode_data_uri(character.avatar))
                typer.echo(f"Avatar: embedded image {width}x{height} {mode}")
            except (UnidentifiedImageError, ValueError) as e:
                typer.secho(f"Warning: embedded avatar could not be read as an image: {e}", fg=typer.colors.YELLOW)

    if export_avatar:
        try:
            saved_path = file_utils.save_avatar_png(character, export_avatar, overwrite=yes)
        except FileExistsError:
            typer.secho(f"Error: File already exists: {export_avatar}", fg=typer.colors.RED)
            typer.secho("Use --yes (-y) to overwrite.", fg=typer.colors.YELLOW)
            raise typer.Exit(code=1)
        except ValueError as e:
            typer.secho(f"Error exporting avatar: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        typer.secho(f"Avatar saved to: {saved_path}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    rich.traceback.install(show_locals=False, suppress=[typer, __name__]) # type: ignore
    typer.run(cardinfo_cli)
