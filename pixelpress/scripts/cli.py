"""CLI tool for Pixelpress."""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

import httpx

from pixelpress.logging_config import configure_logging
from pixelpress.services.images import (
    EncodedResult,
    ImageProcessingError,
    ResizeRequest,
    decode_image,
    resize_image,
)


def guess_content_type(path: Path) -> str:
    """Guess an image content type from a file name."""
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or ""


def default_output_path(input_path: Path) -> Path:
    return input_path.with_name(f"resized_{input_path.name}")


def resize_file(
    input_path: Path,
    output_path: Path,
    *,
    max_width: int | None = None,
    max_height: int | None = None,
    target_size: int | None = None,
    content_type: str | None = None,
) -> EncodedResult:
    """Resize a local image file and write the result."""
    request = ResizeRequest(
        content_type=content_type or guess_content_type(input_path),
        max_width=max_width,
        max_height=max_height,
        target_size=target_size,
    )
    with decode_image(input_path.read_bytes()) as image:
        result = resize_image(image, request)
    output_path.write_bytes(result.data)
    return result


async def api_resize(
    url: str,
    input_path: Path,
    output_path: Path,
    *,
    max_width: int | None = None,
    max_height: int | None = None,
    target_size: int | None = None,
    content_type: str | None = None,
) -> None:
    """Send a file to a running Pixelpress server."""
    fields = {
        "maxWidth": max_width,
        "maxHeight": max_height,
        "targetSize": target_size,
    }
    data = {key: str(value) for key, value in fields.items() if value is not None}
    files = {
        "image": (
            input_path.name,
            input_path.read_bytes(),
            content_type or guess_content_type(input_path),
        )
    }

    async with httpx.AsyncClient(timeout=60.0) as client:
        resp = await client.post(f"{url}/api/resize", data=data, files=files)

    if resp.status_code != 200:
        print(f"Error: {resp.status_code}", file=sys.stderr)
        print(resp.text, file=sys.stderr)
        sys.exit(1)

    output_path.write_bytes(resp.content)
    print(f"Wrote {output_path} ({len(resp.content)} bytes)")
    if resp.headers.get("x-target-met") == "false":
        print("Warning: target size not reached.", file=sys.stderr)


def _describe(result: EncodedResult, output_path: Path) -> str:
    summary = (
        f"Wrote {output_path} ({result.width}x{result.height}, {result.size} bytes"
    )
    if result.quality is not None:
        summary += f", quality {result.quality}"
    return summary + ")"


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def _add_resize_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", type=Path, help="Image file to resize")
    parser.add_argument("-o", "--output", type=Path, help="Output file")
    parser.add_argument(
        "--max-width", type=_positive_int, help="Maximum width in pixels"
    )
    parser.add_argument(
        "--max-height", type=_positive_int, help="Maximum height in pixels"
    )
    parser.add_argument(
        "--target-size", type=_positive_int, help="Target size in bytes"
    )
    parser.add_argument(
        "--content-type", help="Content type (guessed from the file name if omitted)"
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Pixelpress CLI tool.")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    resize_parser = subparsers.add_parser("resize", help="Resize a local file")
    _add_resize_arguments(resize_parser)

    api_parser = subparsers.add_parser("api", help="Resize through a running server")
    _add_resize_arguments(api_parser)
    api_parser.add_argument("--url", default="http://localhost:7675", help="API URL")

    args = parser.parse_args()
    configure_logging(debug=args.debug)

    if args.max_width is None and args.max_height is None and args.target_size is None:
        parser.error("provide --max-width, --max-height or --target-size")

    output = args.output or default_output_path(args.input)

    if args.command == "resize":
        try:
            result = resize_file(
                args.input,
                output,
                max_width=args.max_width,
                max_height=args.max_height,
                target_size=args.target_size,
                content_type=args.content_type,
            )
        except (OSError, ImageProcessingError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        print(_describe(result, output))
        if not result.target_met:
            print("Warning: target size not reached.", file=sys.stderr)

    elif args.command == "api":
        asyncio.run(
            api_resize(
                args.url,
                args.input,
                output,
                max_width=args.max_width,
                max_height=args.max_height,
                target_size=args.target_size,
                content_type=args.content_type,
            )
        )


if __name__ == "__main__":
    main()
