"""Entry point — wires Config → GeminiInferenceClient → SoilAnalyzer for one image."""
import argparse
import asyncio
import logging
import mimetypes
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from mrestore.analyzer import SoilAnalyzer
from mrestore.config import Config
from mrestore.constants import (
    DEFAULT_IMAGE_MIME_TYPE,
    HTTPX_LOG_LEVEL,
    HTTPX_LOGGER,
    MSG_ANALYSIS_ERROR,
)
from mrestore.errors import AnalysisError, RateLimitError
from mrestore.inference.gemini import GeminiInferenceClient

EXIT_ERROR = 1
EXIT_RATE_LIMITED = 2


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True, console=Console(stderr=True)))
    logging.getLogger(HTTPX_LOGGER).setLevel(HTTPX_LOG_LEVEL)


def _existing_file(value: str) -> Path:
    path = Path(value)
    match path.is_file():
        case True:
            return path
        case False:
            raise argparse.ArgumentTypeError(f"image not found: {value}")


def _non_empty(value: str) -> str:
    match value.strip():
        case "":
            raise argparse.ArgumentTypeError("user id must not be empty")
        case stripped:
            return stripped


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mrestore-analyze",
        description="Analyze a soil/land photo with Gemini and print the structured result.",
    )
    parser.add_argument("image", type=_existing_file, help="path to the image file")
    parser.add_argument("--user-id", required=True, type=_non_empty)
    parser.add_argument("--lat", type=float, default=None)
    parser.add_argument("--lon", type=float, default=None)
    return parser


def guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or DEFAULT_IMAGE_MIME_TYPE


def build_analyzer(config: Config) -> SoilAnalyzer:
    client = GeminiInferenceClient(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        api_base=config.gemini_api_base,
        timeout=config.gemini_timeout,
    )
    return SoilAnalyzer(client)


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    config = Config.from_env()
    _setup_logging(config.log_level)
    logger = logging.getLogger(__name__)

    analyzer = build_analyzer(config)
    try:
        result = asyncio.run(
            analyzer.analyze(
                args.image.read_bytes(),
                args.user_id,
                lat=args.lat,
                lon=args.lon,
                mime_type=guess_mime_type(args.image),
            )
        )
    except RateLimitError as e:
        logger.error(MSG_ANALYSIS_ERROR, e)
        return EXIT_RATE_LIMITED
    except AnalysisError as e:
        logger.error(MSG_ANALYSIS_ERROR, e)
        return EXIT_ERROR

    Console().print_json(data=result.to_dict())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
