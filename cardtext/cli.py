"""Command-line interface for cardtext.

This module provides the CLI entry point that runs the extraction pipeline
over one image or a directory of images. OCR is not performed here: each
image needs a JSON file with the OCR engine's lines next to it (or in the
directory given with ``--ocr``).
"""

import json
import logging
import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .config import ExtractorConfig, load_config
from .extractor import extract_card, load_ocr_lines
from .font_metrics import MeasurementSetupError, PillowTextMeasurer
from .utils import get_image_files, load_image, setup_logger

logger = setup_logger(__name__)

def resolve_ocr_path(image_path: Path, ocr: Optional[str]) -> Path:
    """Find the OCR JSON file belonging to an image.

    Args:
        image_path: Path to the image
        ocr: OCR JSON file, directory of ``<stem>.json`` files, or None for
            the image's own directory

    Returns:
        Path to the OCR file (not checked for existence)
    """
    if ocr is None:
        return image_path.with_suffix(".json")
    ocr_path = Path(ocr)
    if ocr_path.is_dir():
        return ocr_path / f"{image_path.stem}.json"
    return ocr_path

def process_single_image(
    image_path: Path,
    ocr_path: Path,
    output_dir: Path,
    config: ExtractorConfig
) -> Path:
    """Run the pipeline on one image and write ``<stem>.texts.json``.

    Args:
        image_path: Path to input image
        ocr_path: Path to the OCR JSON for this image
        output_dir: Directory to save outputs
        config: Extractor settings

    Returns:
        Path of the written JSON file

    Raises:
        ValueError: If the image or OCR file cannot be read
        MeasurementSetupError: If the configured fonts cannot be loaded
    """
    start_time = time.time()

    image = load_image(image_path)
    lines = load_ocr_lines(ocr_path)
    logger.debug(f"{image_path.name}: {len(lines)} OCR lines from {ocr_path}")

    # Fonts are loaded per image and released when it is done
    with PillowTextMeasurer(config.fonts, use_default_font=config.use_default_font) as measurer:
        result = extract_card(image, lines, measurer=measurer, config=config)

    payload = result.to_dict()
    payload["image"] = image_path.name

    output_path = output_dir / f"{image_path.stem}.texts.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, ensure_ascii=False, indent=2)

    logger.info(f"Saved {len(result.texts)} text records to {output_path.name} "
                f"in {time.time() - start_time:.2f}s")
    return output_path

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract text colors, font sizes and card background from OCR'd images."
    )

    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Path to input image file or directory of images"
    )

    parser.add_argument(
        "-r", "--ocr",
        help="OCR JSON file, or directory of <image stem>.json files (default: next to each image)"
    )

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Path to output directory"
    )

    parser.add_argument(
        "-c", "--config",
        help="YAML config file (fonts, use_default_font, normalize_cjk_spaces, fit_font_size)"
    )

    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a config value, e.g. --set fit_font_size=false (repeatable)"
    )

    parser.add_argument(
        "-l", "--logfile",
        help="Path to log file for detailed logging"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args(argv)

def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the extraction tool."""
    args = parse_args(argv)

    # Setup logging
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        for name in list(logging.root.manager.loggerDict):
            if name.startswith("cardtext"):
                logging.getLogger(name).setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    if args.logfile:
        log_path = Path(args.logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode='w')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logging.getLogger().addHandler(file_handler)
        logger.info(f"Logging to file: {log_path}")

    try:
        config = load_config(args.config, args.overrides)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    # Validate input path
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input path '{args.input}' does not exist")
        sys.exit(1)

    image_files = get_image_files(input_path)
    if not image_files:
        logger.error(f"No valid image files found in '{args.input}'")
        sys.exit(1)

    output_path = Path(args.output)
    output_path.mkdir(parents=True, exist_ok=True)

    logger.info(f"Found {len(image_files)} image(s) to process")

    start_time = time.time()
    failures = 0
    for image_path in tqdm(image_files, desc="Extracting", unit="image", disable=len(image_files) < 2):
        ocr_path = resolve_ocr_path(image_path, args.ocr)
        try:
            process_single_image(image_path, ocr_path, output_path, config)
        except MeasurementSetupError as e:
            # Misconfigured fonts fail every image the same way
            logger.error(f"Text measurement setup failed: {e}")
            sys.exit(1)
        except Exception as e:
            logger.error(f"Error processing {image_path.name}: {str(e)}")
            failures += 1
            continue

    total_time = time.time() - start_time
    logger.info(f"Processing complete: {len(image_files) - failures}/{len(image_files)} images "
                f"in {total_time:.1f} seconds")

    if failures == len(image_files):
        sys.exit(1)

if __name__ == "__main__":
    main()
