"""Command-line interface for ID card extraction and CSV export.

Provides subcommands for reading a single card to JSON and for
processing a folder of card images into a CSV report.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path

from src.ocr.id_card_reader import IDCardReader
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.webp", "*.bmp")
_COLUMNS = [
    "filename",
    "status",
    "full_name",
    "father_name",
    "cnic_number",
    "dob",
    "confidence",
    "extraction_method",
    "needs_review",
    "warnings",
    "processing_time_s",
    "error",
]


def _find_images(input_dir: Path) -> list[Path]:
    """Find all supported card images in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of image file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def process_folder(
    input_dir: Path,
    output_csv: Path,
    use_llm: bool = True,
    verbose: bool = False,
) -> dict[str, int]:
    """Read all card images in a folder and export results to CSV.

    Args:
        input_dir: Directory containing card images.
        output_csv: Path for the output CSV file.
        use_llm: Whether to use language-model extraction.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    reader = IDCardReader(load_config())

    files = _find_images(input_dir)
    if not files:
        logger.warning("No images found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d images to process", len(files))

    rows: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            result = reader.read_file(file_path, use_llm=use_llm)
            review = result.review
            rows.append(
                {
                    "filename": file_path.name,
                    "status": "success",
                    "full_name": result.full_name,
                    "father_name": result.father_name,
                    "cnic_number": result.cnic_number,
                    "dob": result.dob,
                    "confidence": result.confidence,
                    "extraction_method": result.extraction_method,
                    "needs_review": not review.all_valid if review else True,
                    "warnings": "; ".join(review.warnings) if review else "",
                    "processing_time_s": round(time.time() - start_time, 2),
                    "error": None,
                }
            )
            successful += 1
        except Exception as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            rows.append(
                {
                    "filename": file_path.name,
                    "status": "failed",
                    "needs_review": True,
                    "error": str(exc),
                }
            )
            failed += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    """Write card results to a CSV file.

    Args:
        rows: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not rows:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    """Print batch processing summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def extract_single(file_path: Path, use_llm: bool = True) -> dict[str, object]:
    """Read a single card image and return a JSON-serializable result.

    Args:
        file_path: Path to the card image.
        use_llm: Whether to use language-model extraction.

    Returns:
        Dictionary with filename, fields, raw_text, confidence, and warnings.
    """
    reader = IDCardReader(load_config())
    result = reader.read_file(file_path, use_llm=use_llm)

    return {
        "filename": file_path.name,
        "fields": {
            "full_name": result.full_name,
            "father_name": result.father_name,
            "cnic_number": result.cnic_number,
            "dob": result.dob,
        },
        "raw_text": result.raw_text,
        "confidence": result.confidence,
        "extraction_method": result.extraction_method,
        "warnings": result.review.warnings if result.review else [],
    }


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="ID Card OCR",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of card images")
    batch_parser.add_argument("input_dir", type=Path, help="Input directory with images")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "--no-llm", action="store_true", help="Use local parsing only"
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    single_parser = subparsers.add_parser("extract", help="Read a single card image")
    single_parser.add_argument("file", type=Path, help="Card image to process")
    single_parser.add_argument(
        "--no-llm", action="store_true", help="Use local parsing only"
    )
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, not args.no_llm, args.verbose)
    elif args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        result = extract_single(args.file, not args.no_llm)
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
