import os
import sys
import logging
import argparse
from pathlib import Path

from dotenv import load_dotenv
from tqdm import tqdm

# Load environment variables first
load_dotenv()

from ..errors import NoOutputError, PipelineError
from ..pipeline.photo_converter import EDGE_THRESHOLD, convert_photo
from ..services.image_service import ImageService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Convert a folder of photos into outlines and colored illustrations.")
    ap.add_argument("folder", help="dir with input photos")
    ap.add_argument("--out-dir", default="data/batch_outputs", help="where results are written")
    ap.add_argument("--no-outline", action="store_true", help="skip the line drawing")
    ap.add_argument("--no-colored", action="store_true", help="skip the colored illustration")
    ap.add_argument("--threshold", type=int, default=EDGE_THRESHOLD, help="edge detection threshold")
    ap.add_argument("--recursive", action="store_true", help="descend into subfolders")
    return ap


def run(args: argparse.Namespace, image_service: ImageService = None) -> int:
    """
    Convert every readable photo in args.folder.
    Returns the number of photos that produced at least one output.
    """
    image_service = image_service or ImageService()
    want_outline, want_colored = not args.no_outline, not args.no_colored
    if not (want_outline or want_colored):
        raise ValueError("Nothing to do: both outputs are disabled")

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    converted = 0
    gallery = image_service.stream_gallery(args.folder, recursive=args.recursive)
    for path, photo in tqdm(gallery, desc="Converting", unit="img"):
        try:
            result = convert_photo(photo, want_outline, want_colored, threshold=args.threshold)
        except NoOutputError as err:
            logger.error(f"{path.name}: {err}")
            continue

        written = 0
        for branch, buffer in (("outline", result.outline), ("colored", result.colored)):
            if buffer is None:
                continue
            try:
                (out_dir / f"{path.stem}_{branch}.jpg").write_bytes(image_service.encode(buffer))
            except PipelineError as err:
                logger.error(f"{path.name}: could not encode {branch} output: {err}")
                continue
            written += 1
        if written:
            converted += 1

    logger.info(f"Converted {converted} photo(s) into {out_dir}")
    return converted


def main(argv=None) -> int:
    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.no_outline and args.no_colored:
        parser.error("--no-outline and --no-colored together leave nothing to do")

    try:
        converted = run(args)
    except NotADirectoryError as err:
        logger.error(f"Input folder not found: {err}")
        return 1
    if converted == 0:
        print("No photos were converted.", file=sys.stderr)
        return 1
    print(f"✓ Converted {converted} photo(s) → {Path(args.out_dir).resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
