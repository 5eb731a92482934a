#!/usr/bin/env python3
import argparse
import logging
import sys
from pathlib import Path

from .codec import load_image, save_image
from .config import ScrambleConfig
from .errors import ScrambleError
from .permutation import generate_permutation, key_to_seed, restore_via_inverse
from .pipeline import count_matching, moved_pixels, restore, scramble, undo, values_preserved

logger = logging.getLogger("pixelscramble")

# ---------- Helpers ----------

def _require_file(path) -> Path:
    path = Path(path)
    if not path.is_file():
        raise ScrambleError(f"Please make sure {path} exists")
    return path


def _pixel_rgb(image, x, y):
    r, g, b, _ = image.pixels[y, x].tolist()
    return r, g, b

# ---------- Modes ----------

def run_scramble(args, cfg: ScrambleConfig) -> Path:
    img = load_image(_require_file(args.inp))
    rng = key_to_seed(args.key, img.width, img.height) if args.key else None
    if rng is None:
        logger.warning("No --key given: this scramble cannot be restored in a later run")

    result = scramble(img.flat(), rng=rng, item_size=cfg.bytes_per_pixel, track=args.track)
    if result.tracker is not None:
        logger.info("Tracked %d byte modifications during shuffling", len(result.tracker))

    return save_image(img.from_flat(result.scrambled), args.out, quality=cfg.jpeg_quality)


def run_restore(args, cfg: ScrambleConfig) -> Path:
    if not args.key:
        raise ScrambleError("restore needs the --key used to scramble")
    img = load_image(_require_file(args.inp))
    if img.format == "JPEG":
        logger.warning("%s is JPEG; lossy compression means the restore will only be approximate", args.inp)

    seed = key_to_seed(args.key, img.width, img.height)
    permutation = generate_permutation(img.total_pixels, seed)
    restored = restore_via_inverse(img.flat(), permutation, item_size=cfg.bytes_per_pixel)
    return save_image(img.from_flat(restored), args.out, quality=cfg.jpeg_quality)


def run_demo(args, cfg: ScrambleConfig) -> Path:
    """Scramble the sample image, save it, restore it both ways and verify."""
    sample = _require_file(cfg.sample_path)
    original = load_image(sample)
    width, height = original.width, original.height
    logger.info("Original image: %dx%d pixels, %d total pixels", width, height, original.total_pixels)

    result = scramble(original.flat(), item_size=cfg.bytes_per_pixel, track=True)
    logger.info("Created shuffled indices for %d pixels", result.element_count)

    logger.info("Shuffle examples:")
    for (x, y), (sx, sy) in moved_pixels(result, width, cfg.preview_count):
        r, g, b = _pixel_rgb(original, x, y)
        logger.info("  Pixel at (%d,%d) [R:%d G:%d B:%d] -> moves to (%d,%d)", x, y, r, g, b, sx, sy)
    logger.info("Tracked %d byte modifications during shuffling", len(result.tracker))

    scrambled = original.from_flat(result.scrambled)
    scrambled_path = save_image(scrambled, cfg.output_path(cfg.scrambled_name, cfg.sample_name),
                                quality=cfg.jpeg_quality)
    logger.info("Saved shuffled image as: %s", scrambled_path)

    logger.info("Verifying pixel values after shuffling:")
    for ((x, y), (sx, sy)), ok in zip(moved_pixels(result, width, cfg.verify_count),
                                      values_preserved(original.flat(), result, cfg.verify_count)):
        logger.info("  Pixel from (%d,%d) moved to (%d,%d) - Values match: %s", x, y, sx, sy, ok)

    logger.info("Applying reverse shuffle...")
    restored = original.from_flat(restore(result))
    restored_path = save_image(restored, cfg.output_path(cfg.restored_name, cfg.sample_name),
                               quality=cfg.jpeg_quality)
    logger.info("Saved restored image as: %s", restored_path)

    checked = min(cfg.match_limit, original.total_pixels)
    matches = count_matching(original.flat(), restored.flat(), cfg.bytes_per_pixel, limit=checked)
    logger.info("Pixel matching: %d/%d pixels match original", matches, checked)
    if matches == checked:
        logger.info("Perfect restoration achieved")
    else:
        logger.warning("Some pixels don't match")

    undo(result)
    logger.info("After undo - scrambled image bytes were reset, remaining tracked offsets: %d",
                len(result.tracker))

    # Scrambling a copy in place leaves the tracker with every original byte
    working = original.flat().copy()
    in_place = scramble(working, item_size=cfg.bytes_per_pixel, track=True, in_place=True)
    undo(in_place)
    recovered = count_matching(original.flat(), working, cfg.bytes_per_pixel)
    logger.info("In-place scramble undone from the change log: %d/%d pixels match",
                recovered, original.total_pixels)
    return restored_path

# ---------- CLI ----------

MODES = {
    "scramble": run_scramble,
    "restore": run_restore,
    "demo": run_demo,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pixelscramble",
        description="Reversible pixel shuffling for PNG/JPEG images. NOT encryption."
    )
    p.add_argument("mode", choices=sorted(MODES), help="Mode to run")
    p.add_argument("--in", dest="inp", help="Input image path (scramble/restore)")
    p.add_argument("--out", dest="out", help="Output image path (scramble/restore)")
    p.add_argument("--key", help="Passphrase the permutation is derived from; needed to restore later")
    p.add_argument("--track", action="store_true", help="Route every byte write through the change tracker")
    p.add_argument("--images-dir", dest="images_dir", help="Directory holding the demo sample (default: images)")
    p.add_argument("--sample", dest="sample_name", help="Demo sample file name (default: sample.jpg)")
    p.add_argument("--quality", dest="jpeg_quality", type=int, help="JPEG quality, 1-95 (default: 90)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv=None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    if args.mode != "demo" and not (args.inp and args.out):
        p.error(f"{args.mode} requires --in and --out")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        cfg = ScrambleConfig.from_args(args)
    except ValueError as e:
        p.error(str(e))

    try:
        out = MODES[args.mode](args, cfg)
    except ScrambleError as e:
        logger.error("%s", e)
        return 1

    print(f"Done: {args.mode} -> {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
