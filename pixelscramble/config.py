"""Runtime settings for the command line."""

from dataclasses import dataclass, fields, replace
from pathlib import Path


@dataclass(frozen=True)
class ScrambleConfig:
    images_dir: str = "images"
    sample_name: str = "sample.jpg"
    scrambled_name: str = "scrambled"
    restored_name: str = "restored"
    bytes_per_pixel: int = 4
    jpeg_quality: int = 90
    preview_count: int = 5
    verify_count: int = 3
    match_limit: int = 100

    def __post_init__(self):
        for name in ("bytes_per_pixel", "preview_count", "verify_count", "match_limit"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be positive")
        # Pillow ignores JPEG quality above 95
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError("jpeg_quality must be between 1 and 95")

    @classmethod
    def from_args(cls, args, base: "ScrambleConfig" = None) -> "ScrambleConfig":
        """Overlay any argparse attributes named like a field and not None."""
        base = base or cls()
        overrides = {}
        for f in fields(cls):
            value = getattr(args, f.name, None)
            if value is not None:
                overrides[f.name] = value
        return replace(base, **overrides)

    def output_path(self, stem: str, like: str) -> Path:
        """images_dir/stem with the extension of like (e.g. the sample file)."""
        return Path(self.images_dir) / (stem + (Path(like).suffix or ".png"))

    @property
    def sample_path(self) -> Path:
        return Path(self.images_dir) / self.sample_name
