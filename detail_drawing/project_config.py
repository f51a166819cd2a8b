"""
JSON-based project configuration for detail_drawing.

Default values can be overridden through a ``.detail.json`` file looked up in:
1. An explicit path given on the command line
2. The drawing's directory
3. The current working directory
4. The user's home directory

The first file found wins; CLI arguments override whatever it sets.

Example .detail.json:
{
    "dimensioning": {"style": "full"},
    "projection": {"depth": 10.0, "view": "all"},
    "print": {"page_size": "A3"},
    "title_block": {"material": "S235", "author": "J. Smith"},
    "output": {"formats": ["json", "svg", "dxf"], "suffix": "_dim"}
}
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from detail_drawing.config import AXES_LAYER_ID, CONTOUR_LAYER_ID, PAGE_MARGIN
from detail_drawing.model import TitleBlock

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".detail.json"


@dataclass
class DimensioningConfig:
    """Batch auto-dimensioning settings."""
    style: str = "auto"  # auto, shapes-only, full
    enabled: bool = True


@dataclass
class ProjectionConfig:
    """Orthographic projection settings."""
    depth: Optional[float] = None  # None = no projections
    view: str = "all"  # side, top, all
    source_layer: str = CONTOUR_LAYER_ID
    target_layer: str = CONTOUR_LAYER_ID
    axes_layer: str = AXES_LAYER_ID


@dataclass
class PrintConfig:
    """Print sheet settings."""
    page_size: str = "A4"  # A4, A3
    margin: float = PAGE_MARGIN


@dataclass
class TitleBlockConfig:
    """Title block fields; empty values keep those stored in the drawing."""
    detail_name: str = ""
    material: str = ""
    thickness: str = ""
    author: str = ""
    date: str = ""

    def apply_to(self, title_block: TitleBlock) -> TitleBlock:
        """Return ``title_block`` with every non-empty field of this config applied."""
        values = {k: v for k, v in asdict(self).items() if v}
        return TitleBlock(**{**asdict(title_block), **values})


@dataclass
class OutputConfig:
    """Output file configuration."""
    formats: List[str] = field(default_factory=lambda: ["json"])  # json, svg, dxf
    prefix: str = ""
    suffix: str = "_dim"
    output_dir: str = ""


_SECTIONS = {
    "dimensioning": DimensioningConfig,
    "projection": ProjectionConfig,
    "print": PrintConfig,
    "title_block": TitleBlockConfig,
    "output": OutputConfig,
}


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    dimensioning: DimensioningConfig = field(default_factory=DimensioningConfig)
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    print: PrintConfig = field(default_factory=PrintConfig)
    title_block: TitleBlockConfig = field(default_factory=TitleBlockConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from a dictionary.

        Unknown sections and keys (including ``_comment`` entries) are ignored.
        """
        config = cls()
        for section in _SECTIONS:
            values = data.get(section)
            if not isinstance(values, dict):
                continue
            target = getattr(config, section)
            for key, value in values.items():
                if hasattr(target, key):
                    setattr(target, key, value)
        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    drawing_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Find the configuration file using the search order above."""
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    candidates = []
    if drawing_path:
        candidates.append(Path(drawing_path).parent / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    candidates.append(Path.home() / CONFIG_FILENAME)

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_config(
    drawing_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration, falling back to defaults when none is found or it is broken."""
    config_path = find_config_file(drawing_path, explicit_config)
    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)
    return ProjectConfig()


def merge_configs(base: ProjectConfig, override: ProjectConfig) -> ProjectConfig:
    """Merge two configurations; non-default values of ``override`` win."""
    merged = ProjectConfig.from_dict(base.to_dict())
    for section, section_cls in _SECTIONS.items():
        defaults = section_cls()
        source = getattr(override, section)
        target = getattr(merged, section)
        for f in fields(section_cls):
            value = getattr(source, f.name)
            if value != getattr(defaults, f.name):
                setattr(target, f.name, value)
    return merged


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> Path:
    """Write a commented sample configuration file."""
    sample = {
        "_comment": "Detail drawing auto-dimensioning configuration",
        "_version": "1.0",
        "dimensioning": {
            "_comment": "style: auto | shapes-only | full",
            "style": "auto",
            "enabled": True,
        },
        "projection": {
            "_comment": "depth > 0 enables projections; view: side | top | all",
            "depth": None,
            "view": "all",
            "source_layer": CONTOUR_LAYER_ID,
            "target_layer": CONTOUR_LAYER_ID,
        },
        "print": {
            "_comment": "page_size: A4 | A3 (landscape)",
            "page_size": "A4",
            "margin": PAGE_MARGIN,
        },
        "title_block": {
            "_comment": "Empty fields keep the values stored in the drawing",
            "detail_name": "",
            "material": "",
            "thickness": "",
            "author": "",
            "date": "",
        },
        "output": {
            "_comment": "formats: json | svg | dxf",
            "formats": ["json"],
            "prefix": "",
            "suffix": "_dim",
            "output_dir": "",
        },
    }

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)
    logger.info("Sample configuration created: %s", path)
    return path
