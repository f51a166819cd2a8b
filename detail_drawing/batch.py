"""
Batch auto-dimensioning of a folder of drawing documents.

Every ``*.json`` drawing found in the input folder goes through the same
pipeline as ``main.py`` (validate, project, dimension, save/export). A
broken drawing is reported and skipped; it never stops the batch.

Usage:
    from detail_drawing.batch import batch_process

    report = batch_process("./drawings", output_dir="./out", parallel=True)
    print(report.summary())
"""

import argparse
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from detail_drawing.logging_config import LogContext, setup_logging
from detail_drawing.project_config import CONFIG_FILENAME, ProjectConfig, load_config

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, 'ProcessingResult'], None]


@dataclass
class ProcessingResult:
    """Outcome for one drawing."""
    input_path: Path
    outputs: Dict[str, Path] = field(default_factory=dict)
    new_dimensions: int = 0
    new_shapes: int = 0
    success: bool = False
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def status(self) -> str:
        return "OK" if self.success else "FAILED"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'input': str(self.input_path),
            'status': self.status,
            'outputs': {fmt: str(path) for fmt, path in self.outputs.items()},
            'new_dimensions': self.new_dimensions,
            'new_shapes': self.new_shapes,
            'error': self.error,
            'duration': round(self.duration_seconds, 3),
        }


@dataclass
class BatchResult:
    """Per-drawing outcomes of a batch run, in input order."""
    results: List[ProcessingResult] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return len([r for r in self.results if r.success])

    @property
    def failed(self) -> int:
        return self.total - self.successful

    @property
    def success_rate(self) -> float:
        """Percentage of drawings processed without error (0 for an empty run)."""
        return 100.0 * self.successful / self.total if self.results else 0.0

    @property
    def new_dimensions(self) -> int:
        return sum(r.new_dimensions for r in self.results)

    def summary(self) -> str:
        """Plain-text report: totals, then one line per drawing."""
        width = max([len(r.input_path.name) for r in self.results] + [8])
        lines = [
            "Batch Processing Summary",
            "-" * (width + 30),
            f"Drawings:   {self.total} ({self.successful} ok, {self.failed} failed, "
            f"{self.success_rate:.0f}%)",
            f"Dimensions: {self.new_dimensions} added",
            f"Elapsed:    {self.total_duration_seconds:.2f}s",
        ]
        if self.results:
            lines.append("")
        for r in self.results:
            detail = f"+{r.new_dimensions} dims" if r.success else r.error
            lines.append(f"  {r.input_path.name:<{width}}  {r.status:<6}  {detail}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'success_rate': self.success_rate,
            'new_dimensions': self.new_dimensions,
            'duration': round(self.total_duration_seconds, 3),
            'results': [r.to_dict() for r in self.results],
        }


def find_drawing_files(
    input_dir: Union[str, Path],
    pattern: str = "*.json",
    recursive: bool = False,
    exclude_suffix: str = "",
) -> List[Path]:
    """Drawing documents in ``input_dir``, sorted by path.

    The project config file and documents whose stem ends with
    ``exclude_suffix`` (outputs of an earlier run) are left out.

    Raises:
        FileNotFoundError: ``input_dir`` does not exist.
        NotADirectoryError: ``input_dir`` is a file.
    """
    folder = Path(input_dir)
    if not folder.exists():
        raise FileNotFoundError(f"Drawing folder not found: {folder}")
    if not folder.is_dir():
        raise NotADirectoryError(f"Expected a folder of drawings, got a file: {folder}")

    matches = folder.rglob(pattern) if recursive else folder.glob(pattern)

    def wanted(path: Path) -> bool:
        if not path.is_file() or path.name == CONFIG_FILENAME:
            return False
        return not (exclude_suffix and path.stem.endswith(exclude_suffix))

    files = sorted({p for p in matches if wanted(p)})
    logger.info("%d drawing(s) matched %r in %s", len(files), pattern, folder)
    return files


def process_single_file(
    input_path: Path,
    config: Optional[ProjectConfig] = None,
) -> ProcessingResult:
    """Run the CLI pipeline on one drawing; failures end up in ``result.error``."""
    # main imports this package, so the pipeline is resolved at call time
    from main import run_pipeline

    result = ProcessingResult(input_path=input_path)
    started = time.perf_counter()
    try:
        with LogContext(drawing=input_path.name):
            outcome = run_pipeline(str(input_path), config=config)
    except Exception as exc:
        result.error = str(exc) or type(exc).__name__
        logger.error("%s skipped: %s", input_path.name, result.error)
    else:
        result.success = True
        result.outputs = dict(outcome.outputs)
        result.new_dimensions = len(outcome.new_dimensions)
        result.new_shapes = len(outcome.new_shapes)
    result.duration_seconds = time.perf_counter() - started
    return result


def _batch_config(
    config: Optional[ProjectConfig],
    config_path: Optional[Union[str, Path]],
    input_dir: Path,
    output_dir: Optional[Path],
    output_prefix: Optional[str],
    output_suffix: Optional[str],
) -> ProjectConfig:
    """Copy of the effective config with the batch overrides applied."""
    if config is None:
        # any file name will do: only its folder is searched
        config = load_config(drawing_path=input_dir / "drawing.json", explicit_config=config_path)
    effective = ProjectConfig.from_dict(config.to_dict())
    overrides = {
        'output_dir': str(output_dir) if output_dir is not None else None,
        'prefix': output_prefix,
        'suffix': output_suffix,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(effective.output, name, value)
    return effective


def batch_process(
    input_dir: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    pattern: str = "*.json",
    recursive: bool = False,
    config: Optional[ProjectConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    output_prefix: Optional[str] = None,
    output_suffix: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> BatchResult:
    """Process every drawing in a folder.

    Args:
        input_dir: Folder with drawing documents.
        output_dir: Where outputs go (default: config ``output.output_dir``,
            else next to each drawing).
        pattern: Glob pattern for drawing documents.
        recursive: Descend into subfolders.
        config: Project configuration; looked up from ``input_dir`` when None.
        config_path: Explicit ``.detail.json`` for the lookup.
        parallel: Process drawings on a thread pool.
        max_workers: Pool size (None: executor default).
        output_prefix, output_suffix: Override the config output names.
        progress_callback: ``(done, total, result)`` after each drawing.

    Raises:
        FileNotFoundError, NotADirectoryError: from :func:`find_drawing_files`.
    """
    started = time.perf_counter()
    folder = Path(input_dir)
    out_dir = Path(output_dir) if output_dir else None
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    config = _batch_config(config, config_path, folder, out_dir, output_prefix, output_suffix)
    files = find_drawing_files(folder, pattern, recursive, exclude_suffix=config.output.suffix)
    if not files:
        logger.warning("Nothing to do in %s", folder)
        return BatchResult(total_duration_seconds=time.perf_counter() - started)

    logger.info("Processing %d drawing(s)%s", len(files), " in parallel" if parallel else "")
    results: List[ProcessingResult] = []

    def finished(result: ProcessingResult) -> None:
        results.append(result)
        logger.info(
            "[%d/%d] %s %s in %.2fs",
            len(results), len(files), result.input_path.name, result.status,
            result.duration_seconds,
        )
        if progress_callback is not None:
            progress_callback(len(results), len(files), result)

    if parallel:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            pending = [pool.submit(process_single_file, path, config) for path in files]
            for future in as_completed(pending):
                finished(future.result())
        results.sort(key=lambda r: r.input_path)
    else:
        for path in files:
            finished(process_single_file(path, config))

    report = BatchResult(results=results, total_duration_seconds=time.perf_counter() - started)
    logger.info(
        "Batch done: %d of %d drawing(s) ok, %d dimension(s) added, %.2fs",
        report.successful, report.total, report.new_dimensions, report.total_duration_seconds,
    )
    return report


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="detail-drawing-batch",
        description="Auto-dimension every drawing document in a folder.",
    )
    parser.add_argument("input_dir", help="folder with drawing documents (*.json)")
    parser.add_argument("-o", "--output-dir", dest="output_dir",
                        help="write outputs here instead of next to each drawing")
    parser.add_argument("-p", "--pattern", default="*.json",
                        help="glob for drawing documents (default: %(default)s)")
    parser.add_argument("-r", "--recursive", action="store_true", help="include subfolders")
    parser.add_argument("-c", "--config", dest="config_path", help="explicit .detail.json")
    parser.add_argument("--style", choices=["auto", "shapes-only", "full"],
                        help="dimensioning style for every drawing")
    parser.add_argument("--formats", nargs="+", choices=["json", "svg", "dxf"],
                        help="output formats for every drawing")
    parser.add_argument("--page", choices=["A4", "A3"], help="SVG sheet size")
    parser.add_argument("--prefix", help="output file name prefix")
    parser.add_argument("--suffix", help="output file name suffix")
    parser.add_argument("--parallel", action="store_true", help="use a thread pool")
    parser.add_argument("-j", "--jobs", type=int, dest="max_workers", help="thread pool size")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def batch_convert_cli(argv: Optional[Sequence[str]] = None) -> int:
    """Console entry point; exit code 0 only when every drawing succeeded."""
    args = _build_parser().parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    folder = Path(args.input_dir)
    config = load_config(drawing_path=folder / "drawing.json", explicit_config=args.config_path)
    if args.style:
        config.dimensioning.style = args.style
    if args.formats:
        config.output.formats = list(args.formats)
    if args.page:
        config.print.page_size = args.page

    try:
        report = batch_process(
            folder,
            output_dir=args.output_dir,
            pattern=args.pattern,
            recursive=args.recursive,
            config=config,
            parallel=args.parallel,
            max_workers=args.max_workers,
            output_prefix=args.prefix,
            output_suffix=args.suffix,
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        logger.error("%s", exc)
        return 1

    print(report.summary())
    return 0 if report.failed == 0 else 1


if __name__ == "__main__":
    import sys
    sys.exit(batch_convert_cli())
