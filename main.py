"""
Точка входа: автоматическое оразмеривание и проекции чертежа детали.

Использование:
    python main.py <drawing.json> [--style {auto,shapes-only,full}]
                   [--project {side,top,all} --depth D] [--svg OUT.svg] [--dxf OUT.dxf]

Пример:
    python main.py plate.json --style full --output plate_dim.json
    python main.py plate.json --project all --depth 10 --svg plate.svg --page A3
    python main.py plate.json --dimension-shape hole-1 --dxf plate.dxf
    python main.py plate.json --clear-projections --project side --depth 5
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional

# Обеспечить поддержку Unicode (ø и кириллица) на Windows-консоли
if sys.stdout.encoding and sys.stdout.encoding.lower() not in ('utf-8', 'utf8'):
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')
if sys.stderr.encoding and sys.stderr.encoding.lower() not in ('utf-8', 'utf8'):
    sys.stderr.reconfigure(encoding='utf-8', errors='replace')

from detail_drawing.config import AXES_LAYER_ID
from detail_drawing.drawing.dimensions import auto_dimension_all, auto_dimension_shape
from detail_drawing.errors import DrawingError, DrawingFormatError, InvalidArgumentError
from detail_drawing.ids import IdGenerator, reserve_ids
from detail_drawing.io.document import load_document, save_document
from detail_drawing.io.validator import validate_drawing
from detail_drawing.logging_config import LogContext, log_timing, setup_logging
from detail_drawing.model import Dimension, DimensionStyle, DrawingState, Shape, TitleBlock
from detail_drawing.project_config import ProjectConfig, load_config
from detail_drawing.projection import (
    clear_projections,
    generate_all_projections,
    generate_side_view,
    generate_top_view,
)

logger = logging.getLogger("detail_drawing.main")

PROJECTION_VIEWS = ("side", "top", "all")


@dataclass
class PipelineResult:
    """Итог обработки одного чертежа."""
    state: DrawingState
    title_block: TitleBlock
    new_shapes: List[Shape] = field(default_factory=list)
    new_dimensions: List[Dimension] = field(default_factory=list)
    removed_shapes: int = 0
    outputs: Dict[str, Path] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Шаги пайплайна
# ---------------------------------------------------------------------------

def project_views(
    state: DrawingState,
    view: str,
    depth: float,
    config: ProjectConfig,
    id_gen: IdGenerator,
) -> List[Shape]:
    """Построить проекции профиля (фигуры слоя-источника)."""
    profile = [s for s in state.shapes if s.layer_id == config.projection.source_layer]
    target = config.projection.target_layer

    if view == "side":
        return generate_side_view(profile, depth, target, id_gen).shapes
    if view == "top":
        return generate_top_view(profile, depth, target, id_gen).shapes
    if view == "all":
        views = generate_all_projections(profile, depth, target, id_gen)
        return views["side"].shapes + views["top"].shapes
    raise InvalidArgumentError(
        f"Unknown projection view {view!r} (expected one of: {', '.join(PROJECTION_VIEWS)})"
    )


def dimensionable_shapes(shapes: List[Shape]) -> List[Shape]:
    """Фигуры для оразмеривания: без осевых линий слоя 'axes'."""
    return [s for s in shapes if s.layer_id != AXES_LAYER_ID]


def output_path_for(drawing_path: Path, config: ProjectConfig, extension: str) -> Path:
    """Путь выходного файла по правилам секции output."""
    out = config.output
    directory = Path(out.output_dir) if out.output_dir else drawing_path.parent
    return directory / f"{out.prefix}{drawing_path.stem}{out.suffix}.{extension}"


def run_pipeline(
    drawing_path: str,
    output_json: Optional[str] = None,
    output_svg: Optional[str] = None,
    output_dxf: Optional[str] = None,
    style: Optional[str] = None,
    dimension_shape: Optional[str] = None,
    project: Optional[str] = None,
    depth: Optional[float] = None,
    clear: bool = False,
    page_size: Optional[str] = None,
    config: Optional[ProjectConfig] = None,
) -> PipelineResult:
    """Полный пайплайн: документ → проверка → проекции → размеры → вывод.

    Шаги:
      1. Загрузка документа и проверка целостности.
      2. Удаление прежних проекций (clear).
      3. Построение проекций (project + depth).
      4. Оразмеривание: одной фигуры (dimension_shape) или всего чертежа.
      5. Сохранение JSON и экспорт SVG / DXF.

    Результаты движков добавляются к состоянию, как это делает редактор.
    Явные аргументы имеют приоритет над конфигурацией.

    Raises:
        FileNotFoundError: документ не найден.
        DrawingFormatError: документ некорректен или содержит повторяющиеся id.
        InvalidArgumentError: неверный стиль, вид, глубина или id фигуры.
    """
    config = config or ProjectConfig()
    path = Path(drawing_path)
    result = PipelineResult(state=DrawingState(), title_block=TitleBlock())

    # --- Шаг 1: Загрузка и проверка ---
    state, title_block = load_document(path)
    report = validate_drawing(state)
    for issue in report.warnings:
        logger.warning("%s", issue)
    if not report.is_valid:
        raise DrawingFormatError(report.summary())

    # --- Шаг 2: Удаление прежних проекций ---
    if clear:
        kept = clear_projections(state.shapes)
        result.removed_shapes = len(state.shapes) - len(kept)
        state.shapes = kept
        logger.info("Удалено фигур проекций: %d", result.removed_shapes)

    id_gen = reserve_ids(IdGenerator(), state.shapes, state.dimensions, state.annotations)

    # --- Шаг 3: Проекции ---
    view = project or (config.projection.view if config.projection.depth else None)
    if view:
        view_depth = depth if depth is not None else config.projection.depth
        with log_timing(logger, "projection", view=view) as info:
            result.new_shapes = project_views(state, view, view_depth, config, id_gen)
            info["shapes"] = len(result.new_shapes)
        state.shapes = state.shapes + result.new_shapes

    # --- Шаг 4: Размеры ---
    targets = dimensionable_shapes(state.shapes)
    if dimension_shape:
        result.new_dimensions = auto_dimension_shape(
            dimension_shape, targets, state.dimensions, id_gen,
        )
    elif config.dimensioning.enabled or style:
        dim_style = DimensionStyle.parse(style or config.dimensioning.style)
        result.new_dimensions = auto_dimension_all(
            replace(state, shapes=targets), dim_style, id_gen,
        )
    state.dimensions = state.dimensions + result.new_dimensions

    title_block = config.title_block.apply_to(title_block)
    result.state, result.title_block = state, title_block

    # --- Шаг 5: Вывод ---
    formats = {f.lower() for f in config.output.formats}
    json_path = Path(output_json) if output_json else (
        output_path_for(path, config, "json") if "json" in formats else None
    )
    svg_path = Path(output_svg) if output_svg else (
        output_path_for(path, config, "svg") if "svg" in formats else None
    )
    dxf_path = Path(output_dxf) if output_dxf else (
        output_path_for(path, config, "dxf") if "dxf" in formats else None
    )

    if json_path:
        result.outputs["json"] = save_document(json_path, state, title_block)
    if svg_path:
        from detail_drawing.drawing.svg_renderer import export_svg
        result.outputs["svg"] = export_svg(
            state, svg_path, title_block,
            page_size or config.print.page_size, config.print.margin,
        )
    if dxf_path:
        from detail_drawing.drawing.dxf_renderer import export_dxf
        result.outputs["dxf"] = export_dxf(state, dxf_path)

    logger.info(
        "Готово: +%d фигур, +%d размеров, файлов: %d",
        len(result.new_shapes), len(result.new_dimensions), len(result.outputs),
    )
    return result


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Автоматическое оразмеривание и ортогональные проекции чертежа детали.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "drawing",
        help="Путь к документу чертежа (JSON, формат .qcad).",
    )
    parser.add_argument(
        "--style",
        choices=[s.value for s in DimensionStyle],
        default=None,
        help="Стиль оразмеривания всего чертежа (по умолчанию из конфигурации: auto).",
    )
    parser.add_argument(
        "--dimension-shape",
        default=None,
        dest="dimension_shape",
        metavar="ID",
        help="Оразмерить только фигуру с указанным id.",
    )
    parser.add_argument(
        "--project",
        choices=PROJECTION_VIEWS,
        default=None,
        help="Построить проекции: вид сбоку, сверху или оба.",
    )
    parser.add_argument(
        "--depth",
        type=float,
        default=None,
        help="Глубина выдавливания для проекций (> 0).",
    )
    parser.add_argument(
        "--clear-projections",
        action="store_true",
        dest="clear_projections",
        help="Удалить ранее построенные проекции (id с префиксом 'proj-').",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Путь к выходному документу JSON.",
    )
    parser.add_argument(
        "--svg",
        default=None,
        help="Путь к SVG-листу для печати.",
    )
    parser.add_argument(
        "--dxf",
        default=None,
        help="Путь к DXF-файлу.",
    )
    parser.add_argument(
        "--page",
        choices=["A4", "A3"],
        default=None,
        help="Формат листа для SVG (по умолчанию из конфигурации: A4).",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Путь к конфигурационному файлу .detail.json.",
    )
    parser.add_argument(
        "--log-json",
        default=None,
        dest="log_json",
        help="Дополнительно писать журнал в JSON-lines файл.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Подробный журнал (DEBUG).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        json_file=args.log_json,
    )

    config = load_config(drawing_path=args.drawing, explicit_config=args.config)

    try:
        with LogContext(drawing=Path(args.drawing).name):
            run_pipeline(
                args.drawing,
                output_json=args.output,
                output_svg=args.svg,
                output_dxf=args.dxf,
                style=args.style,
                dimension_shape=args.dimension_shape,
                project=args.project,
                depth=args.depth,
                clear=args.clear_projections,
                page_size=args.page,
                config=config,
            )
    except FileNotFoundError as exc:
        logger.critical("Файл не найден: %s", exc)
        return 1
    except DrawingFormatError as exc:
        logger.critical("Некорректный документ: %s", exc)
        return 1
    except InvalidArgumentError as exc:
        logger.critical("Неверный аргумент: %s", exc)
        return 1
    except DrawingError as exc:
        logger.critical("Ошибка чертежа: %s", exc)
        return 2
    except Exception as exc:
        logger.critical("Неожиданная ошибка: %s", exc, exc_info=True)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
