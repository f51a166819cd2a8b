"""
Константы движка оразмеривания и проекций.

Все величины заданы в единицах чертежа (мм).
"""

# ---------------------------------------------------------------------------
# Слои
# ---------------------------------------------------------------------------

CONTOUR_LAYER_ID = 'contour'
DIMENSIONS_LAYER_ID = 'dimensions'
ANNOTATIONS_LAYER_ID = 'annotations'
AXES_LAYER_ID = 'axes'
AUXILIARY_LAYER_ID = 'auxiliary'

LAYER_COLORS = {
    CONTOUR_LAYER_ID: '#ffffff',
    DIMENSIONS_LAYER_ID: '#34d399',
    AXES_LAYER_ID: '#f87171',
    AUXILIARY_LAYER_ID: '#60a5fa',
    ANNOTATIONS_LAYER_ID: '#fbbf24',
}

# ---------------------------------------------------------------------------
# Геометрия размера
# ---------------------------------------------------------------------------

DIM_EXTENSION_LENGTH = 15.0     # выступ выносной линии за размерную
DIM_TEXT_MARGIN = 20.0          # запас на текст по обе стороны размерной линии
DIM_COLLISION_PADDING = 12.0    # запас bbox при поиске коллизий
DIM_LABEL_DECIMALS = 1
DIAMETER_SYMBOL = '\u00f8'   # ø

# ---------------------------------------------------------------------------
# Поиск смещения (Dimension Placement Resolver)
# ---------------------------------------------------------------------------

PLACEMENT_MAX_ATTEMPTS = 15
PLACEMENT_DEFAULT_OFFSET = 20.0
PLACEMENT_DEFAULT_INCREMENT = 15.0

DIAMETER_OFFSET_MARGIN = 20.0   # начальное смещение диаметра = r + 20
DIAMETER_INCREMENT = 15.0
RECT_SIZE_OFFSET = -25.0
RECT_SIZE_INCREMENT = -18.0
LINE_LENGTH_OFFSET = 20.0
LINE_LENGTH_INCREMENT = 15.0
POSITIONAL_OFFSET = -30.0
POSITIONAL_INCREMENT = -20.0

# ---------------------------------------------------------------------------
# Контур и пакетное оразмеривание
# ---------------------------------------------------------------------------

CONTOUR_DIM_OFFSET = 25.0       # габариты контура: фиксированно, наружу
CONTOUR_INSIDE_MARGIN = 1.0
POSITIONAL_ROW_START = 25.0     # первый ряд координатных размеров
POSITIONAL_ROW_STEP = 22.0      # шаг между рядами

DUPLICATE_TOLERANCE = 0.5
SIMILAR_POSITION_TOLERANCE = 5.0
CONTOUR_EXTENT_TOLERANCE = 0.5
COORDINATE_DECIMALS = 3         # точность слияния координат в рядах

# ---------------------------------------------------------------------------
# Компоновка печати
# ---------------------------------------------------------------------------

LAYOUT_PADDING = 15.0
LAYOUT_EMPTY_EXTENT = 100.0
LAYOUT_MIN_EXTENT = 1.0
TEXT_WIDTH_FACTOR = 0.6
DEFAULT_FONT_SIZE = 14.0
LEADER_FONT_SIZE = 12.0

PAGE_FORMATS = {
    'A4': (297.0, 210.0),
    'A3': (420.0, 297.0),
}
PAGE_MARGIN = 10.0
TITLE_BLOCK_W = 120.0
TITLE_BLOCK_H = 25.0
TITLE_BLOCK_GAP = 8.0

# ---------------------------------------------------------------------------
# Ортогональные проекции
# ---------------------------------------------------------------------------

PROJECTION_GAP = 30.0
PROJECTION_ID_PREFIX = 'proj-'
CENTERLINE_EXTEND = 10.0        # выход осей главного вида за bbox
HOLE_AXIS_EXTEND = 5.0          # выход оси отверстия за вид
SIDE_VIEW_LABEL = 'Side view'
TOP_VIEW_LABEL = 'Top view'
