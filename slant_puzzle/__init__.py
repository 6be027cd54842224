from .geometry import Point2D, Rect, Segment, cross, distance, intersect, midpoint
from .line import Direction, SlantLine
from .area import Area
from .config import LayoutConfig, get_layout_config, set_layout_config
from .templates import CutStep, LayoutTemplate, get_template, grid, template_names
from .layout import LayoutError, SlantLayout
from .piece import Piece, base_fit
from .session import ActionMode, Frame, FramePiece, PointerEvent, PuzzleSession
from .tikz import generate_tikz_code, generate_tikz_document

__all__ = [
    'Point2D',
    'Rect',
    'Segment',
    'cross',
    'distance',
    'intersect',
    'midpoint',
    'Direction',
    'SlantLine',
    'Area',
    'LayoutConfig',
    'get_layout_config',
    'set_layout_config',
    'CutStep',
    'LayoutTemplate',
    'get_template',
    'grid',
    'template_names',
    'LayoutError',
    'SlantLayout',
    'Piece',
    'base_fit',
    'ActionMode',
    'Frame',
    'FramePiece',
    'PointerEvent',
    'PuzzleSession',
    'generate_tikz_code',
    'generate_tikz_document',
]
