from .bar_bounds import detect_bar_bounds
from .bar_regions import calculate_bar_regions, get_scan_line_y
from .iv_estimator import estimate_iv
from .pixel_sampler import PixelSampler

__all__ = ["PixelSampler", "calculate_bar_regions", "detect_bar_bounds", "estimate_iv", "get_scan_line_y"]
