"""
Bounding box conversions between OCR output and contact records.
"""

from typing import Dict, List, Optional


def empty_position() -> Dict[str, float]:
    """Position used when a contact cannot be located on the image."""
    return {"x": 0, "y": 0, "width": 0, "height": 0}


def bbox_to_position(bbox: Optional[List[float]]) -> Dict[str, float]:
    """
    Convert an ``[x1, y1, x2, y2]`` bbox to ``{x, y, width, height}``.

    Malformed or inverted boxes give the empty position.
    """
    if not bbox or len(bbox) != 4:
        return empty_position()
    x1, y1, x2, y2 = (float(v) for v in bbox)
    if x2 < x1 or y2 < y1:
        return empty_position()
    return {"x": x1, "y": y1, "width": x2 - x1, "height": y2 - y1}


def position_to_bbox(position: Dict[str, float]) -> List[float]:
    """Inverse of ``bbox_to_position``."""
    x = float(position.get("x", 0))
    y = float(position.get("y", 0))
    return [x, y, x + float(position.get("width", 0)), y + float(position.get("height", 0))]


def union_bbox(bboxes: List[List[float]]) -> Optional[List[float]]:
    """Smallest ``[x1, y1, x2, y2]`` covering every well-formed bbox, or None."""
    valid = [b for b in bboxes if b and len(b) == 4]
    if not valid:
        return None
    return [
        min(float(b[0]) for b in valid),
        min(float(b[1]) for b in valid),
        max(float(b[2]) for b in valid),
        max(float(b[3]) for b in valid),
    ]
