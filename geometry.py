"""Plane geometry used to turn Figma gradient handles into CSS gradient
parameters.

Points are ``{"x": float, "y": float}`` dictionaries, the shape Figma uses
for ``gradientHandlePositions``. Slopes follow IEEE division, so a vertical
line yields an infinite slope instead of raising.
"""

import math

from errors import DegenerateGradientError, ParallelLinesError, SingularMatrixError
from models import GradientObject

EPSILON = 1e-12

# Handle positions of an untransformed gradient, one column per handle.
LINEAR_IDENTITY_HANDLES = [[0, 1, 0], [0.5, 0.5, 1], [1, 1, 1]]
RADIAL_IDENTITY_HANDLES = [[0.5, 1, 0.5], [0.5, 0.5, 1], [1, 1, 1]]


def point(x: float, y: float) -> dict:
    return {"x": x, "y": y}


def _divide(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1, denominator)
    return numerator / denominator


def invert_affine(matrix: list) -> list:
    """Return the inverse of a 3x3 matrix, given either in full or as the
    2x3 affine form Figma stores in ``gradientTransform``.

    Raises:
        SingularMatrixError: the determinant is zero (within EPSILON).
    """
    m = [list(row) for row in matrix]
    if len(m) == 2:
        m.append([0, 0, 1])
    if len(m) != 3 or any(len(row) != 3 for row in m):
        raise ValueError("Expected a 2x3 or 3x3 matrix")

    (a, b, c), (d, e, f), (g, h, i) = m
    cofactors = [
        [e * i - f * h, -(d * i - f * g), d * h - e * g],
        [-(b * i - c * h), a * i - c * g, -(a * h - b * g)],
        [b * f - c * e, -(a * f - c * d), a * e - b * d],
    ]
    determinant = a * cofactors[0][0] + b * cofactors[0][1] + c * cofactors[0][2]
    if abs(determinant) < EPSILON:
        raise SingularMatrixError(f"Matrix is not invertible (determinant {determinant})")

    # inverse = transpose(cofactors) / determinant
    return [[cofactors[col][row] / determinant for col in range(3)] for row in range(3)]


def multiply(left: list, right: list) -> list:
    return [
        [sum(left[r][k] * right[k][c] for k in range(len(right))) for c in range(len(right[0]))]
        for r in range(len(left))
    ]


def _handles_from_transform(transform: list, identity: list) -> list:
    positions = multiply(invert_affine(transform), identity)
    return [point(positions[0][i], positions[1][i]) for i in range(3)]


def linear_gradient_handles(transform: list) -> list:
    return _handles_from_transform(transform, LINEAR_IDENTITY_HANDLES)


def radial_gradient_handles(transform: list) -> list:
    return _handles_from_transform(transform, RADIAL_IDENTITY_HANDLES)


def line_intersection(p1: dict, p2: dict, p3: dict, p4: dict) -> dict:
    """Intersection of the line through p1, p2 with the line through p3, p4."""
    denominator = (p1["x"] - p2["x"]) * (p3["y"] - p4["y"]) - (p1["y"] - p2["y"]) * (
        p3["x"] - p4["x"]
    )
    if abs(denominator) < EPSILON:
        raise ParallelLinesError("Lines are parallel or coincident")

    first = p1["x"] * p2["y"] - p1["y"] * p2["x"]
    second = p3["x"] * p4["y"] - p3["y"] * p4["x"]

    return point(
        (first * (p3["x"] - p4["x"]) - (p1["x"] - p2["x"]) * second) / denominator,
        (first * (p3["y"] - p4["y"]) - (p1["y"] - p2["y"]) * second) / denominator,
    )


def rotate(pivot: dict, handle: dict, angle: float) -> dict:
    """Rotate ``handle`` around ``pivot`` by ``angle`` degrees (clockwise in
    screen coordinates)."""
    radians = math.radians(angle)
    cos, sin = math.cos(radians), math.sin(radians)
    dx = handle["x"] - pivot["x"]
    dy = handle["y"] - pivot["y"]
    return point(cos * dx + sin * dy + pivot["x"], cos * dy - sin * dx + pivot["y"])


def rotate_ellipse(pivot: dict, x_radius: float, y_radius: float, angle: float) -> dict:
    x_radius *= 1.5
    y_radius *= 1.5
    radians = math.radians(angle + 180)
    return point(
        -x_radius * math.cos(radians) + pivot["x"],
        -y_radius * math.sin(radians) + pivot["y"],
    )


def gradient_angle(handles: list) -> float:
    """Angle of a gradient in CSS degrees, derived from its three handles."""
    if len(handles) < 3:
        raise ValueError("Three handles are required to calculate the angle of the gradient")

    pivot, direction_guide, angle_guide = handles[0], handles[1], handles[2]

    ref_slope = _divide(direction_guide["y"] - pivot["y"], direction_guide["x"] - pivot["x"])
    ref_angle = round(math.degrees(math.atan(ref_slope)), 2)

    normalized_direction = rotate(pivot, direction_guide, ref_angle)
    normalized_angle_guide = rotate(pivot, angle_guide, ref_angle)

    direction_dx = normalized_direction["x"] - pivot["x"]
    angle_dy = normalized_angle_guide["y"] - pivot["y"]
    if (direction_dx > 0 and angle_dy > 0) or (direction_dx < 0 and angle_dy < 0):
        # The angle handle sits on the other side of the direction axis.
        pivot, angle_guide = handles[2], handles[0]

    slope = _divide(angle_guide["y"] - pivot["y"], angle_guide["x"] - pivot["x"])
    degrees = math.degrees(math.atan(slope))
    if math.isnan(degrees):
        raise DegenerateGradientError("Gradient angle handle coincides with its pivot")

    if pivot["x"] < angle_guide["x"]:
        degrees += 180
    elif pivot["x"] > angle_guide["x"]:
        if pivot["y"] < angle_guide["y"]:
            degrees = 360 - abs(degrees)
    elif pivot["x"] == angle_guide["x"]:
        # vertical line
        if pivot["y"] < angle_guide["y"]:
            degrees = 360 - abs(degrees)
        else:
            degrees = abs(degrees)

    return round(degrees, 2)


def _frame_edge(center: dict, angle: float, length: float) -> list:
    start = point(center["x"] - length / 2, center["y"])
    end = point(center["x"] + length / 2, center["y"])
    return [
        rotate_ellipse(center, center["x"] - start["x"], center["x"] - start["x"], angle),
        rotate_ellipse(center, center["x"] - end["x"], center["x"] - end["x"], angle),
    ]


def linear_gradient_params(gradient: GradientObject) -> list:
    """Return ``[angle, stop_percent, ...]`` for a linear gradient.

    The stop percentages are measured along the segment of the gradient line
    that lies between the two frame edges perpendicular to it, the same way
    CSS measures a ``linear-gradient``.
    """
    angle = gradient_angle(gradient.handles)
    start, end = gradient.handles[0], gradient.handles[1]

    change = [end["x"] - start["x"], (1 - end["y"]) - (1 - start["y"])]
    line_size = math.hypot(change[0], change[1])
    if line_size < EPSILON:
        raise DegenerateGradientError("Gradient handles coincide")

    desired_length = 1
    scale_factor = (desired_length - line_size) / 2 / line_size
    scale = point(change[0] * scale_factor, change[1] * scale_factor)

    arbitrary_line = [
        point(start["x"] - scale["x"], start["y"] + scale["y"]),
        point(end["x"] + scale["x"], end["y"] - scale["y"]),
    ]

    top_center = point(0, 0) if (90 < angle <= 180 or 270 < angle <= 360) else point(1, 0)
    bottom_center = point(0, 1) if (0 <= angle <= 90 or 180 < angle <= 270) else point(1, 1)

    top_line = _frame_edge(top_center, angle, desired_length)
    bottom_line = _frame_edge(bottom_center, angle, desired_length)

    top_hit = line_intersection(top_line[0], top_line[1], arbitrary_line[0], arbitrary_line[1])
    bottom_hit = line_intersection(
        bottom_line[0], bottom_line[1], arbitrary_line[0], arbitrary_line[1]
    )
    distance = math.hypot(bottom_hit["x"] - top_hit["x"], bottom_hit["y"] - top_hit["y"])
    if distance < EPSILON:
        raise DegenerateGradientError("Gradient line has no length inside the frame")

    if start["y"] < end["y"]:
        origin = top_hit if top_hit["y"] < bottom_hit["y"] else bottom_hit
    else:
        origin = top_hit if top_hit["y"] > bottom_hit["y"] else bottom_hit

    params = [angle]
    for stop in gradient.stops:
        position = stop.get("position") or 0
        stop_x = position * change[0] + start["x"]
        stop_y = start["y"] - position * change[1]
        ratio = math.hypot(stop_y - origin["y"], stop_x - origin["x"]) / distance
        params.append(round(round(ratio, 4) * 100, 2))

    return params


def radial_gradient_params(gradient: GradientObject) -> list:
    """Return ``[x_radius, y_radius, center_x, center_y]`` as percentages."""
    center, horizontal, vertical = gradient.handles[0], gradient.handles[1], gradient.handles[2]
    return [
        abs(round(horizontal["x"] - center["x"], 4)) * 100,
        abs(round(vertical["y"] - center["y"], 4)) * 100,
        round(center["x"], 4) * 100,
        round(center["y"], 4) * 100,
    ]
