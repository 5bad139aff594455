"""
Geometry Primitives Module

Plain 2D vector helpers shared by the planarizer, the face extractor and
the reconciliation code. Points are (x, y) tuples.
"""

import math
from typing import Optional, Tuple

Point = Tuple[float, float]


def sub(p: Point, q: Point) -> Point:
    """Vector p - q."""
    return (p[0] - q[0], p[1] - q[1])


def add_scaled(p: Point, v: Point, k: float) -> Point:
    """Point p + v * k."""
    return (p[0] + v[0] * k, p[1] + v[1] * k)


def cross(u: Point, v: Point) -> float:
    """2D cross product (z component of u x v)."""
    return u[0] * v[1] - u[1] * v[0]


def dot(u: Point, v: Point) -> float:
    return u[0] * v[0] + u[1] * v[1]


def distance(p: Point, q: Point) -> float:
    """Euclidean distance between two points."""
    return math.sqrt((q[0] - p[0]) ** 2 + (q[1] - p[1]) ** 2)


def midpoint(p: Point, q: Point) -> Point:
    return (0.5 * (p[0] + q[0]), 0.5 * (p[1] + q[1]))


def normalize(v: Point) -> Optional[Point]:
    """
    Return the unit vector of v.

    Args:
        v: Vector to normalize

    Returns:
        Unit vector, or None when v is (nearly) zero
    """
    len2 = v[0] * v[0] + v[1] * v[1]
    if len2 < 1e-18:
        return None
    k = 1.0 / math.sqrt(len2)
    return (v[0] * k, v[1] * k)


def abs_cosine(u: Point, v: Point) -> Optional[float]:
    """
    Absolute cosine of the angle between two directions.

    Returns None when either direction is degenerate.
    """
    un = normalize(u)
    vn = normalize(v)
    if un is None or vn is None:
        return None
    return abs(dot(un, vn))


def closest_point_on_segment(p: Point, a: Point, b: Point) -> Optional[Tuple[Point, float]]:
    """
    Closest point to p on segment AB.

    Args:
        p: Query point
        a: Segment start
        b: Segment end

    Returns:
        Tuple of (closest point, clamped parameter), or None for a
        degenerate segment
    """
    ab = sub(b, a)
    ab2 = dot(ab, ab)
    if ab2 < 1e-12:
        return None

    t = dot(sub(p, a), ab) / ab2
    t = min(1.0, max(0.0, t))
    return add_scaled(a, ab, t), t


def distance_point_to_segment(p: Point, a: Point, b: Point) -> float:
    """Distance from p to segment AB (falls back to |pa| for degenerate AB)."""
    vx, vy = b[0] - a[0], b[1] - a[1]
    wx, wy = p[0] - a[0], p[1] - a[1]

    c1 = vx * wx + vy * wy
    if c1 <= 0.0:
        return math.sqrt(wx * wx + wy * wy)

    c2 = vx * vx + vy * vy
    if c2 <= c1:
        return distance(p, b)

    t = c1 / c2
    return distance(p, (a[0] + t * vx, a[1] + t * vy))


def bbox_overlaps(a: Point, b: Point, c: Point, d: Point, eps: float) -> bool:
    """Check whether the bounding boxes of AB and CD overlap within eps."""
    if max(a[0], b[0]) + eps < min(c[0], d[0]) - eps:
        return False
    if max(c[0], d[0]) + eps < min(a[0], b[0]) - eps:
        return False
    if max(a[1], b[1]) + eps < min(c[1], d[1]) - eps:
        return False
    if max(c[1], d[1]) + eps < min(a[1], b[1]) - eps:
        return False
    return True


def is_point_on_segment(p: Point, a: Point, b: Point, eps: float) -> bool:
    """
    Collinearity plus bounding-box test.

    p is on AB when its distance to the line AB is at most eps and it
    lies inside the eps-inflated bounding box of AB.
    """
    ab = sub(b, a)
    len_ab = math.sqrt(dot(ab, ab))
    if len_ab < 1e-12:
        return distance(p, a) <= eps

    if abs(cross(ab, sub(p, a))) / len_ab > eps:
        return False

    return (
        min(a[0], b[0]) - eps <= p[0] <= max(a[0], b[0]) + eps
        and min(a[1], b[1]) - eps <= p[1] <= max(a[1], b[1]) + eps
    )


def project_parameter(p: Point, a: Point, b: Point, eps: float) -> Optional[float]:
    """
    Parameter of the projection of p onto AB.

    Args:
        p: Point to project
        a, b: Segment endpoints
        eps: Length tolerance past either end of AB

    Returns:
        t clamped to [0, 1] when the projection falls within eps of the
        segment, else None
    """
    ab = sub(b, a)
    len2 = dot(ab, ab)
    if len2 < 1e-18:
        return None

    t = dot(sub(p, a), ab) / len2
    tol = eps / math.sqrt(len2)
    if t < -tol or t > 1.0 + tol:
        return None
    return min(1.0, max(0.0, t))


def segment_intersection(
    a: Point,
    b: Point,
    c: Point,
    d: Point,
    eps: float
) -> Optional[Tuple[Point, float, float]]:
    """
    Intersect segments AB and CD.

    Args:
        a, b: First segment
        c, d: Second segment
        eps: Length tolerance past the segment ends; also the parallel
            threshold on the determinant

    Returns:
        Tuple of (intersection point, t on AB, t on CD) with parameters
        clamped to [0, 1], or None when the segments are parallel or do
        not meet
    """
    r = sub(b, a)
    s = sub(d, c)
    den = cross(r, s)
    if abs(den) < eps:
        return None

    len_r = math.sqrt(dot(r, r))
    len_s = math.sqrt(dot(s, s))
    if len_r < 1e-12 or len_s < 1e-12:
        return None

    ca = sub(c, a)
    ta = cross(ca, s) / den
    tb = cross(ca, r) / den

    tol_a = eps / len_r
    tol_b = eps / len_s
    if ta < -tol_a or ta > 1.0 + tol_a:
        return None
    if tb < -tol_b or tb > 1.0 + tol_b:
        return None

    ta = min(1.0, max(0.0, ta))
    tb = min(1.0, max(0.0, tb))
    return add_scaled(a, r, ta), ta, tb
