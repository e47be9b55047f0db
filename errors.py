# errors.py
# Failures raised by the circle -> crop pipeline.


class CircleCropError(Exception):
    """Base class. The pipeline worker logs and drops any of these per curve."""


class InsufficientPoints(CircleCropError):
    pass


class ColinearPoints(CircleCropError):
    pass


class DegenerateViewpoint(CircleCropError):
    pass


class ParallelAxes(CircleCropError):
    pass


class EmptyPointSet(CircleCropError):
    pass


class ProjectionFailure(CircleCropError):
    pass


class DegenerateQuadrilateral(CircleCropError):
    pass


class CropFailure(CircleCropError):
    pass


class CurveClosed(CircleCropError):
    """add_point() on a curve that was already marked done."""
